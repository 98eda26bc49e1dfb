"""Per-platform builders for the cloud provider configuration.

Each supported platform registers one builder in :data:`PLATFORMS`. A platform
without a builder has no cloud provider configuration and is rejected by the
cloud provider config asset.
"""

from __future__ import annotations

import logging
from collections import abc as cabc
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING, Protocol

from installer_assets._azure_cloud_provider_config import AzureCloudProviderConfig
from installer_assets._azure_session import azure_session
from installer_assets._errors import (
    ConfigurationError,
    CredentialError,
    SerializationError,
)
from installer_assets._install_config_models import AZURE, AzureCredentials

if TYPE_CHECKING:
    from installer_assets._install_config import (
        ClusterID,
        InstallConfig,
        PlatformCreds,
    )

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PlatformConfig:
    """A platform's serialized cloud provider configuration.

    Attributes
    ----------
    config
        Serialized configuration stored in the config map.
    managed
        Whether managed-mode bootstrap manifests are required.
    credentials
        Credentials embedded in the managed-mode secret, if any.
    """

    config: str
    managed: bool = False
    credentials: AzureCredentials | None = None


class PlatformConfigBuilder(Protocol):
    """Builds the cloud provider configuration for one platform."""

    def build(
        self,
        creds: PlatformCreds,
        install_config: InstallConfig,
        cluster_id: ClusterID,
    ) -> PlatformConfig: ...


class AzureConfigBuilder:
    """Cloud provider configuration for Azure."""

    def build(
        self,
        creds: PlatformCreds,
        install_config: InstallConfig,
        cluster_id: ClusterID,
    ) -> PlatformConfig:
        """Resolve resource names and serialize the Azure configuration.

        Resource names use the user's override when one is set and are derived
        from the infra ID otherwise.

        Raises
        ------
        CredentialError
            If no Azure session can be opened from the credentials.
        SerializationError
            If the configuration cannot be serialized.
        """
        try:
            session = azure_session(creds.azure)
        except CredentialError as exc:
            msg = f"could not get azure session: {exc}"
            raise CredentialError(msg) from exc

        platform = install_config.config.azure
        if platform is None:
            msg = "install config has no azure platform settings"
            raise ConfigurationError(msg)

        infra_id = cluster_id.infra_id
        resource_group = platform.cluster_resource_group_name(infra_id)
        nsg = f"{infra_id}-nsg"
        nrg = platform.network_resource_group_name or resource_group
        vnet = platform.virtual_network or f"{infra_id}-vnet"
        subnet = platform.compute_subnet or f"{infra_id}-worker-subnet"
        logger.debug(
            "Azure network resources: group=%s vnet=%s subnet=%s nsg=%s",
            nrg,
            vnet,
            subnet,
            nsg,
        )

        try:
            config = AzureCloudProviderConfig(
                cloud_name=platform.cloud_name,
                resource_group_name=resource_group,
                group_location=platform.region,
                resource_prefix=infra_id,
                subscription_id=session.credentials.subscription_id,
                tenant_id=session.credentials.tenant_id,
                network_resource_group_name=nrg,
                network_security_group_name=nsg,
                virtual_network_name=vnet,
                subnet_name=subnet,
                aro=platform.aro,
            ).to_json()
        except SerializationError as exc:
            msg = f"could not create cloud provider config: {exc}"
            raise SerializationError(msg) from exc

        return PlatformConfig(
            config=config,
            managed=platform.aro,
            credentials=session.credentials,
        )


PLATFORMS: cabc.Mapping[str, PlatformConfigBuilder] = MappingProxyType(
    {AZURE: AzureConfigBuilder()}
)
