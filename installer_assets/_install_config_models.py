"""Dataclasses describing the install configuration and its credentials."""

from __future__ import annotations

from collections import abc as cabc
from dataclasses import dataclass, field
from typing import Any

from installer_assets._errors import ConfigurationError

AZURE = "azure"
DEFAULT_AZURE_CLOUD = "AzurePublicCloud"


@dataclass(frozen=True, slots=True)
class AzurePlatform:
    """Azure settings from ``platform.azure`` in ``install-config.yaml``.

    Attributes
    ----------
    region
        Azure location for the cluster resources.
    cloud_name
        Azure cloud environment (e.g., ``AzurePublicCloud``).
    resource_group_name
        Existing resource group to install into; empty to create one.
    network_resource_group_name, virtual_network, compute_subnet
        Optional user overrides for pre-existing network resources.
    aro
        Whether the cluster is deployed in managed (ARO) mode.
    """

    region: str = ""
    cloud_name: str = DEFAULT_AZURE_CLOUD
    resource_group_name: str = ""
    network_resource_group_name: str = ""
    virtual_network: str = ""
    compute_subnet: str = ""
    aro: bool = False

    def cluster_resource_group_name(self, infra_id: str) -> str:
        """Return the resource group that holds the cluster resources.

        Examples
        --------
        >>> AzurePlatform().cluster_resource_group_name("abc123")
        'abc123-rg'
        """
        if self.resource_group_name:
            return self.resource_group_name
        return f"{infra_id}-rg"

    @classmethod
    def from_mapping(cls, raw: cabc.Mapping[str, Any]) -> AzurePlatform:
        """Build Azure settings from the raw ``platform.azure`` mapping."""
        return cls(
            region=str(raw.get("region") or ""),
            cloud_name=str(raw.get("cloudName") or DEFAULT_AZURE_CLOUD),
            resource_group_name=str(raw.get("resourceGroupName") or ""),
            network_resource_group_name=str(
                raw.get("networkResourceGroupName") or ""
            ),
            virtual_network=str(raw.get("virtualNetwork") or ""),
            compute_subnet=str(raw.get("computeSubnet") or ""),
            aro=bool(raw.get("aro", False)),
        )


@dataclass(frozen=True, slots=True)
class InstallConfigData:
    """The parts of ``install-config.yaml`` the assets read.

    Attributes
    ----------
    cluster_name
        ``metadata.name``; the base of the infra ID.
    platform_name
        The single key under ``platform`` (``azure``, ``aws``, ...).
    azure
        Azure settings, present only when ``platform_name`` is ``azure``.
    """

    cluster_name: str
    platform_name: str
    azure: AzurePlatform | None = None

    @classmethod
    def from_mapping(cls, raw: cabc.Mapping[str, Any]) -> InstallConfigData:
        """Build install configuration data from a parsed YAML document.

        Raises
        ------
        ConfigurationError
            If the document has no cluster name or no platform section.

        Examples
        --------
        >>> data = InstallConfigData.from_mapping(
        ...     {"metadata": {"name": "demo"}, "platform": {"azure": {}}}
        ... )
        >>> data.platform_name
        'azure'
        """
        metadata = raw.get("metadata") or {}
        cluster_name = metadata.get("name") if isinstance(metadata, dict) else None
        if not cluster_name:
            msg = "install config is missing metadata.name"
            raise ConfigurationError(msg)

        platform = raw.get("platform")
        if not isinstance(platform, dict) or not platform:
            msg = "install config is missing a platform section"
            raise ConfigurationError(msg)
        platform_name = str(next(iter(platform)))

        azure = None
        if platform_name == AZURE:
            azure = AzurePlatform.from_mapping(platform.get(AZURE) or {})

        return cls(
            cluster_name=str(cluster_name),
            platform_name=platform_name,
            azure=azure,
        )


@dataclass(frozen=True, slots=True)
class AzureCredentials:
    """Azure service principal credentials.

    Examples
    --------
    >>> AzureCredentials("sub", "client", "secret", "tenant")
    AzureCredentials(subscription_id='sub', client_id='client', tenant_id='tenant')
    """

    subscription_id: str
    client_id: str
    client_secret: str = field(repr=False)
    tenant_id: str
