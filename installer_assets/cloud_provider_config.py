"""Generate the cloud provider config manifests.

The asset writes ``cloud-provider-config.yaml``, a config map read by the
in-cluster cloud provider. Azure clusters in managed (ARO) mode additionally
get a role, role binding and secret that let the cloud provider read its
service principal.

Examples
--------
>>> asset = CloudProviderConfig()
>>> asset.files()
[]
"""

from __future__ import annotations

import logging
from collections import abc as cabc
from dataclasses import dataclass
from typing import Any, TypeAlias

from installer_assets._aro_manifests import aro_role, aro_role_binding, aro_secret
from installer_assets._asset import (
    AssetFile,
    Dependency,
    FileFetcher,
    Parents,
    WritableAsset,
    after,
    requires,
)
from installer_assets._errors import (
    CredentialError,
    InvalidPlatformError,
    SerializationError,
)
from installer_assets._install_config import (
    ClusterID,
    InstallConfig,
    PlatformCreds,
    PlatformCredsCheck,
)
from installer_assets._install_config_models import AzureCredentials
from installer_assets._manifest_io import object_meta, to_yaml
from installer_assets._platforms import PLATFORMS, PlatformConfigBuilder
from installer_assets._settings import DEFAULT_PATHS, ManifestPaths

__all__ = [
    "CONFIG_MAP_NAME",
    "CONFIG_MAP_NAMESPACE",
    "CLOUD_PROVIDER_CONFIG_DATA_KEY",
    "CloudProviderConfig",
    "GeneratedConfig",
]

logger = logging.getLogger(__name__)

CONFIG_MAP_NAMESPACE = "openshift-config"
CONFIG_MAP_NAME = "cloud-provider-config"
CLOUD_PROVIDER_CONFIG_DATA_KEY = "config"

ManifestBuilder: TypeAlias = cabc.Callable[[AzureCredentials], bytes]


@dataclass(frozen=True, slots=True)
class GeneratedConfig:
    """Output of a successful generation.

    Attributes
    ----------
    config_map
        The config map manifest, as a mapping.
    files
        Serialized manifests in write order.
    """

    config_map: dict[str, Any]
    files: tuple[AssetFile, ...]


class CloudProviderConfig(WritableAsset):
    """Generates the cloud-provider-config.yaml files.

    Parameters
    ----------
    paths
        Manifest filenames to write.
    platforms
        Builders keyed by platform name.
    """

    name = "Cloud Provider Config"

    def __init__(
        self,
        paths: ManifestPaths = DEFAULT_PATHS,
        platforms: cabc.Mapping[str, PlatformConfigBuilder] = PLATFORMS,
    ) -> None:
        self._paths = paths
        self._platforms = platforms
        self._result: GeneratedConfig | None = None

    @property
    def config_map(self) -> dict[str, Any] | None:
        """The generated config map, or ``None`` before generation."""
        return self._result.config_map if self._result else None

    def dependencies(self) -> cabc.Sequence[Dependency]:
        return (
            requires(PlatformCreds),
            requires(InstallConfig),
            requires(ClusterID),
            # Prompts for and checks credentials; its value is never read.
            after(PlatformCredsCheck),
        )

    def generate(self, parents: Parents) -> None:
        """Build the config map and, in managed mode, the ARO manifests.

        Raises
        ------
        InvalidPlatformError
            If the platform has no cloud provider configuration.
        CredentialError
            If no provider session can be opened.
        SerializationError
            If any manifest cannot be serialized.
        """
        self._result = None
        creds, install_config, cluster_id = parents.get(
            PlatformCreds, InstallConfig, ClusterID
        )

        config_map: dict[str, Any] = {
            "apiVersion": "v1",
            "kind": "ConfigMap",
            "metadata": object_meta(CONFIG_MAP_NAME, CONFIG_MAP_NAMESPACE),
            "data": {},
        }

        platform_name = install_config.config.platform_name
        builder = self._platforms.get(platform_name)
        if builder is None:
            msg = f"invalid Platform: {platform_name}"
            raise InvalidPlatformError(msg)

        platform_config = builder.build(creds, install_config, cluster_id)
        config_map["data"][CLOUD_PROVIDER_CONFIG_DATA_KEY] = platform_config.config

        try:
            data = to_yaml(config_map)
        except SerializationError as exc:
            msg = f"failed to create {self.name} manifest: {exc}"
            raise SerializationError(msg) from exc
        files = [AssetFile(filename=self._paths.cloud_provider_config, data=data)]

        if platform_config.managed:
            files.extend(self._managed_files(platform_config.credentials))

        self._result = GeneratedConfig(config_map=config_map, files=tuple(files))
        logger.info(
            "Generated %d %s manifest(s) for platform %s",
            len(files),
            self.name,
            platform_name,
        )

    def _managed_files(self, credentials: AzureCredentials | None) -> list[AssetFile]:
        if credentials is None:
            msg = f"failed to create {self.name} manifest: no credentials"
            raise CredentialError(msg)

        builders: tuple[tuple[str, ManifestBuilder], ...] = (
            (self._paths.aro_role, aro_role),
            (self._paths.aro_role_binding, aro_role_binding),
            (self._paths.aro_secret, aro_secret),
        )
        files = []
        for filename, build in builders:
            try:
                data = build(credentials)
            except SerializationError as exc:
                msg = f"failed to create {self.name} manifest: {exc}"
                raise SerializationError(msg) from exc
            files.append(AssetFile(filename=filename, data=data))
        return files

    def files(self) -> list[AssetFile]:
        """Return the files generated by the asset."""
        return list(self._result.files) if self._result else []

    def load(self, fetcher: FileFetcher) -> bool:
        """Never reuse persisted output; the manifests embed live credentials."""
        return False
