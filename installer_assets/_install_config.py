"""Assets that resolve the install configuration, cluster ID and credentials.

These are the parents of the cloud provider config asset. Interactive
prompting is not supported: ``install-config.yaml`` must already exist in the
asset directory.
"""

from __future__ import annotations

import logging
import re
import secrets
import uuid
from collections import abc as cabc
from pathlib import Path

import yaml

from installer_assets._asset import (
    Asset,
    AssetFile,
    Dependency,
    FileFetcher,
    Parents,
    WritableAsset,
    requires,
)
from installer_assets._azure_session import (
    auth_file_path,
    azure_session,
    load_credentials,
)
from installer_assets._errors import ConfigurationError
from installer_assets._install_config_models import (
    AZURE,
    AzureCredentials,
    InstallConfigData,
)

logger = logging.getLogger(__name__)

INSTALL_CONFIG_FILENAME = "install-config.yaml"

INFRA_ID_MAX_LENGTH = 27
INFRA_ID_RANDOM_LENGTH = 5
# Lowercase alphanumerics without vowels or easily confused characters.
INFRA_ID_ALPHABET = "bcdfghjklmnpqrstvwxz2456789"
_INVALID_INFRA_ID_CHARS = re.compile(r"[^A-Za-z0-9-]")


class InstallConfig(WritableAsset):
    """The user-provided ``install-config.yaml``."""

    name = "Install Config"

    def __init__(self, config: InstallConfigData | None = None) -> None:
        self.config = config
        self._file: AssetFile | None = None

    def dependencies(self) -> cabc.Sequence[Dependency]:
        return ()

    def generate(self, parents: Parents) -> None:
        if self.config is not None:
            return
        msg = f"{INSTALL_CONFIG_FILENAME} is required in the asset directory"
        raise ConfigurationError(msg)

    def files(self) -> list[AssetFile]:
        return [self._file] if self._file is not None else []

    def load(self, fetcher: FileFetcher) -> bool:
        """Parse ``install-config.yaml`` when it exists.

        Raises
        ------
        ConfigurationError
            If the file is not a YAML mapping or lacks required fields.
        """
        asset_file = fetcher.fetch_by_name(INSTALL_CONFIG_FILENAME)
        if asset_file is None:
            return False

        try:
            raw = yaml.safe_load(asset_file.data)
        except yaml.YAMLError as exc:
            msg = f"failed to parse {INSTALL_CONFIG_FILENAME}: {exc}"
            raise ConfigurationError(msg) from exc
        if not isinstance(raw, dict):
            msg = f"{INSTALL_CONFIG_FILENAME} must contain a mapping"
            raise ConfigurationError(msg)

        self.config = InstallConfigData.from_mapping(raw)
        self._file = asset_file
        logger.debug(
            "Loaded install config for cluster %s on %s",
            self.config.cluster_name,
            self.config.platform_name,
        )
        return True


def generate_infra_id(base: str, max_length: int = INFRA_ID_MAX_LENGTH) -> str:
    """Derive a unique infrastructure ID from the cluster name.

    Examples
    --------
    >>> len(generate_infra_id("a-very-long-cluster-name-indeed"))
    27
    """
    max_base_length = max_length - (INFRA_ID_RANDOM_LENGTH + 1)
    base = _INVALID_INFRA_ID_CHARS.sub("-", base)[:max_base_length].rstrip("-")
    suffix = "".join(
        secrets.choice(INFRA_ID_ALPHABET) for _ in range(INFRA_ID_RANDOM_LENGTH)
    )
    return f"{base}-{suffix}"


class ClusterID(Asset):
    """The generated cluster UUID and infrastructure ID."""

    name = "Cluster ID"

    def __init__(self, infra_id: str = "", cluster_uuid: str = "") -> None:
        self.infra_id = infra_id
        self.uuid = cluster_uuid

    def dependencies(self) -> cabc.Sequence[Dependency]:
        return (requires(InstallConfig),)

    def generate(self, parents: Parents) -> None:
        (install_config,) = parents.get(InstallConfig)
        self.uuid = str(uuid.uuid4())
        self.infra_id = generate_infra_id(install_config.config.cluster_name)
        logger.info("Generated infra ID %s", self.infra_id)


class PlatformCreds(Asset):
    """Credentials for the target platform."""

    name = "Platform Credentials"

    def __init__(
        self,
        azure: AzureCredentials | None = None,
        auth_location: Path | None = None,
    ) -> None:
        self.azure = azure
        self._auth_location = auth_location

    def dependencies(self) -> cabc.Sequence[Dependency]:
        return (requires(InstallConfig),)

    def generate(self, parents: Parents) -> None:
        (install_config,) = parents.get(InstallConfig)
        if install_config.config.platform_name != AZURE or self.azure is not None:
            return
        self.azure = load_credentials(auth_file_path(self._auth_location))


class PlatformCredsCheck(Asset):
    """Checks that the platform credentials can open a session."""

    name = "Platform Credentials Check"

    def dependencies(self) -> cabc.Sequence[Dependency]:
        return (requires(PlatformCreds), requires(InstallConfig))

    def generate(self, parents: Parents) -> None:
        creds, install_config = parents.get(PlatformCreds, InstallConfig)
        if install_config.config.platform_name == AZURE:
            azure_session(creds.azure)
            logger.debug("Azure credentials are complete")
