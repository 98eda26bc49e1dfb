"""Manifest locations and CLI/environment input resolution.

Examples
--------
>>> paths = ManifestPaths()
>>> paths.cloud_provider_config
'manifests/cloud-provider-config.yaml'
"""

from __future__ import annotations

import os
from collections import abc as cabc
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from installer_assets._errors import ConfigurationError

DEFAULT_MANIFEST_DIR = "manifests"


@dataclass(frozen=True, slots=True)
class ManifestPaths:
    """Fixed filenames of the cloud provider manifests.

    Attributes
    ----------
    manifest_dir
        Directory, relative to the asset directory, holding the manifests.
    """

    manifest_dir: str = DEFAULT_MANIFEST_DIR

    def _join(self, filename: str) -> str:
        return str(PurePosixPath(self.manifest_dir) / filename)

    @property
    def cloud_provider_config(self) -> str:
        return self._join("cloud-provider-config.yaml")

    @property
    def aro_role(self) -> str:
        return self._join("aro-cloud-provider-secret-reader-role.yaml")

    @property
    def aro_role_binding(self) -> str:
        return self._join("aro-cloud-provider-secret-reader-rolebinding.yaml")

    @property
    def aro_secret(self) -> str:
        return self._join("aro-cloud-provider-secret.yaml")


DEFAULT_PATHS = ManifestPaths()


@dataclass(frozen=True, slots=True)
class InputResolution:
    """How to resolve one input when the CLI leaves it unset."""

    env_key: str
    default: str | Path | None = None
    required: bool = False
    as_path: bool = False


def resolve_input(
    param_value: str | Path | None,
    resolution: InputResolution,
    env: cabc.Mapping[str, str] | None = None,
) -> str | Path | None:
    """Resolve an input from the CLI value, the environment, or a default.

    Raises
    ------
    ConfigurationError
        If a required input is missing from every source.

    Examples
    --------
    >>> resolve_input(None, InputResolution("ASSET_DIR", default="."), env={})
    '.'
    """
    if param_value is not None:
        return param_value

    env_value = (env if env is not None else os.environ).get(resolution.env_key)
    if env_value:
        return Path(env_value) if resolution.as_path else env_value

    if resolution.required:
        msg = f"{resolution.env_key} is required"
        raise ConfigurationError(msg)

    return resolution.default


@dataclass(frozen=True, slots=True)
class GeneratorSettings:
    """Resolved settings for one manifest generation run.

    Attributes
    ----------
    asset_dir
        Directory that holds ``install-config.yaml`` and receives manifests.
    paths
        Manifest filenames relative to ``asset_dir``.
    auth_location
        Azure service principal file, or ``None`` for the default location.
    log_level
        Name of the logging level used by the CLI.
    """

    asset_dir: Path
    paths: ManifestPaths
    auth_location: Path | None
    log_level: str


def resolve_settings(
    *,
    asset_dir: Path | None = None,
    manifest_dir: str | None = None,
    auth_location: Path | None = None,
    log_level: str | None = None,
    env: cabc.Mapping[str, str] | None = None,
) -> GeneratorSettings:
    """Resolve generator settings from CLI values and the environment.

    Examples
    --------
    >>> resolve_settings(env={}).paths.manifest_dir
    'manifests'
    """
    resolved_dir = resolve_input(
        asset_dir,
        InputResolution(env_key="ASSET_DIR", default=Path("."), as_path=True),
        env,
    )
    resolved_manifest_dir = resolve_input(
        manifest_dir,
        InputResolution(env_key="MANIFEST_DIR", default=DEFAULT_MANIFEST_DIR),
        env,
    )
    resolved_auth = resolve_input(
        auth_location,
        InputResolution(env_key="AZURE_AUTH_LOCATION", as_path=True),
        env,
    )
    resolved_level = resolve_input(
        log_level, InputResolution(env_key="LOG_LEVEL", default="INFO"), env
    )

    return GeneratorSettings(
        asset_dir=Path(resolved_dir),  # type: ignore[arg-type]
        paths=ManifestPaths(manifest_dir=str(resolved_manifest_dir)),
        auth_location=Path(resolved_auth) if resolved_auth else None,
        log_level=str(resolved_level).upper(),
    )
