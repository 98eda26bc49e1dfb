#!/usr/bin/env -S uv run python
# /// script
# requires-python = ">=3.13"
# dependencies = ["cyclopts>=2.9", "pyyaml>=6.0"]
# ///
"""Generate the cloud provider config manifests for a cluster.

This script:
- reads ``install-config.yaml`` from the asset directory;
- loads the platform credentials and generates the cluster infra ID;
- builds the cloud provider config manifests; and
- writes them under the manifest directory.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

from cyclopts import App, Parameter

from installer_assets._errors import InstallerAssetError
from installer_assets._install_config import PlatformCreds
from installer_assets._settings import GeneratorSettings, resolve_settings
from installer_assets._store import AssetStore
from installer_assets.cloud_provider_config import CloudProviderConfig

app = App(help="Generate cloud provider config manifests.")


def create_manifests(settings: GeneratorSettings) -> list[str]:
    """Run the asset store and write the cloud provider config manifests.

    Returns the relative paths of the written manifests.
    """
    store = AssetStore(
        settings.asset_dir,
        seeds=[
            CloudProviderConfig(paths=settings.paths),
            PlatformCreds(auth_location=settings.auth_location),
        ],
    )
    asset = store.fetch(CloudProviderConfig)
    store.write(asset)
    return [f.filename for f in asset.files()]


@app.default
def main(
    asset_dir: Path | None = Parameter(),
    manifest_dir: str | None = Parameter(),
    auth_location: Path | None = Parameter(),
    log_level: str | None = Parameter(),
) -> int:
    """Generate cloud provider config manifests.

    Inputs fall back to ``ASSET_DIR``, ``MANIFEST_DIR``,
    ``AZURE_AUTH_LOCATION`` and ``LOG_LEVEL`` when not passed.
    """
    try:
        settings = resolve_settings(
            asset_dir=asset_dir,
            manifest_dir=manifest_dir,
            auth_location=auth_location,
            log_level=log_level,
        )
        logging.basicConfig(
            level=settings.log_level,
            format="%(levelname)s %(name)s: %(message)s",
        )
        written = create_manifests(settings)
    except (InstallerAssetError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    for filename in written:
        print(f"wrote {settings.asset_dir / filename}")
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entrypoint
    raise SystemExit(app())
