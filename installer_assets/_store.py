"""Resolve assets and their parents, then persist the requested files.

Examples
--------
>>> store = AssetStore(Path("/tmp/cluster"))
>>> asset = store.fetch(CloudProviderConfig)  # doctest: +SKIP
>>> store.write(asset)  # doctest: +SKIP
"""

from __future__ import annotations

import logging
from collections import abc as cabc
from pathlib import Path
from typing import TypeVar

from installer_assets._asset import Asset, FileFetcher, Parents, WritableAsset
from installer_assets._errors import AssetGraphError
from installer_assets._manifest_io import DirectoryFetcher, write_manifests

logger = logging.getLogger(__name__)

A = TypeVar("A", bound=Asset)


class AssetStore:
    """Generates each asset at most once per store.

    Parameters
    ----------
    directory
        Asset directory; persisted files are read from and written to it.
    seeds
        Pre-configured asset instances used instead of default-constructed
        ones (e.g., credentials with an explicit service principal file).
    fetcher
        File source for :meth:`WritableAsset.load`; defaults to ``directory``.
    """

    def __init__(
        self,
        directory: Path,
        seeds: cabc.Iterable[Asset] = (),
        fetcher: FileFetcher | None = None,
    ) -> None:
        self._directory = directory
        self._fetcher = fetcher or DirectoryFetcher(directory)
        self._seeds: dict[type[Asset], Asset] = {type(a): a for a in seeds}
        self._resolved: dict[type[Asset], Asset] = {}
        self._in_progress: list[type[Asset]] = []

    def fetch(self, asset_type: type[A]) -> A:
        """Return the resolved instance of ``asset_type``.

        Raises
        ------
        AssetGraphError
            If the dependency graph contains a cycle.
        InstallerAssetError
            If the asset or any parent fails to load or generate.
        """
        if asset_type in self._resolved:
            return self._resolved[asset_type]  # type: ignore[return-value]
        if asset_type in self._in_progress:
            chain = " -> ".join(t.name for t in [*self._in_progress, asset_type])
            msg = f"dependency cycle: {chain}"
            raise AssetGraphError(msg)

        self._in_progress.append(asset_type)
        try:
            asset = self._seeds.get(asset_type) or asset_type()
            declared = asset.dependencies()
            resolved = {dep.asset_type: self.fetch(dep.asset_type) for dep in declared}

            if isinstance(asset, WritableAsset) and asset.load(self._fetcher):
                logger.debug("Loaded %s from %s", asset.name, self._directory)
            else:
                logger.debug("Generating %s", asset.name)
                asset.generate(Parents(declared, resolved))
        finally:
            self._in_progress.pop()

        self._resolved[asset_type] = asset
        return asset  # type: ignore[return-value]

    def write(self, asset: WritableAsset) -> int:
        """Write the asset's files under the asset directory.

        Returns
        -------
        int
            Number of files written.
        """
        count = write_manifests(self._directory, asset.files())
        logger.info("Wrote %d file(s) for %s", count, asset.name)
        return count
