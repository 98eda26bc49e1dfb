"""The asset contract shared by every node in the installer asset graph.

An asset declares the parents it needs, generates its state from their
resolved values, and (for writable assets) exposes the files it produced. The
asset store drives these operations; assets never resolve their own parents.

Examples
--------
>>> class Greeting(Asset):
...     name = "Greeting"
...     def dependencies(self):
...         return ()
...     def generate(self, parents):
...         self.text = "hello"
"""

from __future__ import annotations

import abc
from collections import abc as cabc
from dataclasses import dataclass, field
from typing import Any, ClassVar, Protocol

from installer_assets._errors import UndeclaredDependencyError

__all__ = [
    "Asset",
    "AssetFile",
    "Dependency",
    "FileFetcher",
    "Parents",
    "WritableAsset",
    "after",
    "requires",
]


@dataclass(frozen=True, slots=True)
class AssetFile:
    """A file produced by a writable asset.

    Attributes
    ----------
    filename
        Path relative to the asset directory.
    data
        Raw file contents.
    """

    filename: str
    data: bytes = field(repr=False)


class FileFetcher(Protocol):
    """Read access to files persisted by a previous run."""

    def fetch_by_name(self, name: str) -> AssetFile | None:
        """Return the named file, or ``None`` when it does not exist."""
        ...


@dataclass(frozen=True, slots=True)
class Dependency:
    """A parent declared by an asset.

    Attributes
    ----------
    asset_type
        Asset class that must be resolved before the dependent asset.
    ordering_only
        When true the parent only has to have run; its value is never read
        and :meth:`Parents.get` refuses to hand it out.
    """

    asset_type: type[Asset]
    ordering_only: bool = False


def requires(asset_type: type[Asset]) -> Dependency:
    """Declare a parent whose resolved value the asset reads."""
    return Dependency(asset_type)


def after(asset_type: type[Asset]) -> Dependency:
    """Declare a parent that must run first but whose value is not read.

    Examples
    --------
    >>> after(Asset).ordering_only
    True
    """
    return Dependency(asset_type, ordering_only=True)


class Asset(abc.ABC):
    """A node in the installer asset graph."""

    name: ClassVar[str]

    @abc.abstractmethod
    def dependencies(self) -> cabc.Sequence[Dependency]:
        """Return the parents that must be resolved before :meth:`generate`."""

    @abc.abstractmethod
    def generate(self, parents: Parents) -> None:
        """Populate the asset from its resolved parents.

        Raises
        ------
        InstallerAssetError
            If generation fails. The asset exposes no state afterwards.
        """


class WritableAsset(Asset):
    """An asset that produces files and may be reloaded from disk."""

    @abc.abstractmethod
    def files(self) -> list[AssetFile]:
        """Return the files produced by the last successful generation."""

    @abc.abstractmethod
    def load(self, fetcher: FileFetcher) -> bool:
        """Populate the asset from persisted files.

        Returns
        -------
        bool
            ``True`` when the asset was found on disk and loaded.
        """


class Parents:
    """Resolved parents handed to :meth:`Asset.generate`.

    Parameters
    ----------
    declared
        Dependencies declared by the asset being generated.
    resolved
        Resolved asset instances keyed by asset class.
    """

    __slots__ = ("_readable", "_resolved")

    def __init__(
        self,
        declared: cabc.Iterable[Dependency],
        resolved: cabc.Mapping[type[Asset], Asset],
    ) -> None:
        self._readable = frozenset(
            dep.asset_type for dep in declared if not dep.ordering_only
        )
        self._resolved = dict(resolved)

    def get(self, *asset_types: type[Asset]) -> tuple[Any, ...]:
        """Return resolved instances for ``asset_types``, in the given order.

        Raises
        ------
        UndeclaredDependencyError
            If an asset type was not declared as a value dependency or has not
            been resolved.
        """
        instances = []
        for asset_type in asset_types:
            if asset_type not in self._readable:
                msg = f"{asset_type.__name__} is not a declared value dependency"
                raise UndeclaredDependencyError(msg)
            try:
                instances.append(self._resolved[asset_type])
            except KeyError as exc:
                msg = f"{asset_type.__name__} has not been resolved"
                raise UndeclaredDependencyError(msg) from exc
        return tuple(instances)
