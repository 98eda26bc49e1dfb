"""Serialize manifests and move asset files to and from disk."""

from __future__ import annotations

from collections import abc as cabc
from pathlib import Path
from typing import Any

import yaml

from installer_assets._asset import AssetFile
from installer_assets._errors import SerializationError


def object_meta(name: str, namespace: str) -> dict[str, Any]:
    """Return Kubernetes object metadata as the legacy serializer emits it.

    Examples
    --------
    >>> object_meta("cloud-provider-config", "openshift-config")["namespace"]
    'openshift-config'
    """
    return {"creationTimestamp": None, "name": name, "namespace": namespace}


def to_yaml(document: cabc.Mapping[str, Any]) -> bytes:
    """Serialize a manifest to YAML with sorted keys.

    Raises
    ------
    SerializationError
        If the document holds a value YAML cannot represent.

    Examples
    --------
    >>> to_yaml({"kind": "ConfigMap", "apiVersion": "v1"})
    b'apiVersion: v1\\nkind: ConfigMap\\n'
    """
    try:
        text = yaml.safe_dump(
            dict(document), default_flow_style=False, sort_keys=True
        )
    except yaml.YAMLError as exc:
        msg = f"cannot encode manifest: {exc}"
        raise SerializationError(msg) from exc
    return text.encode("utf-8")


class DirectoryFetcher:
    """Fetch persisted asset files from a directory.

    Parameters
    ----------
    directory
        Asset directory from a previous run.
    """

    def __init__(self, directory: Path) -> None:
        self._directory = directory

    def fetch_by_name(self, name: str) -> AssetFile | None:
        path = self._directory / name
        if not path.is_file():
            return None
        return AssetFile(filename=name, data=path.read_bytes())


def write_manifests(output_dir: Path, files: cabc.Iterable[AssetFile]) -> int:
    """Write asset files under the output directory.

    Parameters
    ----------
    output_dir
        Base directory for manifest output.
    files
        Files with paths relative to ``output_dir``.

    Returns
    -------
    int
        Number of files written.

    Raises
    ------
    ValueError
        If a path would escape ``output_dir``.
    """
    count = 0
    output_root = output_dir.resolve()
    for asset_file in files:
        rel = Path(asset_file.filename)
        if rel.is_absolute() or ".." in rel.parts:
            msg = f"Refusing to write manifest outside {output_dir}"
            raise ValueError(msg)
        dest = output_dir / rel
        if not dest.resolve().is_relative_to(output_root):
            msg = f"Refusing to write manifest outside {output_dir}"
            raise ValueError(msg)
        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_bytes(asset_file.data)
        count += 1
    return count
