"""Sidecar files: ``<stem>.prov.json`` and ``<stem>.prov.sig`` next to the asset."""

from __future__ import annotations

import os
from pathlib import Path

from traceprov.canonical import canonical_json
from traceprov.models import ProvenanceManifest

MANIFEST_SUFFIX = ".prov.json"
SIGNATURE_SUFFIX = ".prov.sig"


def get_sidecar_paths(asset_path: str | os.PathLike[str]) -> tuple[Path, Path]:
    """Return the sidecar paths for an asset.

    ``clip.mp4`` maps to ``clip.prov.json`` and ``clip.prov.sig`` in the same
    directory.

    Returns:
        Tuple of (manifest_path, signature_path)
    """
    path = Path(asset_path)
    return (
        path.with_name(path.stem + MANIFEST_SUFFIX),
        path.with_name(path.stem + SIGNATURE_SUFFIX),
    )


def save_sidecar_files(
    asset_path: str | os.PathLike[str], manifest: ProvenanceManifest, signature: str
) -> tuple[Path, Path]:
    """Write the canonical manifest and the signature text next to the asset.

    Returns:
        Tuple of (manifest_path, signature_path)
    """
    manifest_path, signature_path = get_sidecar_paths(asset_path)
    manifest_path.write_text(canonical_json(manifest), encoding="utf-8")
    signature_path.write_text(signature, encoding="utf-8")
    return manifest_path, signature_path
