"""Locating the manifest and signature for an asset.

Resolvers are tried in order and the first one that finds provenance wins.
Embedded metadata comes first; sidecar files are the fallback.
"""

from __future__ import annotations

import os
from abc import ABC, abstractmethod
from collections.abc import Iterator
from pathlib import Path
from typing import ClassVar

from pydantic import BaseModel

from traceprov.embedders import extract_metadata
from traceprov.sidecar import get_sidecar_paths


class ResolvedProvenance(BaseModel):
    """Manifest text and signature text plus where they came from."""

    manifest_json: str
    signature: str
    source: str


class BaseResolver(ABC):
    """Abstract base class for provenance sources."""

    source: ClassVar[str] = "base"

    @abstractmethod
    def resolve(self, asset_path: Path) -> ResolvedProvenance | None:
        """Return provenance for the asset, or None if this source has none."""
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(source={self.source!r})"


class EmbeddedResolver(BaseResolver):
    """Read provenance embedded in the asset's container."""

    source: ClassVar[str] = "embedded metadata"

    def resolve(self, asset_path: Path) -> ResolvedProvenance | None:
        embedded = extract_metadata(asset_path)
        if embedded is None:
            return None
        return ResolvedProvenance(
            manifest_json=embedded.manifest,
            signature=embedded.signature,
            source=self.source,
        )


class SidecarResolver(BaseResolver):
    """Read provenance from ``.prov.json`` / ``.prov.sig`` files."""

    source: ClassVar[str] = "sidecar files"

    def __init__(
        self,
        manifest_path: str | os.PathLike[str] | None = None,
        signature_path: str | os.PathLike[str] | None = None,
    ) -> None:
        self.manifest_path = Path(manifest_path) if manifest_path else None
        self.signature_path = Path(signature_path) if signature_path else None

    def paths_for(self, asset_path: Path) -> tuple[Path, Path]:
        """Sidecar paths to read: explicit ones if given, else the defaults."""
        default_manifest, default_signature = get_sidecar_paths(asset_path)
        return (
            self.manifest_path or default_manifest,
            self.signature_path or default_signature,
        )

    def resolve(self, asset_path: Path) -> ResolvedProvenance | None:
        manifest_path, signature_path = self.paths_for(asset_path)
        try:
            manifest_json = manifest_path.read_text(encoding="utf-8")
            signature = signature_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError):
            return None
        return ResolvedProvenance(
            manifest_json=manifest_json,
            signature=signature,
            source=self.source,
        )


def default_resolvers(
    manifest_path: str | os.PathLike[str] | None = None,
    signature_path: str | os.PathLike[str] | None = None,
) -> list[BaseResolver]:
    """Embedded metadata first, then sidecar files."""
    return [EmbeddedResolver(), SidecarResolver(manifest_path, signature_path)]


def iter_provenance(
    asset_path: str | os.PathLike[str], resolvers: list[BaseResolver] | None = None
) -> Iterator[ResolvedProvenance]:
    """Yield provenance from every resolver that has some, in order."""
    path = Path(asset_path)
    for resolver in resolvers if resolvers is not None else default_resolvers():
        resolved = resolver.resolve(path)
        if resolved is not None:
            yield resolved


def resolve_provenance(
    asset_path: str | os.PathLike[str], resolvers: list[BaseResolver] | None = None
) -> ResolvedProvenance | None:
    """Try each resolver in order and return the first hit."""
    return next(iter_provenance(asset_path, resolvers), None)
