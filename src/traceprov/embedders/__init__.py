"""Container embedding strategies for traceprov."""

from __future__ import annotations

import os
from pathlib import Path

from traceprov.embedders.base import BaseEmbedder, ContainerStructureError, EmbedError
from traceprov.embedders.mp4 import TRACE_UUID, MP4Embedder
from traceprov.embedders.webm import EBML_MAGIC, WebMEmbedder
from traceprov.models import EmbeddedMetadata

# All embedder classes, in detection order
_EMBEDDERS: list[type[BaseEmbedder]] = [
    MP4Embedder,
    WebMEmbedder,
]


def get_embedder(name: str) -> BaseEmbedder | None:
    """Get an embedder by container name ("mp4", "webm")."""
    for embedder_cls in _EMBEDDERS:
        if embedder_cls.name == name:
            return embedder_cls()
    return None


def get_embedder_for_path(path: str | os.PathLike[str]) -> BaseEmbedder | None:
    """Get the embedder for a file, chosen by extension.

    Returns:
        Embedder instance, or None for unsupported extensions
    """
    path = os.fspath(path)
    for embedder_cls in _EMBEDDERS:
        if embedder_cls.can_handle(path):
            return embedder_cls()
    return None


def detect_container(data: bytes) -> str | None:
    """Sniff the container type from the first bytes of a file.

    Returns:
        "mp4", "webm", or None if unrecognized
    """
    if data[4:8] == b"ftyp":
        return MP4Embedder.name
    if data.startswith(EBML_MAGIC):
        return WebMEmbedder.name
    return None


def get_supported_extensions() -> list[str]:
    """List every file extension that supports container embedding."""
    return [ext for embedder_cls in _EMBEDDERS for ext in embedder_cls.extensions]


def embed_metadata(path: str | os.PathLike[str], manifest: str, signature: str) -> None:
    """Embed a manifest and signature into a media file in place.

    The file is only rewritten once the new container bytes are complete.

    Raises:
        EmbedError: If the container type is unsupported or malformed
    """
    embedder = get_embedder_for_path(path)
    if embedder is None:
        supported = ", ".join(get_supported_extensions())
        raise EmbedError(f"Unsupported media type for file: {path}. Supported: {supported}")

    file_path = Path(path)
    metadata = EmbeddedMetadata(manifest=manifest, signature=signature)
    file_path.write_bytes(embedder.embed(file_path.read_bytes(), metadata))


def extract_metadata(path: str | os.PathLike[str]) -> EmbeddedMetadata | None:
    """Read embedded provenance from a media file.

    Returns:
        EmbeddedMetadata, or None if the file is missing, unsupported, or
        carries no readable TRACE metadata
    """
    embedder = get_embedder_for_path(path)
    if embedder is None:
        return None
    try:
        data = Path(path).read_bytes()
    except OSError:
        return None
    return embedder.extract(data)


__all__ = [
    # Base class
    "BaseEmbedder",
    "EmbedError",
    "ContainerStructureError",
    # Embedders
    "MP4Embedder",
    "WebMEmbedder",
    "TRACE_UUID",
    # Functions
    "get_embedder",
    "get_embedder_for_path",
    "get_supported_extensions",
    "detect_container",
    "embed_metadata",
    "extract_metadata",
]
