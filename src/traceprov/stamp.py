"""Stamping: build, sign, and attach a manifest to an asset."""

from __future__ import annotations

import os
import warnings
from pathlib import Path

from traceprov.canonical import canonical_json
from traceprov.embedders import EmbedError, get_embedder_for_path, get_supported_extensions
from traceprov.hashing import hash_asset
from traceprov.manifest import (
    build_manifest,
    media_type_for,
    parse_operation,
    validate_input_hash,
)
from traceprov.models import (
    EmbeddedMetadata,
    ModelInfo,
    Operation,
    Provider,
    StampResult,
)
from traceprov.sidecar import save_sidecar_files

# Stands in for the real envelope while hashing an embedded asset
_PLACEHOLDER = EmbeddedMetadata(manifest="", signature="")


def stamp_asset(
    asset_path: str | os.PathLike[str],
    operation: Operation | str,
    provider: Provider,
    model: ModelInfo,
    private_key: str | bytes,
    input_hash: str | None = None,
    embed: bool = False,
    strict_media_type: bool = False,
) -> StampResult:
    """Stamp a video file with TRACE provenance.

    Sidecar files are always written. With ``embed`` the manifest is also
    stored inside the container; the output hash then covers the embedded
    asset with the TRACE carrier excised, so the stamped file verifies.

    Args:
        asset_path: Path to the video file
        operation: ai_generated or ai_transformed
        provider: Provider identity
        model: Model identity
        private_key: PKCS8 PEM Ed25519 private key
        input_hash: Content hash of the source asset
        embed: Also embed the manifest into the container
        strict_media_type: Reject unknown extensions

    Returns:
        StampResult describing what was written

    Raises:
        ManifestError: If any input is invalid
        EmbedError: If ``embed`` is set and the container cannot carry the
            manifest; nothing is written in that case
        FileNotFoundError: If the asset does not exist
    """
    operation = parse_operation(operation)
    input_hash = validate_input_hash(input_hash)
    media_type_for(asset_path, strict=strict_media_type)

    path = Path(asset_path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    data = path.read_bytes()
    embedder = get_embedder_for_path(path) if embed else None
    if embed and embedder is None:
        supported = ", ".join(get_supported_extensions())
        raise EmbedError(f"Unsupported media type for file: {path}. Supported: {supported}")

    # Fails on a structurally broken container before anything is signed
    hashed = embedder.embed(data, _PLACEHOLDER) if embedder else data

    signed = build_manifest(
        path,
        operation,
        provider,
        model,
        private_key,
        input_hash,
        data=hashed,
        strict_media_type=strict_media_type,
    )

    if embedder is not None:
        metadata = EmbeddedMetadata(
            manifest=canonical_json(signed.manifest), signature=signed.signature
        )
        path.write_bytes(embedder.embed(data, metadata))

    manifest_path, signature_path = save_sidecar_files(path, signed.manifest, signed.signature)

    return StampResult(
        manifest=signed.manifest,
        signature=signed.signature,
        manifest_path=str(manifest_path),
        signature_path=str(signature_path),
        embedded=embedder is not None,
    )


def input_hash_for(source_path: str | os.PathLike[str]) -> str:
    """Content hash of a source asset, for ``input_hash`` of a transformation.

    Any TRACE carrier in the source is excised, so the value matches the
    source's own ``output.hash``.
    """
    source = Path(source_path)
    if not source.exists():
        raise FileNotFoundError(f"File not found: {source}")
    return hash_asset(source)


def maybe_embed(asset_path: str | os.PathLike[str]) -> bool:
    """Check if an asset's container supports embedding, warning if not."""
    if get_embedder_for_path(asset_path) is not None:
        return True
    warnings.warn(
        f"Container embedding not supported for {asset_path}; writing sidecar files only",
        stacklevel=2,
    )
    return False
