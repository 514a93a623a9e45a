"""Manifest construction and signing."""

from __future__ import annotations

import os
import secrets
import warnings
from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path

from traceprov.canonical import canonical_bytes
from traceprov.embedders import get_embedder_for_path, get_supported_extensions
from traceprov.hashing import hash_asset, is_valid_hash
from traceprov.models import (
    InputAsset,
    MediaType,
    ModelInfo,
    Operation,
    OutputAsset,
    ProvenanceManifest,
    Provider,
    SignedManifest,
    Timestamps,
)
from traceprov.signing import derive_public_key, encode_public_key, encode_signature, sign

NONCE_BYTES = 16


class ManifestError(ValueError):
    """Manifest inputs failed validation."""

    pass


def utc_now() -> str:
    """Current instant as RFC3339 with millisecond precision, e.g. 2024-05-01T12:00:00.000Z."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def generate_nonce() -> str:
    """Return 128 random bits as hex."""
    return secrets.token_hex(NONCE_BYTES)


def media_type_for(path: str | os.PathLike[str], strict: bool = False) -> MediaType:
    """Derive the manifest media type from a file extension.

    Unknown extensions are recorded as ``video/mp4`` unless ``strict`` is set.

    Raises:
        ManifestError: If ``strict`` and the extension is not recognized
    """
    embedder = get_embedder_for_path(path)
    if embedder is not None:
        return embedder.media_type
    if strict:
        extension = Path(path).suffix.lower()
        supported = ", ".join(get_supported_extensions())
        raise ManifestError(f"Unrecognized media type '{extension}'. Supported: {supported}")
    return MediaType.MP4


def claims_for(operation: Operation) -> list[str]:
    """Claims asserted for an operation."""
    return [operation.value]


def parse_operation(operation: Operation | str) -> Operation:
    """Coerce an operation name.

    Raises:
        ManifestError: If the name is not a known operation
    """
    try:
        return Operation(operation)
    except ValueError:
        choices = ", ".join(op.value for op in Operation)
        raise ManifestError(f"Invalid operation: {operation}. Must be one of: {choices}") from None


def validate_input_hash(input_hash: str | None) -> str | None:
    """Check an input hash is ``None`` or a ``sha256:<64 hex>`` string.

    Raises:
        ManifestError: If the hash is malformed
    """
    if input_hash is None:
        return None
    if not is_valid_hash(input_hash):
        raise ManifestError(f"Input hash must be in sha256:<64 lowercase hex> format: {input_hash}")
    return input_hash


def sign_manifest(manifest: ProvenanceManifest, private_key: str | bytes) -> str:
    """Sign the canonical encoding of a manifest, returning base64 text."""
    return encode_signature(sign(canonical_bytes(manifest), private_key))


def build_manifest(
    asset_path: str | os.PathLike[str],
    operation: Operation | str,
    provider: Provider,
    model: ModelInfo,
    private_key: str | bytes,
    input_hash: str | None = None,
    *,
    data: bytes | None = None,
    strict_media_type: bool = False,
    clock: Callable[[], str] = utc_now,
    nonce_factory: Callable[[], str] = generate_nonce,
) -> SignedManifest:
    """Create and sign a provenance manifest for a video file.

    All inputs are validated before the asset is hashed.

    Args:
        asset_path: Path to the video file
        operation: ai_generated or ai_transformed
        provider: Provider identity; ``public_key`` is derived from
            ``private_key`` when absent
        model: Model identity
        private_key: PKCS8 PEM Ed25519 private key
        input_hash: Content hash of the source asset (transformations)
        data: Asset bytes to hash instead of reading ``asset_path``
        strict_media_type: Reject unknown extensions instead of assuming MP4
        clock: Source of the ``created_utc`` timestamp
        nonce_factory: Source of the manifest nonce

    Returns:
        SignedManifest with the manifest and its base64 signature

    Raises:
        ManifestError: If any input is invalid
        FileNotFoundError: If the asset does not exist
    """
    operation = parse_operation(operation)
    input_hash = validate_input_hash(input_hash)
    media_type = media_type_for(asset_path, strict=strict_media_type)

    if operation == Operation.AI_TRANSFORMED and input_hash is None:
        warnings.warn("Transformation operation should include an input hash", stacklevel=2)

    if data is None and not os.path.exists(asset_path):
        raise FileNotFoundError(f"File not found: {asset_path}")

    public_key = provider.public_key or encode_public_key(derive_public_key(private_key))

    manifest = ProvenanceManifest(
        provider=Provider(id=provider.id, name=provider.name, public_key=public_key),
        operation=operation,
        model=ModelInfo(id=model.id, version=model.version),
        timestamps=Timestamps(created_utc=clock()),
        input=InputAsset(hash=input_hash),
        output=OutputAsset(hash=hash_asset(asset_path, data), media_type=media_type),
        claims=claims_for(operation),
        nonce=nonce_factory(),
    )

    return SignedManifest(manifest=manifest, signature=sign_manifest(manifest, private_key))
