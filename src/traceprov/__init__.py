"""traceprov - TRACE provenance for video.

Bind a signed, canonical provenance manifest to the exact bytes of a video.

Usage:
    from traceprov import generate_key_pair, stamp_asset, verify_asset
    from traceprov.models import ModelInfo, Operation, Provider

    keys = generate_key_pair()

    # Stamp a video (writes clip.prov.json / clip.prov.sig, optionally embeds)
    stamp_asset(
        "clip.mp4",
        Operation.AI_GENERATED,
        Provider(id="p1", name="Provider One"),
        ModelInfo(id="m1", version="1.0"),
        keys.private_key,
        embed=True,
    )

    # Verify it
    report = verify_asset("clip.mp4")
    print(report.state, report.message)
"""

from traceprov._version import __version__
from traceprov.canonical import canonical_bytes, canonical_json
from traceprov.embedders import (
    ContainerStructureError,
    EmbedError,
    embed_metadata,
    extract_metadata,
    get_embedder_for_path,
)
from traceprov.hashing import hash_asset, hash_bytes, hash_file
from traceprov.manifest import ManifestError, build_manifest, sign_manifest
from traceprov.models import (
    EmbeddedMetadata,
    ModelInfo,
    Operation,
    ProvenanceManifest,
    Provider,
    SignedManifest,
    StampResult,
    VerificationReport,
    VerificationState,
)
from traceprov.sidecar import get_sidecar_paths, save_sidecar_files
from traceprov.signing import (
    KeyFormatError,
    KeyPair,
    derive_public_key,
    generate_key_pair,
    save_key_pair,
)
from traceprov.stamp import input_hash_for, stamp_asset
from traceprov.verify import verify_asset, verify_manifest

__all__ = [
    # Version
    "__version__",
    # Main functions
    "stamp_asset",
    "verify_asset",
    "verify_manifest",
    "build_manifest",
    "sign_manifest",
    "input_hash_for",
    # Encoding and hashing
    "canonical_json",
    "canonical_bytes",
    "hash_bytes",
    "hash_file",
    "hash_asset",
    # Keys
    "KeyPair",
    "generate_key_pair",
    "derive_public_key",
    "save_key_pair",
    # Attachment
    "get_sidecar_paths",
    "save_sidecar_files",
    "embed_metadata",
    "extract_metadata",
    "get_embedder_for_path",
    # Models
    "ProvenanceManifest",
    "SignedManifest",
    "Provider",
    "ModelInfo",
    "Operation",
    "EmbeddedMetadata",
    "StampResult",
    "VerificationReport",
    "VerificationState",
    # Errors
    "ManifestError",
    "EmbedError",
    "ContainerStructureError",
    "KeyFormatError",
]
