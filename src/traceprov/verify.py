"""Provenance verification.

Verification walks a fixed sequence of checks and stops at the first one
that decides the outcome:

1. Asset missing                                  -> INCONCLUSIVE
2. No manifest/signature found, or unparseable    -> INCONCLUSIVE
3. Signature does not verify                      -> INVALID
4. Asset hash differs from ``output.hash``        -> INVALID
5. Otherwise                                      -> VALID

A VALID result always means both a good signature and a matching hash.
Missing evidence is never reported as tampering.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from traceprov.canonical import canonical_bytes
from traceprov.hashing import hash_asset
from traceprov.models import ProvenanceManifest, VerificationReport, VerificationState
from traceprov.resolve import BaseResolver, default_resolvers, iter_provenance
from traceprov.signing import KeyFormatError, decode_public_key, decode_signature, verify


def check_signature(
    manifest: dict[str, Any], signature: str, public_key: str | None
) -> tuple[bool, str]:
    """Verify a signature over the canonical encoding of a parsed manifest.

    Args:
        manifest: Manifest as parsed from JSON (not re-validated)
        signature: Base64 signature text
        public_key: ``provider.public_key`` (base64 of the SPKI PEM)

    Returns:
        Tuple of (ok, reason)
    """
    if not public_key:
        return False, "Manifest has no provider public key"

    try:
        public_pem = decode_public_key(public_key)
        signature_bytes = decode_signature(signature)
        valid = verify(canonical_bytes(manifest), signature_bytes, public_pem)
    except KeyFormatError as e:
        return False, f"Malformed provider public key: {e}"
    except ValueError as e:
        return False, f"Malformed signature: {e}"

    if not valid:
        return False, "Signature verification failed"
    return True, "Signature valid"


def verify_asset(
    asset_path: str | os.PathLike[str],
    manifest_path: str | os.PathLike[str] | None = None,
    signature_path: str | os.PathLike[str] | None = None,
    resolvers: list[BaseResolver] | None = None,
) -> VerificationReport:
    """Verify the provenance of a video file.

    Embedded metadata is read first; sidecar files are the fallback.

    Args:
        asset_path: Path to the video file
        manifest_path: Explicit manifest sidecar (default: ``<stem>.prov.json``)
        signature_path: Explicit signature sidecar (default: ``<stem>.prov.sig``)
        resolvers: Provenance sources to try instead of the default ones

    Returns:
        VerificationReport with the state and a human-readable reason
    """
    path = Path(asset_path)

    def report(state: VerificationState, message: str, **kwargs: Any) -> VerificationReport:
        return VerificationReport(path=str(path), state=state, message=message, **kwargs)

    if not path.is_file():
        return report(VerificationState.INCONCLUSIVE, "Video file not found")

    if resolvers is None:
        resolvers = default_resolvers(manifest_path, signature_path)
    # A source whose manifest does not parse falls through to the next one
    parse_failure: VerificationReport | None = None
    for resolved in iter_provenance(path, resolvers):
        try:
            raw_manifest = json.loads(resolved.manifest_json)
            manifest = ProvenanceManifest.model_validate(raw_manifest)
        except (ValueError, ValidationError) as e:
            reason = "invalid JSON" if isinstance(e, json.JSONDecodeError) else "invalid structure"
            parse_failure = parse_failure or report(
                VerificationState.INCONCLUSIVE,
                f"Manifest could not be parsed ({reason}) from {resolved.source}",
                source=resolved.source,
            )
            continue
        break
    else:
        return parse_failure or report(
            VerificationState.INCONCLUSIVE,
            "Manifest not found (neither embedded nor sidecar)",
        )

    ok, reason = check_signature(raw_manifest, resolved.signature, manifest.provider.public_key)
    if not ok:
        return report(
            VerificationState.INVALID, reason, source=resolved.source, manifest=manifest
        )

    try:
        content_hash = hash_asset(path)
    except OSError as e:
        return report(
            VerificationState.INCONCLUSIVE,
            f"Video file could not be read: {e}",
            source=resolved.source,
            manifest=manifest,
        )

    if content_hash != manifest.output.hash:
        return report(
            VerificationState.INVALID,
            "File hash mismatch - file may have been modified",
            source=resolved.source,
            manifest=manifest,
        )

    return report(
        VerificationState.VALID,
        f"Provenance verified successfully (from {resolved.source})",
        source=resolved.source,
        manifest=manifest,
    )


# Alias for the name used by earlier TRACE tools
verify_manifest = verify_asset
