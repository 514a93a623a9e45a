"""Embedding and verification result models."""

import json
from enum import Enum

from pydantic import BaseModel, ValidationError

from .manifest import ProvenanceManifest


class EmbeddedMetadata(BaseModel):
    """Manifest and signature as carried inside a container or sidecars.

    ``manifest`` is the canonical manifest JSON text, ``signature`` the
    base64 signature text.
    """

    manifest: str
    signature: str

    def to_envelope(self) -> bytes:
        """Serialize to the compact JSON envelope stored in containers."""
        envelope = {"manifest": self.manifest, "signature": self.signature}
        return json.dumps(envelope, separators=(",", ":"), ensure_ascii=False).encode("utf-8")

    @classmethod
    def from_envelope(cls, data: bytes) -> "EmbeddedMetadata | None":
        """Parse a JSON envelope, returning None if it is not one."""
        try:
            envelope = json.loads(data.decode("utf-8"))
        except (UnicodeDecodeError, ValueError):
            return None
        if not isinstance(envelope, dict):
            return None
        try:
            return cls(manifest=envelope["manifest"], signature=envelope["signature"])
        except (KeyError, ValidationError):
            return None


class VerificationState(str, Enum):
    """Terminal verification outcomes."""

    VALID = "VALID"
    INVALID = "INVALID"
    INCONCLUSIVE = "INCONCLUSIVE"


class VerificationReport(BaseModel):
    """Outcome of verifying one asset."""

    path: str
    state: VerificationState
    message: str
    source: str | None = None  # "embedded metadata" or "sidecar files"
    manifest: ProvenanceManifest | None = None

    @property
    def is_valid(self) -> bool:
        """Check if provenance was verified."""
        return self.state == VerificationState.VALID


class StampResult(BaseModel):
    """What a stamp operation produced."""

    manifest: ProvenanceManifest
    signature: str
    manifest_path: str
    signature_path: str
    embedded: bool = False
