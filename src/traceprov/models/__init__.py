"""Pydantic models for traceprov."""

from .box import Box, BoxInfo, VendorBox
from .manifest import (
    MEDIA_PROFILE,
    SPEC_VERSION,
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
from .result import (
    EmbeddedMetadata,
    StampResult,
    VerificationReport,
    VerificationState,
)

__all__ = [
    # Manifest
    "ProvenanceManifest",
    "SignedManifest",
    "Provider",
    "ModelInfo",
    "Timestamps",
    "InputAsset",
    "OutputAsset",
    "Operation",
    "MediaType",
    "SPEC_VERSION",
    "MEDIA_PROFILE",
    # Container
    "Box",
    "BoxInfo",
    "VendorBox",
    # Results
    "EmbeddedMetadata",
    "VerificationState",
    "VerificationReport",
    "StampResult",
]
