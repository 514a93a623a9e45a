"""Provenance manifest models."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

SPEC_VERSION = "0.1"
MEDIA_PROFILE = "video"


class Operation(str, Enum):
    """What the provider did to produce the asset."""

    AI_GENERATED = "ai_generated"
    AI_TRANSFORMED = "ai_transformed"


class MediaType(str, Enum):
    """Media types a manifest can describe."""

    MP4 = "video/mp4"
    WEBM = "video/webm"


class Provider(BaseModel):
    """The party that produced and signed the asset."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    public_key: str | None = None  # base64 of the SPKI PEM text


class ModelInfo(BaseModel):
    """The generative model used for the operation."""

    model_config = ConfigDict(frozen=True)

    id: str
    version: str


class Timestamps(BaseModel):
    model_config = ConfigDict(frozen=True)

    created_utc: str  # RFC3339, kept verbatim as signed


class InputAsset(BaseModel):
    model_config = ConfigDict(frozen=True)

    hash: str | None = None


class OutputAsset(BaseModel):
    model_config = ConfigDict(frozen=True)

    hash: str
    media_type: MediaType


class ProvenanceManifest(BaseModel):
    """The signed provenance record.

    Instances are frozen: the signature covers the canonical encoding, so a
    changed manifest is a different manifest. A downstream transformation
    issues a new manifest whose ``input.hash`` points at this one's
    ``output.hash``.
    """

    model_config = ConfigDict(frozen=True)

    spec_version: str = SPEC_VERSION
    media_profile: str = MEDIA_PROFILE
    provider: Provider
    operation: Operation
    model: ModelInfo
    timestamps: Timestamps
    input: InputAsset = Field(default_factory=InputAsset)
    output: OutputAsset
    claims: list[str] = Field(default_factory=list)
    nonce: str

    @property
    def is_transformation(self) -> bool:
        """Check if the manifest records a transformation of a prior asset."""
        return self.operation == Operation.AI_TRANSFORMED

    @property
    def has_input(self) -> bool:
        """Check if the manifest links to a source asset."""
        return self.input.hash is not None

    def to_dict(self) -> dict:
        """Return the JSON-ready dict that gets canonically encoded."""
        return self.model_dump(mode="json")


class SignedManifest(BaseModel):
    """A manifest together with its detached base64 Ed25519 signature."""

    model_config = ConfigDict(frozen=True)

    manifest: ProvenanceManifest
    signature: str
