"""Tests for manifest construction."""

import json
import re

import pytest
from pydantic import ValidationError

from traceprov.canonical import canonical_bytes
from traceprov.embedders import get_embedder
from traceprov.hashing import hash_bytes
from traceprov.manifest import (
    ManifestError,
    build_manifest,
    claims_for,
    generate_nonce,
    media_type_for,
    parse_operation,
    sign_manifest,
    utc_now,
    validate_input_hash,
)
from traceprov.models import MediaType, Operation, Provider
from traceprov.signing import decode_public_key, decode_signature, encode_public_key, verify

INPUT_HASH = "sha256:" + "ab" * 32


class TestBuildManifest:
    """Test build_manifest."""

    def test_fields(self, clip, mp4_bytes, provider, model, key_pair):
        """Test a generated-content manifest carries every required field."""
        signed = build_manifest(clip, "ai_generated", provider, model, key_pair.private_key)
        manifest = signed.manifest

        assert manifest.spec_version == "0.1"
        assert manifest.media_profile == "video"
        assert manifest.provider.id == "p1"
        assert manifest.provider.name == "Provider One"
        assert manifest.operation == Operation.AI_GENERATED
        assert manifest.model.id == "m1"
        assert manifest.model.version == "1.0"
        assert manifest.claims == ["ai_generated"]
        assert manifest.input.hash is None
        assert manifest.output.hash == hash_bytes(mp4_bytes)
        assert manifest.output.media_type == MediaType.MP4
        assert not manifest.has_input
        assert not manifest.is_transformation

    def test_canonical_encoding(self, clip, provider, model, key_pair):
        """Test the encoded manifest has sorted keys and a null input hash."""
        signed = build_manifest(clip, "ai_generated", provider, model, key_pair.private_key)
        encoded = canonical_bytes(signed.manifest).decode("utf-8")
        keys = list(json.loads(encoded))
        assert keys == sorted(keys)
        assert '"input":{"hash":null}' in encoded
        assert '"media_profile":"video"' in encoded

    def test_signature_verifies(self, clip, provider, model, key_pair):
        """Test the signature covers the canonical manifest under the embedded key."""
        signed = build_manifest(clip, "ai_generated", provider, model, key_pair.private_key)
        public_pem = decode_public_key(signed.manifest.provider.public_key)
        assert public_pem == key_pair.public_key
        assert verify(
            canonical_bytes(signed.manifest), decode_signature(signed.signature), public_pem
        )
        assert signed.signature == sign_manifest(signed.manifest, key_pair.private_key)

    def test_keeps_given_public_key(self, clip, model, key_pair):
        """Test an explicit provider public key is used as-is."""
        encoded = encode_public_key(key_pair.public_key)
        provider = Provider(id="p1", name="Provider One", public_key=encoded)
        signed = build_manifest(clip, "ai_generated", provider, model, key_pair.private_key)
        assert signed.manifest.provider.public_key == encoded

    def test_transformation(self, clip, provider, model, key_pair):
        """Test a transformation links to its input."""
        signed = build_manifest(
            clip, Operation.AI_TRANSFORMED, provider, model, key_pair.private_key, INPUT_HASH
        )
        assert signed.manifest.input.hash == INPUT_HASH
        assert signed.manifest.claims == ["ai_transformed"]
        assert signed.manifest.is_transformation
        assert signed.manifest.has_input

    def test_transformation_without_input_warns(self, clip, provider, model, key_pair):
        """Test a transformation without an input hash is allowed with a warning."""
        with pytest.warns(UserWarning, match="input hash"):
            signed = build_manifest(
                clip, "ai_transformed", provider, model, key_pair.private_key
            )
        assert signed.manifest.input.hash is None

    def test_webm_media_type(self, webm_clip, provider, model, key_pair):
        """Test .webm files are recorded as video/webm."""
        signed = build_manifest(webm_clip, "ai_generated", provider, model, key_pair.private_key)
        assert signed.manifest.output.media_type == MediaType.WEBM

    def test_unknown_extension_defaults_to_mp4(self, tmp_path, provider, model, key_pair):
        """Test unknown extensions fall back to video/mp4."""
        path = tmp_path / "clip.bin"
        path.write_bytes(b"data")
        signed = build_manifest(path, "ai_generated", provider, model, key_pair.private_key)
        assert signed.manifest.output.media_type == MediaType.MP4

    def test_unknown_extension_strict(self, tmp_path, provider, model, key_pair):
        """Test strict mode rejects unknown extensions."""
        path = tmp_path / "clip.bin"
        path.write_bytes(b"data")
        with pytest.raises(ManifestError, match="Unrecognized media type"):
            build_manifest(
                path, "ai_generated", provider, model, key_pair.private_key,
                strict_media_type=True,
            )

    def test_invalid_operation(self, clip, provider, model, key_pair):
        """Test unknown operations are rejected."""
        with pytest.raises(ManifestError, match="Invalid operation"):
            build_manifest(clip, "ai_edited", provider, model, key_pair.private_key)

    def test_bad_input_hash_checked_before_file(self, tmp_path, provider, model, key_pair):
        """Test input validation happens before the asset is touched."""
        with pytest.raises(ManifestError, match="Input hash"):
            build_manifest(
                tmp_path / "missing.mp4", "ai_transformed", provider, model,
                key_pair.private_key, "md5:1234",
            )

    def test_missing_file(self, tmp_path, provider, model, key_pair):
        """Test a missing asset raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            build_manifest(
                tmp_path / "missing.mp4", "ai_generated", provider, model, key_pair.private_key
            )

    def test_data_override(self, tmp_path, provider, model, key_pair):
        """Test explicit bytes are hashed and the path need not exist."""
        signed = build_manifest(
            tmp_path / "later.mp4", "ai_generated", provider, model, key_pair.private_key,
            data=b"bytes",
        )
        assert signed.manifest.output.hash == hash_bytes(b"bytes")

    def test_injected_clock_and_nonce(self, clip, provider, model, key_pair):
        """Test the timestamp and nonce sources can be replaced."""
        signed = build_manifest(
            clip, "ai_generated", provider, model, key_pair.private_key,
            clock=lambda: "2024-05-01T12:00:00.000Z",
            nonce_factory=lambda: "0" * 32,
        )
        assert signed.manifest.timestamps.created_utc == "2024-05-01T12:00:00.000Z"
        assert signed.manifest.nonce == "0" * 32

    def test_nonces_differ(self, clip, provider, model, key_pair):
        """Test two manifests for the same asset differ in their nonce."""
        first = build_manifest(clip, "ai_generated", provider, model, key_pair.private_key)
        second = build_manifest(clip, "ai_generated", provider, model, key_pair.private_key)
        assert first.manifest.nonce != second.manifest.nonce
        assert first.signature != second.signature

    def test_manifest_is_frozen(self, clip, provider, model, key_pair):
        """Test manifests cannot be mutated after signing."""
        signed = build_manifest(clip, "ai_generated", provider, model, key_pair.private_key)
        with pytest.raises(ValidationError):
            signed.manifest.nonce = "changed"


class TestHelpers:
    """Test manifest helper functions."""

    def test_utc_now_format(self):
        """Test RFC3339 UTC with millisecond precision."""
        assert re.fullmatch(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z", utc_now())

    def test_nonce(self):
        """Test nonces are 128 random bits in hex."""
        nonce = generate_nonce()
        assert re.fullmatch(r"[0-9a-f]{32}", nonce)
        assert generate_nonce() != nonce

    @pytest.mark.parametrize(
        "path,expected",
        [
            ("clip.mp4", MediaType.MP4),
            ("CLIP.MP4", MediaType.MP4),
            ("clip.webm", MediaType.WEBM),
            ("clip.mov", MediaType.MP4),
            ("clip", MediaType.MP4),
        ],
    )
    def test_media_type_for(self, path, expected):
        """Test media type selection by extension."""
        assert media_type_for(path) == expected

    def test_media_type_for_follows_embedders(self):
        """Test every embeddable extension is accepted in strict mode."""
        for embedder in (get_embedder("mp4"), get_embedder("webm")):
            for extension in embedder.extensions:
                assert media_type_for(f"clip{extension}", strict=True) == embedder.media_type
        with pytest.raises(ManifestError, match="Supported: .mp4"):
            media_type_for("clip.avi", strict=True)

    def test_claims_for(self):
        """Test the claim is the operation name."""
        assert claims_for(Operation.AI_GENERATED) == ["ai_generated"]
        assert claims_for(Operation.AI_TRANSFORMED) == ["ai_transformed"]

    def test_parse_operation(self):
        """Test operation names are coerced."""
        assert parse_operation("ai_generated") is Operation.AI_GENERATED
        assert parse_operation(Operation.AI_TRANSFORMED) is Operation.AI_TRANSFORMED
        with pytest.raises(ManifestError):
            parse_operation("AI_GENERATED")

    def test_validate_input_hash(self):
        """Test input hash validation."""
        assert validate_input_hash(None) is None
        assert validate_input_hash(INPUT_HASH) == INPUT_HASH
        with pytest.raises(ManifestError):
            validate_input_hash("sha256:XYZ")
