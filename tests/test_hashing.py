"""Tests for content hashing."""

import hashlib

import pytest

from traceprov.embedders import MP4Embedder, WebMEmbedder
from traceprov.hashing import hash_asset, hash_bytes, hash_file, is_valid_hash
from traceprov.models import EmbeddedMetadata

METADATA = EmbeddedMetadata(manifest="{}", signature="c2ln")


def test_hash_bytes_format():
    """Test the sha256: prefix and lowercase hex digest."""
    assert hash_bytes(b"") == (
        "sha256:e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
    )
    assert is_valid_hash(hash_bytes(b"abc"))


def test_hash_file(tmp_path):
    """Test a file hashes to the digest of its bytes."""
    path = tmp_path / "clip.bin"
    path.write_bytes(b"video bytes")
    assert hash_file(path) == "sha256:" + hashlib.sha256(b"video bytes").hexdigest()


def test_hash_file_missing(tmp_path):
    """Test a missing file raises."""
    with pytest.raises(FileNotFoundError):
        hash_file(tmp_path / "missing.mp4")


@pytest.mark.parametrize(
    "value,expected",
    [
        ("sha256:" + "a" * 64, True),
        ("sha256:" + "A" * 64, False),
        ("sha256:" + "a" * 63, False),
        ("sha1:" + "a" * 64, False),
        ("a" * 64, False),
        ("", False),
    ],
)
def test_is_valid_hash(value, expected):
    """Test hash format validation."""
    assert is_valid_hash(value) is expected


def test_hash_asset_plain_file(clip, mp4_bytes):
    """Test a file without a carrier hashes as its full bytes."""
    assert hash_asset(clip) == hash_bytes(mp4_bytes)


def test_hash_asset_unknown_extension(tmp_path):
    """Test unsupported containers hash as their full bytes."""
    path = tmp_path / "clip.avi"
    path.write_bytes(b"RIFF")
    assert hash_asset(path) == hash_bytes(b"RIFF")


def test_hash_asset_excises_mp4_carrier(clip, mp4_bytes):
    """Test the TRACE box does not change the content hash of an embedded file."""
    embedder = MP4Embedder()
    placeholder = embedder.embed(mp4_bytes, EmbeddedMetadata(manifest="", signature=""))
    clip.write_bytes(embedder.embed(mp4_bytes, METADATA))
    assert hash_asset(clip) == hash_bytes(embedder.strip(placeholder))


def test_hash_asset_excises_webm_carrier(webm_clip, webm_bytes):
    """Test the trailing WebM marker is not hashed."""
    webm_clip.write_bytes(WebMEmbedder().embed(webm_bytes, METADATA))
    assert hash_asset(webm_clip) == hash_bytes(webm_bytes)


def test_hash_asset_data_override(clip):
    """Test explicit bytes are hashed instead of the file contents."""
    assert hash_asset(clip, b"other") == hash_bytes(b"other")
