"""Pytest configuration and fixtures."""

import os
import struct

import pytest

from traceprov import config
from traceprov.models import ModelInfo, Provider
from traceprov.signing import generate_key_pair

EBML_HEADER = bytes.fromhex("1a45dfa3") + b"\x9f\x42\x86\x81\x01\x42\xf7\x81\x01"


def raw_box(box_type: bytes, payload: bytes = b"") -> bytes:
    """Serialize a box with a plain 32-bit header."""
    return struct.pack(">I4s", 8 + len(payload), box_type) + payload


def raw_extended_box(box_type: bytes, payload: bytes = b"") -> bytes:
    """Serialize a box with a 64-bit largesize header."""
    return struct.pack(">I4sQ", 1, box_type, 16 + len(payload)) + payload


@pytest.fixture
def box():
    """Factory for plain boxes."""
    return raw_box


@pytest.fixture
def extended_box():
    """Factory for extended-size boxes."""
    return raw_extended_box


@pytest.fixture
def make_mp4():
    """Factory for minimal MP4 files: ftyp | moov(mvhd + children) | mdat."""

    def _make(moov_children: bytes = b"", with_moov: bool = True) -> bytes:
        ftyp = raw_box(b"ftyp", b"isom\x00\x00\x02\x00isomiso2mp41")
        moov = raw_box(b"moov", raw_box(b"mvhd", bytes(100)) + moov_children)
        mdat = raw_box(b"mdat", bytes(range(256)) * 4)
        return ftyp + (moov if with_moov else b"") + mdat

    return _make


@pytest.fixture
def mp4_bytes(make_mp4) -> bytes:
    """A minimal MP4 without a meta box."""
    return make_mp4()


@pytest.fixture
def webm_bytes() -> bytes:
    """Bytes that start like a WebM (EBML) file."""
    return EBML_HEADER + bytes(range(256)) * 2


@pytest.fixture
def clip(tmp_path, mp4_bytes):
    """A minimal MP4 file on disk."""
    path = tmp_path / "clip.mp4"
    path.write_bytes(mp4_bytes)
    return path


@pytest.fixture
def webm_clip(tmp_path, webm_bytes):
    """A minimal WebM file on disk."""
    path = tmp_path / "clip.webm"
    path.write_bytes(webm_bytes)
    return path


@pytest.fixture(scope="session")
def key_pair():
    """One Ed25519 key pair for the whole session."""
    return generate_key_pair()


@pytest.fixture
def provider() -> Provider:
    return Provider(id="p1", name="Provider One")


@pytest.fixture
def model() -> ModelInfo:
    return ModelInfo(id="m1", version="1.0")


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch):
    """Keep user config files and TRACEPROV_* variables out of tests."""
    for key in list(os.environ):
        if key.startswith("TRACEPROV_"):
            monkeypatch.delenv(key)
    monkeypatch.setattr(config, "CONFIG_LOCATIONS", [])
    config.reset_config()
    yield
    config.reset_config()
