"""Ed25519 signing, verification, and key handling.

Keys at rest are PEM: PKCS8 for private keys, SPKI for public keys. Inside a
manifest the provider public key is stored as the base64 of the SPKI PEM
text.
"""

from __future__ import annotations

import base64
import binascii
import os
from dataclasses import dataclass
from pathlib import Path

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)


class KeyFormatError(ValueError):
    """Key material is not a usable Ed25519 key."""

    pass


@dataclass(frozen=True)
class KeyPair:
    """PEM-encoded Ed25519 key pair."""

    private_key: str
    public_key: str


def generate_key_pair() -> KeyPair:
    """Generate a new Ed25519 key pair."""
    private_key = Ed25519PrivateKey.generate()
    private_pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode("ascii")
    return KeyPair(private_key=private_pem, public_key=_public_pem(private_key.public_key()))


def _public_pem(public_key: Ed25519PublicKey) -> str:
    return public_key.public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    ).decode("ascii")


def load_private_key(private_pem: str | bytes) -> Ed25519PrivateKey:
    """Load a PKCS8 PEM private key, insisting on Ed25519."""
    if isinstance(private_pem, str):
        private_pem = private_pem.encode("utf-8")
    try:
        key = serialization.load_pem_private_key(private_pem, password=None)
    except (ValueError, TypeError) as e:
        raise KeyFormatError(f"Invalid private key: {e}") from e
    if not isinstance(key, Ed25519PrivateKey):
        raise KeyFormatError("Private key is not an Ed25519 key")
    return key


def load_public_key(public_pem: str | bytes) -> Ed25519PublicKey:
    """Load an SPKI PEM public key, insisting on Ed25519."""
    if isinstance(public_pem, str):
        public_pem = public_pem.encode("utf-8")
    try:
        key = serialization.load_pem_public_key(public_pem)
    except (ValueError, TypeError) as e:
        raise KeyFormatError(f"Invalid public key: {e}") from e
    if not isinstance(key, Ed25519PublicKey):
        raise KeyFormatError("Public key is not an Ed25519 key")
    return key


def derive_public_key(private_pem: str | bytes) -> str:
    """Return the SPKI PEM public key matching a private key."""
    return _public_pem(load_private_key(private_pem).public_key())


def encode_public_key(public_pem: str) -> str:
    """Encode a PEM public key for ``provider.public_key``."""
    return base64.b64encode(public_pem.encode("utf-8")).decode("ascii")


def decode_public_key(encoded: str) -> str:
    """Decode ``provider.public_key`` back to PEM text."""
    try:
        return base64.b64decode(encoded, validate=True).decode("utf-8")
    except (binascii.Error, ValueError) as e:
        raise KeyFormatError(f"Public key is not valid base64 PEM: {e}") from e


def sign(data: bytes, private_pem: str | bytes) -> bytes:
    """Sign raw bytes with Ed25519."""
    return load_private_key(private_pem).sign(data)


def verify(data: bytes, signature: bytes, public_pem: str | bytes) -> bool:
    """Verify an Ed25519 signature over raw bytes.

    Raises:
        KeyFormatError: If the public key cannot be loaded
    """
    public_key = load_public_key(public_pem)
    try:
        public_key.verify(signature, data)
    except InvalidSignature:
        return False
    return True


def encode_signature(signature: bytes) -> str:
    """Render a signature as base64 text."""
    return base64.b64encode(signature).decode("ascii")


def decode_signature(text: str) -> bytes:
    """Parse base64 signature text.

    Raises:
        ValueError: If the text is not valid base64
    """
    try:
        return base64.b64decode(text.strip(), validate=True)
    except binascii.Error as e:
        raise ValueError(f"Signature is not valid base64: {e}") from e


def public_key_path_for(private_path: str | Path) -> Path:
    """Return the ``.pub.pem`` path that sits next to a private key file."""
    private_path = Path(private_path)
    if private_path.suffix in (".pem", ".key"):
        return private_path.with_suffix(".pub.pem")
    return private_path.with_name(private_path.name + ".pub.pem")


def save_key_pair(key_pair: KeyPair, private_path: str | Path) -> tuple[Path, Path]:
    """Write a key pair to disk.

    The private key is written with owner-only permissions; the public key is
    written next to it as ``<name>.pub.pem``.

    Returns:
        Tuple of (private_key_path, public_key_path)
    """
    private_path = Path(private_path)
    public_path = public_key_path_for(private_path)
    private_path.parent.mkdir(parents=True, exist_ok=True)

    fd = os.open(private_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, "w", encoding="utf-8") as f:
        f.write(key_pair.private_key)
    public_path.write_text(key_pair.public_key, encoding="utf-8")
    return private_path, public_path


def read_key_file(path: str | Path) -> str:
    """Read PEM text from a key file."""
    return Path(path).read_text(encoding="utf-8")
