"""Content hashing in ``sha256:<hex>`` form."""

import hashlib
import re
from pathlib import Path

HASH_PREFIX = "sha256:"
HASH_PATTERN = re.compile(r"^sha256:[0-9a-f]{64}$")


def hash_bytes(data: bytes) -> str:
    """Hash exact bytes and return ``sha256:<lowercase-hex>``."""
    return f"{HASH_PREFIX}{hashlib.sha256(data).hexdigest()}"


def hash_file(path: str | Path) -> str:
    """Hash the complete contents of a file."""
    return hash_bytes(Path(path).read_bytes())


def is_valid_hash(value: str) -> bool:
    """Check a string is a well-formed ``sha256:`` content hash."""
    return bool(HASH_PATTERN.match(value))


def hash_asset(path: str | Path, data: bytes | None = None) -> str:
    """Hash an asset's content with any embedded TRACE carrier excised.

    For a file that carries no embedded provenance this is the hash of the
    complete file. ``data`` overrides the bytes read from ``path``; the path
    still selects the container type.
    """
    from traceprov.embedders import get_embedder_for_path

    if data is None:
        data = Path(path).read_bytes()
    embedder = get_embedder_for_path(path)
    if embedder is not None:
        data = embedder.strip(data)
    return hash_bytes(data)
