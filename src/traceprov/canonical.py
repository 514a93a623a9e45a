"""Canonical JSON encoding for manifests.

The same bytes are produced for signing and for verification, regardless of
the order in which the manifest's keys were built.
"""

import json
from typing import Any

from pydantic import BaseModel


def sort_keys(value: Any) -> Any:
    """Recursively rebuild dicts with lexicographically ordered keys.

    Lists keep their element order; scalars pass through unchanged.
    """
    if isinstance(value, dict):
        return {key: sort_keys(value[key]) for key in sorted(value)}
    if isinstance(value, (list, tuple)):
        return [sort_keys(item) for item in value]
    return value


def canonical_json(value: Any) -> str:
    """Serialize a manifest (model or plain dict) to canonical JSON text."""
    if isinstance(value, BaseModel):
        value = value.model_dump(mode="json")
    return json.dumps(sort_keys(value), separators=(",", ":"), ensure_ascii=False)


def canonical_bytes(value: Any) -> bytes:
    """Return the UTF-8 canonical encoding that signatures cover."""
    return canonical_json(value).encode("utf-8")
