"""WebM embedder: a trailing text marker.

This is not a structural EBML edit. The envelope is base64-encoded and
appended after the last byte of the file as::

    \\n<!--TRACEPROV:<base64 envelope>-->

Players ignore the trailing bytes, but remuxing or trimming tools drop them.
"""

import base64
import binascii
from typing import ClassVar

from traceprov.embedders.base import BaseEmbedder, ContainerStructureError
from traceprov.models import EmbeddedMetadata, MediaType

EBML_MAGIC = b"\x1a\x45\xdf\xa3"
MARKER_TAG = "TRACEPROV"
MARKER_PREFIX = f"<!--{MARKER_TAG}:".encode("ascii")
MARKER_SUFFIX = b"-->"
MARKER_SEPARATOR = b"\n"


class WebMEmbedder(BaseEmbedder):
    """Embed provenance as a trailing ``<!--TRACEPROV:...-->`` marker."""

    name: ClassVar[str] = "webm"
    extensions: ClassVar[tuple[str, ...]] = (".webm",)
    media_type: ClassVar[MediaType] = MediaType.WEBM

    def embed(self, data: bytes, metadata: EmbeddedMetadata) -> bytes:
        if not data.startswith(EBML_MAGIC):
            raise ContainerStructureError("WebM file does not start with an EBML header")

        encoded = base64.b64encode(metadata.to_envelope())
        return self.excise(data) + MARKER_SEPARATOR + MARKER_PREFIX + encoded + MARKER_SUFFIX

    def extract(self, data: bytes) -> EmbeddedMetadata | None:
        index = data.rfind(MARKER_PREFIX)
        if index == -1:
            return None

        start = index + len(MARKER_PREFIX)
        end = data.find(MARKER_SUFFIX, start)
        if end == -1:
            return None

        try:
            envelope = base64.b64decode(data[start:end], validate=True)
        except binascii.Error:
            return None
        return EmbeddedMetadata.from_envelope(envelope)

    def excise(self, data: bytes) -> bytes:
        # Only a well-formed marker that ends the file is a carrier
        index = data.rfind(MARKER_PREFIX)
        if index == -1:
            return data
        end = data.find(MARKER_SUFFIX, index + len(MARKER_PREFIX))
        if end == -1 or end + len(MARKER_SUFFIX) != len(data):
            return data

        if data[index - 1 : index] == MARKER_SEPARATOR:
            index -= 1
        return data[:index]
