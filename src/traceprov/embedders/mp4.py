"""MP4-family embedder: a vendor ``uuid`` box inside ``moov/meta``."""

from typing import ClassVar

from traceprov.embedders.base import BaseEmbedder, ContainerStructureError
from traceprov.models import EmbeddedMetadata, MediaType, VendorBox
from traceprov.utils.container import (
    MP4_EXTENSIONS,
    build_box,
    build_meta_box,
    find_box,
    list_vendor_boxes,
    other_children,
    remove_box,
    replace_box,
    spans_exactly,
    splice_box,
)

# "TRACE-Prov-2024-" in ASCII
TRACE_UUID = bytes(
    [
        0x54, 0x52, 0x41, 0x43, 0x45, 0x2D, 0x50, 0x72,
        0x6F, 0x76, 0x2D, 0x32, 0x30, 0x32, 0x34, 0x2D,
    ]
)  # fmt: skip


class MP4Embedder(BaseEmbedder):
    """Embed provenance as a TRACE ``uuid`` box under ``moov/meta``.

    The ``meta`` box is rebuilt with any existing TRACE entry dropped and the
    new one appended, then moved to the end of ``moov``; the rebuilt ``moov``
    takes the place of the old one in the file. Non-``uuid`` children of an
    existing ``meta`` box (``hdlr``, ``ilst``, ...) and other vendors' ``uuid``
    boxes are kept. Excising the carrier from a ``meta`` that held nothing but
    the TRACE box removes the ``meta`` box as well.
    """

    name: ClassVar[str] = "mp4"
    extensions: ClassVar[tuple[str, ...]] = tuple(MP4_EXTENSIONS)
    media_type: ClassVar[MediaType] = MediaType.MP4

    def embed(self, data: bytes, metadata: EmbeddedMetadata) -> bytes:
        moov = find_box(data, "moov")
        if moov is None:
            raise ContainerStructureError("MP4 file does not contain a moov box")
        if not spans_exactly(moov.payload):
            raise ContainerStructureError("moov box holds a truncated or overrunning child box")
        meta = find_box(moov.payload, "meta")
        if meta is not None and not spans_exactly(meta.payload):
            raise ContainerStructureError("meta box holds a truncated or overrunning child box")

        entry = VendorBox(uuid=TRACE_UUID, data=metadata.to_envelope())
        new_moov = build_box("moov", self._rebuild_moov_payload(moov.payload, entry))
        return replace_box(data, "moov", new_moov)

    def extract(self, data: bytes) -> EmbeddedMetadata | None:
        trace_box = self._find_trace_box(data)
        if trace_box is None:
            return None
        return EmbeddedMetadata.from_envelope(trace_box.data)

    def excise(self, data: bytes) -> bytes:
        if self._find_trace_box(data) is None:
            return data
        moov = find_box(data, "moov")
        new_moov = build_box("moov", self._rebuild_moov_payload(moov.payload, None))
        return replace_box(data, "moov", new_moov)

    def _find_trace_box(self, data: bytes) -> VendorBox | None:
        moov = find_box(data, "moov")
        if moov is None:
            return None
        meta = find_box(moov.payload, "meta")
        if meta is None:
            return None
        for vendor in list_vendor_boxes(meta.payload):
            if vendor.uuid == TRACE_UUID:
                return vendor
        return None

    def _rebuild_moov_payload(self, moov_payload: bytes, entry: VendorBox | None) -> bytes:
        meta = find_box(moov_payload, "meta")
        if meta is None:
            vendors: list[VendorBox] = []
            preserved = b""
        else:
            vendors = [v for v in list_vendor_boxes(meta.payload) if v.uuid != TRACE_UUID]
            preserved = other_children(meta.payload)

        if entry is not None:
            vendors.append(entry)
        elif not vendors and not preserved:
            # Nothing left to carry: drop the meta box entirely
            return remove_box(moov_payload, "meta")

        return splice_box(moov_payload, "meta", build_meta_box(vendors, preserved))
