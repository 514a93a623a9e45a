"""ISO-BMFF (MP4 family) box engine.

Everything here works on an in-memory copy of the container. Boxes are
located by offset and size; edits rebuild the affected box and splice the new
bytes over the old byte range, so every size field stays equal to the span
the box occupies in its parent.

Box header layout (ISO/IEC 14496-12)::

    size(4) | type(4) | [largesize(8) if size == 1] | payload

``meta`` is a full box: a 4-byte version/flags word precedes its children.
"""

from __future__ import annotations

import struct
from collections.abc import Iterator

from traceprov.models import Box, BoxInfo, VendorBox

# MP4/MOV container boxes that can contain child boxes
CONTAINER_BOXES = [
    "moov",
    "trak",
    "mdia",
    "minf",
    "stbl",
    "udta",
    "meta",
    "ilst",
    "edts",
    "dinf",
    "sinf",
    "schi",
    "tref",
    "gmhd",
    "wave",
]

# Boxes whose payload starts with a version/flags word
FULL_BOXES = ["meta"]

# MP4/MOV file extensions
MP4_EXTENSIONS = [".mp4", ".m4v", ".m4a", ".mov", ".3gp", ".3g2"]

HEADER_SIZE = 8
EXTENDED_HEADER_SIZE = 16
FULL_BOX_PREFIX_SIZE = 4
UUID_SIZE = 16
MAX_32BIT_SIZE = 0xFFFFFFFF


def _tag(box_type: str | bytes) -> bytes:
    if isinstance(box_type, str):
        box_type = box_type.encode("latin-1")
    if len(box_type) != 4:
        raise ValueError(f"Box type must be 4 bytes, got {box_type!r}")
    return box_type


def _decode_tag(raw: bytes) -> str:
    try:
        return raw.decode("ascii")
    except UnicodeDecodeError:
        return raw.decode("latin-1", errors="replace")


def read_box_header(buffer: bytes, offset: int, end: int) -> tuple[int, bytes, int] | None:
    """Read the box header at ``offset``.

    Returns:
        Tuple of (size, raw_type, header_size), or None when the header is
        truncated, the size is zero or smaller than the header, or the box
        would run past ``end``.
    """
    if offset + HEADER_SIZE > end:
        return None
    size, raw_type = struct.unpack_from(">I4s", buffer, offset)
    header_size = HEADER_SIZE

    # Handle extended size
    if size == 1:
        if offset + EXTENDED_HEADER_SIZE > end:
            return None
        size = struct.unpack_from(">Q", buffer, offset + HEADER_SIZE)[0]
        header_size = EXTENDED_HEADER_SIZE

    if size == 0 or size < header_size or offset + size > end:
        return None
    return size, raw_type, header_size


def iter_boxes(buffer: bytes, start: int = 0, end: int | None = None) -> Iterator[Box]:
    """Yield the boxes of one nesting level between ``start`` and ``end``.

    Yielded boxes are descriptors only (``payload`` is empty); use
    ``with_payload`` to slice the bytes of a box of interest. The scan stops
    at the first malformed header instead of guessing where the next box
    might start.
    """
    end = len(buffer) if end is None else min(end, len(buffer))
    offset = start
    while offset < end:
        header = read_box_header(buffer, offset, end)
        if header is None:
            return
        size, raw_type, header_size = header
        box_type = _decode_tag(raw_type)

        payload_offset = offset + header_size
        if box_type in FULL_BOXES:
            payload_offset += FULL_BOX_PREFIX_SIZE
            if payload_offset > offset + size:
                return

        yield Box(
            type=box_type,
            size=size,
            offset=offset,
            header_size=header_size,
            payload_offset=payload_offset,
        )
        offset += size


def with_payload(buffer: bytes, box: Box) -> Box:
    """Return a copy of a box descriptor carrying its payload bytes."""
    return box.model_copy(update={"payload": bytes(buffer[box.payload_offset : box.end])})


def spans_exactly(buffer: bytes) -> bool:
    """Check the boxes of one nesting level cover ``buffer`` exactly.

    False when a child box is truncated, overruns its parent, or is followed
    by bytes that do not form a box.
    """
    end = 0
    for box in iter_boxes(buffer):
        end = box.end
    return end == len(buffer)


def find_box(
    buffer: bytes, box_type: str | bytes, start: int = 0, end: int | None = None
) -> Box | None:
    """Find the first box of ``box_type`` at one nesting level.

    Args:
        buffer: Container bytes
        box_type: Four-character box type, e.g. "moov"
        start: Offset where the scan begins
        end: Offset where the scan stops (default: end of buffer)

    Returns:
        The matching Box with its payload, or None
    """
    wanted = _decode_tag(_tag(box_type))
    for box in iter_boxes(buffer, start, end):
        if box.type == wanted:
            return with_payload(buffer, box)
    return None


def list_vendor_boxes(meta_payload: bytes) -> list[VendorBox]:
    """List the ``uuid`` children of a ``meta`` payload.

    Non-``uuid`` siblings are skipped.
    """
    vendors = []
    for box in iter_boxes(meta_payload):
        if box.type != "uuid":
            continue
        if box.end - box.payload_offset < UUID_SIZE:
            continue
        uuid_end = box.payload_offset + UUID_SIZE
        vendors.append(
            VendorBox(
                uuid=bytes(meta_payload[box.payload_offset : uuid_end]),
                data=bytes(meta_payload[uuid_end : box.end]),
            )
        )
    return vendors


def other_children(meta_payload: bytes) -> bytes:
    """Return the raw bytes of every non-``uuid`` child of a ``meta`` payload."""
    return b"".join(
        meta_payload[box.offset : box.end]
        for box in iter_boxes(meta_payload)
        if box.type != "uuid"
    )


def build_box(box_type: str | bytes, payload: bytes) -> bytes:
    """Serialize a plain box.

    A 64-bit largesize header is used only when the box would not fit a
    32-bit size field.
    """
    tag = _tag(box_type)
    size = HEADER_SIZE + len(payload)
    if size <= MAX_32BIT_SIZE:
        return struct.pack(">I4s", size, tag) + payload
    size = EXTENDED_HEADER_SIZE + len(payload)
    return struct.pack(">I4sQ", 1, tag, size) + payload


def build_uuid_box(uuid: bytes, data: bytes) -> bytes:
    """Serialize a vendor ``uuid`` box: size | "uuid" | uuid(16) | data."""
    if len(uuid) != UUID_SIZE:
        raise ValueError(f"Vendor UUID must be {UUID_SIZE} bytes, got {len(uuid)}")
    return build_box("uuid", uuid + data)


def build_meta_box(vendor_entries: list[VendorBox], preserved: bytes = b"") -> bytes:
    """Serialize a ``meta`` full box holding vendor ``uuid`` boxes.

    Args:
        vendor_entries: Vendor boxes, written in order
        preserved: Raw non-``uuid`` children kept ahead of the vendor boxes

    Returns:
        size | "meta" | version+flags (0) | preserved | uuid boxes
    """
    children = preserved + b"".join(build_uuid_box(v.uuid, v.data) for v in vendor_entries)
    return build_box("meta", struct.pack(">I", 0) + children)


def remove_box(buffer: bytes, box_type: str | bytes) -> bytes:
    """Remove the first top-level box of ``box_type``."""
    box = find_box(buffer, box_type)
    if box is None:
        return bytes(buffer)
    return bytes(buffer[: box.offset]) + bytes(buffer[box.end :])


def splice_box(buffer: bytes, box_type: str | bytes, replacement: bytes) -> bytes:
    """Remove the first top-level ``box_type`` box and append ``replacement``.

    If no such box exists the replacement is simply appended.
    """
    return remove_box(buffer, box_type) + replacement


def replace_box(buffer: bytes, box_type: str | bytes, replacement: bytes) -> bytes:
    """Swap the first top-level ``box_type`` box for ``replacement`` in place.

    Returns the buffer unchanged if there is no such box.
    """
    box = find_box(buffer, box_type)
    if box is None:
        return bytes(buffer)
    return bytes(buffer[: box.offset]) + replacement + bytes(buffer[box.end :])


def parse_mp4_boxes(data: bytes, max_depth: int = 5) -> list[BoxInfo]:
    """Parse MP4/MOV box structure.

    Args:
        data: Container bytes
        max_depth: Maximum depth to recurse into container boxes

    Returns:
        List of BoxInfo objects representing the box structure
    """
    boxes: list[BoxInfo] = []

    def parse_boxes(start: int, end: int, depth: int) -> None:
        for box in iter_boxes(data, start, end):
            box_info = BoxInfo(
                type=box.type,
                size=box.size,
                offset=box.offset,
                depth=depth,
            )

            # Preview data for certain types
            if box.type in ["ftyp", "hdlr", "mvhd", "tkhd", "mdhd"]:
                preview_end = min(box.end, box.payload_offset + 256)
                box_info.data_preview = data[box.payload_offset : preview_end].hex()[:100]
            elif box.type == "uuid":
                uuid_end = min(box.end, box.payload_offset + UUID_SIZE)
                box_info.data_preview = data[box.payload_offset : uuid_end].hex()

            boxes.append(box_info)

            # Recurse into container boxes
            if box.type in CONTAINER_BOXES and depth < max_depth:
                parse_boxes(box.payload_offset, box.end, depth + 1)

    parse_boxes(0, len(data), 0)
    return boxes
