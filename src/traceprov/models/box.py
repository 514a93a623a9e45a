"""ISO-BMFF box models."""

from pydantic import BaseModel


class Box(BaseModel):
    """A box located inside a byte buffer.

    ``size`` is the full span of the box in its parent, header included.
    ``payload`` starts after the header (and after the version/flags word
    for full boxes such as ``meta``).
    """

    type: str
    size: int
    offset: int
    header_size: int = 8
    payload_offset: int
    payload: bytes = b""

    @property
    def end(self) -> int:
        """Offset one past the last byte of the box."""
        return self.offset + self.size


class VendorBox(BaseModel):
    """A ``uuid`` box keyed by a 16-byte vendor identifier."""

    uuid: bytes
    data: bytes = b""


class BoxInfo(BaseModel):
    """MP4/MOV box structure information."""

    type: str
    size: int
    offset: int
    depth: int = 0
    data_preview: str | None = None
