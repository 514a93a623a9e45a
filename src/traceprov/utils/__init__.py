"""Utility functions for traceprov."""

from .container import (
    CONTAINER_BOXES,
    MP4_EXTENSIONS,
    build_box,
    build_meta_box,
    build_uuid_box,
    find_box,
    iter_boxes,
    list_vendor_boxes,
    parse_mp4_boxes,
    remove_box,
    replace_box,
    spans_exactly,
    splice_box,
)

__all__ = [
    # Box engine
    "find_box",
    "iter_boxes",
    "list_vendor_boxes",
    "build_box",
    "build_uuid_box",
    "build_meta_box",
    "remove_box",
    "splice_box",
    "replace_box",
    "spans_exactly",
    # Inspection
    "parse_mp4_boxes",
    "CONTAINER_BOXES",
    "MP4_EXTENSIONS",
]
