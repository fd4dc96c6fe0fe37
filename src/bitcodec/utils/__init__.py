"""Utility functions for bitcodec.

This module provides output alignment and layout/size introspection.
"""

from __future__ import annotations

from .align import align, align_in_place
from .sizing import (
    alignof,
    encoded_bits,
    encoded_size,
    field_count,
    field_offsets,
    field_sizes,
    sizeof,
)

__all__ = [
    # Alignment
    "align",
    "align_in_place",
    # Layout
    "field_count",
    "field_offsets",
    "sizeof",
    "alignof",
    # Sizing
    "encoded_bits",
    "encoded_size",
    "field_sizes",
]
