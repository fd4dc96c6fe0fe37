"""Codec-wide constants.

The codec has no runtime configuration: byte order is chosen per call and
everything else is fixed here.
"""

from __future__ import annotations

import enum

#: Width of the platform word used by the transcoder, in bits.
WORD_BITS = 64
WORD_MASK = (1 << WORD_BITS) - 1
WORD_BYTES = WORD_BITS // 8

#: Width of one unit of the byte stream.
BYTE_BITS = 8


class ByteOrder(enum.Enum):
    """Bit order within and across byte boundaries."""

    MSB_FIRST = "msb_first"
    LSB_FIRST = "lsb_first"


DEFAULT_BYTE_ORDER = ByteOrder.MSB_FIRST
