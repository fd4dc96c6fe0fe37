"""bitcodec: Structural Binary Codec

A Python library that converts typed values to and from packed bit streams
without hand-written per-field encode/decode code. Designed for protocol and
embedded data where the byte-for-byte layout matters: fixed-width integer
fields, sub-byte bit-fields and padding bits.

Key Features:
- Pydantic-based struct modeling, fields encoded in declaration order
- Arbitrary bit widths across byte boundaries, with sign extension
- Most-significant-first or least-significant-first bit order per call
- Enums, IEEE floats (bit exact), length-prefixed and fixed-length containers
- Custom encode_bits/decode_bits hooks for anything else

Quick Start:
    >>> from bitcodec import BaseStruct, Bits, ByteOrder, Spare, UInt8, serialize, deserialize
    >>>
    >>> class Flags(BaseStruct):
    ...     spare: Spare(4)
    ...     a: Bits(UInt8, 2)
    ...     b: Bits(UInt8, 2)
    >>>
    >>> data = serialize(Flags(a=1, b=2), ByteOrder.LSB_FIRST)
    >>> data
    b'\\x90'
    >>> deserialize(Flags, data, ByteOrder.LSB_FIRST)
    Flags(spare=None, a=1, b=2)
"""

from __future__ import annotations

from .codec import (
    BitPacker,
    BitUnpacker,
    BufferSink,
    BufferSource,
    ByteSink,
    ByteSource,
    StreamSink,
    StreamSource,
    deserialize,
    deserialize_into,
    resolve,
    serialize,
)
from .config import DEFAULT_BYTE_ORDER, WORD_BITS, ByteOrder
from .exceptions import (
    BitcodecError,
    BitWidthError,
    BufferExhaustedError,
    DecodeError,
    EncodeError,
    SchemaError,
)
from .models import (
    BaseStruct,
    Bits,
    Bool,
    Char,
    FixedArray,
    FixedBytes,
    FixedStr,
    Float16,
    Float32,
    Float64,
    Int8,
    Int16,
    Int32,
    Int64,
    IntType,
    Spare,
    UInt8,
    UInt16,
    UInt32,
    UInt64,
)
from .utils import (
    align,
    align_in_place,
    alignof,
    encoded_bits,
    encoded_size,
    field_count,
    field_offsets,
    field_sizes,
    sizeof,
)

__version__ = "0.1.0"

__all__ = [
    # Core API
    "serialize",
    "deserialize",
    "deserialize_into",
    "ByteOrder",
    "DEFAULT_BYTE_ORDER",
    "WORD_BITS",
    # Structs and field types
    "BaseStruct",
    "Bits",
    "Spare",
    "FixedArray",
    "FixedBytes",
    "FixedStr",
    "UInt8",
    "UInt16",
    "UInt32",
    "UInt64",
    "Int8",
    "Int16",
    "Int32",
    "Int64",
    "Bool",
    "Char",
    "Float16",
    "Float32",
    "Float64",
    "IntType",
    # Transcoder and byte I/O
    "BitPacker",
    "BitUnpacker",
    "ByteSink",
    "ByteSource",
    "BufferSink",
    "BufferSource",
    "StreamSink",
    "StreamSource",
    "resolve",
    # Exceptions
    "BitcodecError",
    "SchemaError",
    "EncodeError",
    "DecodeError",
    "BufferExhaustedError",
    "BitWidthError",
    # Alignment and sizing
    "align",
    "align_in_place",
    "field_count",
    "field_offsets",
    "sizeof",
    "alignof",
    "encoded_bits",
    "encoded_size",
    "field_sizes",
    # Version
    "__version__",
]
