"""Encoding entry point.

This module provides the serialize() function that converts any supported
value to a packed byte string.
"""

from __future__ import annotations

from typing import Any

from ..config import DEFAULT_BYTE_ORDER, ByteOrder
from ..exceptions import EncodeError
from .bitpack import BitPacker
from .resolver import resolve


def serialize(
    value: Any, byte_order: ByteOrder = DEFAULT_BYTE_ORDER, as_type: Any = None
) -> bytes:
    """Serialize a value to bytes.

    The type's policy is resolved first (once per type), then the value is
    pushed through the bit packer and the last partial byte is flushed with
    zero bits. The same value and byte order always produce the same bytes.

    Args:
        value: Value to encode
        byte_order: Bit order applied to every field
        as_type: Type to encode as; defaults to ``type(value)``. Required for
            generic containers such as ``list[UInt16]``.

    Returns:
        Packed bytes (no header, no top-level length)

    Raises:
        SchemaError: If the type has no policy or cannot be serialized
        EncodeError: If a value does not fit its type, or the result exceeds
            the struct's ``struct_max_bytes``
        BitWidthError: If a custom codec requests an invalid bit width

    Examples:
        ```python
        from bitcodec import BaseStruct, ByteOrder, Char, UInt8, UInt32, serialize

        class Trio(BaseStruct):
            a: UInt32
            b: bool
            c: Char

        serialize(Trio(a=0x12345678, b=True, c=0), ByteOrder.LSB_FIRST)
        # b"\\x78\\x56\\x34\\x12\\x01\\x00"

        serialize([1, 2, 3], as_type=list[UInt8])
        # eight-byte count, then b"\\x01\\x02\\x03"
        ```
    """
    target_type = type(value) if as_type is None else as_type
    policy = resolve(target_type)
    policy.require_encode()

    packer = BitPacker(byte_order)
    policy.encode(value, packer)
    encoded = packer.to_bytes()

    max_bytes = getattr(target_type, "struct_max_bytes", None)
    if max_bytes is not None and len(encoded) > max_bytes:
        raise EncodeError(
            f"Encoded size ({len(encoded)} bytes) exceeds struct_max_bytes={max_bytes}"
        )

    return encoded
