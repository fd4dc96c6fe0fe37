"""Decoding entry points.

This module provides deserialize(), which builds a fresh value from bytes,
and deserialize_into(), which decodes into an existing value.
"""

from __future__ import annotations

import logging
from typing import Any, TypeVar

from ..config import DEFAULT_BYTE_ORDER, ByteOrder
from .bitpack import BitUnpacker
from .io import BytesLike
from .resolver import resolve

T = TypeVar("T")

_logger = logging.getLogger(__name__)


def deserialize(
    cls: type[T] | Any, data: BytesLike, byte_order: ByteOrder = DEFAULT_BYTE_ORDER
) -> T:
    """Deserialize bytes into a new value of ``cls``.

    Args:
        cls: Type to decode (a struct class, an alias such as UInt32, or a
            generic such as ``list[Int16]``)
        data: Bytes to decode; never copied
        byte_order: Bit order the data was written with

    Returns:
        Decoded value

    Raises:
        SchemaError: If the type has no policy or cannot be deserialized
        BufferExhaustedError: If data ends before the value is complete
        DecodeError: If the data does not form a valid value

    Examples:
        ```python
        from bitcodec import ByteOrder, UInt32, deserialize

        deserialize(UInt32, b"\\x12\\x34\\x56\\x78")                      # 0x12345678
        deserialize(UInt32, b"\\x12\\x34\\x56\\x78", ByteOrder.LSB_FIRST)  # 0x78563412
        ```
    """
    return _decode(cls, data, byte_order, None)


def deserialize_into(
    target: Any,
    data: BytesLike,
    byte_order: ByteOrder = DEFAULT_BYTE_ORDER,
    as_type: Any = None,
) -> Any:
    """Deserialize bytes into an existing value.

    Structs, lists, bytearrays and custom codec objects are updated in place.
    Immutable values (ints, floats, tuples) cannot be, so the decoded value is
    returned instead. If decoding fails part way, the target keeps whatever
    was already decoded.

    Args:
        target: Value to decode into
        data: Bytes to decode
        byte_order: Bit order the data was written with
        as_type: Type to decode as; defaults to ``type(target)``

    Returns:
        ``target`` when updated in place, otherwise the decoded value
    """
    return _decode(type(target) if as_type is None else as_type, data, byte_order, target)


def _decode(cls: Any, data: BytesLike, byte_order: ByteOrder, target: Any) -> Any:
    policy = resolve(cls)
    policy.require_decode()

    unpacker = BitUnpacker(data, byte_order)
    value = policy.decode(unpacker, target)

    remaining = unpacker.bytes_remaining()
    if remaining:
        _logger.debug("Ignoring %d trailing bytes after %s", remaining, policy.name)
    return value
