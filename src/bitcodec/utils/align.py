"""Byte alignment helpers for encoded output."""

from __future__ import annotations

from ..codec.io import BytesLike


def _padding_for(length: int, alignment: int) -> int:
    if alignment < 1:
        raise ValueError(f"alignment must be >= 1, got {alignment}")
    return -length % alignment


def align(data: BytesLike, alignment: int) -> bytes:
    """Return a copy of ``data`` zero-padded to a multiple of ``alignment`` bytes.

    Args:
        data: Encoded bytes
        alignment: Alignment in bytes (>= 1)

    Returns:
        Padded copy of the data

    Raises:
        ValueError: If alignment is less than 1

    Example:
        >>> align(b"\\x01\\x02\\x03", 4)
        b'\\x01\\x02\\x03\\x00'
    """
    return bytes(data) + bytes(_padding_for(len(data), alignment))


def align_in_place(buffer: bytearray, alignment: int) -> bytearray:
    """Zero-pad ``buffer`` in place to a multiple of ``alignment`` bytes.

    Returns:
        The same buffer, for chaining

    Raises:
        ValueError: If alignment is less than 1
    """
    buffer.extend(bytes(_padding_for(len(buffer), alignment)))
    return buffer
