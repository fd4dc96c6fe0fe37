"""Bit-level packing and unpacking.

This module provides the bit stream transcoder: it moves values of any width
from 1 to WORD_BITS bits into and out of a stream of 8-bit units, carrying a
partially filled byte across calls.

Byte order only controls where bits land, never which bits belong to a value:

- MSB_FIRST: the value's top bit is sent first and each byte fills from bit 7 down
- LSB_FIRST: the value's bottom bit is sent first and each byte fills from bit 0 up
"""

from __future__ import annotations

from typing import Any

from ..config import BYTE_BITS, DEFAULT_BYTE_ORDER, WORD_BITS, WORD_MASK, ByteOrder
from ..exceptions import BitWidthError, EncodeError
from ..models.fields import IntType
from .io import BufferSink, BufferSource, ByteSink, ByteSource, BytesLike

_TOP_BIT = 1 << (WORD_BITS - 1)


def _check_width(width: int, type_bits: int, action: str) -> None:
    if type_bits > WORD_BITS:
        raise BitWidthError(
            f"Attempting to {action} a {type_bits}-bit type, wider than the "
            f"{WORD_BITS}-bit platform word"
        )
    if width > type_bits:
        raise BitWidthError(
            f"Attempting to {action} {width} bits, exceeding the {type_bits}-bit type"
        )
    if width <= 0:
        raise BitWidthError(f"Attempting to {action} {width} bits")


class BitPacker:
    """Packs values bit-by-bit into a byte sink.

    Example:
        >>> packer = BitPacker(ByteOrder.LSB_FIRST)
        >>> packer.put_bits(0, 4)
        >>> packer.put_bits(1, 2)
        >>> packer.put_bits(2, 2)
        >>> packer.to_bytes()
        b'\\x90'
    """

    def __init__(
        self, byte_order: ByteOrder = DEFAULT_BYTE_ORDER, sink: ByteSink | None = None
    ) -> None:
        """Initialize an empty bit packer.

        Args:
            byte_order: Bit order used for every value written
            sink: Destination for completed bytes (defaults to a new BufferSink)
        """
        self.byte_order = byte_order
        self.sink = sink if sink is not None else BufferSink()
        self._byte = 0
        self._bits_set = 0
        self._bit_count = 0

    def put_bits(self, value: int, width: int, type_bits: int = WORD_BITS) -> None:
        """Append the low ``width`` bits of ``value``.

        Args:
            value: Integer whose low bits are written (negative values are
                taken in two's complement)
            width: Number of bits to write
            type_bits: Width of the type the value comes from

        Raises:
            BitWidthError: If width is zero, exceeds type_bits, or type_bits
                exceeds the platform word
        """
        _check_width(width, type_bits, "serialize")

        msb_first = self.byte_order is ByteOrder.MSB_FIRST
        data = value & WORD_MASK
        if msb_first:
            data = (data << (WORD_BITS - width)) & WORD_MASK
            data_mask = _TOP_BIT
        else:
            data_mask = 1

        for _ in range(width):
            if data & data_mask:
                if msb_first:
                    self._byte |= 0x80 >> self._bits_set
                else:
                    self._byte |= 0x01 << self._bits_set

            self._bits_set += 1
            if self._bits_set == BYTE_BITS:
                self._emit()

            if msb_first:
                data = (data << 1) & WORD_MASK
            else:
                data >>= 1

        self._bit_count += width

    def give(self, value: int, int_type: IntType, bits: int | None = None) -> None:
        """Write an integer of a native type, optionally narrowed to ``bits``.

        Raises:
            BitWidthError: If bits is invalid for int_type
        """
        self.put_bits(value, int_type.bits if bits is None else bits, int_type.bits)

    def write(self, value: Any, as_type: Any = None) -> BitPacker:
        """Encode ``value`` through the policy resolved for its type.

        Args:
            value: Value to encode
            as_type: Type to encode as (defaults to ``type(value)``)

        Returns:
            self, so writes can be chained
        """
        from .resolver import resolve

        policy = resolve(type(value) if as_type is None else as_type)
        policy.require_encode()
        policy.encode(value, self)
        return self

    def flush(self) -> None:
        """Emit a partially filled byte, zero-filling its unused bits.

        Calling flush with no pending bits does nothing.
        """
        if self._bits_set != 0:
            self._emit()

    def bit_length(self) -> int:
        """Return the number of bits written so far."""
        return self._bit_count

    def to_bytes(self) -> bytes:
        """Flush and return everything written to the in-memory sink.

        Raises:
            EncodeError: If the packer writes to a sink other than a BufferSink
        """
        self.flush()
        if not isinstance(self.sink, BufferSink):
            raise EncodeError(f"{type(self.sink).__name__} does not keep written bytes")
        return self.sink.getvalue()

    def _emit(self) -> None:
        self.sink.put_byte(self._byte)
        self._byte = 0
        self._bits_set = 0


class BitUnpacker:
    """Unpacks values bit-by-bit from a byte source.

    Bytes are pulled lazily: a new byte is consumed only when every bit of the
    current one has been read.

    Example:
        >>> unpacker = BitUnpacker(b"\\x80")
        >>> unpacker.take(IntType(8, signed=True), bits=5)
        -16
    """

    def __init__(
        self, data: BytesLike | ByteSource, byte_order: ByteOrder = DEFAULT_BYTE_ORDER
    ) -> None:
        """Initialize a bit unpacker.

        Args:
            data: Bytes to read, or a ByteSource
            byte_order: Bit order used for every value read
        """
        self.byte_order = byte_order
        self.source = data if isinstance(data, ByteSource) else BufferSource(data)
        self._byte = 0
        self._bits_left = 0
        self._bit_count = 0

    def get_bits(self, width: int, sign_extend: bool = False, type_bits: int = WORD_BITS) -> int:
        """Remove ``width`` bits from the stream.

        Args:
            width: Number of bits to read
            sign_extend: Fill every bit above ``width`` with ones when the top
                transferred bit is set
            type_bits: Width of the destination type

        Returns:
            Unsigned WORD_BITS-wide bit pattern

        Raises:
            BitWidthError: If width is zero, exceeds type_bits, or type_bits
                exceeds the platform word
            BufferExhaustedError: If the source runs out of bytes
        """
        _check_width(width, type_bits, "deserialize")

        msb_first = self.byte_order is ByteOrder.MSB_FIRST
        data = 0
        # Marks word positions that hold no transferred bit.
        sign_mask = WORD_MASK

        for _ in range(width):
            if self._bits_left == 0:
                self._byte = self.source.get_byte()
                self._bits_left = BYTE_BITS

            position = BYTE_BITS - self._bits_left
            if msb_first:
                bit = (self._byte >> (BYTE_BITS - 1 - position)) & 1
                data = (data << 1) | bit
                sign_mask = (sign_mask << 1) & WORD_MASK
            else:
                bit = (self._byte >> position) & 1
                data = (data >> 1) | (bit << (WORD_BITS - 1))
                sign_mask >>= 1
            self._bits_left -= 1

        if not msb_first:
            shift = WORD_BITS - width
            data >>= shift
            sign_mask = ~((~sign_mask & WORD_MASK) >> shift) & WORD_MASK

        self._bit_count += width
        if sign_extend and (data >> (width - 1)) & 1:
            data |= sign_mask
        return data

    def take(self, int_type: IntType, bits: int | None = None) -> int:
        """Read an integer of a native type, optionally narrowed to ``bits``.

        Signed types are sign-extended from the top bit read.
        """
        width = int_type.bits if bits is None else bits
        pattern = self.get_bits(width, sign_extend=int_type.signed, type_bits=int_type.bits)
        return int_type.from_pattern(pattern)

    def read(self, as_type: Any, into: Any = None) -> Any:
        """Decode a value of ``as_type`` through its resolved policy.

        Args:
            as_type: Type to decode
            into: Existing value to decode into, where the type is mutable

        Returns:
            The decoded value
        """
        from .resolver import resolve

        policy = resolve(as_type)
        policy.require_decode()
        return policy.decode(self, into)

    def bit_position(self) -> int:
        """Return the number of bits read so far."""
        return self._bit_count

    def bytes_remaining(self) -> int | None:
        """Return the number of bytes not yet pulled from the source."""
        return self.source.remaining()
