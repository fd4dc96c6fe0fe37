"""Unit tests for the bit stream transcoder."""

from __future__ import annotations

import pytest

from bitcodec import BitWidthError, BufferExhaustedError, ByteOrder, WORD_BITS
from bitcodec.codec.bitpack import BitPacker, BitUnpacker
from bitcodec.codec.io import BufferSink
from bitcodec.models.fields import IntType

INT8 = IntType(8, signed=True)
UINT8 = IntType(8)
UINT32 = IntType(32)


class TestBitPacker:
    """Test BitPacker functionality."""

    def test_msb_first_fills_from_top_bit(self) -> None:
        """MSB-first places the first bit at 0x80."""
        packer = BitPacker(ByteOrder.MSB_FIRST)
        packer.put_bits(15, 4)  # 1111
        packer.put_bits(3, 2)  # 11
        packer.put_bits(0, 2)  # 00

        assert packer.bit_length() == 8
        assert packer.to_bytes() == b"\xfc"  # 11111100

    def test_lsb_first_fills_from_bottom_bit(self) -> None:
        """LSB-first places the first bit at 0x01."""
        packer = BitPacker(ByteOrder.LSB_FIRST)
        packer.put_bits(0, 4)
        packer.put_bits(1, 2)
        packer.put_bits(2, 2)

        assert packer.to_bytes() == bytes([0b10010000])

    def test_multi_byte_value(self) -> None:
        """A 32-bit value spans four bytes in either order."""
        msb = BitPacker(ByteOrder.MSB_FIRST)
        msb.give(0x12345678, UINT32)
        assert msb.to_bytes() == b"\x12\x34\x56\x78"

        lsb = BitPacker(ByteOrder.LSB_FIRST)
        lsb.give(0x12345678, UINT32)
        assert lsb.to_bytes() == b"\x78\x56\x34\x12"

    def test_value_crossing_byte_boundary(self) -> None:
        """Partial-byte state carries across calls."""
        packer = BitPacker(ByteOrder.MSB_FIRST)
        packer.put_bits(0b101, 3)
        packer.put_bits(0b1100110011, 10)

        # 101 11001 | 10011 000
        assert packer.to_bytes() == b"\xb9\x98"

    def test_only_low_bits_are_written(self) -> None:
        """Bits above the requested width are ignored."""
        packer = BitPacker(ByteOrder.MSB_FIRST)
        packer.put_bits(0xFF3, 4)
        assert packer.to_bytes() == b"\x30"

    def test_negative_value_two_complement(self) -> None:
        """Negative values are written as two's complement."""
        packer = BitPacker()
        packer.give(-5, INT8)
        assert packer.to_bytes() == b"\xfb"

    def test_flush_pads_with_zero(self) -> None:
        """A partial byte is padded with zeros in the unused positions."""
        msb = BitPacker(ByteOrder.MSB_FIRST)
        msb.put_bits(1, 1)
        assert msb.to_bytes() == b"\x80"

        lsb = BitPacker(ByteOrder.LSB_FIRST)
        lsb.put_bits(1, 1)
        assert lsb.to_bytes() == b"\x01"

    def test_flush_is_idempotent(self) -> None:
        """A second flush emits nothing."""
        sink = BufferSink()
        packer = BitPacker(ByteOrder.MSB_FIRST, sink)
        packer.put_bits(0b11, 2)

        packer.flush()
        packer.flush()

        assert sink.getvalue() == b"\xc0"

    def test_empty_packer(self) -> None:
        """Test empty bit packer."""
        packer = BitPacker()
        assert packer.bit_length() == 0
        assert packer.to_bytes() == b""

    def test_full_word(self) -> None:
        """The full platform word can be written in one call."""
        packer = BitPacker(ByteOrder.MSB_FIRST)
        packer.put_bits(0x0123456789ABCDEF, WORD_BITS)
        assert packer.to_bytes() == bytes.fromhex("0123456789abcdef")

    @pytest.mark.parametrize(
        ("width", "type_bits", "match"),
        [
            (0, 8, "no bits|0 bits"),
            (9, 8, "exceeding"),
            (8, 128, "wider than"),
        ],
    )
    def test_invalid_widths(self, width: int, type_bits: int, match: str) -> None:
        """Invalid widths are rejected, never truncated."""
        packer = BitPacker()
        with pytest.raises(BitWidthError, match=match):
            packer.put_bits(0, width, type_bits)
        assert packer.bit_length() == 0

    def test_bit_width_error_is_value_error(self) -> None:
        """BitWidthError can be caught as ValueError."""
        with pytest.raises(ValueError):
            BitPacker().put_bits(1, WORD_BITS + 1)


class TestBitUnpacker:
    """Test BitUnpacker functionality."""

    def test_msb_first(self) -> None:
        """Test reading most-significant-first."""
        unpacker = BitUnpacker(b"\xfc", ByteOrder.MSB_FIRST)

        assert unpacker.get_bits(4) == 15
        assert unpacker.get_bits(2) == 3
        assert unpacker.get_bits(2) == 0

    def test_lsb_first(self) -> None:
        """Test reading least-significant-first."""
        unpacker = BitUnpacker(bytes([0b10010000]), ByteOrder.LSB_FIRST)

        assert unpacker.get_bits(4) == 0
        assert unpacker.get_bits(2) == 1
        assert unpacker.get_bits(2) == 2

    def test_uint32_byte_orders(self) -> None:
        """The same four bytes decode differently per byte order."""
        data = b"\x12\x34\x56\x78"
        assert BitUnpacker(data, ByteOrder.MSB_FIRST).take(UINT32) == 0x12345678
        assert BitUnpacker(data, ByteOrder.LSB_FIRST).take(UINT32) == 0x78563412

    def test_take_signed(self) -> None:
        """Signed types decode negative values."""
        assert BitUnpacker(b"\xfb").take(INT8) == -5

    def test_sign_extension_of_narrow_field(self) -> None:
        """A 5-bit 10000 pattern read into a signed byte is -16."""
        unpacker = BitUnpacker(bytes([0b10000000]), ByteOrder.MSB_FIRST)
        assert unpacker.take(INT8, bits=5) == -16

    def test_sign_extension_lsb_first(self) -> None:
        """Sign extension also works least-significant-first."""
        unpacker = BitUnpacker(bytes([0b00010000]), ByteOrder.LSB_FIRST)
        assert unpacker.take(INT8, bits=5) == -16

    def test_sign_extension_fills_word(self) -> None:
        """get_bits marks every bit above the width."""
        unpacker = BitUnpacker(bytes([0b10000000]), ByteOrder.MSB_FIRST)
        pattern = unpacker.get_bits(5, sign_extend=True)
        assert pattern == ((1 << WORD_BITS) - 1) & ~0b01111

    def test_no_sign_extension_for_positive(self) -> None:
        """A clear top bit leaves the value untouched."""
        unpacker = BitUnpacker(bytes([0b01111000]), ByteOrder.MSB_FIRST)
        assert unpacker.get_bits(5, sign_extend=True) == 15

    def test_unsigned_narrow_field_not_extended(self) -> None:
        """Unsigned types never sign-extend."""
        unpacker = BitUnpacker(bytes([0b10000000]), ByteOrder.MSB_FIRST)
        assert unpacker.take(UINT8, bits=5) == 16

    def test_bytes_pulled_lazily(self) -> None:
        """A byte is consumed only when the previous one is exhausted."""
        unpacker = BitUnpacker(b"\xff\xff")
        assert unpacker.bytes_remaining() == 2
        unpacker.get_bits(3)
        assert unpacker.bytes_remaining() == 1
        unpacker.get_bits(5)
        assert unpacker.bytes_remaining() == 1
        unpacker.get_bits(1)
        assert unpacker.bytes_remaining() == 0
        assert unpacker.bit_position() == 9

    def test_exhaustion(self) -> None:
        """Reading a 4-byte integer from 3 bytes fails."""
        unpacker = BitUnpacker(b"\x01\x02\x03")
        with pytest.raises(BufferExhaustedError, match="past end"):
            unpacker.take(UINT32)

    def test_invalid_width(self) -> None:
        """Zero-width reads are rejected."""
        with pytest.raises(BitWidthError):
            BitUnpacker(b"\xff").get_bits(0)
        with pytest.raises(BitWidthError):
            BitUnpacker(b"\xff").take(UINT8, bits=9)


class TestRoundTrip:
    """Test round-trip packing/unpacking."""

    def test_roundtrip_mixed(self, byte_order: ByteOrder) -> None:
        """Mixed widths survive a round trip in both orders."""
        packer = BitPacker(byte_order)
        packer.put_bits(42, 8)
        packer.put_bits(1, 1)
        packer.give(-5, INT8, bits=4)
        packer.put_bits(0x99, 8)
        packer.give(0xDEADBEEF, UINT32)

        unpacker = BitUnpacker(packer.to_bytes(), byte_order)
        assert unpacker.get_bits(8) == 42
        assert unpacker.get_bits(1) == 1
        assert unpacker.take(INT8, bits=4) == -5
        assert unpacker.get_bits(8) == 0x99
        assert unpacker.take(UINT32) == 0xDEADBEEF
