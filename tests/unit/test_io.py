"""Unit tests for byte sinks and sources."""

from __future__ import annotations

import io

import pytest

from bitcodec import (
    BitPacker,
    BitUnpacker,
    BufferExhaustedError,
    BufferSink,
    BufferSource,
    ByteOrder,
    DecodeError,
    EncodeError,
    StreamSink,
    StreamSource,
)


class TestBufferSink:
    """Test the in-memory sink."""

    def test_collects_bytes(self) -> None:
        sink = BufferSink()
        sink.put_byte(0x12)
        sink.put_byte(0x34)

        assert sink.getvalue() == b"\x12\x34"
        assert len(sink) == 2


class TestBufferSource:
    """Test the bounded read cursor."""

    def test_reads_forward(self) -> None:
        source = BufferSource(b"\x01\x02")

        assert source.remaining() == 2
        assert source.get_byte() == 1
        assert source.get_byte() == 2
        assert source.remaining() == 0
        assert source.position() == 2

    def test_past_end_raises(self) -> None:
        """Reading past the end fails instead of yielding zero."""
        source = BufferSource(b"\x01")
        source.get_byte()

        with pytest.raises(BufferExhaustedError):
            source.get_byte()

    def test_exhaustion_is_decode_error(self) -> None:
        with pytest.raises(DecodeError):
            BufferSource(b"").get_byte()

    def test_accepts_bytearray_and_memoryview(self) -> None:
        data = bytearray(b"\xaa\xbb")
        assert BufferSource(data).get_byte() == 0xAA
        assert BufferSource(memoryview(data)[1:]).get_byte() == 0xBB

    def test_does_not_copy(self) -> None:
        """The source reads through to the caller's buffer."""
        data = bytearray(b"\x00\x00")
        source = BufferSource(data)
        data[1] = 0x7F
        source.get_byte()
        assert source.get_byte() == 0x7F


class TestStreams:
    """Test the file-like adapters."""

    def test_stream_sink(self) -> None:
        stream = io.BytesIO()
        packer = BitPacker(ByteOrder.MSB_FIRST, StreamSink(stream))
        packer.put_bits(0xABC, 12)
        packer.flush()

        assert stream.getvalue() == b"\xab\xc0"

    def test_to_bytes_needs_buffer_sink(self) -> None:
        packer = BitPacker(sink=StreamSink(io.BytesIO()))
        with pytest.raises(EncodeError):
            packer.to_bytes()

    def test_stream_source(self) -> None:
        unpacker = BitUnpacker(StreamSource(io.BytesIO(b"\xab\xc0")), ByteOrder.MSB_FIRST)

        assert unpacker.get_bits(12) == 0xABC
        assert unpacker.bytes_remaining() is None

    def test_stream_source_eof(self) -> None:
        source = StreamSource(io.BytesIO(b""))
        with pytest.raises(BufferExhaustedError, match="end of stream"):
            source.get_byte()
