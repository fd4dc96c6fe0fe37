"""Byte sinks and sources beneath the bit transcoder.

The transcoder only ever moves one 8-bit unit at a time. Sinks receive those
units during encoding, sources supply them during decoding:

- BufferSink: growable in-memory buffer owned for the duration of one encode
- BufferSource: bounded, forward-only cursor over caller-supplied bytes
- StreamSink / StreamSource: adapters over binary file-like objects
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import BinaryIO, Union

from ..exceptions import BufferExhaustedError

BytesLike = Union[bytes, bytearray, memoryview]


class ByteSink(ABC):
    """Append-only destination for encoded bytes."""

    @abstractmethod
    def put_byte(self, byte: int) -> None:
        """Append a single byte (0-255)."""


class ByteSource(ABC):
    """Forward-only origin of bytes to decode."""

    @abstractmethod
    def get_byte(self) -> int:
        """Consume and return the next byte.

        Raises:
            BufferExhaustedError: If no byte is left
        """

    @abstractmethod
    def remaining(self) -> int | None:
        """Return the number of unread bytes, or None if unknown."""


class BufferSink(ByteSink):
    """Collects encoded bytes in a growable in-memory buffer.

    Example:
        >>> sink = BufferSink()
        >>> sink.put_byte(0x12)
        >>> sink.getvalue()
        b'\\x12'
    """

    def __init__(self) -> None:
        self._buffer = bytearray()

    def put_byte(self, byte: int) -> None:
        self._buffer.append(byte)

    def getvalue(self) -> bytes:
        """Return a copy of everything written so far."""
        return bytes(self._buffer)

    def __len__(self) -> int:
        return len(self._buffer)


class BufferSource(ByteSource):
    """Reads bytes from a caller-supplied buffer without copying it.

    Args:
        data: Bytes-like object to read from
    """

    def __init__(self, data: BytesLike) -> None:
        self._view = memoryview(data).cast("B")
        self._position = 0
        self._size = len(self._view)

    def get_byte(self) -> int:
        if self._position >= self._size:
            raise BufferExhaustedError(
                f"Attempted to read past end of buffer ({self._size} bytes)"
            )
        byte = self._view[self._position]
        self._position += 1
        return byte

    def remaining(self) -> int:
        return self._size - self._position

    def position(self) -> int:
        """Return the number of bytes consumed."""
        return self._position


class StreamSink(ByteSink):
    """Writes encoded bytes straight to a binary stream."""

    def __init__(self, stream: BinaryIO) -> None:
        self._stream = stream

    def put_byte(self, byte: int) -> None:
        self._stream.write(bytes((byte,)))


class StreamSource(ByteSource):
    """Reads bytes one at a time from a binary stream.

    End of stream is an error, never an implicit zero byte.
    """

    def __init__(self, stream: BinaryIO) -> None:
        self._stream = stream

    def get_byte(self) -> int:
        chunk = self._stream.read(1)
        if not chunk:
            raise BufferExhaustedError("Attempted to read past end of stream")
        return chunk[0]

    def remaining(self) -> None:
        return None
