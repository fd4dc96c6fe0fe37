"""Exception hierarchy for bitcodec.

This module defines all custom exceptions used throughout the package.
All exceptions inherit from BitcodecError for easy catching of any bitcodec-specific error.
"""

from __future__ import annotations


class BitcodecError(Exception):
    """Base exception for all bitcodec errors."""

    pass


class SchemaError(BitcodecError):
    """Raised when a type cannot be used with the codec.

    Examples:
        - No encoding policy applies to the type
        - Type defines only one of encode_bits/decode_bits
        - Bits or Spare declared wider than its backing representation
        - Enum member value outside its underlying integer type
        - Floating point width other than 16, 32 or 64
    """

    pass


class EncodeError(BitcodecError):
    """Raised when encoding a value fails.

    Examples:
        - Value out of range for its integer type or bit-field
        - Fixed-length container with the wrong number of elements
        - Encoded struct exceeds struct_max_bytes
    """

    pass


class DecodeError(BitcodecError):
    """Raised when decoding binary data fails.

    Examples:
        - Truncated data (insufficient bytes)
        - Unknown enum value
        - Invalid UTF-8 in a string field
        - Decoded fields rejected by the model
    """

    pass


class BufferExhaustedError(DecodeError):
    """Raised when a byte is pulled past the end of the input."""

    pass


class BitWidthError(BitcodecError, ValueError):
    """Raised when the transcoder is asked for an invalid number of bits.

    Examples:
        - Zero bits requested
        - More bits than the destination type holds
        - A type wider than the platform word
    """

    pass
