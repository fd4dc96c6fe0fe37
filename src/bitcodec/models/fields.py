"""Field type helpers and utilities.

This module provides the wire-level type vocabulary used to declare struct
fields: native-width integers and floats, explicit bit-fields, padding, and
fixed-length containers. Every helper returns an ``Annotated`` type (or a
pydantic ``FieldInfo``), so the same declaration drives both pydantic
validation and the codec.

Example:
    >>> class Flags(BaseStruct):
    ...     spare: Spare(4)
    ...     a: Bits(UInt8, 2)
    ...     b: Bits(UInt8, 2)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated, Any, cast, get_args, get_origin

from annotated_types import Ge, Le, MaxLen, MinLen
from pydantic import Field
from pydantic.fields import FieldInfo

from ..config import WORD_BITS
from ..exceptions import SchemaError


@dataclass(frozen=True)
class IntType:
    """Native integer descriptor.

    Attributes:
        bits: Storage width in bits (a positive multiple of 8)
        signed: Whether values are two's complement
    """

    bits: int
    signed: bool = False

    def __post_init__(self) -> None:
        if self.bits < 8 or self.bits % 8 != 0:
            raise SchemaError(f"Integer width must be a positive multiple of 8, got {self.bits}")

    @property
    def mask(self) -> int:
        return (1 << self.bits) - 1

    @property
    def min_value(self) -> int:
        return -(1 << (self.bits - 1)) if self.signed else 0

    @property
    def max_value(self) -> int:
        return (1 << (self.bits - 1)) - 1 if self.signed else self.mask

    def from_pattern(self, pattern: int) -> int:
        """Convert a raw bit pattern to a Python int of this type.

        Only the low ``self.bits`` of the pattern are kept; a set top bit
        makes the result negative for signed types.
        """
        value = pattern & self.mask
        if self.signed and value >> (self.bits - 1):
            value -= 1 << self.bits
        return value


@dataclass(frozen=True)
class FloatType:
    """IEEE 754 floating point descriptor (16, 32 or 64 bits)."""

    bits: int


@dataclass(frozen=True)
class BitField:
    """Marks an integer stored in ``backing`` but sent as ``width`` bits."""

    width: int
    backing: IntType


@dataclass(frozen=True)
class Padding:
    """Marks ``width`` spare bits with no backing value."""

    width: int


def _integer(bits: int, signed: bool) -> Any:
    int_type = IntType(bits, signed)
    return Annotated[int, int_type, Ge(int_type.min_value), Le(int_type.max_value)]


UInt8 = _integer(8, False)
UInt16 = _integer(16, False)
UInt32 = _integer(32, False)
UInt64 = _integer(64, False)
Int8 = _integer(8, True)
Int16 = _integer(16, True)
Int32 = _integer(32, True)
Int64 = _integer(64, True)

#: C ``bool``: one byte on the wire, decoded as a Python bool.
Bool = bool
#: C ``char``: a signed byte.
Char = Int8

Float16 = Annotated[float, FloatType(16)]
Float32 = Annotated[float, FloatType(32)]
Float64 = Annotated[float, FloatType(64)]


def int_type_of(tp: Any) -> IntType:
    """Return the IntType behind an integer alias, ``int`` or an IntType.

    Raises:
        SchemaError: If ``tp`` is not an integer type
    """
    if isinstance(tp, IntType):
        return tp
    if tp is int:
        return IntType(WORD_BITS, signed=True)
    if tp is bool:
        return IntType(8, signed=False)
    if get_origin(tp) is Annotated:
        for meta in reversed(tp.__metadata__):
            if isinstance(meta, IntType):
                return meta
        return int_type_of(get_args(tp)[0])
    raise SchemaError(f"{tp!r} is not an integer type")


def Bits(backing: Any, width: int) -> Any:
    """Create an explicitly sized bit-field type.

    The value is stored as ``backing`` but occupies only ``width`` bits on
    the wire. Signed backings sign-extend on decode.

    Args:
        backing: Integer type the value is stored in (e.g. UInt8, Int16, int)
        width: Wire width in bits (1 to the backing width)

    Returns:
        An ``Annotated[int, ...]`` type usable as a field annotation

    Raises:
        SchemaError: If width is outside 1..backing width

    Example:
        >>> class Header(BaseStruct):
        ...     version: Bits(UInt8, 3)
        ...     offset: Bits(Int16, 13)
    """
    int_type = int_type_of(backing)
    if width < 1 or width > int_type.bits:
        raise SchemaError(
            f"Bits width {width} does not fit backing type of {int_type.bits} bits"
        )
    if int_type.signed:
        low, high = -(1 << (width - 1)), (1 << (width - 1)) - 1
    else:
        low, high = 0, (1 << width) - 1
    return Annotated[int, BitField(width, int_type), Ge(low), Le(high)]


def Spare(width: int) -> Any:
    """Create a padding type of ``width`` bits.

    Spare fields always encode as zero bits and are discarded on decode.
    They default to None, so they never need to be passed to a constructor.

    Raises:
        SchemaError: If width is outside 1..WORD_BITS
    """
    if width < 1 or width > WORD_BITS:
        raise SchemaError(f"Spare width must be 1-{WORD_BITS}, got {width}")
    return Annotated[None, Padding(width), Field(default=None)]


def FixedArray(element: Any, length: int) -> Any:
    """Create a fixed-length list type (no length prefix on the wire).

    Example:
        >>> class Sample(BaseStruct):
        ...     channels: FixedArray(Int16, 4)
    """
    if length < 0:
        raise SchemaError(f"FixedArray length must be non-negative, got {length}")
    return Annotated[list[element], MinLen(length), MaxLen(length)]


def FixedBytes(*, length: int, **kwargs: Any) -> FieldInfo:
    """Create a fixed-length bytes field.

    Args:
        length: Exact length in bytes
        **kwargs: Additional Field() arguments

    Returns:
        Pydantic FieldInfo suitable for use as a field default/metadata.

    Example:
        >>> class Message(BaseStruct):
        ...     payload: bytes = FixedBytes(length=16)
    """
    return cast(FieldInfo, Field(min_length=length, max_length=length, **kwargs))


def FixedStr(*, length: int, **kwargs: Any) -> FieldInfo:
    """Create a fixed-length string field.

    The length counts UTF-8 bytes on the wire.

    Example:
        >>> class Message(BaseStruct):
        ...     callsign: str = FixedStr(length=8)
    """
    return cast(FieldInfo, Field(min_length=length, max_length=length, **kwargs))


#: Element count prefix of resizable containers (the platform ``size_t``).
SIZE_TYPE = IntType(WORD_BITS, signed=False)
