"""Encoding policies.

A policy is the encode/decode strategy chosen for one type. Terminal policies
(integers, enums, floats, bit-fields, padding) call straight onto the
transcoder; container and struct policies delegate to the policies of their
elements and fields.

Every policy also carries the natural in-memory layout of its type (``size``
and ``alignment``, C rules) used for field offsets, and its fixed wire width
(``bit_length``) when it has one.
"""

from __future__ import annotations

import dataclasses
import enum
import struct
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Sequence

from pydantic import BaseModel, ValidationError

from ..config import WORD_BYTES
from ..exceptions import DecodeError, EncodeError, SchemaError
from ..models.fields import SIZE_TYPE, BitField, FloatType, IntType, Padding
from .bitpack import BitPacker, BitUnpacker

if TYPE_CHECKING:
    from .schema import StructSchema

# Resizable containers are laid out as a begin/end/capacity header.
_CONTAINER_SIZE = 3 * WORD_BYTES

_FLOAT_FORMATS = {16: ("<e", "<H"), 32: ("<f", "<I"), 64: ("<d", "<Q")}


def _type_name(tp: Any) -> str:
    return getattr(tp, "__name__", repr(tp))


def round_up(value: int, alignment: int) -> int:
    return (value + alignment - 1) // alignment * alignment


class Policy(ABC):
    """Encode/decode strategy for a single type.

    Attributes:
        name: Human readable type name used in error messages
        size: Natural in-memory size in bytes
        alignment: Natural in-memory alignment in bytes
        can_encode: Whether values of the type can be serialized
        can_decode: Whether values of the type can be deserialized
    """

    name: str = "?"
    size: int = 1
    alignment: int = 1
    can_encode: bool = True
    can_decode: bool = True

    @abstractmethod
    def encode(self, value: Any, packer: BitPacker) -> None:
        """Write ``value`` to the packer."""

    @abstractmethod
    def decode(self, unpacker: BitUnpacker, current: Any = None) -> Any:
        """Read a value from the unpacker.

        Args:
            unpacker: Source of bits
            current: Existing value to decode into; mutable values are
                updated in place and returned

        Returns:
            The decoded value
        """

    @property
    def bit_length(self) -> int | None:
        """Number of bits every value occupies on the wire, or None if it varies."""
        return None

    def require_encode(self) -> None:
        """Raise SchemaError unless the type can be serialized."""
        if not self.can_encode:
            raise SchemaError(f"{self.name} is read-only: it has no serializer")

    def require_decode(self) -> None:
        """Raise SchemaError unless the type can be deserialized."""
        if not self.can_decode:
            raise SchemaError(f"{self.name} is write-only: it has no deserializer")

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name})"


class IntegerPolicy(Policy):
    """Native integer: the full type width, two's complement when signed."""

    def __init__(self, int_type: IntType, name: str | None = None) -> None:
        self.int_type = int_type
        prefix = "Int" if int_type.signed else "UInt"
        self.name = name or f"{prefix}{int_type.bits}"
        self.size = self.alignment = int_type.bits // 8

    @property
    def bit_length(self) -> int:
        return self.int_type.bits

    def encode(self, value: Any, packer: BitPacker) -> None:
        if not isinstance(value, int):
            raise EncodeError(f"{self.name}: expected int, got {type(value).__name__}")
        if value < self.int_type.min_value or value > self.int_type.max_value:
            raise EncodeError(
                f"{self.name}: value {value} out of range "
                f"[{self.int_type.min_value}, {self.int_type.max_value}]"
            )
        packer.give(int(value), self.int_type)

    def decode(self, unpacker: BitUnpacker, current: Any = None) -> int:
        return unpacker.take(self.int_type)


class BoolPolicy(IntegerPolicy):
    """C ``bool``: one unsigned byte, any non-zero value decodes as True."""

    def __init__(self) -> None:
        super().__init__(IntType(8, signed=False), name="bool")

    def encode(self, value: Any, packer: BitPacker) -> None:
        if not isinstance(value, (bool, int)) or value not in (0, 1):
            raise EncodeError(f"bool: expected True or False, got {value!r}")
        packer.give(int(value), self.int_type)

    def decode(self, unpacker: BitUnpacker, current: Any = None) -> bool:
        return unpacker.take(self.int_type) != 0


class EnumPolicy(Policy):
    """Enumeration sent as its underlying integer value."""

    def __init__(self, enum_type: type[enum.Enum], int_type: IntType) -> None:
        self.enum_type = enum_type
        self.int_type = int_type
        self.name = enum_type.__name__
        self.size = self.alignment = int_type.bits // 8

        if not list(enum_type):
            raise SchemaError(f"Enum {self.name} has no values")
        for member in enum_type:
            value = member.value
            if isinstance(value, bool) or not isinstance(value, int):
                raise SchemaError(f"Enum {self.name}: member {member.name} is not an integer")
            if value < int_type.min_value or value > int_type.max_value:
                raise SchemaError(
                    f"Enum {self.name}: member {member.name}={value} does not fit "
                    f"its {int_type.bits}-bit underlying type"
                )

    @property
    def bit_length(self) -> int:
        return self.int_type.bits

    def encode(self, value: Any, packer: BitPacker) -> None:
        if not isinstance(value, self.enum_type):
            raise EncodeError(f"expected {self.name}, got {type(value).__name__}")
        packer.give(value.value, self.int_type)

    def decode(self, unpacker: BitUnpacker, current: Any = None) -> enum.Enum:
        raw = unpacker.take(self.int_type)
        try:
            return self.enum_type(raw)
        except ValueError as e:
            raise DecodeError(f"{self.name}: unknown value {raw}") from e


class FloatPolicy(Policy):
    """IEEE 754 float sent as the unsigned integer with the same bits."""

    def __init__(self, float_type: FloatType) -> None:
        if float_type.bits not in _FLOAT_FORMATS:
            raise SchemaError(
                f"Floating point width {float_type.bits} is not supported (use 16, 32 or 64)"
            )
        self.float_type = float_type
        self.int_type = IntType(float_type.bits, signed=False)
        self.name = f"Float{float_type.bits}"
        self.size = self.alignment = float_type.bits // 8
        self._float_format, self._int_format = _FLOAT_FORMATS[float_type.bits]

    @property
    def bit_length(self) -> int:
        return self.float_type.bits

    def encode(self, value: Any, packer: BitPacker) -> None:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise EncodeError(f"{self.name}: expected float, got {type(value).__name__}")
        try:
            packed = struct.pack(self._float_format, value)
        except (OverflowError, struct.error) as e:
            raise EncodeError(f"{self.name}: cannot represent {value}: {e}") from e
        (pattern,) = struct.unpack(self._int_format, packed)
        packer.give(pattern, self.int_type)

    def decode(self, unpacker: BitUnpacker, current: Any = None) -> float:
        pattern = unpacker.take(self.int_type)
        (value,) = struct.unpack(self._float_format, struct.pack(self._int_format, pattern))
        return value


class BitFieldPolicy(Policy):
    """Integer sent with an explicit wire width narrower than its storage."""

    def __init__(self, bit_field: BitField) -> None:
        self.bit_field = bit_field
        backing = bit_field.backing
        self.name = f"Bits({backing.bits}{'s' if backing.signed else 'u'}, {bit_field.width})"
        self.size = self.alignment = backing.bits // 8
        if backing.signed:
            self._low = -(1 << (bit_field.width - 1))
            self._high = (1 << (bit_field.width - 1)) - 1
        else:
            self._low, self._high = 0, (1 << bit_field.width) - 1

    @property
    def bit_length(self) -> int:
        return self.bit_field.width

    def encode(self, value: Any, packer: BitPacker) -> None:
        if not isinstance(value, int):
            raise EncodeError(f"{self.name}: expected int, got {type(value).__name__}")
        if value < self._low or value > self._high:
            raise EncodeError(
                f"{self.name}: value {value} does not fit in {self.bit_field.width} bits"
            )
        packer.put_bits(value, self.bit_field.width, self.bit_field.backing.bits)

    def decode(self, unpacker: BitUnpacker, current: Any = None) -> int:
        backing = self.bit_field.backing
        pattern = unpacker.get_bits(
            self.bit_field.width, sign_extend=backing.signed, type_bits=backing.bits
        )
        return backing.from_pattern(pattern)


class PaddingPolicy(Policy):
    """Spare bits: written as zeros, read and dropped."""

    def __init__(self, padding: Padding) -> None:
        self.padding = padding
        self.name = f"Spare({padding.width})"

    @property
    def bit_length(self) -> int:
        return self.padding.width

    def encode(self, value: Any, packer: BitPacker) -> None:
        packer.put_bits(0, self.padding.width)

    def decode(self, unpacker: BitUnpacker, current: Any = None) -> Any:
        unpacker.get_bits(self.padding.width)
        return current


class CustomPolicy(Policy):
    """Type that encodes itself through ``encode_bits``/``decode_bits``.

    ``decode_bits`` fills the instance in place; fresh values are created
    with ``cls()`` first.
    """

    size = alignment = WORD_BYTES

    def __init__(self, cls: type) -> None:
        self.cls = cls
        self.name = _type_name(cls)
        self.can_encode = callable(getattr(cls, "encode_bits", None))
        self.can_decode = callable(getattr(cls, "decode_bits", None))

    def encode(self, value: Any, packer: BitPacker) -> None:
        self.require_encode()
        value.encode_bits(packer)

    def decode(self, unpacker: BitUnpacker, current: Any = None) -> Any:
        self.require_decode()
        target = current if current is not None else self.cls()
        target.decode_bits(unpacker)
        return target


class ByteStringPolicy(Policy):
    """``bytes``, ``bytearray`` or UTF-8 ``str``.

    With ``length`` None a SIZE_TYPE byte count comes first; otherwise the
    length is part of the type and exactly that many bytes are sent.
    """

    _BYTE = IntType(8, signed=False)

    def __init__(self, kind: type, length: int | None = None) -> None:
        self.kind = kind
        self.length = length
        self.name = kind.__name__ if length is None else f"{kind.__name__}[{length}]"
        if length is None:
            self.size, self.alignment = _CONTAINER_SIZE, WORD_BYTES
        else:
            self.size = max(length, 1)

    @property
    def bit_length(self) -> int | None:
        return None if self.length is None else self.length * 8

    def encode(self, value: Any, packer: BitPacker) -> None:
        if self.kind is str:
            if not isinstance(value, str):
                raise EncodeError(f"{self.name}: expected str, got {type(value).__name__}")
            data = value.encode("utf-8")
        else:
            if not isinstance(value, (bytes, bytearray, memoryview)):
                raise EncodeError(f"{self.name}: expected bytes, got {type(value).__name__}")
            data = bytes(value)

        if self.length is None:
            packer.give(len(data), SIZE_TYPE)
        elif len(data) != self.length:
            raise EncodeError(f"{self.name}: expected {self.length} bytes, got {len(data)} bytes")

        for byte in data:
            packer.give(byte, self._BYTE)

    def decode(self, unpacker: BitUnpacker, current: Any = None) -> Any:
        count = unpacker.take(SIZE_TYPE) if self.length is None else self.length
        data = bytearray()
        for _ in range(count):
            data.append(unpacker.take(self._BYTE))

        if self.kind is str:
            try:
                return data.decode("utf-8")
            except UnicodeDecodeError as e:
                raise DecodeError(f"{self.name}: invalid UTF-8 encoding: {e}") from e
        if self.kind is bytearray:
            if isinstance(current, bytearray):
                current[:] = data
                return current
            return data
        return bytes(data)


class SequencePolicy(Policy):
    """Homogeneous ``list`` or ``tuple[T, ...]``.

    With ``length`` None the sequence is resizable and a SIZE_TYPE element
    count comes first; decoding into a list regrows it to that count. With a
    ``length`` the arity is fixed and no count is sent.
    """

    def __init__(self, element: Policy, container: type = list, length: int | None = None) -> None:
        self.element = element
        self.container = container
        self.length = length
        suffix = "" if length is None else f", {length}"
        self.name = f"{container.__name__}[{element.name}{suffix}]"
        if length is None and element.bit_length == 0:
            raise SchemaError(f"{self.name}: resizable container of zero-bit elements")
        if length is None:
            self.size, self.alignment = _CONTAINER_SIZE, WORD_BYTES
        else:
            self.size = max(length * element.size, 1)
            self.alignment = element.alignment
        self.can_encode = element.can_encode
        self.can_decode = element.can_decode

    @property
    def bit_length(self) -> int | None:
        if self.length is None:
            return None
        element_bits = self.element.bit_length
        return None if element_bits is None else self.length * element_bits

    def encode(self, value: Any, packer: BitPacker) -> None:
        if not isinstance(value, (list, tuple)):
            raise EncodeError(f"{self.name}: expected a sequence, got {type(value).__name__}")
        if self.length is None:
            packer.give(len(value), SIZE_TYPE)
        elif len(value) != self.length:
            raise EncodeError(
                f"{self.name}: expected {self.length} elements, got {len(value)} elements"
            )
        for item in value:
            self.element.encode(item, packer)

    def decode(self, unpacker: BitUnpacker, current: Any = None) -> Any:
        count = unpacker.take(SIZE_TYPE) if self.length is None else self.length
        target = current if isinstance(current, list) and self.container is list else []
        del target[count:]
        for index in range(count):
            if index < len(target):
                target[index] = self.element.decode(unpacker, target[index])
            else:
                target.append(self.element.decode(unpacker, None))
        return target if self.container is list else self.container(target)


class TuplePolicy(Policy):
    """Heterogeneous fixed-arity ``tuple[A, B, ...]``, elements in order."""

    def __init__(self, elements: Sequence[Policy]) -> None:
        self.elements = tuple(elements)
        self.name = f"tuple[{', '.join(p.name for p in self.elements)}]"
        self.size, self.alignment = _layout(self.elements)
        self.can_encode = all(p.can_encode for p in self.elements)
        self.can_decode = all(p.can_decode for p in self.elements)

    @property
    def bit_length(self) -> int | None:
        total = 0
        for policy in self.elements:
            bits = policy.bit_length
            if bits is None:
                return None
            total += bits
        return total

    def encode(self, value: Any, packer: BitPacker) -> None:
        if not isinstance(value, (list, tuple)) or len(value) != len(self.elements):
            raise EncodeError(f"{self.name}: expected {len(self.elements)} elements, got {value!r}")
        for policy, item in zip(self.elements, value):
            policy.encode(item, packer)

    def decode(self, unpacker: BitUnpacker, current: Any = None) -> tuple[Any, ...]:
        if not isinstance(current, tuple) or len(current) != len(self.elements):
            current = (None,) * len(self.elements)
        return tuple(
            policy.decode(unpacker, item) for policy, item in zip(self.elements, current)
        )


class StructPolicy(Policy):
    """Composite type encoded field by field in declaration order.

    The schema is attached after construction so that a struct can refer to
    itself through a container while its fields are still being resolved.
    """

    def __init__(self, cls: type, schema: StructSchema | None = None) -> None:
        self.cls = cls
        self.name = _type_name(cls)
        self.schema: StructSchema | None = None
        if schema is not None:
            self.attach(schema)

    def attach(self, schema: StructSchema) -> None:
        """Bind the decomposed field list of the struct."""
        self.schema = schema
        self.size = schema.size
        self.alignment = schema.alignment
        self.can_encode = all(f.policy.can_encode for f in schema.fields)
        self.can_decode = all(f.policy.can_decode for f in schema.fields)

    @property
    def bit_length(self) -> int | None:
        if self.schema is None:
            # Still being resolved
            return None
        return self.schema.total_bits()

    def encode(self, value: Any, packer: BitPacker) -> None:
        assert self.schema is not None
        if not isinstance(value, self.cls):
            raise EncodeError(f"expected {self.name}, got {type(value).__name__}")
        for field in self.schema.fields:
            field.policy.encode(getattr(value, field.name), packer)

    def decode(self, unpacker: BitUnpacker, current: Any = None) -> Any:
        assert self.schema is not None
        if isinstance(current, self.cls):
            for field in self.schema.fields:
                value = field.policy.decode(unpacker, getattr(current, field.name))
                self._assign(current, field.name, value)
            return current

        values = {
            field.name: field.policy.decode(unpacker, None) for field in self.schema.fields
        }
        return self._construct(values)

    def _assign(self, target: Any, name: str, value: Any) -> None:
        try:
            setattr(target, name, value)
        except ValidationError as e:
            raise DecodeError(f"{self.name}.{name}: decoded value rejected: {e}") from e

    def _construct(self, values: dict[str, Any]) -> Any:
        try:
            if issubclass(self.cls, BaseModel):
                return self.cls(**values)
            init_names = {f.name for f in dataclasses.fields(self.cls) if f.init}
            instance = self.cls(**{k: v for k, v in values.items() if k in init_names})
            for name, value in values.items():
                if name not in init_names:
                    setattr(instance, name, value)
            return instance
        except (ValidationError, TypeError, ValueError) as e:
            raise DecodeError(f"Failed to construct {self.name}: {e}") from e


def _layout(policies: Sequence[Policy]) -> tuple[int, int]:
    """Return (size, alignment) of policies laid out back to back, C style."""
    cursor = 0
    alignment = 1
    for policy in policies:
        cursor = round_up(cursor, policy.alignment) + policy.size
        alignment = max(alignment, policy.alignment)
    return max(round_up(cursor, alignment), 1), alignment

