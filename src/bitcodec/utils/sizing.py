"""Layout and size introspection.

This module reports how the codec sees a type without encoding anything:
field counts and byte offsets of composites under natural layout, and the
encoded size of fixed-width types.
"""

from __future__ import annotations

from typing import Any

from ..codec.resolver import resolve, struct_schema
from ..codec.schema import is_composite
from ..exceptions import SchemaError


def _as_type(value_or_type: Any) -> Any:
    if isinstance(value_or_type, type) or not is_composite(type(value_or_type)):
        return value_or_type
    return type(value_or_type)


def field_count(struct_or_class: Any) -> int:
    """Return the number of fields of a composite type.

    A composite with no fields has a count of zero.

    Example:
        >>> field_count(Trio)
        3
    """
    return struct_schema(_as_type(struct_or_class)).field_count


def field_offsets(struct_or_class: Any) -> tuple[int, ...]:
    """Return the byte offset of each field under natural C layout.

    Example:
        >>> class Trio(BaseStruct):
        ...     a: UInt32
        ...     b: bool
        ...     c: Char
        >>> field_offsets(Trio)
        (0, 4, 5)
    """
    return struct_schema(_as_type(struct_or_class)).offsets()


def sizeof(tp: Any) -> int:
    """Return the natural in-memory size of a type in bytes."""
    return resolve(_as_type(tp)).size


def alignof(tp: Any) -> int:
    """Return the natural alignment of a type in bytes."""
    return resolve(_as_type(tp)).alignment


def encoded_bits(tp: Any) -> int:
    """Calculate the encoded size of a fixed-width type in bits.

    Args:
        tp: Type (or struct instance) to calculate size for

    Returns:
        Size in bits

    Raises:
        SchemaError: If the type has no policy or its width depends on the value

    Example:
        >>> class Flags(BaseStruct):
        ...     spare: Spare(4)
        ...     a: Bits(UInt8, 2)
        ...     b: Bits(UInt8, 2)
        >>> encoded_bits(Flags)
        8
    """
    policy = resolve(_as_type(tp))
    bits = policy.bit_length
    if bits is None:
        raise SchemaError(f"{policy.name} has no fixed encoded size")
    return bits


def encoded_size(tp: Any) -> int:
    """Calculate the encoded size of a fixed-width type in bytes (rounded up)."""
    return (encoded_bits(tp) + 7) // 8


def field_sizes(struct_or_class: Any) -> dict[str, int | None]:
    """Get the encoded size in bits of each field of a composite.

    Returns:
        Dictionary mapping field names to their size in bits (None if variable)

    Example:
        >>> field_sizes(Flags)
        {'spare': 4, 'a': 2, 'b': 2}
    """
    schema = struct_schema(_as_type(struct_or_class))
    return {field.name: field.bits_required() for field in schema.fields}
