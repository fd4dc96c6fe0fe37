"""Unit tests for layout and size introspection."""

from __future__ import annotations

from dataclasses import dataclass

import pytest
from pydantic import create_model

from bitcodec import (
    BaseStruct,
    Bits,
    Char,
    FixedArray,
    FixedBytes,
    Float32,
    Int64,
    SchemaError,
    Spare,
    UInt8,
    UInt16,
    UInt32,
    alignof,
    encoded_bits,
    encoded_size,
    field_count,
    field_offsets,
    field_sizes,
    sizeof,
)


class Trio(BaseStruct):
    a: UInt32
    b: bool
    c: Char


class Flags(BaseStruct):
    spare: Spare(4)
    a: Bits(UInt8, 2)
    b: Bits(UInt8, 2)


class Empty(BaseStruct):
    pass


class Mixed(BaseStruct):
    head: UInt8
    items: list[UInt8]
    tail: Float32


class Outer(BaseStruct):
    head: UInt8
    inner: Trio


@dataclass
class Wide:
    small: UInt8
    big: Int64


Large = create_model(
    "Large",
    __base__=BaseStruct,
    **{f"f{i}": (UInt8, 0) for i in range(30)},
)


class TestFieldCount:
    """Test field counting."""

    @pytest.mark.parametrize(
        ("struct_type", "expected"),
        [(Trio, 3), (Flags, 3), (Large, 30), (Empty, 0), (Wide, 2)],
    )
    def test_count(self, struct_type: type, expected: int) -> None:
        assert field_count(struct_type) == expected

    def test_count_from_instance(self) -> None:
        assert field_count(Trio(a=1, b=True, c=0)) == 3

    def test_not_a_composite(self) -> None:
        with pytest.raises(SchemaError, match="not a composite"):
            field_count(int)


class TestOffsets:
    """Test natural layout offsets."""

    def test_trio(self) -> None:
        assert field_offsets(Trio) == (0, 4, 5)
        assert sizeof(Trio) == 8
        assert alignof(Trio) == 4

    def test_bit_fields_take_backing_storage(self) -> None:
        assert field_offsets(Flags) == (0, 1, 2)
        assert sizeof(Flags) == 3

    def test_padding_before_wide_field(self) -> None:
        assert field_offsets(Wide) == (0, 8)
        assert sizeof(Wide) == 16

    def test_resizable_container_header(self) -> None:
        assert field_offsets(Mixed) == (0, 8, 32)
        assert sizeof(Mixed) == 40
        assert alignof(Mixed) == 8

    def test_nested(self) -> None:
        assert field_offsets(Outer) == (0, 4)
        assert sizeof(Outer) == 12

    def test_large(self) -> None:
        assert field_offsets(Large) == tuple(range(30))

    def test_empty(self) -> None:
        assert field_offsets(Empty) == ()

    @pytest.mark.parametrize(
        ("tp", "size", "alignment"),
        [
            (UInt8, 1, 1),
            (UInt16, 2, 2),
            (int, 8, 8),
            (bool, 1, 1),
            (float, 8, 8),
            (list[UInt8], 24, 8),
            (bytes, 24, 8),
            (FixedArray(UInt16, 3), 6, 2),
            (tuple[UInt8, UInt32], 8, 4),
        ],
    )
    def test_scalar_layout(self, tp: object, size: int, alignment: int) -> None:
        assert sizeof(tp) == size
        assert alignof(tp) == alignment


class TestEncodedSize:
    """Test fixed encoded sizes."""

    def test_trio(self) -> None:
        assert encoded_bits(Trio) == 48
        assert encoded_size(Trio) == 6

    def test_flags(self) -> None:
        assert encoded_bits(Flags) == 8
        assert encoded_size(Flags) == 1

    def test_partial_byte_rounds_up(self) -> None:
        assert encoded_bits(Bits(UInt16, 12)) == 12
        assert encoded_size(Bits(UInt16, 12)) == 2

    def test_fixed_bytes(self) -> None:
        class Tagged(BaseStruct):
            tag: bytes = FixedBytes(length=4)
            value: UInt16

        assert encoded_size(Tagged) == 6

    def test_variable_size(self) -> None:
        with pytest.raises(SchemaError, match="no fixed encoded size"):
            encoded_bits(Mixed)

    def test_field_sizes(self) -> None:
        assert field_sizes(Flags) == {"spare": 4, "a": 2, "b": 2}
        assert field_sizes(Mixed) == {"head": 8, "items": None, "tail": 32}
