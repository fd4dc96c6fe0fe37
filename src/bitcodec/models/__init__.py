"""Struct modeling for bitcodec.

This module provides the BaseStruct class and the field types used to
declare wire layouts.
"""

from __future__ import annotations

from .base import BaseStruct
from .fields import (
    SIZE_TYPE,
    BitField,
    Bits,
    Bool,
    Char,
    FixedArray,
    FixedBytes,
    FixedStr,
    Float16,
    Float32,
    Float64,
    FloatType,
    Int8,
    Int16,
    Int32,
    Int64,
    IntType,
    Padding,
    Spare,
    UInt8,
    UInt16,
    UInt32,
    UInt64,
    int_type_of,
)

__all__ = [
    "BaseStruct",
    "Bits",
    "Spare",
    "FixedArray",
    "FixedBytes",
    "FixedStr",
    "UInt8",
    "UInt16",
    "UInt32",
    "UInt64",
    "Int8",
    "Int16",
    "Int32",
    "Int64",
    "Bool",
    "Char",
    "Float16",
    "Float32",
    "Float64",
    "IntType",
    "FloatType",
    "BitField",
    "Padding",
    "SIZE_TYPE",
    "int_type_of",
]
