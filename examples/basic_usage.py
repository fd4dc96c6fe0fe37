#!/usr/bin/env python3
"""Basic usage example for bitcodec.

This example demonstrates:
1. Declaring a struct with native-width fields, bit-fields and padding
2. Serializing in both bit orders
3. Deserializing back to a Pydantic model
4. Inspecting field offsets and encoded sizes
"""

from __future__ import annotations

from bitcodec import (
    BaseStruct,
    Bits,
    ByteOrder,
    Char,
    Spare,
    UInt8,
    UInt32,
    deserialize,
    encoded_size,
    field_offsets,
    field_sizes,
    serialize,
)


class Trio(BaseStruct):
    """Three natural-width fields."""

    a: UInt32
    b: bool
    c: Char


class Flags(BaseStruct):
    """Two 2-bit flags behind four spare bits, packed into one byte."""

    spare: Spare(4)
    a: Bits(UInt8, 2)
    b: Bits(UInt8, 2)


def show(label: str, data: bytes) -> None:
    print(f"   {label}: {data.hex(' ')}  ({' '.join(format(b, '08b') for b in data)})")


def main() -> None:
    """Run the basic usage example."""
    print("=" * 60)
    print("bitcodec Basic Usage Example")
    print("=" * 60)
    print()

    # Natural-width fields
    print("1. Serializing Trio(a=0x12345678, b=True, c=0)...")
    trio = Trio(a=0x12345678, b=True, c=0)
    show("MSB first", serialize(trio, ByteOrder.MSB_FIRST))
    show("LSB first", serialize(trio, ByteOrder.LSB_FIRST))
    print(f"   In-memory offsets: {field_offsets(Trio)}")
    print()

    # Sub-byte fields
    print("2. Serializing Flags(a=1, b=2)...")
    flags = Flags(a=1, b=2)
    for field_name, bits in field_sizes(Flags).items():
        print(f"   {field_name}: {bits} bits")
    print(f"   Total: {encoded_size(Flags)} byte")
    show("MSB first", serialize(flags, ByteOrder.MSB_FIRST))
    show("LSB first", serialize(flags, ByteOrder.LSB_FIRST))
    print()

    # Decode
    print("3. Decoding Flags from LSB-first bytes...")
    decoded = deserialize(Flags, bytes([0b10010000]), ByteOrder.LSB_FIRST)
    print(f"   a={decoded.a} b={decoded.b}")
    print()

    # Verify round-trip
    print("4. Verifying round-trip...")
    data = serialize(trio, ByteOrder.LSB_FIRST)
    if deserialize(Trio, data, ByteOrder.LSB_FIRST) == trio:
        print("   ✓ Round-trip successful! Structs match.")
    else:
        print("   ✗ Round-trip failed! Structs don't match.")
    print()

    print("=" * 60)
    print("Example complete!")
    print("=" * 60)


if __name__ == "__main__":
    main()
