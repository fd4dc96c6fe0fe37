#!/usr/bin/env python3
"""Custom codec and streaming example for bitcodec.

This example demonstrates:
1. A plain class that encodes itself with encode_bits/decode_bits
2. Using it as a field of a struct
3. Writing several structs into one stream and reading them back
"""

from __future__ import annotations

import io

from bitcodec import (
    BaseStruct,
    BitPacker,
    BitUnpacker,
    Bits,
    ByteOrder,
    StreamSink,
    StreamSource,
    UInt8,
    deserialize,
    serialize,
)


class GridRef:
    """Latitude/longitude cell packed as two 10-bit indices."""

    def __init__(self, row: int = 0, col: int = 0) -> None:
        self.row = row
        self.col = col

    def encode_bits(self, packer: BitPacker) -> None:
        packer.put_bits(self.row, 10)
        packer.put_bits(self.col, 10)

    def decode_bits(self, unpacker: BitUnpacker) -> None:
        self.row = unpacker.get_bits(10)
        self.col = unpacker.get_bits(10)

    def __repr__(self) -> str:
        return f"GridRef(row={self.row}, col={self.col})"


class Sighting(BaseStruct):
    """Observation report: 4-bit species code, 20-bit cell, 8-bit count."""

    species: Bits(UInt8, 4)
    cell: GridRef
    count: UInt8


def main() -> None:
    """Run the custom codec example."""
    print("=" * 60)
    print("bitcodec Custom Codec Example")
    print("=" * 60)
    print()

    # Single struct
    print("1. Serializing one sighting...")
    sighting = Sighting(species=9, cell=GridRef(412, 731), count=3)
    data = serialize(sighting)
    print(f"   Encoded: {data.hex(' ')} ({len(data)} bytes for 32 bits)")

    decoded = deserialize(Sighting, data)
    print(f"   Decoded: species={decoded.species} cell={decoded.cell} count={decoded.count}")
    print()

    # Stream of structs
    print("2. Streaming sightings least-significant-bit first...")
    sightings = [Sighting(species=n, cell=GridRef(n * 10, n * 20), count=n) for n in range(1, 5)]

    stream = io.BytesIO()
    packer = BitPacker(ByteOrder.LSB_FIRST, StreamSink(stream))
    for item in sightings:
        packer.write(item)
    packer.flush()
    print(f"   Stream length: {len(stream.getvalue())} bytes")

    stream.seek(0)
    unpacker = BitUnpacker(StreamSource(stream), ByteOrder.LSB_FIRST)
    for _ in sightings:
        item = unpacker.read(Sighting)
        print(f"   species={item.species} cell={item.cell} count={item.count}")
    print()

    print("=" * 60)
    print("Example complete!")
    print("=" * 60)


if __name__ == "__main__":
    main()
