"""Structural binary codec for bitcodec.

This module provides the bit stream transcoder, the encoding policies, and
the serialize/deserialize entry points.
"""

from __future__ import annotations

from .bitpack import BitPacker, BitUnpacker
from .decoder import deserialize, deserialize_into
from .encoder import serialize
from .io import BufferSink, BufferSource, ByteSink, ByteSource, StreamSink, StreamSource
from .policies import Policy
from .resolver import resolve, struct_schema
from .schema import FieldSchema, StructSchema

__all__ = [
    "serialize",
    "deserialize",
    "deserialize_into",
    "BitPacker",
    "BitUnpacker",
    "ByteSink",
    "ByteSource",
    "BufferSink",
    "BufferSource",
    "StreamSink",
    "StreamSource",
    "Policy",
    "resolve",
    "struct_schema",
    "StructSchema",
    "FieldSchema",
]
