"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import pytest

from bitcodec import ByteOrder


@pytest.fixture(params=[ByteOrder.MSB_FIRST, ByteOrder.LSB_FIRST], ids=["msb", "lsb"])
def byte_order(request: pytest.FixtureRequest) -> ByteOrder:
    """Each test using this fixture runs once per byte order."""
    return request.param


@pytest.fixture
def trio_bytes_lsb() -> bytes:
    """Trio(a=0x12345678, b=True, c=0) packed least-significant-first."""
    return b"\x78\x56\x34\x12\x01\x00"
