import binascii
import struct
import zlib
from pathlib import Path

import pytest


def _chunk(chunk_type: bytes, data: bytes) -> bytes:
    return (
        struct.pack(">I", len(data))
        + chunk_type
        + data
        + struct.pack(">I", binascii.crc32(chunk_type + data) & 0xFFFFFFFF)
    )


def make_png_header_bytes(width: int, height: int) -> bytes:
    """A 1-bit greyscale PNG that only declares its size.

    Pillow checks the declared size when opening, so the missing pixel data
    is never reached for oversized images.
    """
    signature = b"\x89PNG\r\n\x1a\n"
    ihdr = _chunk(b"IHDR", struct.pack(">IIBBBBB", width, height, 1, 0, 0, 0, 0))
    idat = _chunk(b"IDAT", zlib.compress(b""))
    iend = _chunk(b"IEND", b"")
    return signature + ihdr + idat + iend


@pytest.fixture
def oversized_png(tmp_path: Path) -> Path:
    path = tmp_path / "in" / "huge.png"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(make_png_header_bytes(20000, 20000))
    return path
