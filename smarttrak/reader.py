"""
Low-level byte access for SmartTrak .asd files.

Two kinds of helpers live here:
- Stream helpers that block until an exact number of bytes is available
- Little-endian field accessors over an in-memory buffer
"""

import struct
from typing import BinaryIO

from .exceptions import FramingError, UnexpectedEOF

STRING_MARKER = b"\xff\xfe\xff"

_U16 = struct.Struct("<H")
_I16 = struct.Struct("<h")
_U32 = struct.Struct("<I")
_U64 = struct.Struct("<Q")


def read_exact(stream: BinaryIO, length: int) -> bytes:
    """
    Read exactly `length` bytes from a stream.

    Short reads are retried until the stream reports end of data.

    Args:
        stream: Binary file-like object
        length: Number of bytes to read

    Returns:
        The bytes read

    Raises:
        UnexpectedEOF: If the stream ends before `length` bytes were read
    """
    chunks = []
    read = 0
    while read < length:
        chunk = stream.read(length - read)
        if not chunk:
            raise UnexpectedEOF(length, read)
        chunks.append(chunk)
        read += len(chunk)
    return b"".join(chunks)


def u8(data: bytes, offset: int) -> int:
    return data[offset]


def u16(data: bytes, offset: int) -> int:
    return _U16.unpack_from(data, offset)[0]


def i16(data: bytes, offset: int) -> int:
    return _I16.unpack_from(data, offset)[0]


def u32(data: bytes, offset: int) -> int:
    return _U32.unpack_from(data, offset)[0]


def u64(data: bytes, offset: int) -> int:
    return _U64.unpack_from(data, offset)[0]


def read_framed_string(stream: BinaryIO) -> str:
    """
    Read a framed UTF-16 string.

    Layout: FF FE FF marker, one length byte L, then L little-endian
    16-bit code units. Each code unit is taken as a code point on its own;
    surrogate pairs are not combined.

    Raises:
        FramingError: If the marker bytes do not match
        UnexpectedEOF: If the stream ends inside the string
    """
    header = read_exact(stream, 4)
    if header[:3] != STRING_MARKER:
        raise FramingError(header[:3])

    length = header[3]
    payload = read_exact(stream, 2 * length)
    return "".join(chr(u16(payload, 2 * i)) for i in range(length))
