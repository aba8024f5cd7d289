'''
Unsigned leb128 varint encoding and decoding as used in multiformats.

Values are limited to 63 bits, so an encoding is at most 9 bytes long.
'''

from collections.abc import Iterable
from typing import IO

from .errors import TruncatedVarInt, VarIntOverflow

__all__ = (
    'MAX_VALUE', 'MAX_LENGTH',
    'encode_iter', 'decode_iter',
    'decode_stream', 'decode_bytes',
    'encode', 'decode',
    'encode_uint', 'decode_uint'
)

MAX_LENGTH = 9
MAX_VALUE = (1 << 7*MAX_LENGTH) - 1

def encode_iter(number: int) -> Iterable[int]:
    """Pack `number` into varint bytes as an iterable of integers"""
    if number < 0:
        raise VarIntOverflow(f"Varints are unsigned, got {number}")
    if number > MAX_VALUE:
        raise VarIntOverflow(f"Varint exceeds 63 bits: {number}")

    while True:
        towrite = number & 0x7f
        number >>= 7
        if number:
            yield towrite | 0x80
        else:
            yield towrite
            break

def _decode(it: Iterable[int], offset: int) -> tuple[int, int]:
    shift = 0
    result = 0
    for n, i in enumerate(it, 1):
        result |= (i & 0x7f) << shift
        shift += 7
        if not (i & 0x80):
            return result, n
        if n == MAX_LENGTH:
            raise VarIntOverflow()

    raise TruncatedVarInt(offset)

def decode_iter(it: Iterable[int]) -> int:
    """Read a varint from `it` as an iterable of byte values"""
    return _decode(it, 0)[0]

def _stream_bytes(stream: IO[bytes]) -> Iterable[int]:
    """Read bytes from `stream` as an iterable of integers"""
    while b := stream.read(1):
        yield b[0]

def decode_stream(stream: IO[bytes]) -> int:
    """Read a varint from `stream`, leaving it positioned after the varint"""
    return decode_iter(_stream_bytes(stream))

def decode_bytes(buf: bytes) -> int:
    """Read a varint from from `buf` bytes"""
    return decode_iter(buf)

def encode(number: int) -> bytes:
    """Pack `number` into varint bytes"""
    return bytes(encode_iter(number))

def encode_uint(value: int) -> bytes:
    """Pack `value` into varint bytes"""
    return encode(value)

def decode_uint(buf: bytes|bytearray|memoryview, offset: int=0) -> tuple[int, int]:
    """
    Read a varint from `buf` starting at `offset`.

    :return: The value and the number of bytes consumed.
    """
    if offset < 0:
        raise IndexError(f"Negative varint offset {offset}")
    return _decode(memoryview(buf)[offset:], offset)

def decode(src: bytes | IO[bytes] | Iterable[int]) -> int:
    """Read a varint from `src` bytes or stream"""
    match src:
        case bytes() | bytearray() | memoryview():
            return decode_uint(src)[0]
        case _ if hasattr(src, 'read'):
            return decode_stream(src) # type: ignore[arg-type]
        case Iterable():
            return decode_iter(src)
        case _:
            raise TypeError("Unsupported source type for varint decoding")
