import copy
import hashlib

import base58
import pytest
from pydantic import BaseModel, ValidationError

from mh import varint
from mh.errors import (
    DigestLengthMismatch, HasherUnavailable, MultihashError, TrailingBytes,
    TruncatedDigest, TruncatedHeader, TruncationError, UnsupportedAlgorithm,
    VarIntOverflow
)
from mh.multihash import (
    DEFAULT_ENGINE, Engine, Multihash, decode, encode_value, hash_and_encode,
    multihash
)
from mh.registry import DEFAULT_REGISTRY, Descriptor, Fixed, Registry, VARIABLE

HELLO_SHA256 = bytes.fromhex(
    'b94d27b9934d3e08a52e52d7da7dabfac484efe37a5380ee9088f7ace2efcde9'
)


def test_encode_sha256() -> None:
    buf = encode_value('sha2-256', HELLO_SHA256)
    assert len(varint.encode_uint(0x12)) + 1 + 32 == len(buf)
    assert b'\x12\x20' + HELLO_SHA256 == buf

    mh = decode(buf)
    assert (0x12, 32, HELLO_SHA256) == (mh.function, mh.length, mh.digest)


def test_encode_by_code() -> None:
    assert encode_value(0x12, HELLO_SHA256) == encode_value('sha2-256', HELLO_SHA256)


def test_multibyte_code() -> None:
    digest = bytes(range(32))
    buf = encode_value('blake2b-256', digest)
    assert b'\xa0\xe4\x02\x20' + digest == buf
    mh = decode(buf)
    assert 0xb220 == mh.function
    assert 'blake2b-256' == mh.function_name


@pytest.mark.parametrize("desc", [
    d for d in DEFAULT_REGISTRY if d.size is not None
])
def test_round_trip(desc: Descriptor) -> None:
    assert desc.size is not None
    digest = bytes((i * 7 + desc.code) & 0xff for i in range(desc.size))
    mh = decode(encode_value(desc.code, digest))
    assert (desc.code, desc.size, digest) == (mh.function, mh.length, mh.digest)


def test_variable_length() -> None:
    assert b'\x00\x05hello' == encode_value('id', b'hello')
    assert b'\x00\x00' == encode_value('id', b'')
    assert b'hello' == decode(b'\x00\x05hello').digest

    long = bytes(300)
    buf = encode_value('id', long)
    assert b'\x00\xac\x02' == buf[:3]
    assert long == decode(buf).digest


@pytest.mark.parametrize("size", [0, 1, 31, 33, 64])
def test_length_enforcement(size: int) -> None:
    with pytest.raises(DigestLengthMismatch) as info:
        encode_value('sha2-256', b'\xaa' * size)
    assert 32 == info.value.expected
    assert size == info.value.actual


def test_unsupported_encode() -> None:
    with pytest.raises(UnsupportedAlgorithm):
        encode_value(0x01, HELLO_SHA256)
    with pytest.raises(UnsupportedAlgorithm):
        encode_value('sha256', HELLO_SHA256)


@pytest.mark.parametrize("buf", [b'', b'\x12', b'\x01', b'\x80', b'\xb2'])
def test_short_buffers(buf: bytes) -> None:
    with pytest.raises(TruncationError):
        decode(buf)


def test_truncated_header_fields() -> None:
    with pytest.raises(TruncatedHeader) as info:
        decode(b'\x80\xe4')
    assert 'function code' == info.value.field

    with pytest.raises(TruncatedHeader) as info:
        decode(b'\x12\x80')
    assert 'digest length' == info.value.field


def test_unknown_code() -> None:
    with pytest.raises(UnsupportedAlgorithm) as info:
        decode(b'\x01\x20' + HELLO_SHA256)
    assert 0x01 == info.value.algorithm


def test_declared_length_mismatch() -> None:
    with pytest.raises(DigestLengthMismatch):
        decode(b'\x12\x1f' + HELLO_SHA256[:31])


def test_trailing_bytes() -> None:
    buf = encode_value('sha2-256', HELLO_SHA256)
    with pytest.raises(TrailingBytes) as info:
        decode(buf + b'\x00')
    assert 1 == info.value.extra


def test_truncated_digest() -> None:
    buf = encode_value('sha2-256', HELLO_SHA256)
    with pytest.raises(TruncatedDigest) as info:
        decode(buf[:-1])
    assert (32, 31) == (info.value.expected, info.value.actual)


def test_header_overflow() -> None:
    with pytest.raises(VarIntOverflow):
        decode(b'\xff' * 10)
    with pytest.raises(VarIntOverflow):
        decode(b'\x00' + b'\xff' * 10)


def test_errors_are_value_errors() -> None:
    with pytest.raises(ValueError):
        decode(b'\x12\x20')


def test_digest_is_copied() -> None:
    buf = bytearray(encode_value('sha2-256', HELLO_SHA256))
    mh = decode(buf)
    buf[5] ^= 0xff
    assert HELLO_SHA256 == mh.digest
    assert isinstance(mh.digest, bytes)


def test_decode_memoryview() -> None:
    buf = b'junk' + encode_value('sha2-256', HELLO_SHA256)
    assert HELLO_SHA256 == decode(memoryview(buf)[4:]).digest


def test_hash_and_encode() -> None:
    assert b'\x12\x20' + HELLO_SHA256 == hash_and_encode('sha2-256', b'hello world')
    assert b'\x00\x05hello' == hash_and_encode('id', b'hello')


def test_hash_unsupported_checked_first() -> None:
    calls = []

    def hasher(desc: Descriptor, data: bytes) -> bytes:
        calls.append(desc)
        return b''

    engine = Engine(DEFAULT_REGISTRY, hasher)
    with pytest.raises(UnsupportedAlgorithm):
        engine.hash_and_encode(0x01, b'data')
    assert [] == calls


def test_hash_unavailable() -> None:
    with pytest.raises(HasherUnavailable):
        hash_and_encode('skein256-256', b'data')


def test_custom_engine() -> None:
    reg = Registry([
        Descriptor(0x300001, 'xor8', Fixed(1)),
        Descriptor(0x300002, 'raw', VARIABLE),
    ])

    def hasher(desc: Descriptor, data: bytes) -> bytes:
        if desc.name == 'xor8':
            x = 0
            for b in data:
                x ^= b
            return bytes([x])
        return data

    engine = Engine(reg, hasher)
    buf = engine.hash_and_encode('xor8', b'\x01\x02\x04')
    assert varint.encode(0x300001) + b'\x01\x07' == buf
    mh = engine.decode(buf)
    assert (0x300001, b'\x07') == tuple(mh)
    assert "xor8" == mh.function_name
    assert "Multihash('xor8', digest='07')" == repr(mh)

    with pytest.raises(UnsupportedAlgorithm):
        engine.decode(encode_value('sha2-256', HELLO_SHA256))
    with pytest.raises(UnsupportedAlgorithm):
        DEFAULT_ENGINE.decode(buf)


def test_engine_immutable() -> None:
    with pytest.raises(TypeError):
        DEFAULT_ENGINE.registry = Registry([])  # type: ignore[misc]


def test_validate() -> None:
    good = encode_value('sha2-256', HELLO_SHA256)
    assert Multihash.validate(good)
    assert not Multihash.validate(good + b'\x00')
    assert not Multihash.validate(good[:-1])
    assert not Multihash.validate(b'')
    assert not Multihash.validate(b'\xff' * 12)


class TestMultihash:
    def test_from_parts(self) -> None:
        mh = Multihash('sha2-256', HELLO_SHA256)
        assert 0x12 == mh.function
        assert 'sha2-256' == mh.function_name
        assert HELLO_SHA256 == mh.digest
        assert 32 == mh.length
        assert 34 == len(mh)

    def test_from_hex_digest(self) -> None:
        assert Multihash(0x12, HELLO_SHA256.hex()) == Multihash('sha2-256', HELLO_SHA256)

    def test_from_buffer(self) -> None:
        buf = encode_value('sha2-256', HELLO_SHA256)
        mh = Multihash(buf)
        assert buf == mh.buffer
        assert buf == bytes(mh)
        assert mh == buf
        assert Multihash(buffer=buf) == mh

    def test_keywords(self) -> None:
        mh = Multihash(function='sha1', digest=bytes(20))
        assert 0x11 == mh.function
        with pytest.raises(TypeError):
            Multihash(function='sha1')
        with pytest.raises(TypeError):
            Multihash('sha1', bytes(20), b'')  # type: ignore[call-overload]

    def test_copy_constructor(self) -> None:
        mh = Multihash('sha2-256', HELLO_SHA256)
        assert Multihash(mh) is mh
        assert copy.copy(mh) is mh
        assert copy.deepcopy(mh) is mh

    def test_invalid(self) -> None:
        with pytest.raises(DigestLengthMismatch):
            Multihash('sha2-256', b'short')
        with pytest.raises(UnsupportedAlgorithm):
            Multihash('nope', b'')
        with pytest.raises(TrailingBytes):
            Multihash(encode_value('sha2-256', HELLO_SHA256) + b'!')
        with pytest.raises(TypeError):
            Multihash(1.5, b'')  # type: ignore[call-overload]
        with pytest.raises(TypeError):
            Multihash('sha1', 20)  # type: ignore[call-overload]

    def test_immutable(self) -> None:
        mh = Multihash('sha2-256', HELLO_SHA256)
        with pytest.raises(TypeError):
            mh.digest = b''  # type: ignore[misc]

    def test_hashable(self) -> None:
        a = Multihash('sha2-256', HELLO_SHA256)
        b = decode(a.buffer)
        assert {a} == {b}
        assert a is not b

    def test_ordering(self) -> None:
        a = Multihash('sha1', bytes(20))
        b = Multihash('sha2-256', bytes(32))
        assert a < b
        assert sorted([b, a]) == [a, b]
        assert a < bytearray(b.buffer)
        assert a < memoryview(b.buffer)

    def test_buffer_equality(self) -> None:
        mh = Multihash('sha2-256', HELLO_SHA256)
        assert mh == bytearray(mh.buffer)
        assert mh == memoryview(mh.buffer)
        assert mh != bytearray(mh.buffer[:-1])

    def test_digest_buffers(self) -> None:
        mh = Multihash('sha2-256', HELLO_SHA256)
        for digest in (bytearray(HELLO_SHA256), memoryview(HELLO_SHA256)):
            other = Multihash('sha2-256', digest)
            assert mh == other
            assert isinstance(other.digest, bytes)

    def test_match(self) -> None:
        match Multihash('sha2-256', HELLO_SHA256):
            case Multihash(0x12, digest):
                assert HELLO_SHA256 == digest
            case _:
                pytest.fail("Multihash did not match")

    def test_strings(self) -> None:
        mh = Multihash('sha2-256', HELLO_SHA256)
        assert '1220' + HELLO_SHA256.hex() == mh.hex()
        assert mh.hex() == mh.encode('hex')
        assert base58.b58encode(mh.buffer).decode() == str(mh)
        assert str(mh).startswith('Qm')

        assert mh == Multihash.from_hex(mh.hex())
        assert mh == Multihash.from_b58(str(mh))
        assert mh == Multihash.decode(str(mh))
        assert mh == Multihash.decode(mh.hex(), 'hex')
        with pytest.raises(ValueError):
            mh.encode('base64')  # type: ignore[arg-type]

    def test_repr(self) -> None:
        mh = Multihash('id', b'\x01')
        assert "Multihash('id', digest='01')" == repr(mh)

    def test_multihash_helper(self) -> None:
        mh = multihash('sha2-256', b'hello world')
        assert HELLO_SHA256 == mh.digest
        assert hashlib.sha1(b'x').digest() == multihash(0x11, b'x').digest


class TestPydantic:
    class Model(BaseModel):
        mh: Multihash

    def test_validate_and_serialize(self) -> None:
        mh = Multihash('sha2-256', HELLO_SHA256)
        for value in (mh, mh.buffer, str(mh)):
            assert mh == self.Model(mh=value).mh
        assert {'mh': str(mh)} == self.Model(mh=mh).model_dump()

    def test_rejects(self) -> None:
        with pytest.raises(ValidationError):
            self.Model(mh=b'\x12\x20')
        with pytest.raises(ValidationError):
            self.Model(mh=12)

    def test_json_schema(self) -> None:
        schema = self.Model.model_json_schema()
        assert 'multihash' == schema['properties']['mh']['format']


def test_multihash_error_hierarchy() -> None:
    for exc in (TruncatedDigest(1, 0), TrailingBytes(1), VarIntOverflow()):
        assert isinstance(exc, MultihashError)


def test_package_exports_module() -> None:
    import mh
    import mh.multihash as module
    assert mh.multihash is module
    assert mh.Multihash is module.Multihash
    assert callable(module.multihash)
