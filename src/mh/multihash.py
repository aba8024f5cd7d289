'''
Multihash encoding, decoding, and hashing.

A multihash is `<varint function code><varint digest length><digest>`, with
nothing before or after it.
'''

from typing import Any, Callable, Literal, Self, overload

import base58
from pydantic import GetCoreSchemaHandler, GetJsonSchemaHandler
from pydantic.json_schema import JsonSchemaValue
from pydantic_core import core_schema

from . import varint, hashers
from ._common import Immutable
from .errors import (
    MultihashError, UnsupportedAlgorithm, DigestLengthMismatch,
    TruncatedVarInt, TruncatedHeader, TruncatedDigest, TrailingBytes
)
from .registry import DEFAULT_REGISTRY, Descriptor, Registry

__all__ = (
    'Engine', 'DEFAULT_ENGINE',
    'Multihash', 'multihash',
    'encode_value', 'hash_and_encode', 'decode'
)

type Buffer = bytes|bytearray|memoryview

class Engine(Immutable):
    '''
    Encodes and decodes multihashes against a registry of hash functions,
    computing digests with `hasher`. Engines hold no mutable state, so a
    single instance can be shared freely.
    '''
    __slots__ = ('registry', 'hasher')

    registry: Registry
    hasher: Callable[[Descriptor, bytes], bytes]

    def __init__(self,
            registry: Registry=DEFAULT_REGISTRY,
            hasher: Callable[[Descriptor, bytes], bytes]=hashers.compute
        ):
        object.__setattr__(self, 'registry', registry)
        object.__setattr__(self, 'hasher', hasher)

    def resolve(self, algorithm: int|str) -> Descriptor:
        '''
        Find the descriptor for a function code or name.

        :raises UnsupportedAlgorithm: Not in the registry.
        '''
        if (desc := self.registry.lookup(algorithm)) is None:
            raise UnsupportedAlgorithm(algorithm)
        return desc

    def check(self, algorithm: int|str, digest: Buffer) -> Descriptor:
        '''Validate a digest against its function's expected length.'''
        desc = self.resolve(algorithm)
        if not desc.length.accepts(len(digest)):
            raise DigestLengthMismatch(desc.name, desc.size or 0, len(digest))
        return desc

    def encode_value(self, algorithm: int|str, digest: Buffer) -> bytes:
        '''Pack an existing digest into a multihash buffer.'''
        desc = self.check(algorithm, digest)
        return (
            varint.encode_uint(desc.code) +
            varint.encode_uint(len(digest)) +
            bytes(digest)
        )

    def hash_and_encode(self, algorithm: int|str, data: Buffer) -> bytes:
        '''Hash `data` and pack the digest into a multihash buffer.'''
        desc = self.resolve(algorithm)
        return self.encode_value(desc.code, self.hasher(desc, bytes(data)))

    def unpack(self, buffer: Buffer) -> tuple[Descriptor, bytes]:
        '''
        Split a multihash buffer into its descriptor and a copy of its digest.
        The declared length is always the length of the returned digest.
        '''
        view = memoryview(buffer)
        try: code, n = varint.decode_uint(view, 0)
        except TruncatedVarInt:
            raise TruncatedHeader('function code', len(view)) from None

        try: length, m = varint.decode_uint(view, n)
        except TruncatedVarInt:
            raise TruncatedHeader('digest length', len(view)) from None

        if (desc := self.registry.lookup_by_code(code)) is None:
            raise UnsupportedAlgorithm(code)

        if not desc.length.accepts(length):
            raise DigestLengthMismatch(desc.name, desc.size or 0, length)

        start = n + m
        remaining = len(view) - start
        if remaining < length:
            raise TruncatedDigest(length, remaining)
        if remaining > length:
            raise TrailingBytes(remaining - length)

        return desc, bytes(view[start:])

    def decode(self, buffer: Buffer) -> 'Multihash':
        '''Decode and validate a multihash buffer.'''
        desc, digest = self.unpack(buffer)
        return Multihash._unchecked(desc, digest)

    def validate(self, buffer: Buffer) -> bool:
        '''Whether `buffer` is a well-formed multihash.'''
        try:
            self.unpack(buffer)
        except MultihashError:
            return False
        return True

DEFAULT_ENGINE = Engine()

class Multihash(Immutable):
    '''A hash with a function code and digest.'''
    # The function code is a varint so we store the parts rather than the
    #  buffer to keep O(1) access to them.
    __slots__ = ("function", "digest", "_name")
    __match_args__ = ("function", "digest")

    function: int
    digest: bytes
    _name: str

    def __new__(cls, function: 'int|str|Buffer|Multihash|None'=None, digest: str|Buffer|None=None, **kwargs) -> 'Multihash':
        if isinstance(function, Multihash):
            if digest is not None:
                raise TypeError("Copy constructor does not accept digest argument")
            return function
        return super().__new__(cls)

    @overload
    def __init__(self, function: int|str, digest: str|Buffer): ...
    @overload
    def __init__(self, buffer: 'Buffer|Multihash'): ...

    def __init__(self, *args, **kwargs):
        # Types of function, digest, and buffer are interlinked, we need to
        # combine them into a single tuple to match against.
        parts: tuple[Any, Any, None]|tuple[None, None, Any]
        match args:
            case (function, digest):
                parts = (function, digest, None)

            case (buffer,):
                if (digest := kwargs.pop("digest", None)) is not None:
                    parts = (buffer, digest, None)
                else:
                    parts = (None, None, buffer)

            case ():
                if (buffer := kwargs.pop("buffer", None)) is not None:
                    parts = (None, None, buffer)
                else:
                    function = kwargs.pop("function", None)
                    digest = kwargs.pop("digest", None)
                    if function is None or digest is None:
                        raise TypeError('Multihash() missing function or digest')
                    parts = (function, digest, None)

            case _:
                raise TypeError('Multihash() got too many arguments')

        if kwargs:
            raise TypeError('Multihash() got too many arguments')

        match parts:
            case (None, None, Multihash()):
                # __new__ already returned the original
                return

            case (None, None, bytes()|bytearray()|memoryview() as buffer):
                desc, digest = DEFAULT_ENGINE.unpack(buffer)

            case (int()|str() as function, str()|bytes()|bytearray()|memoryview() as digest, None):
                if isinstance(function, bool):
                    raise TypeError("Expected function to be int or str, got bool")
                if isinstance(digest, str):
                    digest = bytes.fromhex(digest)
                desc = DEFAULT_ENGINE.check(function, digest)
                digest = bytes(digest)

            case (None, None, buffer):
                raise TypeError(
                    f"Expected buffer to be bytes, got {type(buffer).__name__}"
                )

            case (function, digest, None) if not isinstance(function, (int, str)):
                raise TypeError(
                    f"Expected function to be int or str, got {type(function).__name__}"
                )

            case (_, digest, None):
                raise TypeError(
                    f"Expected digest to be bytes, got {type(digest).__name__}"
                )

        object.__setattr__(self, 'function', desc.code)
        object.__setattr__(self, 'digest', digest)
        object.__setattr__(self, '_name', desc.name)

    @classmethod
    def _unchecked(cls, desc: Descriptor, digest: bytes) -> Self:
        self = super().__new__(cls)
        object.__setattr__(self, 'function', desc.code)
        object.__setattr__(self, 'digest', digest)
        object.__setattr__(self, '_name', desc.name)
        return self

    def __len__(self): return len(self.buffer)
    def __hash__(self): return hash(self.buffer)
    def __bytes__(self): return self.buffer
    def __str__(self): return self.encode()

    def __iter__(self):
        yield self.function
        yield self.digest

    def __eq__(self, other):
        if isinstance(other, Multihash):
            return (
                self.function == other.function and
                self.digest == other.digest
            )
        elif isinstance(other, (bytes, bytearray, memoryview)):
            return self.buffer == bytes(other)
        return NotImplemented

    def __lt__(self, other):
        if isinstance(other, Multihash):
            return self.buffer < other.buffer
        elif isinstance(other, (bytes, bytearray, memoryview)):
            return self.buffer < bytes(other)
        return NotImplemented

    def __repr__(self):
        return f"Multihash({self.function_name!r}, digest={self.digest.hex()!r})"

    @property
    def function_name(self) -> str:
        return self._name

    @property
    def length(self) -> int:
        return len(self.digest)

    @property
    def buffer(self) -> bytes:
        """
        Returns the multihash buffer as bytes
        """
        return (
            varint.encode_uint(self.function) +
            varint.encode_uint(len(self.digest)) +
            self.digest
        )

    def hex(self) -> str:
        """
        Returns the multihash buffer as a hex string
        """
        return self.buffer.hex()

    def encode(self, codec: Literal['hex', 'b58'] = 'b58') -> str:
        """
        Encode the multihash to a string using the specified codec

        :param codec: The codec to use for encoding, either 'hex' or 'b58'
        :return: Encoded multihash string
        :rtype: str
        """
        match codec:
            case 'hex': return self.buffer.hex()
            case 'b58': return base58.b58encode(self.buffer).decode('ascii')
            case _:
                raise ValueError(f"Unsupported codec: {codec}")

    @classmethod
    def decode(cls, data: str, codec: Literal['hex', 'b58'] = 'b58') -> 'Multihash':
        '''Decode a multihash string produced by `encode`.'''
        match codec:
            case 'hex': return cls.from_hex(data)
            case 'b58': return cls.from_b58(data)
            case _:
                raise ValueError(f"Unsupported codec: {codec}")

    @classmethod
    def from_hex(cls, hex_string: str) -> 'Multihash':
        """
        Create a Multihash from a hex encoded string

        :param hex_string: Hex encoded multihash string
        :return: Multihash object
        """
        return cls(bytes.fromhex(hex_string))

    @classmethod
    def from_b58(cls, b58_string: str) -> 'Multihash':
        """
        Create a Multihash from a base58 encoded string

        :param b58_string: Base58 encoded multihash string
        :return: Multihash object
        """
        return cls(base58.b58decode(b58_string))

    @staticmethod
    def validate(multihash: Buffer) -> bool:
        return DEFAULT_ENGINE.validate(multihash)

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> core_schema.CoreSchema:
        """
        Integrates Multihash with Pydantic's validation and serialization.
        Accepts Multihash objects, raw buffers, or base58 strings.
        """
        def validate_multihash(value: Any) -> Multihash:
            match value:
                case Multihash(): return value
                case bytes(): return cls(value)
                case str(): return cls.from_b58(value)
                case _:
                    raise ValueError(
                        f"Cannot convert {type(value).__name__} to Multihash"
                    )

        return core_schema.no_info_plain_validator_function(
            validate_multihash,
            serialization=core_schema.plain_serializer_function_ser_schema(
                str, return_schema=core_schema.str_schema(),
            )
        )

    @classmethod
    def __get_pydantic_json_schema__(cls, core_schema: core_schema.CoreSchema, handler: GetJsonSchemaHandler) -> JsonSchemaValue:
        return {
            'type': 'string',
            'format': 'multihash',
            'description': 'Base58 encoded multihash'
        }

def encode_value(algorithm: int|str, digest: Buffer) -> bytes:
    '''Pack `digest` produced by `algorithm` into a multihash buffer.'''
    return DEFAULT_ENGINE.encode_value(algorithm, digest)

def hash_and_encode(algorithm: int|str, data: Buffer) -> bytes:
    '''Hash `data` with `algorithm` and pack it into a multihash buffer.'''
    return DEFAULT_ENGINE.hash_and_encode(algorithm, data)

def decode(buffer: Buffer) -> Multihash:
    '''Decode and validate a multihash buffer.'''
    return DEFAULT_ENGINE.decode(buffer)

def multihash(name: int|str, data: Buffer) -> Multihash:
    """
    Create a multihash for the given data using the specified hash function.

    :param name: Name or code of the hash function (e.g., 'sha2-256')
    :param data: Data to hash
    :return: Multihash object
    """
    return DEFAULT_ENGINE.decode(DEFAULT_ENGINE.hash_and_encode(name, data))
