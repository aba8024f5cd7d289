'''
Self-describing multihash digests: `<varint code><varint length><digest>`.
'''

from .errors import (
    MultihashError, UnsupportedAlgorithm, DigestLengthMismatch,
    TruncationError, TruncatedVarInt, TruncatedHeader, TruncatedDigest,
    TrailingBytes, VarIntOverflow, HasherUnavailable
)
from .registry import (
    Fixed, Variable, VARIABLE, Descriptor, Registry,
    DEFAULT_REGISTRY, HASH_CODES, CODE_HASHES
)
from .varint import encode_uint, decode_uint
from .multihash import (
    Engine, DEFAULT_ENGINE, Multihash,
    encode_value, hash_and_encode, decode
)
from . import varint, hashers, multihash

__all__ = (
    'MultihashError', 'UnsupportedAlgorithm', 'DigestLengthMismatch',
    'TruncationError', 'TruncatedVarInt', 'TruncatedHeader', 'TruncatedDigest',
    'TrailingBytes', 'VarIntOverflow', 'HasherUnavailable',
    'Fixed', 'Variable', 'VARIABLE', 'Descriptor', 'Registry',
    'DEFAULT_REGISTRY', 'HASH_CODES', 'CODE_HASHES',
    'encode_uint', 'decode_uint',
    'Engine', 'DEFAULT_ENGINE', 'Multihash',
    'encode_value', 'hash_and_encode', 'decode',
    'varint', 'hashers', 'multihash'
)
