'''
Registry of multihash functions, mapping multicodec codes to names and the
digest length each function produces.
'''

from dataclasses import dataclass
from types import MappingProxyType
from typing import Final, Iterable, Iterator, Mapping, Optional

from ._common import Immutable

__all__ = (
    'Fixed', 'Variable', 'VARIABLE', 'Length', 'Descriptor', 'Registry',
    'DEFAULT_REGISTRY', 'HASH_CODES', 'CODE_HASHES'
)

@dataclass(frozen=True, slots=True)
class Fixed:
    '''The function always produces `size` bytes.'''
    size: int

    def __post_init__(self):
        if self.size <= 0:
            raise ValueError(f"Fixed digest length must be positive, got {self.size}")

    def accepts(self, length: int) -> bool:
        return length == self.size

@dataclass(frozen=True, slots=True)
class Variable:
    '''Any declared length is accepted.'''
    def accepts(self, length: int) -> bool:
        return True

VARIABLE: Final = Variable()

type Length = Fixed|Variable

@dataclass(frozen=True, slots=True)
class Descriptor:
    code: int
    name: str
    length: Length

    @property
    def size(self) -> Optional[int]:
        '''The fixed digest size, or None if the length is variable.'''
        match self.length:
            case Fixed(size): return size
            case Variable(): return None

class Registry(Immutable):
    '''
    An immutable table of hash function descriptors, indexed by both code
    and name. Lookups return None for unknown functions rather than raising,
    since unknown codes are ordinary input from untrusted buffers.
    '''
    __slots__ = ('_by_code', '_by_name')

    _by_code: Mapping[int, Descriptor]
    _by_name: Mapping[str, Descriptor]

    def __init__(self, descriptors: Iterable[Descriptor]):
        by_code: dict[int, Descriptor] = {}
        by_name: dict[str, Descriptor] = {}
        for desc in descriptors:
            if desc.code < 0:
                raise ValueError(f"Negative hash code for {desc.name!r}")
            if desc.code in by_code:
                raise ValueError(
                    f"Duplicate hash code 0x{desc.code:02x}: "
                    f"{by_code[desc.code].name!r} and {desc.name!r}"
                )
            if desc.name in by_name:
                raise ValueError(f"Duplicate hash name {desc.name!r}")
            by_code[desc.code] = desc
            by_name[desc.name] = desc

        object.__setattr__(self, '_by_code', MappingProxyType(by_code))
        object.__setattr__(self, '_by_name', MappingProxyType(by_name))

    def __len__(self): return len(self._by_code)
    def __iter__(self) -> Iterator[Descriptor]: return iter(self._by_code.values())

    def __contains__(self, key: object):
        match key:
            case bool(): return False
            case int(): return key in self._by_code
            case str(): return key in self._by_name
            case _: return False

    def __repr__(self):
        return f"Registry(<{len(self)} functions>)"

    def lookup_by_code(self, code: int) -> Optional[Descriptor]:
        return self._by_code.get(code)

    def lookup_by_name(self, name: str) -> Optional[Descriptor]:
        return self._by_name.get(name)

    def lookup(self, key: int|str) -> Optional[Descriptor]:
        '''Look up a descriptor by either code or name.'''
        match key:
            case bool(): return None
            case int(): return self.lookup_by_code(key)
            case str(): return self.lookup_by_name(key)
            case _: return None

    def codes(self) -> Mapping[str, int]:
        '''Mapping of names to codes.'''
        return {d.name: d.code for d in self}

    def names(self) -> Mapping[int, str]:
        '''Mapping of codes to names.'''
        return {d.code: d.name for d in self}

def _fixed(code: int, name: str, size: int):
    return Descriptor(code, name, Fixed(size))

def _family(prefix: str, base: int, count: int):
    # Code base+i produces an i-byte digest named by its bit width.
    for i in range(1, count + 1):
        yield _fixed(base + i, f"{prefix}-{i*8}", i)

DEFAULT_REGISTRY: Final = Registry([
    Descriptor(0x00, 'id', VARIABLE),
    _fixed(0x11, 'sha1', 20),
    _fixed(0x12, 'sha2-256', 32),
    _fixed(0x13, 'sha2-512', 64),
    _fixed(0x14, 'sha3-512', 64),
    _fixed(0x15, 'sha3-384', 48),
    _fixed(0x16, 'sha3-256', 32),
    _fixed(0x17, 'sha3-224', 28),
    _fixed(0x18, 'shake-128', 32),
    _fixed(0x19, 'shake-256', 64),
    _fixed(0x1a, 'keccak-224', 28),
    _fixed(0x1b, 'keccak-256', 32),
    _fixed(0x1c, 'keccak-384', 48),
    _fixed(0x1d, 'keccak-512', 64),
    Descriptor(0x1e, 'blake3', VARIABLE), # XOF, 32 by default
    _fixed(0x20, 'sha2-384', 48),
    _fixed(0x22, 'murmur3-128', 16),
    _fixed(0x23, 'murmur3-32', 4),
    _fixed(0x56, 'dbl-sha2-256', 32), # draft
    _fixed(0xd4, 'md4', 16), # draft
    _fixed(0xd5, 'md5', 16), # draft
    _fixed(0x1012, 'sha2-256-trunc254-padded', 32),
    _fixed(0x1013, 'sha2-224', 28),
    _fixed(0x1014, 'sha2-512-224', 28),
    _fixed(0x1015, 'sha2-512-256', 32),
    *_family('blake2b', 0xb200, 0x40),
    *_family('blake2s', 0xb240, 0x20),
    *_family('skein256', 0xb300, 0x20),
    *_family('skein512', 0xb320, 0x40),
    *_family('skein1024', 0xb360, 0x80),
    _fixed(0xb401, 'poseidon-bls12_381-a2-fc1', 32),
])

HASH_CODES: Final[Mapping[str, int]] = MappingProxyType(dict(DEFAULT_REGISTRY.codes()))
CODE_HASHES: Final[Mapping[int, str]] = MappingProxyType(dict(DEFAULT_REGISTRY.names()))
