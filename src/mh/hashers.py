'''
Hash function backends for computing digests named in the registry.
'''

import hashlib
import logging
from typing import Callable, Optional

import blake3
from Cryptodome.Hash import keccak

from .errors import HasherUnavailable
from .registry import Descriptor

__all__ = ('Hasher', 'backend', 'compute', 'available')

logger = logging.getLogger(__name__)

type Hasher = Callable[[bytes, Descriptor], bytes]
'''Computes a digest of `data` for the function described by `desc`.'''

def _fixed_size(desc: Descriptor) -> int:
    if (size := desc.size) is None:
        raise HasherUnavailable(desc.name, "a fixed digest length is required")
    return size

def _hashlib(name: str) -> Hasher:
    def hasher(data: bytes, desc: Descriptor) -> bytes:
        try: h = hashlib.new(name, data)
        except ValueError:
            # OpenSSL builds may lack legacy digests like md4
            raise HasherUnavailable(desc.name) from None
        return h.digest()
    return hasher

def _identity(data: bytes, desc: Descriptor) -> bytes:
    return bytes(data)

def _shake(name: str) -> Hasher:
    def hasher(data: bytes, desc: Descriptor) -> bytes:
        return hashlib.new(name, data).digest(_fixed_size(desc)) # type: ignore[call-arg]
    return hasher

def _keccak(data: bytes, desc: Descriptor) -> bytes:
    return keccak.new(digest_bits=_fixed_size(desc)*8, data=data).digest()

def _blake2b(data: bytes, desc: Descriptor) -> bytes:
    return hashlib.blake2b(data, digest_size=_fixed_size(desc)).digest()

def _blake2s(data: bytes, desc: Descriptor) -> bytes:
    return hashlib.blake2s(data, digest_size=_fixed_size(desc)).digest()

def _blake3(data: bytes, desc: Descriptor) -> bytes:
    # XOF, registered as variable so use the default output length
    return blake3.blake3(data).digest(length=desc.size or 32)

def _dbl_sha256(data: bytes, desc: Descriptor) -> bytes:
    return hashlib.sha256(hashlib.sha256(data).digest()).digest()

def _sha256_trunc254(data: bytes, desc: Descriptor) -> bytes:
    d = bytearray(hashlib.sha256(data).digest())
    d[-1] &= 0b00111111
    return bytes(d)

BACKENDS: dict[str, Hasher] = {
    'id': _identity,
    'sha1': _hashlib('sha1'),
    'sha2-224': _hashlib('sha224'),
    'sha2-256': _hashlib('sha256'),
    'sha2-384': _hashlib('sha384'),
    'sha2-512': _hashlib('sha512'),
    'sha2-512-224': _hashlib('sha512_224'),
    'sha2-512-256': _hashlib('sha512_256'),
    'sha3-224': _hashlib('sha3_224'),
    'sha3-256': _hashlib('sha3_256'),
    'sha3-384': _hashlib('sha3_384'),
    'sha3-512': _hashlib('sha3_512'),
    'shake-128': _shake('shake_128'),
    'shake-256': _shake('shake_256'),
    'keccak-224': _keccak,
    'keccak-256': _keccak,
    'keccak-384': _keccak,
    'keccak-512': _keccak,
    'blake3': _blake3,
    'dbl-sha2-256': _dbl_sha256,
    'sha2-256-trunc254-padded': _sha256_trunc254,
    'md4': _hashlib('md4'),
    'md5': _hashlib('md5'),
}
FAMILIES: dict[str, Hasher] = {
    'blake2b': _blake2b,
    'blake2s': _blake2s,
}

def backend(name: str) -> Optional[Hasher]:
    '''Find the backend for a registered function name, if there is one.'''
    if fn := BACKENDS.get(name):
        return fn
    family, _, _ = name.rpartition('-')
    return FAMILIES.get(family)

def available(desc: Descriptor) -> bool:
    '''Whether `compute` can be expected to succeed for `desc`.'''
    return backend(desc.name) is not None

def compute(desc: Descriptor, data: bytes) -> bytes:
    '''
    Compute the digest of `data` with the function described by `desc`.

    :raises HasherUnavailable: No backend for the function, or the backend
        can't produce a digest for the descriptor's length.
    '''
    if (fn := backend(desc.name)) is None:
        raise HasherUnavailable(desc.name)

    logger.debug("Hashing %d bytes with %s", len(data), desc.name)
    return fn(data, desc)
