'''
Errors raised by the multihash codec. Every error is terminal to the call
which raised it, and all of them are ValueErrors so callers can catch the
whole family without importing this module.
'''

from typing import Optional

__all__ = (
    'MultihashError', 'UnsupportedAlgorithm', 'DigestLengthMismatch',
    'TruncationError', 'TruncatedVarInt', 'TruncatedHeader', 'TruncatedDigest',
    'TrailingBytes', 'VarIntOverflow', 'HasherUnavailable'
)

class MultihashError(ValueError):
    """Base class for multihash errors."""

class UnsupportedAlgorithm(MultihashError):
    '''The hash function is not in the registry.'''
    def __init__(self, algorithm: int|str):
        self.algorithm = algorithm
        if isinstance(algorithm, int):
            super().__init__(f"Unsupported hash code 0x{algorithm:02x}")
        else:
            super().__init__(f"Unknown hash function: {algorithm!r}")

class DigestLengthMismatch(MultihashError):
    '''The digest length conflicts with the algorithm's fixed length.'''
    def __init__(self, name: str, expected: int, actual: int):
        self.name = name
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"{name} digests are {expected} bytes, got {actual}"
        )

class TruncationError(MultihashError):
    """The buffer ended before the structure being read was complete."""

class TruncatedVarInt(TruncationError):
    def __init__(self, offset: int):
        self.offset = offset
        super().__init__(f"Incomplete varint data at offset {offset}")

class TruncatedHeader(TruncationError):
    def __init__(self, field: str, offset: int):
        self.field = field
        self.offset = offset
        super().__init__(f"Multihash ended inside the {field} field at offset {offset}")

class TruncatedDigest(TruncationError):
    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(f"Multihash declares {expected} digest bytes, only {actual} remain")

class TrailingBytes(MultihashError):
    def __init__(self, extra: int):
        self.extra = extra
        super().__init__(f"{extra} unexpected byte(s) after the multihash digest")

class VarIntOverflow(MultihashError):
    def __init__(self, msg: str="Varint exceeds 63 bits"):
        super().__init__(msg)

class HasherUnavailable(MultihashError):
    '''
    The algorithm is registered but there's no backend available to compute
    it, eg skein or md4 on OpenSSL builds without the legacy provider.
    '''
    def __init__(self, name: str, reason: Optional[str]=None):
        self.name = name
        self.reason = reason
        if reason:
            super().__init__(f"Cannot compute {name!r}: {reason}")
        else:
            super().__init__(f"No hash backend available for {name!r}")
