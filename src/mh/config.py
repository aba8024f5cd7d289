'''
Configuration for the mh command line tool.
'''

import os
from typing import Annotated, Final, Literal

from pydantic import BaseModel, Field, field_validator

from .registry import DEFAULT_REGISTRY

__all__ = ('CONFIG', 'Config')

CONFIG: Final = "~/.config/mh.toml"

class Config(BaseModel):
    hash: Annotated[
        str, Field(description="Default hash function.")
    ] = "sha2-256"
    codec: Annotated[
        Literal['hex', 'b58'], Field(description="String encoding for multihashes.")
    ] = "b58"

    @field_validator('hash')
    @classmethod
    def known_hash(cls, v: str) -> str:
        if v not in DEFAULT_REGISTRY:
            raise ValueError(f"Unknown hash function: {v!r}")
        return v

    @classmethod
    def from_file(cls, path: str=CONFIG) -> 'Config':
        """Load configuration from TOML, using the defaults if it's missing."""
        import tomllib
        try:
            with open(os.path.expanduser(path), 'rb') as f:
                return cls.model_validate(tomllib.load(f))
        except FileNotFoundError:
            return cls()
