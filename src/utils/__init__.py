"""Shared utilities for planwire."""

from utils.env_utils import env_bool, env_int, env_value
from utils.hashing import canonical_digest, sha256_hex

__all__ = [
    "canonical_digest",
    "env_bool",
    "env_int",
    "env_value",
    "sha256_hex",
]
