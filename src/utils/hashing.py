"""Content digests over canonical encodings."""

from __future__ import annotations

import hashlib

from serde_msgspec import dumps_msgpack


def sha256_hex(payload: bytes, *, length: int | None = None) -> str:
    """Return the SHA-256 hex digest of ``payload``.

    ``length`` keeps only the leading hex characters.

    Returns
    -------
    str
        Hex digest.
    """
    digest = hashlib.sha256(payload).hexdigest()
    if length is None:
        return digest
    return digest[:length]


def canonical_digest(obj: object, *, length: int | None = None) -> str:
    """Digest the deterministic MessagePack encoding of ``obj``.

    Two values that encode to the same bytes share a digest, so structs
    compare by their wire form rather than by identity.

    Returns
    -------
    str
        Hex digest.
    """
    return sha256_hex(dumps_msgpack(obj), length=length)


__all__ = ["canonical_digest", "sha256_hex"]
