"""Fixed-width integer aliases and path helpers shared across planwire."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

from msgspec import Meta

type PathLike = str | Path

INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1
INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1
UINT32_MAX = 2**32 - 1

# Wire widths. Out-of-range values are rejected at decode time; semantic
# bounds (for example non-negative limits) belong to the validation layer.
Int32 = Annotated[int, Meta(ge=INT32_MIN, le=INT32_MAX, description="Signed 32-bit integer.")]
Int64 = Annotated[int, Meta(ge=INT64_MIN, le=INT64_MAX, description="Signed 64-bit integer.")]
UInt32 = Annotated[
    int,
    Meta(ge=0, le=UINT32_MAX, description="Extension anchor or type reference."),
]


def ensure_path(p: PathLike) -> Path:
    """Return ``p`` as a ``Path``.

    Returns
    -------
    pathlib.Path
        Path instance.
    """
    return p if isinstance(p, Path) else Path(p)


__all__ = [
    "INT32_MAX",
    "INT32_MIN",
    "INT64_MAX",
    "INT64_MIN",
    "UINT32_MAX",
    "Int32",
    "Int64",
    "PathLike",
    "UInt32",
    "ensure_path",
]
