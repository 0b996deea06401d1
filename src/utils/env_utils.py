"""Typed reads of ``PLANWIRE_*`` and other environment settings.

Unset or blank variables yield the default. Values that fail to parse are
logged at warning level and also yield the default, so a bad setting never
aborts a run.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from typing import overload

_LOGGER = logging.getLogger(__name__)

_BOOLEANS = {
    **dict.fromkeys(("1", "true", "yes", "y", "on"), True),
    **dict.fromkeys(("0", "false", "no", "n", "off"), False),
}


def env_value(name: str) -> str | None:
    """Return the stripped value of ``name``; blank counts as unset.

    Returns
    -------
    str | None
        Value, or ``None`` when unset or blank.
    """
    stripped = os.environ.get(name, "").strip()
    return stripped or None


def _parse_bool(raw: str) -> bool:
    try:
        return _BOOLEANS[raw.lower()]
    except KeyError:
        msg = "Invalid boolean"
        raise ValueError(msg) from None


def _read[T](name: str, parse: Callable[[str], T], default: T | None, kind: str) -> T | None:
    raw = env_value(name)
    if raw is None:
        return default
    try:
        return parse(raw)
    except ValueError:
        _LOGGER.warning("Invalid %s for %s: %r", kind, name, raw)
        return default


@overload
def env_bool(name: str) -> bool | None: ...


@overload
def env_bool(name: str, *, default: bool) -> bool: ...


def env_bool(name: str, *, default: bool | None = None) -> bool | None:
    """Read ``name`` as a boolean (``1/0``, ``true/false``, ``yes/no``, ``on/off``).

    Returns
    -------
    bool | None
        Parsed flag or ``default``.
    """
    return _read(name, _parse_bool, default, "boolean")


@overload
def env_int(name: str, *, minimum: int | None = None) -> int | None: ...


@overload
def env_int(name: str, *, default: int, minimum: int | None = None) -> int: ...


def env_int(
    name: str,
    *,
    default: int | None = None,
    minimum: int | None = None,
) -> int | None:
    """Read ``name`` as an integer no smaller than ``minimum``.

    Parameters
    ----------
    name
        Environment variable name.
    default
        Returned when the variable is unset, unparsable or too small.
    minimum
        Smallest accepted value, if any.

    Returns
    -------
    int | None
        Parsed integer or ``default``.
    """
    value = _read(name, int, None, "integer")
    if value is None:
        return default
    if minimum is not None and value < minimum:
        _LOGGER.warning("Integer for %s below minimum %d: %d", name, minimum, value)
        return default
    return value


__all__ = [
    "env_bool",
    "env_int",
    "env_value",
]
