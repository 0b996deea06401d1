"""Version reporting for the planwire CLI."""

from __future__ import annotations

import platform
import sys
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as pkg_version

from plan_ir.relations import WIRE_VERSION
from serde_msgspec import dumps_json

_REPORTED_DISTRIBUTIONS = ("cyclopts", "msgspec", "opentelemetry-api", "pyarrow", "rich")


def _installed(name: str) -> str | None:
    try:
        return pkg_version(name)
    except PackageNotFoundError:
        return None


def get_version() -> str:
    """Return the installed planwire version, ``0.0.0-dev`` from a source tree.

    Returns
    -------
    str
        Version string.
    """
    return _installed("planwire") or "0.0.0-dev"


def get_version_info() -> dict[str, object]:
    """Return the package, wire format and dependency versions.

    Returns
    -------
    dict[str, object]
        JSON-friendly version report.
    """
    return {
        "planwire": get_version(),
        "wire_version": WIRE_VERSION,
        "python": platform.python_version(),
        "platform": platform.platform(),
        "dependencies": {name: _installed(name) for name in _REPORTED_DISTRIBUTIONS},
    }


def version_command() -> int:
    """Print the version report as JSON.

    Returns
    -------
    int
        Exit status code.
    """
    sys.stdout.write(dumps_json(get_version_info(), pretty=True).decode("utf-8") + "\n")
    return 0


__all__ = ["get_version", "get_version_info", "version_command"]
