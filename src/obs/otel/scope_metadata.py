"""Version and schema URL reported on planwire instrumentation scopes."""

from __future__ import annotations

import functools
from importlib.metadata import PackageNotFoundError, version

from utils.env_utils import env_value


@functools.cache
def instrumentation_version() -> str | None:
    """Return ``PLANWIRE_SERVICE_VERSION`` or the installed planwire version.

    Returns
    -------
    str | None
        Version string, ``None`` when running from an uninstalled tree.
    """
    override = env_value("PLANWIRE_SERVICE_VERSION")
    if override is not None:
        return override
    try:
        return version("planwire")
    except PackageNotFoundError:
        return None


@functools.cache
def instrumentation_schema_url() -> str | None:
    """Return the semantic convention schema URL, when one is configured.

    Returns
    -------
    str | None
        ``PLANWIRE_OTEL_SCHEMA_URL``, else ``OTEL_SCHEMA_URL``.
    """
    return env_value("PLANWIRE_OTEL_SCHEMA_URL") or env_value("OTEL_SCHEMA_URL")


__all__ = ["instrumentation_schema_url", "instrumentation_version"]
