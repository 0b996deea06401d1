"""Canonical OpenTelemetry instrumentation scopes for planwire."""

from __future__ import annotations

from enum import StrEnum


class ScopeName(StrEnum):
    CODEC = "planwire.codec"
    VALIDATION = "planwire.validation"
    CLI = "planwire.cli"


SCOPE_CODEC = ScopeName.CODEC
SCOPE_VALIDATION = ScopeName.VALIDATION
SCOPE_CLI = ScopeName.CLI

__all__ = [
    "SCOPE_CLI",
    "SCOPE_CODEC",
    "SCOPE_VALIDATION",
    "ScopeName",
]
