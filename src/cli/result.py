"""Structured return value of CLI commands."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from cli.exit_codes import ExitCode


@dataclass(frozen=True)
class CliResult:
    """Outcome of a command, printed by ``cli_result_action``.

    ``artifacts`` maps names to files the command wrote and ``details``
    holds short values such as fingerprints.
    """

    exit_code: int
    summary: str | None = None
    artifacts: Mapping[str, Path] = field(default_factory=dict)
    details: Mapping[str, object] = field(default_factory=dict)

    @classmethod
    def success(
        cls,
        *,
        summary: str | None = None,
        artifacts: Mapping[str, Path] | None = None,
        details: Mapping[str, object] | None = None,
    ) -> CliResult:
        """Return a result with exit code ``0``.

        Returns
        -------
        CliResult
            Successful result.
        """
        return cls(ExitCode.SUCCESS, summary, dict(artifacts or {}), dict(details or {}))

    @classmethod
    def from_exception(cls, exc: BaseException, *, summary: str | None = None) -> CliResult:
        """Return a failed result whose exit code classifies ``exc``.

        Returns
        -------
        CliResult
            Failed result; the summary defaults to the exception text.
        """
        return cls(int(ExitCode.from_exception(exc)), summary or str(exc))

    @property
    def ok(self) -> bool:
        """Whether the command succeeded."""
        return self.exit_code == ExitCode.SUCCESS


__all__ = ["CliResult"]
