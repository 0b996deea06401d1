"""Result action handler for Cyclopts integration."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from rich.console import Console

from cli.exit_codes import ExitCode
from cli.result import CliResult

if TYPE_CHECKING:
    from cyclopts import App


def cli_result_action(
    app: App,
    cmd: object,
    result: Any,
    *,
    console: Console | None = None,
) -> int:
    """Handle command results and convert to exit codes.

    Registered as the ``result_action`` of the CLI app. Normalizes the
    command return types to integer exit codes.

    Returns
    -------
    int
        Exit code for the process.
    """
    _ = app
    _ = cmd
    out = console or Console(stderr=True)

    if result is None:
        return ExitCode.SUCCESS

    if isinstance(result, int):
        return result

    if isinstance(result, CliResult):
        if result.summary:
            out.print(result.summary, markup=False, highlight=False)
        for name, path in sorted(result.artifacts.items()):
            out.print(f"  {name}: {path}", markup=False, highlight=False)
        for name, value in sorted(result.details.items()):
            out.print(f"  {name}: {value}", markup=False, highlight=False)
        return int(result.exit_code)

    out.print(f"Unexpected command return type: {type(result).__name__} (value: {result!r})")
    return ExitCode.GENERAL_ERROR


__all__ = ["cli_result_action"]
