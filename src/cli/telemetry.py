"""Traced command dispatch for CLI invocations."""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING

from cyclopts.exceptions import CycloptsError

from cli.context import RunContext
from cli.exit_codes import ExitCode
from cli.result_action import cli_result_action
from obs.otel import SCOPE_CLI, set_span_attributes, stage_span
from plan_ir.errors import PlanError
from serde_msgspec import dumps_json

if TYPE_CHECKING:
    from cyclopts import App

_LOGGER = logging.getLogger(__name__)


def _command_name_from_tokens(tokens: list[str]) -> str:
    if not tokens:
        return "<unknown>"
    return tokens[0]


def _inject_run_context(
    ignored: dict[str, object],
    arguments: dict[str, object],
    run_context: RunContext,
) -> None:
    for name, hint in ignored.items():
        if hint is RunContext or name == "run_context":
            arguments[name] = run_context


def _report_plan_error(exc: PlanError) -> None:
    sys.stderr.write(dumps_json({"error": exc.to_payload()}).decode("utf-8") + "\n")


def invoke_with_telemetry(
    app: App,
    tokens: list[str],
    *,
    run_context: RunContext,
) -> int:
    """Parse ``tokens``, run the selected command in a span and map errors.

    Plan errors are written to stderr as a JSON payload; their exit code
    follows ``ExitCode.from_exception``.

    Returns
    -------
    int
        Exit status code.
    """
    command_name = _command_name_from_tokens(tokens)
    try:
        command, bound, ignored = app.parse_args(tokens, exit_on_error=False, print_error=True)
    except CycloptsError as exc:
        return ExitCode.from_exception(exc)
    _inject_run_context(ignored, bound.arguments, run_context)
    with stage_span(
        "cli.command",
        stage="cli",
        scope_name=SCOPE_CLI,
        attributes={"cli.command": command_name, "cli.tokens": len(tokens)},
    ) as span:
        try:
            result = command(*bound.args, **bound.kwargs)
            exit_code = cli_result_action(app, command, result)
        except PlanError as exc:
            _LOGGER.debug("Command %s rejected plan: %s", command_name, exc)
            _report_plan_error(exc)
            exit_code = ExitCode.from_exception(exc)
        except OSError as exc:
            _LOGGER.error("Command %s failed: %s", command_name, exc)
            exit_code = ExitCode.from_exception(exc)
        set_span_attributes(span, {"cli.exit_code": int(exit_code)})
    return int(exit_code)


__all__ = ["invoke_with_telemetry"]
