"""Main application setup for the planwire CLI."""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from typing import Annotated, Literal

import msgspec
from cyclopts import App, Parameter
from cyclopts.config import Toml

from cli.commands.version import get_version
from cli.context import RunContext
from cli.groups import admin_group, limits_group, session_group
from cli.result_action import cli_result_action
from cli.telemetry import invoke_with_telemetry
from plan_ir.config import PlanIRConfig

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")

_HELP_EPILOGUE = """
Examples:
  planwire encode plan.json plan.bin      Encode a JSON plan to MessagePack
  planwire decode plan.bin                Print a MessagePack plan as JSON
  planwire validate plan.bin              Report validation rule violations
  planwire explain plan.json              Print the plan tree and violations

Environment Variables:
  PLANWIRE_LOG_LEVEL             Default log level (DEBUG, INFO, WARNING, ERROR)
  PLANWIRE_MAX_DEPTH             Maximum plan nesting depth
  PLANWIRE_ALLOW_TEST_FIXTURES   Accept the test-only unknown relation
"""

app = App(
    name="planwire",
    help="planwire - codec and validator for relational query plan IR.",
    help_format="rich",
    help_epilogue=_HELP_EPILOGUE,
    version=get_version(),
    version_flags=["--version", "-V"],
    default_parameter=Parameter(
        show_default=True,
        show_env_var=True,
    ),
    result_action=cli_result_action,
    config=[
        Toml("planwire.toml", must_exist=False, search_parents=True),
        Toml(
            "pyproject.toml",
            root_keys=("tool", "planwire"),
            must_exist=False,
            search_parents=True,
        ),
    ],
    exit_on_error=True,
    print_error=True,
    help_on_error=False,
)

app.meta.group_parameters = session_group


@dataclass(frozen=True)
class SessionOptions:
    """Session-level configuration parameters."""

    log_level: Annotated[
        Literal["DEBUG", "INFO", "WARNING", "ERROR"],
        Parameter(
            name="--log-level",
            help="Logging verbosity level.",
            env_var="PLANWIRE_LOG_LEVEL",
            group=session_group,
        ),
    ] = "WARNING"


@dataclass(frozen=True)
class LimitOptions:
    """Overrides for the codec and validation limits."""

    max_depth: Annotated[
        int | None,
        Parameter(
            name="--max-depth",
            help="Maximum plan nesting depth (defaults to PLANWIRE_MAX_DEPTH or 256).",
            group=limits_group,
        ),
    ] = None
    allow_test_fixtures: Annotated[
        bool | None,
        Parameter(
            name="--allow-test-fixtures",
            help="Accept the test-only unknown relation during validation.",
            group=limits_group,
        ),
    ] = None


_DEFAULT_SESSION_OPTIONS = SessionOptions()
_DEFAULT_LIMIT_OPTIONS = LimitOptions()


def resolve_limits(limits: LimitOptions) -> PlanIRConfig:
    """Apply command-line overrides on top of the environment limits.

    Returns
    -------
    PlanIRConfig
        Effective limits.

    Raises
    ------
    ValueError
        Raised when an override is out of range.
    """
    config = PlanIRConfig.from_env()
    overrides = {
        name: value
        for name, value in (
            ("max_depth", limits.max_depth),
            ("allow_test_fixtures", limits.allow_test_fixtures),
        )
        if value is not None
    }
    if not overrides:
        return config
    try:
        return msgspec.convert(
            {**msgspec.structs.asdict(config), **overrides},
            type=PlanIRConfig,
        )
    except msgspec.ValidationError as exc:
        msg = f"Invalid limit override: {exc}."
        raise ValueError(msg) from exc


@app.meta.default
def meta_launcher(
    *tokens: Annotated[str, Parameter(show=False, allow_leading_hyphen=True)],
    session: Annotated[SessionOptions, Parameter(name="*")] = _DEFAULT_SESSION_OPTIONS,
    limits: Annotated[LimitOptions, Parameter(name="*")] = _DEFAULT_LIMIT_OPTIONS,
) -> int:
    """Meta launcher for logging setup and context injection.

    Returns
    -------
    int
        Exit status code from command execution.

    Raises
    ------
    ValueError
        Raised when the log level is invalid.
    """
    if session.log_level not in LOG_LEVELS:
        msg = f"Unsupported log level {session.log_level!r}."
        raise ValueError(msg)
    logging.basicConfig(level=session.log_level)

    run_context = RunContext(log_level=session.log_level, config=resolve_limits(limits))
    return invoke_with_telemetry(app, list(tokens), run_context=run_context)


# Lazy-loaded commands with aliases
app.command("cli.commands.codec:encode_command", name="encode", alias="e")
app.command("cli.commands.codec:decode_command", name="decode", alias="d")
app.command("cli.commands.inspect:validate_command", name="validate", alias="check")
app.command("cli.commands.inspect:explain_command", name="explain", alias="x")
app.command("cli.commands.version:version_command", name="version", alias="v")

app.register_install_completion_command(
    name="--install-completion",
    add_to_startup=False,
    group=admin_group,
    help="Install shell completion scripts.",
)


def main() -> None:
    """Run the planwire CLI."""
    sys.exit(app.meta())


__all__ = ["LimitOptions", "SessionOptions", "app", "main", "meta_launcher", "resolve_limits"]
