"""Plan validation and explanation commands."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Annotated, Literal

from cyclopts import Parameter, validators

from cli.context import RunContext, context_config
from cli.exit_codes import ExitCode
from cli.groups import input_group, output_group
from cli.plan_io import PlanFormat, read_plan
from plan_ir.codec import plan_fingerprint
from plan_ir.paths import render_path
from plan_ir.render import render_plan
from plan_ir.validation import check_plan
from serde_msgspec import dumps_json
from validation.violations import PlanViolation

_EXISTING_FILE = validators.Path(exists=True, dir_okay=False)


def _violation_line(violation: PlanViolation) -> str:
    return f"{render_path(violation.path)}: [{violation.rule}] {violation}"


def _exit_code(violations: tuple[PlanViolation, ...]) -> int:
    if not violations:
        return ExitCode.SUCCESS
    return ExitCode.from_exception(violations[0].to_error())


def validate_command(
    source: Annotated[Path, Parameter(validator=_EXISTING_FILE, help="Plan file to check.")],
    *,
    input_format: Annotated[
        PlanFormat,
        Parameter(name="--input-format", help="Wire format of the plan file.", group=input_group),
    ] = "auto",
    output_format: Annotated[
        Literal["text", "json"],
        Parameter(
            name="--output-format",
            help="Report format.",
            env_var="PLANWIRE_REPORT_FORMAT",
            group=output_group,
        ),
    ] = "text",
    run_context: Annotated[RunContext | None, Parameter(parse=False)] = None,
) -> int:
    """Decode a plan file and report every validation rule it breaks.

    The exit code is taken from the first violation found.

    Returns
    -------
    int
        Exit status code.
    """
    config = context_config(run_context)
    plan = read_plan(source, plan_format=input_format, config=config)
    violations = check_plan(plan, config=config)
    if output_format == "json":
        report = {
            "ok": not violations,
            "fingerprint": plan_fingerprint(plan),
            "violations": [violation.to_payload() for violation in violations],
        }
        sys.stdout.write(dumps_json(report, pretty=True).decode("utf-8") + "\n")
    elif violations:
        sys.stdout.write("".join(f"{_violation_line(item)}\n" for item in violations))
    else:
        sys.stdout.write(f"ok {plan_fingerprint(plan)}\n")
    return _exit_code(violations)


def explain_command(
    source: Annotated[Path, Parameter(validator=_EXISTING_FILE, help="Plan file to explain.")],
    *,
    input_format: Annotated[
        PlanFormat,
        Parameter(name="--input-format", help="Wire format of the plan file.", group=input_group),
    ] = "auto",
    run_context: Annotated[RunContext | None, Parameter(parse=False)] = None,
) -> int:
    """Print a plan as an indented tree followed by its violations.

    Returns
    -------
    int
        Exit status code.
    """
    config = context_config(run_context)
    plan = read_plan(source, plan_format=input_format, config=config)
    violations = check_plan(plan, config=config)
    lines = [render_plan(plan, config=config)]
    if violations:
        lines.append("")
        lines.append(f"{len(violations)} violation(s):")
        lines.extend(f"  {_violation_line(item)}" for item in violations)
    sys.stdout.write("\n".join(lines) + "\n")
    return _exit_code(violations)


__all__ = ["explain_command", "validate_command"]
