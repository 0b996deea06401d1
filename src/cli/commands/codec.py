"""Plan conversion commands between MessagePack and JSON."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated

from cyclopts import Parameter, validators

from cli.context import RunContext, context_config
from cli.groups import input_group, output_group
from cli.plan_io import PlanFormat, dump_plan, read_plan, resolve_format, write_bytes
from cli.result import CliResult
from plan_ir.codec import plan_fingerprint
from plan_ir.relations import Plan
from plan_ir.validation import validate


@dataclass(frozen=True)
class ConvertOptions:
    """CLI options shared by ``encode`` and ``decode``."""

    input_format: Annotated[
        PlanFormat,
        Parameter(
            name="--input-format",
            help="Wire format of the input file (auto uses the file suffix).",
            group=input_group,
        ),
    ] = "auto"
    skip_validation: Annotated[
        bool,
        Parameter(
            name="--skip-validation",
            help="Convert without running the validation layer.",
            group=input_group,
        ),
    ] = False
    output_format: Annotated[
        PlanFormat,
        Parameter(
            name="--output-format",
            help="Wire format of the output (auto uses the file suffix).",
            env_var="PLANWIRE_OUTPUT_FORMAT",
            group=output_group,
        ),
    ] = "auto"


_DEFAULT_CONVERT_OPTIONS = ConvertOptions()
_EXISTING_FILE = validators.Path(exists=True, dir_okay=False)


def _load(source: Path, options: ConvertOptions, run_context: RunContext | None) -> Plan:
    config = context_config(run_context)
    plan = read_plan(source, plan_format=options.input_format, config=config)
    if not options.skip_validation:
        validate(plan, config=config)
    return plan


def encode_command(
    source: Annotated[Path, Parameter(validator=_EXISTING_FILE, help="Plan file to read.")],
    target: Annotated[Path, Parameter(help="Destination for the MessagePack payload.")],
    options: Annotated[ConvertOptions, Parameter(name="*")] = _DEFAULT_CONVERT_OPTIONS,
    *,
    run_context: Annotated[RunContext | None, Parameter(parse=False)] = None,
) -> CliResult:
    """Encode a plan file (JSON by default) to MessagePack.

    Returns
    -------
    CliResult
        Written path and plan fingerprint.
    """
    config = context_config(run_context)
    plan = _load(source, options, run_context)
    wire_format = "msgpack" if options.output_format == "auto" else options.output_format
    written = write_bytes(target, dump_plan(plan, wire_format=wire_format, config=config))
    return CliResult.success(
        summary=f"Encoded {source} as {wire_format}.",
        artifacts={"plan": written},
        details={"fingerprint": plan_fingerprint(plan)},
    )


def decode_command(
    source: Annotated[Path, Parameter(validator=_EXISTING_FILE, help="Plan file to read.")],
    target: Annotated[
        Path | None,
        Parameter(help="Destination file; JSON is written to stdout when omitted."),
    ] = None,
    options: Annotated[ConvertOptions, Parameter(name="*")] = _DEFAULT_CONVERT_OPTIONS,
    *,
    run_context: Annotated[RunContext | None, Parameter(parse=False)] = None,
) -> CliResult | int:
    """Decode a MessagePack plan and write it as JSON.

    Returns
    -------
    CliResult | int
        Written path, or exit status when writing to stdout.
    """
    config = context_config(run_context)
    plan = _load(source, options, run_context)
    if options.output_format == "auto":
        wire_format = "json" if target is None else resolve_format(target, "auto")
    else:
        wire_format = options.output_format
    payload = dump_plan(plan, wire_format=wire_format, config=config)
    if target is None:
        if wire_format == "json":
            sys.stdout.write(payload.decode("utf-8") + "\n")
        else:
            sys.stdout.buffer.write(payload)
        return 0
    written = write_bytes(target, payload)
    return CliResult.success(
        summary=f"Decoded {source} as {wire_format}.",
        artifacts={"plan": written},
        details={"fingerprint": plan_fingerprint(plan)},
    )


__all__ = ["ConvertOptions", "decode_command", "encode_command"]
