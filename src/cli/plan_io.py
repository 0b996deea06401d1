"""Plan file helpers for CLI commands."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Literal

from core_types import PathLike, ensure_path
from plan_ir.codec import decode, decode_json, encode, encode_json
from plan_ir.config import PlanIRConfig
from plan_ir.relations import Plan

logger = logging.getLogger(__name__)

PlanFormat = Literal["auto", "msgpack", "json"]

_JSON_SUFFIXES = frozenset({".json"})


def resolve_format(path: PathLike | None, plan_format: PlanFormat) -> Literal["msgpack", "json"]:
    """Resolve ``auto`` to a concrete wire format from the file suffix.

    ``.json`` files are JSON; anything else, including stdout, is
    MessagePack.

    Returns
    -------
    Literal["msgpack", "json"]
        Concrete wire format.
    """
    if plan_format != "auto":
        return plan_format
    if path is not None and ensure_path(path).suffix.lower() in _JSON_SUFFIXES:
        return "json"
    return "msgpack"


def read_plan(path: PathLike, *, plan_format: PlanFormat, config: PlanIRConfig) -> Plan:
    """Read and decode a plan file.

    Returns
    -------
    Plan
        Decoded plan.
    """
    source = ensure_path(path)
    data = source.read_bytes()
    wire_format = resolve_format(source, plan_format)
    logger.debug("Read %d bytes of %s from %s", len(data), wire_format, source)
    if wire_format == "json":
        return decode_json(data, config=config)
    return decode(data, config=config)


def dump_plan(
    plan: Plan,
    *,
    wire_format: Literal["msgpack", "json"],
    config: PlanIRConfig,
) -> bytes:
    """Encode a plan for writing; JSON output is indented.

    Returns
    -------
    bytes
        Encoded plan.
    """
    if wire_format == "json":
        return encode_json(plan, config=config, pretty=True)
    return encode(plan, config=config)


def write_bytes(path: PathLike, data: bytes) -> Path:
    """Write ``data`` to ``path``, creating parent directories.

    Returns
    -------
    Path
        Path written.
    """
    target = ensure_path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(data)
    logger.debug("Wrote %d bytes to %s", len(data), target)
    return target


__all__ = ["PlanFormat", "dump_plan", "read_plan", "resolve_format", "write_bytes"]
