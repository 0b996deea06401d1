"""Indented text rendering of plans for diagnostics."""

from __future__ import annotations

from collections.abc import Iterator
from enum import Enum

import msgspec

from plan_ir.config import PlanIRConfig, resolve_config
from plan_ir.paths import join_label
from plan_ir.relations import Plan
from plan_ir.traversal import is_node, node_name, walk

_INDENT = "  "
_MAX_BYTES_SHOWN = 16


def render_plan(plan: Plan, *, config: PlanIRConfig | None = None) -> str:
    """Render a plan as an indented tree, one node per line.

    Non-default scalar fields are shown inline; child nodes are listed
    beneath their parent with the field label that reaches them.

    Returns
    -------
    str
        Multi-line rendering.
    """
    cfg = resolve_config(config)
    lines = [f"plan(version={plan.version})"]
    for node, path, depth in walk(plan.root, max_depth=cfg.max_depth):
        via = path[-1].via
        prefix = f"{via}: " if via else ""
        args = ", ".join(f"{label}={_format_value(value)}" for label, value in _scalar_items(node))
        lines.append(f"{_INDENT * depth}{prefix}{node_name(node)}({args})")
    lines.extend(
        f"{_INDENT}extension {ext.kind.value} #{ext.anchor}: {ext.name}" for ext in plan.extensions
    )
    return "\n".join(lines)


def _is_default(info: msgspec.structs.FieldInfo, value: object) -> bool:
    if info.default is not msgspec.NODEFAULT:
        return value == info.default
    if info.default_factory is not msgspec.NODEFAULT:
        return value == info.default_factory()
    return False


def _non_default_fields(struct: msgspec.Struct, prefix: str | None) -> list[tuple[str, object]]:
    return [
        (join_label(prefix, info.name), getattr(struct, info.name))
        for info in msgspec.structs.fields(struct)
        if not _is_default(info, getattr(struct, info.name))
    ]


def _scalar_items(node: msgspec.Struct) -> Iterator[tuple[str, object]]:
    pending = list(reversed(_non_default_fields(node, None)))
    while pending:
        label, value = pending.pop()
        if is_node(value) or value is None:
            continue
        if isinstance(value, msgspec.Struct):
            pending.extend(reversed(_non_default_fields(value, label)))
        elif isinstance(value, tuple) and any(isinstance(item, msgspec.Struct) for item in value):
            pending.extend(
                reversed([(join_label(label, f"[{index}]"), item) for index, item in enumerate(value)])
            )
        else:
            yield label, value


def _format_value(value: object) -> str:
    if isinstance(value, Enum):
        return value.name.lower()
    if isinstance(value, bytes):
        shown = value[:_MAX_BYTES_SHOWN].hex()
        suffix = "..." if len(value) > _MAX_BYTES_SHOWN else ""
        return f"0x{shown}{suffix}"
    if isinstance(value, tuple):
        return "[" + ", ".join(_format_value(item) for item in value) + "]"
    return repr(value)


__all__ = ["render_plan"]
