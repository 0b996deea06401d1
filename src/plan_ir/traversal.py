"""Generic child enumeration and iterative walks over plan trees.

Nodes are relations, read sources, expressions, literals and data types.
Plain containers (sort fields, map entries, struct fields, attributes) are
not nodes; their members are reached through composed field labels such as
``"sort_fields[0].expression"``.
"""

from __future__ import annotations

from collections.abc import Iterator

import msgspec

from plan_ir.errors import DepthExceededError
from plan_ir.expressions import ExpressionBase
from plan_ir.literals import LiteralBase
from plan_ir.oneof import wire_name
from plan_ir.paths import ROOT_PATH, PlanPath, extend_path, join_label
from plan_ir.relations import DataSource, NamedTable, RelationBase
from plan_ir.types import DataTypeBase

NODE_TYPES: tuple[type[msgspec.Struct], ...] = (
    RelationBase,
    ExpressionBase,
    LiteralBase,
    DataTypeBase,
    NamedTable,
    DataSource,
)

type PlanNode = RelationBase | ExpressionBase | LiteralBase | DataTypeBase | NamedTable | DataSource


def is_node(value: object) -> bool:
    """Return True when ``value`` is a plan tree node.

    Returns
    -------
    bool
        Whether the value is a relation, read source, expression, literal or
        data type.
    """
    return isinstance(value, NODE_TYPES)


def node_name(node: object) -> str:
    """Return the wire name of a node.

    Returns
    -------
    str
        Variant wire name, for example ``"join"``.
    """
    return wire_name(type(node))


def node_tag(node: object) -> int | None:
    """Return the integer wire tag of a node, ``None`` for a bare union base.

    Returns
    -------
    int | None
        Wire tag.
    """
    tag = getattr(type(node), "__struct_config__").tag
    return tag if isinstance(tag, int) else None


def iter_children(node: msgspec.Struct) -> Iterator[tuple[str, PlanNode]]:
    """Yield ``(label, child)`` pairs in field declaration order.

    Yields
    ------
    tuple[str, PlanNode]
        Field label of the child and the child node.
    """
    pending: list[tuple[str | None, object]] = [(None, node)]
    first = True
    while pending:
        prefix, value = pending.pop()
        if not first and is_node(value):
            yield prefix or "", value  # type: ignore[misc]
            continue
        first = False
        expanded: list[tuple[str | None, object]] = []
        if isinstance(value, msgspec.Struct):
            for name in value.__struct_fields__:
                expanded.append((join_label(prefix, name), getattr(value, name)))
        elif isinstance(value, tuple):
            for index, item in enumerate(value):
                expanded.append((join_label(prefix, f"[{index}]"), item))
        pending.extend(reversed(expanded))


def walk(
    root: msgspec.Struct,
    *,
    max_depth: int | None = None,
    path: PlanPath = ROOT_PATH,
) -> Iterator[tuple[PlanNode, PlanPath, int]]:
    """Walk a tree in pre-order with an explicit stack.

    Parameters
    ----------
    root
        Node to start from.
    max_depth
        Maximum node depth; the root is at depth 1.
    path
        Path of the parent of ``root``, empty for a plan root.

    Yields
    ------
    tuple[PlanNode, PlanPath, int]
        Node, its root-to-node path and its depth.

    Raises
    ------
    DepthExceededError
        Raised when a node lies deeper than ``max_depth``.
    """
    stack: list[tuple[msgspec.Struct, PlanPath, int]] = [
        (root, extend_path(path, node_name(root), None, tag=node_tag(root)), 1)
    ]
    while stack:
        node, node_path, depth = stack.pop()
        if max_depth is not None and depth > max_depth:
            msg = f"Plan nesting exceeds the maximum depth of {max_depth}."
            raise DepthExceededError(msg, path=node_path)
        yield node, node_path, depth  # type: ignore[misc]
        children = [
            (
                child,
                extend_path(node_path, node_name(child), label, tag=node_tag(child)),
                depth + 1,
            )
            for label, child in iter_children(node)
        ]
        stack.extend(reversed(children))


def measure_depth(root: msgspec.Struct) -> int:
    """Return the depth of the deepest node below ``root``.

    Returns
    -------
    int
        Maximum node depth, ``1`` for a leaf.
    """
    deepest = 0
    stack: list[tuple[msgspec.Struct, int]] = [(root, 1)]
    while stack:
        node, depth = stack.pop()
        deepest = max(deepest, depth)
        stack.extend((child, depth + 1) for _, child in iter_children(node))
    return deepest


__all__ = [
    "NODE_TYPES",
    "PlanNode",
    "is_node",
    "iter_children",
    "measure_depth",
    "node_name",
    "node_tag",
    "walk",
]
