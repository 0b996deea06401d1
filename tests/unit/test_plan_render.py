"""Tests for the indented plan rendering."""

from __future__ import annotations

from plan_ir.expressions import col, lit
from plan_ir.literals import BinaryLiteral
from plan_ir.relations import (
    ExtensionDeclaration,
    ExtensionKind,
    Join,
    JoinType,
    Limit,
    NamedTable,
    Plan,
    Project,
    Read,
)
from plan_ir.render import render_plan


def _table(name: str) -> Read:
    return Read(read_type=NamedTable(unparsed_identifier=name))


def test_render_lists_nodes_with_field_labels() -> None:
    """Ensure each node renders on its own line below its parent."""
    plan = Plan(root=Limit(input=_table("t"), limit=5))
    assert render_plan(plan).splitlines() == [
        "plan(version=1)",
        "  limit(limit=5)",
        "    input: read()",
        "      read_type: named_table(unparsed_identifier='t')",
    ]


def test_render_formats_enums_and_sequences() -> None:
    """Ensure enums render by name and string tuples as lists."""
    join = Join(
        left=_table("a"),
        right=_table("b"),
        join_type=JoinType.LEFT_OUTER,
        using_columns=("id", "day"),
    )
    first = render_plan(Plan(root=join)).splitlines()[1]
    assert first.startswith("  join(")
    assert "join_type=left_outer" in first
    assert "using_columns=['id', 'day']" in first


def test_render_truncates_long_binary_values() -> None:
    """Ensure long byte strings are shown as a shortened hex prefix."""
    project = Project(
        input=_table("t"),
        expressions=(lit(BinaryLiteral(value=bytes(range(20)))), col("x")),
    )
    text = render_plan(Plan(root=project))
    assert "binary(value=0x000102030405060708090a0b0c0d0e0f...)" in text
    assert "expressions[1]: unresolved_attribute(unparsed_identifier='x')" in text


def test_render_lists_extensions() -> None:
    """Ensure declared extensions follow the tree."""
    plan = Plan(
        root=_table("t"),
        extensions=(ExtensionDeclaration(anchor=7, name="geo", kind=ExtensionKind.TYPE),),
    )
    assert render_plan(plan).splitlines()[-1] == "  extension type #7: geo"
