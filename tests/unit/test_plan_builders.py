"""Tests for the oneof keyword builders."""

from __future__ import annotations

import pytest

from plan_ir.errors import OneofMultiSetError, OneofUnsetError, StructuralError, UnsupportedVariantError
from plan_ir.expressions import UnresolvedAttribute, UnresolvedStar
from plan_ir.literals import LongLiteral, StringLiteral
from plan_ir.oneof import (
    LITERAL_UNION,
    RELATION_UNION,
    build_expression,
    build_literal,
    build_read_type,
    build_relation,
    variant_tag,
)
from plan_ir.relations import SQL, Filter, NamedTable, RelationCommon


def test_build_relation_wraps_single_field_variant() -> None:
    """Ensure a raw value populates a variant's only own field."""
    relation = build_relation(sql="SELECT 1")
    assert relation == SQL(query="SELECT 1")


def test_build_relation_applies_common() -> None:
    """Ensure diagnostic metadata is attached to the chosen variant."""
    relation = build_relation(sql="SELECT 1", common=RelationCommon(source_info="cell 3"))
    assert relation.common == RelationCommon(source_info="cell 3")


def test_build_relation_without_variant() -> None:
    """Ensure an empty oneof is reported as unset."""
    with pytest.raises(OneofUnsetError) as excinfo:
        build_relation()
    assert excinfo.value.rule == "relation_oneof"


def test_build_relation_with_two_variants() -> None:
    """Ensure two variants for one oneof slot are rejected."""
    with pytest.raises(OneofMultiSetError):
        build_relation(sql="SELECT 1", range=None)


def test_build_relation_unknown_variant() -> None:
    """Ensure unknown variant names are unsupported rather than ignored."""
    with pytest.raises(UnsupportedVariantError, match="window"):
        build_relation(window="w")


def test_build_relation_rejects_raw_multi_field_payload() -> None:
    """Ensure multi-field variants require an instance."""
    with pytest.raises(StructuralError):
        build_relation(filter="a > 1")


def test_build_relation_accepts_instance() -> None:
    """Ensure a variant instance passes through unchanged."""
    node = Filter(input=SQL(query="SELECT 1"), condition=UnresolvedStar())
    assert build_relation(filter=node) is node


def test_build_literal_sets_shared_fields() -> None:
    """Ensure nullable and variation apply to every literal kind."""
    literal = build_literal(i64=5, nullable=True, type_variation_reference=2)
    assert literal == LongLiteral(value=5, nullable=True, type_variation_reference=2)


def test_build_literal_string() -> None:
    """Ensure string literals are built from plain values."""
    assert build_literal(string="a") == StringLiteral(value="a")


def test_build_expression_and_read_type() -> None:
    """Ensure expression and read source builders select by wire name."""
    assert build_expression(unresolved_attribute="a") == UnresolvedAttribute(unparsed_identifier="a")
    assert build_read_type(named_table="t") == NamedTable(unparsed_identifier="t")


def test_registries_use_stable_tags() -> None:
    """Ensure wire tags match the published numbering."""
    assert variant_tag(RELATION_UNION.by_name["fill_na"]) == 90
    assert variant_tag(RELATION_UNION.by_name["crosstab"]) == 101
    assert variant_tag(LITERAL_UNION.by_name["decimal"]) == 24
    assert RELATION_UNION.by_tag[999].__name__ == "Unknown"
