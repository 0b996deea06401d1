"""Oneof registries and keyword builders for the tagged unions.

The registries map wire tags and wire names to variant classes for each
union. The ``build_*`` helpers mirror protobuf-style construction: exactly
one keyword names the populated variant.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from functools import cached_property
from typing import TYPE_CHECKING, cast

import msgspec

from plan_ir.errors import OneofMultiSetError, OneofUnsetError, StructuralError, UnsupportedVariantError
from plan_ir.expressions import EXPRESSION_VARIANTS, ExpressionBase
from plan_ir.literals import LITERAL_VARIANTS, LiteralBase
from plan_ir.relations import READ_TYPE_VARIANTS, RELATION_VARIANTS, RelationBase
from plan_ir.types import DATA_TYPE_VARIANTS, DataTypeBase

if TYPE_CHECKING:
    from plan_ir.expressions import Expression
    from plan_ir.literals import Literal
    from plan_ir.relations import ReadType, Relation, RelationCommon


@dataclass(frozen=True)
class UnionSpec:
    """Closed set of tagged variants sharing one tag field."""

    label: str
    tag_field: str
    base: type[msgspec.Struct] | None
    variants: tuple[type[msgspec.Struct], ...]
    shared_fields: frozenset[str] = field(default_factory=frozenset)

    @cached_property
    def by_tag(self) -> dict[int, type[msgspec.Struct]]:
        """Return variants keyed by wire tag.

        Returns
        -------
        dict[int, type[msgspec.Struct]]
            Tag to variant class.
        """
        return {variant_tag(cls): cls for cls in self.variants}

    @cached_property
    def by_name(self) -> dict[str, type[msgspec.Struct]]:
        """Return variants keyed by wire name.

        Returns
        -------
        dict[str, type[msgspec.Struct]]
            Wire name to variant class.
        """
        return {wire_name(cls): cls for cls in self.variants}


def variant_tag(cls: type[msgspec.Struct]) -> int:
    """Return the integer wire tag of a variant class.

    Returns
    -------
    int
        Wire tag.
    """
    return cast("int", cls.__struct_config__.tag)


def wire_name(cls: type[object]) -> str:
    """Return the wire name of a variant class.

    Returns
    -------
    str
        Wire name, falling back to the class name.
    """
    return cast("str", getattr(cls, "wire_name", cls.__name__))


RELATION_UNION = UnionSpec(
    label="relation",
    tag_field="rel_type",
    base=RelationBase,
    variants=RELATION_VARIANTS,
    shared_fields=frozenset(RelationBase.__struct_fields__),
)
READ_TYPE_UNION = UnionSpec(
    label="read_type",
    tag_field="read_type",
    base=None,
    variants=READ_TYPE_VARIANTS,
)
EXPRESSION_UNION = UnionSpec(
    label="expression",
    tag_field="expr_type",
    base=ExpressionBase,
    variants=EXPRESSION_VARIANTS,
)
LITERAL_UNION = UnionSpec(
    label="literal",
    tag_field="literal_type",
    base=LiteralBase,
    variants=LITERAL_VARIANTS,
    shared_fields=frozenset(LiteralBase.__struct_fields__),
)
DATA_TYPE_UNION = UnionSpec(
    label="data_type",
    tag_field="kind",
    base=DataTypeBase,
    variants=DATA_TYPE_VARIANTS,
    shared_fields=frozenset(DataTypeBase.__struct_fields__),
)

UNIONS_BY_TAG_FIELD: Mapping[str, UnionSpec] = {
    spec.tag_field: spec
    for spec in (RELATION_UNION, READ_TYPE_UNION, EXPRESSION_UNION, LITERAL_UNION, DATA_TYPE_UNION)
}


def _select_one(spec: UnionSpec, variant: Mapping[str, object]) -> msgspec.Struct:
    unknown = sorted(name for name in variant if name not in spec.by_name)
    if unknown:
        msg = f"Unsupported {spec.label} variant(s): {', '.join(unknown)}."
        raise UnsupportedVariantError(msg, rule=f"{spec.label}_variant_known")
    if not variant:
        msg = f"No {spec.label} variant supplied."
        raise OneofUnsetError(msg, rule=f"{spec.label}_oneof")
    if len(variant) > 1:
        msg = f"Several {spec.label} variants supplied: {', '.join(sorted(variant))}."
        raise OneofMultiSetError(msg, rule=f"{spec.label}_oneof")
    ((name, payload),) = variant.items()
    return _coerce_payload(spec, spec.by_name[name], payload)


def _coerce_payload(
    spec: UnionSpec,
    cls: type[msgspec.Struct],
    payload: object,
) -> msgspec.Struct:
    if isinstance(payload, cls):
        return payload
    own_fields = [name for name in cls.__struct_fields__ if name not in spec.shared_fields]
    if len(own_fields) != 1:
        msg = f"Variant {wire_name(cls)!r} expects a {cls.__name__} instance."
        raise StructuralError(msg, rule=f"{spec.label}_payload_type")
    return cls(**{own_fields[0]: payload})


def build_relation(*, common: RelationCommon | None = None, **variant: object) -> Relation:
    """Build a relation from exactly one variant keyword.

    Parameters
    ----------
    common
        Optional diagnostic metadata applied to the variant.
    **variant
        One keyword named after the variant (``filter=Filter(...)``,
        ``sql="SELECT 1"``).

    Returns
    -------
    Relation
        The populated variant.
    """
    node = _select_one(RELATION_UNION, variant)
    if common is not None:
        node = msgspec.structs.replace(node, common=common)
    return cast("Relation", node)


def build_read_type(**variant: object) -> ReadType:
    """Build a read source from exactly one variant keyword.

    Returns
    -------
    ReadType
        Named table or data source.
    """
    return cast("ReadType", _select_one(READ_TYPE_UNION, variant))


def build_expression(**variant: object) -> Expression:
    """Build an expression from exactly one variant keyword.

    Returns
    -------
    Expression
        The populated variant.
    """
    return cast("Expression", _select_one(EXPRESSION_UNION, variant))


def build_literal(
    *,
    nullable: bool | None = None,
    type_variation_reference: int | None = None,
    **kind: object,
) -> Literal:
    """Build a literal from exactly one kind keyword (``i64=5``, ``string="a"``).

    Returns
    -------
    Literal
        The populated literal kind.
    """
    node = _select_one(LITERAL_UNION, kind)
    updates: dict[str, object] = {}
    if nullable is not None:
        updates["nullable"] = nullable
    if type_variation_reference is not None:
        updates["type_variation_reference"] = type_variation_reference
    if updates:
        node = msgspec.structs.replace(node, **updates)
    return cast("Literal", node)


__all__ = [
    "DATA_TYPE_UNION",
    "EXPRESSION_UNION",
    "LITERAL_UNION",
    "READ_TYPE_UNION",
    "RELATION_UNION",
    "UNIONS_BY_TAG_FIELD",
    "UnionSpec",
    "build_expression",
    "build_literal",
    "build_read_type",
    "build_relation",
    "variant_tag",
    "wire_name",
]
