"""Scalar expression tree.

Identifiers are carried as plain strings; binding them to columns and
functions is the analyzer's job.
"""

from __future__ import annotations

from typing import ClassVar

from plan_ir.literals import Literal
from plan_ir.types import DataType
from serde_msgspec import StructBaseCompat


class ExpressionBase(StructBaseCompat, tag_field="expr_type"):
    """Common base of every expression variant."""

    wire_name: ClassVar[str] = "expression"


class LiteralExpression(ExpressionBase, tag=1):
    wire_name: ClassVar[str] = "literal"

    literal: Literal | None = None


class UnresolvedAttribute(ExpressionBase, tag=2):
    """Column reference resolved by name during analysis."""

    wire_name: ClassVar[str] = "unresolved_attribute"

    unparsed_identifier: str


class UnresolvedFunction(ExpressionBase, tag=3):
    """Function call resolved by (possibly qualified) name during analysis."""

    wire_name: ClassVar[str] = "unresolved_function"

    parts: tuple[str, ...]
    arguments: tuple[Expression, ...] = ()


class ExpressionString(ExpressionBase, tag=4):
    """Raw expression text left to the engine's own parser."""

    wire_name: ClassVar[str] = "expression_string"

    expression: str


class UnresolvedStar(ExpressionBase, tag=5):
    """Expands to every column in scope."""

    wire_name: ClassVar[str] = "unresolved_star"


class Alias(ExpressionBase, tag=6):
    """Names the output of ``expr``.

    More than one name is a positional multi-column alias for generators
    that produce several columns at once. ``metadata`` is JSON object text
    and only applies to single-name aliases.
    """

    wire_name: ClassVar[str] = "alias"

    expr: Expression | None = None
    name: tuple[str, ...]
    metadata: str | None = None


class QualifiedAttribute(StructBaseCompat):
    """Column with a fully resolved type; bypasses name resolution."""

    name: str
    type: DataType | None = None


Expression = (
    LiteralExpression
    | UnresolvedAttribute
    | UnresolvedFunction
    | ExpressionString
    | UnresolvedStar
    | Alias
)

EXPRESSION_VARIANTS: tuple[type[ExpressionBase], ...] = (
    LiteralExpression,
    UnresolvedAttribute,
    UnresolvedFunction,
    ExpressionString,
    UnresolvedStar,
    Alias,
)


def col(name: str) -> UnresolvedAttribute:
    """Return an unresolved column reference.

    Returns
    -------
    UnresolvedAttribute
        Reference to ``name``.
    """
    return UnresolvedAttribute(unparsed_identifier=name)


def call(name: str, *arguments: Expression) -> UnresolvedFunction:
    """Return an unresolved call of a dotted function name.

    Returns
    -------
    UnresolvedFunction
        Call expression with ``name`` split on dots.
    """
    return UnresolvedFunction(parts=tuple(name.split(".")), arguments=arguments)


def lit(literal: Literal) -> LiteralExpression:
    """Wrap a literal as an expression.

    Returns
    -------
    LiteralExpression
        Expression node holding ``literal``.
    """
    return LiteralExpression(literal=literal)


__all__ = [
    "EXPRESSION_VARIANTS",
    "Alias",
    "Expression",
    "ExpressionBase",
    "ExpressionString",
    "LiteralExpression",
    "QualifiedAttribute",
    "UnresolvedAttribute",
    "UnresolvedFunction",
    "UnresolvedStar",
    "call",
    "col",
    "lit",
]
