"""Relation plan tree and the plan envelope.

A relation is exactly one tagged variant; the tag is the variant's wire tag.
Each variant owns its child relations and expressions, so a plan is a strict
tree. New variants must take an unused tag and reserved tags are never assigned
(see ``RESERVED_TAGS``).
"""

from __future__ import annotations

from enum import IntEnum, StrEnum
from typing import ClassVar

from core_types import Int32, Int64, UInt32
from plan_ir.expressions import Expression, QualifiedAttribute
from plan_ir.literals import Literal
from serde_msgspec import StructBaseCompat

WIRE_VERSION = 1

# Tags per union that are reserved and must never be assigned to a variant.
RESERVED_TAGS: dict[str, frozenset[int]] = {
    "rel_type": frozenset(),
    "expr_type": frozenset(),
    "literal_type": frozenset({4, 6, 8, 9, 15, 18}),
    "kind": frozenset({4, 6, 8, 9, 15, 18, 26, 30}),
    "read_type": frozenset(),
}


class JoinType(IntEnum):
    UNSPECIFIED = 0
    INNER = 1
    FULL_OUTER = 2
    LEFT_OUTER = 3
    RIGHT_OUTER = 4
    LEFT_ANTI = 5
    LEFT_SEMI = 6


class SetOpType(IntEnum):
    UNSPECIFIED = 0
    INTERSECT = 1
    UNION = 2
    EXCEPT = 3


class SortDirection(IntEnum):
    UNSPECIFIED = 0
    ASCENDING = 1
    DESCENDING = 2


class SortNulls(IntEnum):
    UNSPECIFIED = 0
    FIRST = 1
    LAST = 2


class RelationCommon(StructBaseCompat):
    """Diagnostic metadata; never interpreted semantically."""

    source_info: str = ""


class RelationBase(StructBaseCompat, tag_field="rel_type"):
    """Common base of every relation variant.

    ``arity`` is the number of child relation slots of the variant; a bare
    ``RelationBase`` has no variant and is rejected by validation.
    """

    wire_name: ClassVar[str] = "relation"
    arity: ClassVar[int] = 0

    common: RelationCommon | None = None


class NamedTable(StructBaseCompat, tag_field="read_type", tag=1):
    wire_name: ClassVar[str] = "named_table"

    unparsed_identifier: str


class DataSource(StructBaseCompat, tag_field="read_type", tag=2):
    """File or table source; ``schema`` empty means infer."""

    wire_name: ClassVar[str] = "data_source"

    format: str
    schema: str = ""
    options: dict[str, str] = {}


ReadType = NamedTable | DataSource


class Read(RelationBase, tag=2):
    wire_name: ClassVar[str] = "read"

    read_type: ReadType


class Project(RelationBase, tag=3):
    """Projection; ``input`` may be absent for constant-only projections."""

    wire_name: ClassVar[str] = "project"
    arity: ClassVar[int] = 1

    input: Relation | None = None
    expressions: tuple[Expression, ...] = ()


class Filter(RelationBase, tag=4):
    wire_name: ClassVar[str] = "filter"
    arity: ClassVar[int] = 1

    input: Relation | None = None
    condition: Expression | None = None


class Join(RelationBase, tag=5):
    """Join of two inputs.

    ``join_condition`` and a non-empty ``using_columns`` are mutually
    exclusive; the validation layer enforces it.
    """

    wire_name: ClassVar[str] = "join"
    arity: ClassVar[int] = 2

    left: Relation | None = None
    right: Relation | None = None
    join_condition: Expression | None = None
    join_type: JoinType = JoinType.UNSPECIFIED
    using_columns: tuple[str, ...] = ()


class SetOperation(RelationBase, tag=6):
    wire_name: ClassVar[str] = "set_op"
    arity: ClassVar[int] = 2

    left_input: Relation | None = None
    right_input: Relation | None = None
    set_op_type: SetOpType = SetOpType.UNSPECIFIED
    is_all: bool = False
    by_name: bool = False


class SortField(StructBaseCompat):
    expression: Expression | None = None
    direction: SortDirection = SortDirection.UNSPECIFIED
    nulls: SortNulls = SortNulls.UNSPECIFIED


class Sort(RelationBase, tag=7):
    wire_name: ClassVar[str] = "sort"
    arity: ClassVar[int] = 1

    input: Relation | None = None
    sort_fields: tuple[SortField, ...] = ()
    is_global: bool = False


class Limit(RelationBase, tag=8):
    wire_name: ClassVar[str] = "limit"
    arity: ClassVar[int] = 1

    input: Relation | None = None
    limit: Int32 = 0


class Aggregate(RelationBase, tag=9):
    wire_name: ClassVar[str] = "aggregate"
    arity: ClassVar[int] = 1

    input: Relation | None = None
    grouping_expressions: tuple[Expression, ...] = ()
    result_expressions: tuple[Expression, ...] = ()


class SQL(RelationBase, tag=10):
    wire_name: ClassVar[str] = "sql"

    query: str


class LocalRelation(RelationBase, tag=11):
    """In-plan literal table described by qualified attributes."""

    wire_name: ClassVar[str] = "local_relation"

    attributes: tuple[QualifiedAttribute, ...] = ()


class Sample(RelationBase, tag=12):
    """Bernoulli or Poisson sample; no ``seed`` means non-deterministic."""

    wire_name: ClassVar[str] = "sample"
    arity: ClassVar[int] = 1

    input: Relation | None = None
    lower_bound: float = 0.0
    upper_bound: float = 1.0
    with_replacement: bool = False
    seed: Int64 | None = None


class Offset(RelationBase, tag=13):
    wire_name: ClassVar[str] = "offset"
    arity: ClassVar[int] = 1

    input: Relation | None = None
    offset: Int32 = 0


class Deduplicate(RelationBase, tag=14):
    """Drops duplicate rows keyed on ``column_names`` or on every column."""

    wire_name: ClassVar[str] = "deduplicate"
    arity: ClassVar[int] = 1

    input: Relation | None = None
    column_names: tuple[str, ...] = ()
    all_columns_as_keys: bool = False


class Range(RelationBase, tag=15):
    """Integer sequence ``[start, end)`` stepping by ``step`` in one ``id`` column."""

    wire_name: ClassVar[str] = "range"

    end: Int64
    start: Int64 = 0
    step: Int64 = 1
    num_partitions: Int32 | None = None

    def element_count(self) -> int:
        """Return the number of rows the range produces.

        Returns
        -------
        int
            Row count, ``0`` for empty ranges or a zero step.
        """
        if self.step == 0:
            return 0
        span = self.end - self.start
        if span == 0 or (span > 0) != (self.step > 0):
            return 0
        return -(-span // self.step)


class SubqueryAlias(RelationBase, tag=16):
    wire_name: ClassVar[str] = "subquery_alias"
    arity: ClassVar[int] = 1

    input: Relation | None = None
    alias: str
    qualifier: tuple[str, ...] = ()


class Repartition(RelationBase, tag=17):
    wire_name: ClassVar[str] = "repartition"
    arity: ClassVar[int] = 1

    input: Relation | None = None
    num_partitions: Int32
    shuffle: bool = False


class RenameColumnsBySameLengthNames(RelationBase, tag=18):
    """Positional rename.

    The analyzer must check that ``column_names`` has one entry per input
    column; validation only checks it when the input schema is static.
    """

    wire_name: ClassVar[str] = "rename_columns_by_same_length_names"
    arity: ClassVar[int] = 1

    input: Relation | None = None
    column_names: tuple[str, ...] = ()


class RenameColumnsByNameToNameMap(RelationBase, tag=19):
    """Rename by mapping; keys missing from the schema are no-ops."""

    wire_name: ClassVar[str] = "rename_columns_by_name_to_name_map"
    arity: ClassVar[int] = 1

    input: Relation | None = None
    rename_columns_map: dict[str, str] = {}


class ShowString(RelationBase, tag=20):
    wire_name: ClassVar[str] = "show_string"
    arity: ClassVar[int] = 1

    input: Relation | None = None
    num_rows: Int32 | None = None
    truncate: Int32 | None = None
    vertical: bool | None = None


class NAFill(RelationBase, tag=90):
    """Replaces nulls.

    One value with no ``cols`` fills every compatible column, one value with
    ``cols`` fills those columns, several values pair with ``cols``.
    """

    wire_name: ClassVar[str] = "fill_na"
    arity: ClassVar[int] = 1

    input: Relation | None = None
    cols: tuple[str, ...] = ()
    values: tuple[Literal, ...] = ()


class StatSummary(RelationBase, tag=100):
    wire_name: ClassVar[str] = "summary"
    arity: ClassVar[int] = 1

    input: Relation | None = None
    statistics: tuple[str, ...] = ()


class StatCrosstab(RelationBase, tag=101):
    wire_name: ClassVar[str] = "crosstab"
    arity: ClassVar[int] = 1

    input: Relation | None = None
    col1: str
    col2: str


class Unknown(RelationBase, tag=999):
    """Test fixture placeholder; not a forward-compatibility mechanism."""

    wire_name: ClassVar[str] = "unknown"


Relation = (
    Read
    | Project
    | Filter
    | Join
    | SetOperation
    | Sort
    | Limit
    | Aggregate
    | SQL
    | LocalRelation
    | Sample
    | Offset
    | Deduplicate
    | Range
    | SubqueryAlias
    | Repartition
    | RenameColumnsBySameLengthNames
    | RenameColumnsByNameToNameMap
    | ShowString
    | NAFill
    | StatSummary
    | StatCrosstab
    | Unknown
)

RELATION_VARIANTS: tuple[type[RelationBase], ...] = (
    Read,
    Project,
    Filter,
    Join,
    SetOperation,
    Sort,
    Limit,
    Aggregate,
    SQL,
    LocalRelation,
    Sample,
    Offset,
    Deduplicate,
    Range,
    SubqueryAlias,
    Repartition,
    RenameColumnsBySameLengthNames,
    RenameColumnsByNameToNameMap,
    ShowString,
    NAFill,
    StatSummary,
    StatCrosstab,
    Unknown,
)

READ_TYPE_VARIANTS: tuple[type[StructBaseCompat], ...] = (NamedTable, DataSource)


class ExtensionKind(StrEnum):
    TYPE = "type"
    TYPE_VARIATION = "type_variation"


class ExtensionDeclaration(StructBaseCompat):
    """Entry of the plan's out-of-band extension table."""

    anchor: UInt32
    name: str
    kind: ExtensionKind = ExtensionKind.TYPE_VARIATION


class Plan(StructBaseCompat):
    """Versioned envelope exchanged between client and engine."""

    root: Relation
    version: int = WIRE_VERSION
    extensions: tuple[ExtensionDeclaration, ...] = ()


__all__ = [
    "READ_TYPE_VARIANTS",
    "RELATION_VARIANTS",
    "RESERVED_TAGS",
    "SQL",
    "WIRE_VERSION",
    "Aggregate",
    "DataSource",
    "Deduplicate",
    "ExtensionDeclaration",
    "ExtensionKind",
    "Filter",
    "Join",
    "JoinType",
    "Limit",
    "LocalRelation",
    "NAFill",
    "NamedTable",
    "Offset",
    "Plan",
    "Project",
    "Range",
    "Read",
    "ReadType",
    "Relation",
    "RelationBase",
    "RelationCommon",
    "RenameColumnsByNameToNameMap",
    "RenameColumnsBySameLengthNames",
    "Repartition",
    "Sample",
    "SetOpType",
    "SetOperation",
    "ShowString",
    "Sort",
    "SortDirection",
    "SortField",
    "SortNulls",
    "StatCrosstab",
    "StatSummary",
    "SubqueryAlias",
    "Unknown",
]
