"""Validation layer for decoded or constructed plans.

The validator walks the tree once in pre-order with an explicit stack and
enforces the cross-field rules the tagged-union shape cannot express.
``validate`` raises for the first violation in pre-order; ``check_plan``
returns every violation for diagnostics. Neither repairs or coerces the
plan.
"""

from __future__ import annotations

import logging
import math
import re
from collections import Counter
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass
from enum import IntEnum
from typing import Any

import msgspec

from obs.otel import SCOPE_VALIDATION, stage_span
from plan_ir.config import PlanIRConfig, resolve_config
from plan_ir.expressions import (
    Alias,
    ExpressionString,
    LiteralExpression,
    UnresolvedAttribute,
    UnresolvedFunction,
)
from plan_ir.literals import (
    DECIMAL_WIDTH,
    MICROS_PER_DAY,
    UUID_WIDTH,
    BooleanLiteral,
    ByteLiteral,
    DecimalLiteral,
    DoubleLiteral,
    EmptyListLiteral,
    EmptyMapLiteral,
    FloatLiteral,
    IntegerLiteral,
    ListLiteral,
    LiteralBase,
    LongLiteral,
    MapLiteral,
    NullLiteral,
    ShortLiteral,
    StringLiteral,
    TimeLiteral,
    UserDefinedLiteral,
    UUIDLiteral,
    VarCharLiteral,
)
from plan_ir.oneof import UNIONS_BY_TAG_FIELD
from plan_ir.paths import ROOT_PATH, PlanPath, render_path
from plan_ir.relations import (
    SQL,
    WIRE_VERSION,
    Aggregate,
    DataSource,
    Deduplicate,
    ExtensionKind,
    Filter,
    Join,
    JoinType,
    Limit,
    LocalRelation,
    NAFill,
    NamedTable,
    Offset,
    Plan,
    Project,
    Range,
    Read,
    RenameColumnsByNameToNameMap,
    RenameColumnsBySameLengthNames,
    Repartition,
    Sample,
    SetOperation,
    SetOpType,
    ShowString,
    Sort,
    SortDirection,
    SortNulls,
    StatCrosstab,
    StatSummary,
    SubqueryAlias,
    Unknown,
)
from plan_ir.traversal import node_name, walk
from plan_ir.types import (
    MAX_DECIMAL_PRECISION,
    DataTypeBase,
    DecimalType,
    FixedBinaryType,
    FixedCharType,
    ListType,
    MapType,
    StructType,
    UserDefinedType,
    VarCharType,
)
from validation.violations import PlanViolation, ViolationType

logger = logging.getLogger(__name__)

I8_RANGE = (-(2**7), 2**7 - 1)
I16_RANGE = (-(2**15), 2**15 - 1)
SUMMARY_STATISTICS = frozenset(
    {"count", "mean", "stddev", "min", "max", "count_distinct", "approx_count_distinct"}
)
_PERCENTILE_RE = re.compile(r"^\d+(\.\d+)?%$")
_FILL_VALUE_TYPES = (
    BooleanLiteral,
    ByteLiteral,
    ShortLiteral,
    IntegerLiteral,
    LongLiteral,
    FloatLiteral,
    DoubleLiteral,
    StringLiteral,
)
# Relations whose output columns are exactly their input columns.
_COLUMN_PRESERVING = (
    SubqueryAlias,
    Filter,
    Limit,
    Offset,
    Sort,
    Sample,
    Repartition,
    Deduplicate,
    NAFill,
    RenameColumnsByNameToNameMap,
)
_BASE_TYPES = frozenset(spec.base for spec in UNIONS_BY_TAG_FIELD.values() if spec.base is not None)


@dataclass(frozen=True)
class _Context:
    config: PlanIRConfig
    anchors: Mapping[ExtensionKind, frozenset[int]]

    @property
    def check_anchors(self) -> bool:
        return any(self.anchors.values())


type _Check = Callable[[Any, PlanPath, _Context], Iterator[PlanViolation]]

_NODE_CHECKS: dict[type, _Check] = {}


def _checks_for(*node_types: type) -> Callable[[_Check], _Check]:
    def register(check: _Check) -> _Check:
        for node_type in node_types:
            _NODE_CHECKS[node_type] = check
        return check

    return register


def validate(plan: Plan, *, config: PlanIRConfig | None = None) -> Plan:
    """Validate a plan and return it unchanged.

    Parameters
    ----------
    plan
        Plan to check.
    config
        Optional limits; defaults to ``PlanIRConfig()``.

    Returns
    -------
    Plan
        The same plan instance.

    Raises
    ------
    PlanError
        Raised for the first violation found in pre-order, with the
        root-to-node path and the violated rule.
    """
    cfg = resolve_config(config)
    attrs = {"planwire.max_depth": cfg.max_depth}
    with stage_span(
        "plan_ir.validate",
        stage="validate",
        scope_name=SCOPE_VALIDATION,
        attributes=attrs,
    ) as span:
        violation = next(iter_violations(plan, config=cfg), None)
        if violation is not None:
            span.set_attribute("planwire.rule", violation.rule)
            logger.debug("Plan rejected: %s at %s.", violation.rule, render_path(violation.path))
            raise violation.to_error()
    logger.debug("Plan validated (root=%s).", node_name(plan.root))
    return plan


def check_plan(plan: Plan, *, config: PlanIRConfig | None = None) -> tuple[PlanViolation, ...]:
    """Return every violation of ``plan`` in pre-order.

    Returns
    -------
    tuple[PlanViolation, ...]
        Violations; empty for a valid plan.
    """
    return tuple(iter_violations(plan, config=resolve_config(config)))


def iter_violations(plan: Plan, *, config: PlanIRConfig) -> Iterator[PlanViolation]:
    """Yield violations lazily in pre-order.

    Yields
    ------
    PlanViolation
        Next violation found.

    Raises
    ------
    TypeError
        Raised when ``plan`` is not a ``Plan``.
    """
    if not isinstance(plan, Plan):
        msg = f"Expected a Plan, got {type(plan).__name__}."
        raise TypeError(msg)
    yield from _check_envelope(plan)
    context = _Context(config=config, anchors=_declared_anchors(plan))
    for node, path, _ in walk(plan.root, max_depth=config.max_depth):
        yield from _check_node(node, path, context)


def _declared_anchors(plan: Plan) -> dict[ExtensionKind, frozenset[int]]:
    return {
        kind: frozenset(ext.anchor for ext in plan.extensions if ext.kind == kind)
        for kind in ExtensionKind
    }


def _check_envelope(plan: Plan) -> Iterator[PlanViolation]:
    if plan.version != WIRE_VERSION:
        yield _violation(
            ViolationType.INVALID_VALUE,
            "wire_version",
            ROOT_PATH,
            field="version",
            expected=str(WIRE_VERSION),
            actual=str(plan.version),
        )
    for kind in ExtensionKind:
        counts = Counter(ext.anchor for ext in plan.extensions if ext.kind == kind)
        duplicates = sorted(anchor for anchor, count in counts.items() if count > 1)
        if duplicates:
            yield _violation(
                ViolationType.DUPLICATE_VALUES,
                "extension_anchor_unique",
                ROOT_PATH,
                field=f"extensions[{kind.value}]",
                actual=", ".join(str(anchor) for anchor in duplicates),
            )


def _check_node(node: object, path: PlanPath, context: _Context) -> Iterator[PlanViolation]:
    if type(node) in _BASE_TYPES:
        yield _violation(
            ViolationType.ONEOF_UNSET,
            f"{node_name(node)}_oneof",
            path,
            field=node_name(node),
        )
        return
    check = _NODE_CHECKS.get(type(node))
    if check is not None:
        yield from check(node, path, context)
    if context.check_anchors:
        yield from _check_anchors(node, path, context)


def _violation(
    violation_type: ViolationType,
    rule: str,
    path: PlanPath,
    **details: str | None,
) -> PlanViolation:
    return PlanViolation(violation_type=violation_type, rule=rule, path=path, **details)


def _required(node: object, path: PlanPath, *fields: str) -> Iterator[PlanViolation]:
    for field in fields:
        if getattr(node, field) is None:
            yield _violation(
                ViolationType.MISSING_VALUE,
                f"{node_name(node)}_{field}_required",
                path,
                field=field,
            )


def _non_blank(node: object, path: PlanPath, *fields: str) -> Iterator[PlanViolation]:
    for field in fields:
        value = getattr(node, field)
        if value is None or not value.strip():
            yield _violation(
                ViolationType.MISSING_VALUE,
                f"{node_name(node)}_{field}_required",
                path,
                field=field,
            )


def _specified(
    node: object,
    path: PlanPath,
    field: str,
    value: int,
    enum_type: type[IntEnum],
    *,
    label: str | None = None,
) -> Iterator[PlanViolation]:
    # Compared by value; constructed structs may carry ints outside the enum.
    members = [member for member in enum_type if member != 0]
    if value in members:
        return
    choices = ", ".join(member.name.lower() for member in members)
    yield _violation(
        ViolationType.INVALID_VALUE,
        f"{node_name(node)}_{field}_specified",
        path,
        field=label or field,
        expected=f"one of {choices}",
        actual="unspecified" if value == 0 else str(int(value)),
    )


def _at_least(
    node: object,
    path: PlanPath,
    field: str,
    value: int | None,
    minimum: int,
) -> Iterator[PlanViolation]:
    if value is not None and value < minimum:
        yield _violation(
            ViolationType.OUT_OF_RANGE,
            f"{node_name(node)}_{field.replace('.', '_')}_range",
            path,
            field=field,
            expected=f">= {minimum}",
            actual=str(value),
        )


# Relations


@_checks_for(Read)
def _check_read(node: Read, path: PlanPath, _context: _Context) -> Iterator[PlanViolation]:
    if node.read_type is None:
        yield _violation(ViolationType.ONEOF_UNSET, "read_type_oneof", path, field="read_type")


@_checks_for(NamedTable)
def _check_named_table(
    node: NamedTable, path: PlanPath, _context: _Context
) -> Iterator[PlanViolation]:
    yield from _non_blank(node, path, "unparsed_identifier")


@_checks_for(DataSource)
def _check_data_source(
    node: DataSource, path: PlanPath, _context: _Context
) -> Iterator[PlanViolation]:
    yield from _non_blank(node, path, "format")


@_checks_for(Project)
def _check_project(node: Project, path: PlanPath, _context: _Context) -> Iterator[PlanViolation]:
    if node.input is None and not node.expressions:
        yield _violation(
            ViolationType.ARITY_MISMATCH,
            "project_expressions_required",
            path,
            field="expressions",
            expected="at least 1 expression without an input",
            actual="0",
        )


@_checks_for(Filter)
def _check_filter(node: Filter, path: PlanPath, _context: _Context) -> Iterator[PlanViolation]:
    yield from _required(node, path, "input", "condition")


@_checks_for(Join)
def _check_join(node: Join, path: PlanPath, _context: _Context) -> Iterator[PlanViolation]:
    yield from _required(node, path, "left", "right")
    yield from _specified(node, path, "join_type", node.join_type, JoinType)
    if node.join_condition is not None and node.using_columns:
        yield _violation(
            ViolationType.CONFLICT,
            "join_condition_using_columns_exclusive",
            path,
            field="join_condition",
            other="using_columns",
        )


@_checks_for(SetOperation)
def _check_set_operation(
    node: SetOperation, path: PlanPath, _context: _Context
) -> Iterator[PlanViolation]:
    yield from _required(node, path, "left_input", "right_input")
    yield from _specified(node, path, "set_op_type", node.set_op_type, SetOpType)


@_checks_for(Sort)
def _check_sort(node: Sort, path: PlanPath, _context: _Context) -> Iterator[PlanViolation]:
    yield from _required(node, path, "input")
    if not node.sort_fields:
        yield _violation(
            ViolationType.ARITY_MISMATCH,
            "sort_fields_required",
            path,
            field="sort_fields",
            expected="at least 1 sort field",
            actual="0",
        )
    for index, sort_field in enumerate(node.sort_fields):
        label = f"sort_fields[{index}]"
        if sort_field.expression is None:
            yield _violation(
                ViolationType.MISSING_VALUE,
                "sort_expression_required",
                path,
                field=f"{label}.expression",
            )
        yield from _specified(
            node,
            path,
            "direction",
            sort_field.direction,
            SortDirection,
            label=f"{label}.direction",
        )
        yield from _specified(
            node,
            path,
            "nulls",
            sort_field.nulls,
            SortNulls,
            label=f"{label}.nulls",
        )


@_checks_for(Limit)
def _check_limit(node: Limit, path: PlanPath, _context: _Context) -> Iterator[PlanViolation]:
    yield from _required(node, path, "input")
    yield from _at_least(node, path, "limit", node.limit, 0)


@_checks_for(Offset)
def _check_offset(node: Offset, path: PlanPath, _context: _Context) -> Iterator[PlanViolation]:
    yield from _required(node, path, "input")
    yield from _at_least(node, path, "offset", node.offset, 0)


@_checks_for(Aggregate)
def _check_aggregate(
    node: Aggregate, path: PlanPath, _context: _Context
) -> Iterator[PlanViolation]:
    yield from _required(node, path, "input")


@_checks_for(SQL)
def _check_sql(node: SQL, path: PlanPath, _context: _Context) -> Iterator[PlanViolation]:
    yield from _non_blank(node, path, "query")


@_checks_for(LocalRelation)
def _check_local_relation(
    node: LocalRelation, path: PlanPath, _context: _Context
) -> Iterator[PlanViolation]:
    for index, attribute in enumerate(node.attributes):
        if not attribute.name.strip():
            yield _violation(
                ViolationType.MISSING_VALUE,
                "local_relation_attribute_name_required",
                path,
                field=f"attributes[{index}].name",
            )
        if attribute.type is None:
            yield _violation(
                ViolationType.MISSING_VALUE,
                "local_relation_attribute_type_required",
                path,
                field=f"attributes[{index}].type",
            )


@_checks_for(Sample)
def _check_sample(node: Sample, path: PlanPath, _context: _Context) -> Iterator[PlanViolation]:
    yield from _required(node, path, "input")
    lower, upper = node.lower_bound, node.upper_bound
    if math.isnan(lower) or math.isnan(upper) or not 0.0 <= lower <= upper <= 1.0:
        yield _violation(
            ViolationType.OUT_OF_RANGE,
            "sample_bounds_range",
            path,
            field="lower_bound",
            expected="0 <= lower_bound <= upper_bound <= 1",
            actual=f"[{lower}, {upper}]",
        )


@_checks_for(Deduplicate)
def _check_deduplicate(
    node: Deduplicate, path: PlanPath, _context: _Context
) -> Iterator[PlanViolation]:
    yield from _required(node, path, "input")
    if node.all_columns_as_keys and node.column_names:
        yield _violation(
            ViolationType.CONFLICT,
            "deduplicate_keys_exclusive",
            path,
            field="all_columns_as_keys",
            other="column_names",
        )


@_checks_for(Range)
def _check_range(node: Range, path: PlanPath, _context: _Context) -> Iterator[PlanViolation]:
    if node.step == 0:
        yield _violation(
            ViolationType.OUT_OF_RANGE,
            "range_step_range",
            path,
            field="step",
            expected="!= 0",
            actual="0",
        )
    yield from _at_least(node, path, "num_partitions", node.num_partitions, 1)


@_checks_for(SubqueryAlias)
def _check_subquery_alias(
    node: SubqueryAlias, path: PlanPath, _context: _Context
) -> Iterator[PlanViolation]:
    yield from _required(node, path, "input")
    yield from _non_blank(node, path, "alias")


@_checks_for(Repartition)
def _check_repartition(
    node: Repartition, path: PlanPath, _context: _Context
) -> Iterator[PlanViolation]:
    yield from _required(node, path, "input")
    yield from _at_least(node, path, "num_partitions", node.num_partitions, 1)


@_checks_for(RenameColumnsBySameLengthNames)
def _check_rename_by_position(
    node: RenameColumnsBySameLengthNames, path: PlanPath, _context: _Context
) -> Iterator[PlanViolation]:
    yield from _required(node, path, "input")
    expected = static_column_count(node.input)
    if expected is not None and expected != len(node.column_names):
        yield _violation(
            ViolationType.ARITY_MISMATCH,
            "rename_column_count",
            path,
            field="column_names",
            expected=f"{expected} names",
            actual=str(len(node.column_names)),
        )


@_checks_for(RenameColumnsByNameToNameMap)
def _check_rename_by_map(
    node: RenameColumnsByNameToNameMap, path: PlanPath, _context: _Context
) -> Iterator[PlanViolation]:
    yield from _required(node, path, "input")
    counts = Counter(node.rename_columns_map.values())
    duplicates = sorted(name for name, count in counts.items() if count > 1)
    if duplicates:
        yield _violation(
            ViolationType.DUPLICATE_VALUES,
            "rename_targets_unique",
            path,
            field="rename_columns_map",
            actual=", ".join(repr(name) for name in duplicates),
        )


@_checks_for(ShowString)
def _check_show_string(
    node: ShowString, path: PlanPath, _context: _Context
) -> Iterator[PlanViolation]:
    yield from _required(node, path, "input", "num_rows", "truncate")
    yield from _at_least(node, path, "num_rows", node.num_rows, 0)
    yield from _at_least(node, path, "truncate", node.truncate, 0)


@_checks_for(NAFill)
def _check_fill_na(node: NAFill, path: PlanPath, _context: _Context) -> Iterator[PlanViolation]:
    yield from _required(node, path, "input")
    if not node.values:
        yield _violation(
            ViolationType.ARITY_MISMATCH,
            "fill_na_values_required",
            path,
            field="values",
            expected="at least 1 value",
            actual="0",
        )
    elif len(node.values) > 1 and len(node.cols) != len(node.values):
        yield _violation(
            ViolationType.ARITY_MISMATCH,
            "fill_na_values_cols_paired",
            path,
            field="cols",
            expected=f"{len(node.values)} columns to pair with {len(node.values)} values",
            actual=str(len(node.cols)),
        )
    for index, value in enumerate(node.values):
        if not isinstance(value, _FILL_VALUE_TYPES):
            yield _violation(
                ViolationType.INVALID_VALUE,
                "fill_na_value_kind",
                path,
                field=f"values[{index}]",
                expected="a boolean, integer, floating point or string literal",
                actual=node_name(value),
            )


@_checks_for(StatSummary)
def _check_summary(
    node: StatSummary, path: PlanPath, _context: _Context
) -> Iterator[PlanViolation]:
    yield from _required(node, path, "input")
    for index, statistic in enumerate(node.statistics):
        if statistic not in SUMMARY_STATISTICS and not _PERCENTILE_RE.match(statistic):
            yield _violation(
                ViolationType.OUT_OF_RANGE,
                "summary_statistic_known",
                path,
                field=f"statistics[{index}]",
                expected="a summary statistic or a percentile such as '75%'",
                actual=repr(statistic),
            )


@_checks_for(StatCrosstab)
def _check_crosstab(
    node: StatCrosstab, path: PlanPath, _context: _Context
) -> Iterator[PlanViolation]:
    yield from _required(node, path, "input")
    yield from _non_blank(node, path, "col1", "col2")


@_checks_for(Unknown)
def _check_unknown(node: Unknown, path: PlanPath, context: _Context) -> Iterator[PlanViolation]:
    if not context.config.allow_test_fixtures:
        yield _violation(
            ViolationType.INVALID_VALUE,
            "unknown_relation_fixture",
            path,
            field="rel_type",
            detail="the unknown relation is a test fixture and requires allow_test_fixtures",
        )


def static_column_count(relation: object) -> int | None:
    """Return the output column count of ``relation`` when it is static.

    Column-preserving relations are followed down to a local relation, a
    range or a positional rename; anything else needs the analyzer.

    Returns
    -------
    int | None
        Column count, or ``None`` when it depends on a catalog schema.
    """
    current = relation
    while isinstance(current, _COLUMN_PRESERVING):
        current = current.input
    if isinstance(current, LocalRelation):
        return len(current.attributes)
    if isinstance(current, Range):
        return 1
    if isinstance(current, RenameColumnsBySameLengthNames):
        return len(current.column_names)
    return None


# Expressions


@_checks_for(LiteralExpression)
def _check_literal_expression(
    node: LiteralExpression, path: PlanPath, _context: _Context
) -> Iterator[PlanViolation]:
    yield from _required(node, path, "literal")


@_checks_for(UnresolvedAttribute)
def _check_unresolved_attribute(
    node: UnresolvedAttribute, path: PlanPath, _context: _Context
) -> Iterator[PlanViolation]:
    yield from _non_blank(node, path, "unparsed_identifier")


@_checks_for(UnresolvedFunction)
def _check_unresolved_function(
    node: UnresolvedFunction, path: PlanPath, _context: _Context
) -> Iterator[PlanViolation]:
    if not node.parts or not all(part.strip() for part in node.parts):
        yield _violation(
            ViolationType.ARITY_MISMATCH,
            "unresolved_function_name_required",
            path,
            field="parts",
            expected="at least 1 non-empty name part",
            actual=repr(list(node.parts)),
        )


@_checks_for(ExpressionString)
def _check_expression_string(
    node: ExpressionString, path: PlanPath, _context: _Context
) -> Iterator[PlanViolation]:
    yield from _non_blank(node, path, "expression")


@_checks_for(Alias)
def _check_alias(node: Alias, path: PlanPath, _context: _Context) -> Iterator[PlanViolation]:
    yield from _required(node, path, "expr")
    if not node.name:
        yield _violation(
            ViolationType.ARITY_MISMATCH,
            "alias_name_required",
            path,
            field="name",
            expected="at least 1 name",
            actual="0",
        )
    if node.metadata is None:
        return
    if len(node.name) != 1:
        yield _violation(
            ViolationType.CONFLICT,
            "alias_metadata_single_name",
            path,
            field="metadata",
            other="name",
            detail=f"metadata only applies to a single name, got {len(node.name)}",
        )
    try:
        parsed = msgspec.json.decode(node.metadata)
    except msgspec.DecodeError:
        parsed = None
    if not isinstance(parsed, dict):
        yield _violation(
            ViolationType.INVALID_VALUE,
            "alias_metadata_json_object",
            path,
            field="metadata",
            expected="JSON object text",
            actual=repr(node.metadata[:40]),
        )


# Literals


def _literal_signature(literal: object) -> tuple[object, ...] | None:
    if isinstance(literal, NullLiteral):
        return None
    if isinstance(literal, DecimalLiteral):
        return (type(literal), literal.value.precision, literal.value.scale)
    return (type(literal),)


def _homogeneous(
    node: object,
    path: PlanPath,
    field: str,
    literals: Iterator[object],
) -> Iterator[PlanViolation]:
    kinds: dict[tuple[object, ...], str] = {}
    for literal in literals:
        signature = _literal_signature(literal)
        if signature is not None and signature not in kinds:
            kinds[signature] = node_name(literal)
    if len(kinds) > 1:
        yield _violation(
            ViolationType.HETEROGENEOUS,
            f"{node_name(node)}_{field.replace('.', '_')}_homogeneous",
            path,
            field=field,
            actual=", ".join(sorted(set(kinds.values()))),
        )


def _bounded(
    node: object,
    path: PlanPath,
    field: str,
    value: int,
    bounds: tuple[int, int],
) -> Iterator[PlanViolation]:
    low, high = bounds
    if not low <= value <= high:
        yield _violation(
            ViolationType.OUT_OF_RANGE,
            f"{node_name(node)}_{field.replace('.', '_')}_range",
            path,
            field=field,
            expected=f"[{low}, {high}]",
            actual=str(value),
        )


@_checks_for(ByteLiteral)
def _check_i8(node: ByteLiteral, path: PlanPath, _context: _Context) -> Iterator[PlanViolation]:
    yield from _bounded(node, path, "value", node.value, I8_RANGE)


@_checks_for(ShortLiteral)
def _check_i16(node: ShortLiteral, path: PlanPath, _context: _Context) -> Iterator[PlanViolation]:
    yield from _bounded(node, path, "value", node.value, I16_RANGE)


@_checks_for(TimeLiteral)
def _check_time(node: TimeLiteral, path: PlanPath, _context: _Context) -> Iterator[PlanViolation]:
    yield from _bounded(node, path, "value", node.value, (0, MICROS_PER_DAY - 1))


@_checks_for(VarCharLiteral)
def _check_var_char(
    node: VarCharLiteral, path: PlanPath, _context: _Context
) -> Iterator[PlanViolation]:
    yield from _at_least(node, path, "value.length", node.value.length, 0)
    if node.value.length >= 0 and len(node.value.value) > node.value.length:
        yield _violation(
            ViolationType.OUT_OF_RANGE,
            "var_char_value_length",
            path,
            field="value.value",
            expected=f"at most {node.value.length} characters",
            actual=str(len(node.value.value)),
        )


def _width(
    node: object,
    path: PlanPath,
    field: str,
    payload: bytes,
    width: int,
) -> Iterator[PlanViolation]:
    if len(payload) != width:
        yield _violation(
            ViolationType.INVALID_VALUE,
            f"{node_name(node)}_width",
            path,
            field=field,
            expected=f"{width} bytes",
            actual=f"{len(payload)} bytes",
        )


def _precision_scale(
    node: object,
    path: PlanPath,
    precision: int,
    scale: int,
    *,
    prefix: str = "",
) -> Iterator[PlanViolation]:
    if not 1 <= precision <= MAX_DECIMAL_PRECISION:
        yield from _bounded(node, path, f"{prefix}precision", precision, (1, MAX_DECIMAL_PRECISION))
    elif not 0 <= scale <= precision:
        yield from _bounded(node, path, f"{prefix}scale", scale, (0, precision))


@_checks_for(DecimalLiteral)
def _check_decimal(
    node: DecimalLiteral, path: PlanPath, _context: _Context
) -> Iterator[PlanViolation]:
    payload = node.value
    violations = [
        *_width(node, path, "value.value", payload.value, DECIMAL_WIDTH),
        *_precision_scale(node, path, payload.precision, payload.scale, prefix="value."),
    ]
    yield from violations
    if violations:
        return
    if abs(node.unscaled()) >= 10**payload.precision:
        yield _violation(
            ViolationType.OUT_OF_RANGE,
            "decimal_value_precision",
            path,
            field="value.value",
            expected=f"at most {payload.precision} digits",
            actual=str(node.to_decimal()),
        )


@_checks_for(UUIDLiteral)
def _check_uuid(node: UUIDLiteral, path: PlanPath, _context: _Context) -> Iterator[PlanViolation]:
    yield from _width(node, path, "value", node.value, UUID_WIDTH)


@_checks_for(ListLiteral)
def _check_list(node: ListLiteral, path: PlanPath, _context: _Context) -> Iterator[PlanViolation]:
    yield from _homogeneous(node, path, "values", iter(node.values))


@_checks_for(MapLiteral)
def _check_map(node: MapLiteral, path: PlanPath, _context: _Context) -> Iterator[PlanViolation]:
    yield from _homogeneous(node, path, "key_values.key", (entry.key for entry in node.key_values))
    yield from _homogeneous(
        node, path, "key_values.value", (entry.value for entry in node.key_values)
    )


@_checks_for(NullLiteral)
def _check_null(node: NullLiteral, path: PlanPath, _context: _Context) -> Iterator[PlanViolation]:
    yield from _required(node, path, "type")
    for field in ("nullable", "type_variation_reference"):
        if getattr(node, field):
            yield _violation(
                ViolationType.CONFLICT,
                f"null_{field}_on_type",
                path,
                field=field,
                other="type",
                detail="a typed null declares this on its data type",
            )


@_checks_for(EmptyListLiteral, EmptyMapLiteral)
def _check_empty_collection(
    node: EmptyListLiteral | EmptyMapLiteral, path: PlanPath, _context: _Context
) -> Iterator[PlanViolation]:
    yield from _required(node, path, "type")


@_checks_for(UserDefinedLiteral)
def _check_user_defined_literal(
    node: UserDefinedLiteral, path: PlanPath, _context: _Context
) -> Iterator[PlanViolation]:
    yield from _required(node, path, "value")


# Data types


@_checks_for(DecimalType)
def _check_decimal_type(
    node: DecimalType, path: PlanPath, _context: _Context
) -> Iterator[PlanViolation]:
    yield from _precision_scale(node, path, node.precision, node.scale)


@_checks_for(FixedCharType, VarCharType, FixedBinaryType)
def _check_length_type(
    node: FixedCharType | VarCharType | FixedBinaryType, path: PlanPath, _context: _Context
) -> Iterator[PlanViolation]:
    yield from _at_least(node, path, "length", node.length, 0)


@_checks_for(ListType)
def _check_list_type(node: ListType, path: PlanPath, _context: _Context) -> Iterator[PlanViolation]:
    yield from _required(node, path, "element_type")


@_checks_for(MapType)
def _check_map_type(node: MapType, path: PlanPath, _context: _Context) -> Iterator[PlanViolation]:
    yield from _required(node, path, "key_type", "value_type")


@_checks_for(StructType)
def _check_struct_type(
    node: StructType, path: PlanPath, _context: _Context
) -> Iterator[PlanViolation]:
    for index, struct_field in enumerate(node.fields):
        if struct_field.type is None:
            yield _violation(
                ViolationType.MISSING_VALUE,
                "struct_field_type_required",
                path,
                field=f"fields[{index}].type",
            )


# Extension anchors


def _check_anchors(node: object, path: PlanPath, context: _Context) -> Iterator[PlanViolation]:
    references: list[tuple[str, int, ExtensionKind]] = []
    if isinstance(node, (LiteralBase, DataTypeBase)) and not isinstance(node, NullLiteral):
        references.append(
            ("type_variation_reference", node.type_variation_reference, ExtensionKind.TYPE_VARIATION)
        )
    if isinstance(node, (UserDefinedType, UserDefinedLiteral)):
        references.append(("type_reference", node.type_reference, ExtensionKind.TYPE))
    for field, anchor, kind in references:
        if anchor and anchor not in context.anchors[kind]:
            yield _violation(
                ViolationType.UNRESOLVED_ANCHOR,
                f"{field}_declared",
                path,
                field=field,
                expected=kind.value,
                actual=str(anchor),
            )


__all__ = [
    "I16_RANGE",
    "I8_RANGE",
    "SUMMARY_STATISTICS",
    "check_plan",
    "iter_violations",
    "static_column_count",
    "validate",
]
