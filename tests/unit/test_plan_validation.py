"""Tests for the plan validation layer."""

from __future__ import annotations

import pytest

from plan_ir.config import PlanIRConfig
from plan_ir.errors import (
    ArityError,
    DepthExceededError,
    OneofUnsetError,
    RangeError,
    SemanticConflictError,
    StructuralError,
)
from plan_ir.expressions import (
    Alias,
    ExpressionBase,
    QualifiedAttribute,
    UnresolvedFunction,
    call,
    col,
    lit,
)
from plan_ir.literals import (
    BooleanLiteral,
    ByteLiteral,
    DecimalLiteral,
    IntegerLiteral,
    ListLiteral,
    LongLiteral,
    NullLiteral,
    StringLiteral,
)
from plan_ir.paths import render_path
from plan_ir.relations import (
    Deduplicate,
    ExtensionDeclaration,
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
    RelationBase,
    RenameColumnsByNameToNameMap,
    RenameColumnsBySameLengthNames,
    Repartition,
    Sample,
    SetOperation,
    SetOpType,
    Sort,
    SortDirection,
    SortField,
    SortNulls,
    StatSummary,
    SubqueryAlias,
    Unknown,
)
from plan_ir.types import DecimalType, IntegerType, StringType
from plan_ir.validation import check_plan, static_column_count, validate

TABLE = Read(read_type=NamedTable(unparsed_identifier="t"))
OTHER = Read(read_type=NamedTable(unparsed_identifier="u"))


def _plan(root: object) -> Plan:
    return Plan(root=root)  # type: ignore[arg-type]


def test_validate_returns_same_plan(sample_plan: Plan) -> None:
    """Ensure a valid plan is returned unchanged."""
    assert validate(sample_plan) is sample_plan
    assert check_plan(sample_plan) == ()


def test_join_condition_and_using_columns_conflict() -> None:
    """Ensure join condition and using columns are mutually exclusive."""
    join = Join(
        left=TABLE,
        right=OTHER,
        join_type=JoinType.INNER,
        join_condition=call("=", col("t.id"), col("u.id")),
        using_columns=("id",),
    )
    with pytest.raises(SemanticConflictError) as excinfo:
        validate(_plan(join))
    assert excinfo.value.rule == "join_condition_using_columns_exclusive"
    assert render_path(excinfo.value.path) == "join"


@pytest.mark.parametrize(
    ("condition", "using"),
    [(call("=", col("t.id"), col("u.id")), ()), (None, ("id",))],
)
def test_join_with_one_of_condition_or_using(condition: object, using: tuple[str, ...]) -> None:
    """Ensure either join key form alone validates."""
    join = Join(
        left=TABLE,
        right=OTHER,
        join_type=JoinType.LEFT_OUTER,
        join_condition=condition,  # type: ignore[arg-type]
        using_columns=using,
    )
    validate(_plan(join))


def test_join_type_must_be_specified() -> None:
    """Ensure an unspecified join type fails validation."""
    with pytest.raises(StructuralError) as excinfo:
        validate(_plan(Join(left=TABLE, right=OTHER)))
    assert excinfo.value.rule == "join_join_type_specified"


def test_out_of_range_enum_values_are_invalid() -> None:
    """Ensure integers outside an enum are reported, not raised as ValueError."""
    join = Join(left=TABLE, right=OTHER, join_type=9)  # type: ignore[arg-type]
    with pytest.raises(StructuralError) as excinfo:
        validate(_plan(join))
    assert excinfo.value.rule == "join_join_type_specified"
    assert [violation.actual for violation in check_plan(_plan(join))] == ["9"]
    sort_field = SortField(expression=col("a"), direction=7, nulls=-1)  # type: ignore[arg-type]
    violations = check_plan(_plan(Sort(input=TABLE, sort_fields=(sort_field,))))
    assert [(violation.rule, violation.actual) for violation in violations] == [
        ("sort_direction_specified", "7"),
        ("sort_nulls_specified", "-1"),
    ]


@pytest.mark.parametrize("is_all", [True, False])
@pytest.mark.parametrize("by_name", [True, False])
def test_set_operation_modifiers_are_independent(*, is_all: bool, by_name: bool) -> None:
    """Ensure all four modifier combinations are legal."""
    node = SetOperation(
        left_input=TABLE,
        right_input=OTHER,
        set_op_type=SetOpType.UNION,
        is_all=is_all,
        by_name=by_name,
    )
    validate(_plan(node))


def test_rename_targets_must_be_unique() -> None:
    """Ensure duplicate rename targets are rejected."""
    bad = RenameColumnsByNameToNameMap(input=TABLE, rename_columns_map={"a": "x", "b": "x"})
    with pytest.raises(ArityError) as excinfo:
        validate(_plan(bad))
    assert excinfo.value.rule == "rename_targets_unique"
    good = RenameColumnsByNameToNameMap(input=TABLE, rename_columns_map={"a": "x", "b": "y"})
    validate(_plan(good))


def test_fill_na_broadcasts_single_value() -> None:
    """Ensure one value with no columns broadcasts to every column."""
    validate(_plan(NAFill(input=TABLE, values=(BooleanLiteral(value=True),))))
    validate(_plan(NAFill(input=TABLE, cols=("a", "b"), values=(IntegerLiteral(value=0),))))


def test_fill_na_values_must_pair_with_columns() -> None:
    """Ensure several values need exactly as many columns."""
    node = NAFill(
        input=TABLE,
        cols=("a",),
        values=(IntegerLiteral(value=1), IntegerLiteral(value=2)),
    )
    with pytest.raises(ArityError) as excinfo:
        validate(_plan(node))
    assert excinfo.value.rule == "fill_na_values_cols_paired"


def test_fill_na_requires_a_value() -> None:
    """Ensure an empty fill value list is rejected."""
    with pytest.raises(ArityError):
        validate(_plan(NAFill(input=TABLE)))


def test_range_leaf_and_limit_bounds() -> None:
    """Ensure a range validates as a leaf and limits must be non-negative."""
    rng = Range(start=0, end=10, step=2)
    validate(_plan(rng))
    assert rng.element_count() == 5
    validate(_plan(Limit(input=rng, limit=3)))
    with pytest.raises(RangeError) as excinfo:
        validate(_plan(Limit(input=rng, limit=-1)))
    assert excinfo.value.rule == "limit_limit_range"


def test_range_step_must_be_non_zero() -> None:
    """Ensure a zero step is out of range."""
    with pytest.raises(RangeError):
        validate(_plan(Range(end=10, step=0)))


def test_offset_and_partitions_bounds() -> None:
    """Ensure offsets are non-negative and partition counts positive."""
    with pytest.raises(RangeError):
        validate(_plan(Offset(input=TABLE, offset=-2)))
    with pytest.raises(RangeError):
        validate(_plan(Repartition(input=TABLE, num_partitions=0)))
    with pytest.raises(RangeError):
        validate(_plan(Range(end=5, num_partitions=0)))
    validate(_plan(Repartition(input=TABLE, num_partitions=4)))


def test_sample_bounds() -> None:
    """Ensure sample bounds lie in [0, 1] and are ordered."""
    validate(_plan(Sample(input=TABLE, lower_bound=0.1, upper_bound=0.5)))
    with pytest.raises(RangeError):
        validate(_plan(Sample(input=TABLE, lower_bound=0.6, upper_bound=0.5)))
    with pytest.raises(RangeError):
        validate(_plan(Sample(input=TABLE, lower_bound=0.0, upper_bound=1.5)))


def test_sort_requires_direction_and_nulls() -> None:
    """Ensure unspecified sort direction and null ordering fail validation."""
    node = Sort(input=TABLE, sort_fields=(SortField(expression=col("a")),))
    violations = check_plan(_plan(node))
    assert [violation.rule for violation in violations] == [
        "sort_direction_specified",
        "sort_nulls_specified",
    ]
    ok = Sort(
        input=TABLE,
        sort_fields=(
            SortField(
                expression=col("a"),
                direction=SortDirection.DESCENDING,
                nulls=SortNulls.FIRST,
            ),
        ),
    )
    validate(_plan(ok))


def test_deduplicate_keys_are_exclusive() -> None:
    """Ensure all-columns deduplication cannot also name columns."""
    node = Deduplicate(input=TABLE, column_names=("a",), all_columns_as_keys=True)
    with pytest.raises(SemanticConflictError):
        validate(_plan(node))


def test_alias_requires_a_name() -> None:
    """Ensure zero alias names are rejected."""
    node = Project(input=TABLE, expressions=(Alias(expr=col("a"), name=()),))
    with pytest.raises(ArityError) as excinfo:
        validate(_plan(node))
    assert render_path(excinfo.value.path) == "project/expressions[0]:alias"


def test_alias_metadata_rules() -> None:
    """Ensure alias metadata is single-name JSON object text."""
    multi = Alias(expr=call("explode", col("m")), name=("k", "v"), metadata="{}")
    not_json = Alias(expr=col("a"), name=("b",), metadata="[1, 2]")
    violations = check_plan(_plan(Project(input=TABLE, expressions=(multi, not_json))))
    assert [violation.rule for violation in violations] == [
        "alias_metadata_single_name",
        "alias_metadata_json_object",
    ]
    single = Alias(expr=col("a"), name=("b",), metadata='{"x": 1}')
    validate(_plan(Project(input=TABLE, expressions=(single,))))


def test_unresolved_function_needs_name() -> None:
    """Ensure a function call without a name is rejected."""
    node = Filter(input=TABLE, condition=UnresolvedFunction(parts=()))
    with pytest.raises(ArityError):
        validate(_plan(node))


def test_bare_relation_base_is_oneof_unset() -> None:
    """Ensure a relation without a variant is reported as unset."""
    node = SubqueryAlias(input=RelationBase(), alias="s")  # type: ignore[arg-type]
    with pytest.raises(OneofUnsetError) as excinfo:
        validate(_plan(node))
    assert render_path(excinfo.value.path) == "subquery_alias/input:relation"


def test_bare_expression_base_is_oneof_unset() -> None:
    """Ensure an expression without a variant is reported as unset."""
    node = Filter(input=TABLE, condition=ExpressionBase())  # type: ignore[arg-type]
    with pytest.raises(OneofUnsetError):
        validate(_plan(node))


def test_literal_range_checks() -> None:
    """Ensure narrow integer kinds are range-checked."""
    node = Project(expressions=(lit(ByteLiteral(value=200)),))
    with pytest.raises(RangeError) as excinfo:
        validate(_plan(node))
    assert excinfo.value.rule == "i8_value_range"


def test_decimal_precision_limits() -> None:
    """Ensure decimal precision above 38 and overflowing values are rejected."""
    with pytest.raises(RangeError):
        validate(_plan(Project(expressions=(lit(DecimalLiteral.from_int(1, precision=39)),))))
    with pytest.raises(RangeError) as excinfo:
        validate(_plan(Project(expressions=(lit(DecimalLiteral.from_int(1000, precision=3)),))))
    assert excinfo.value.rule == "decimal_value_precision"
    validate(_plan(Project(expressions=(lit(DecimalLiteral.from_int(-1, precision=5)),))))


def test_list_literal_must_be_homogeneous() -> None:
    """Ensure list elements share one kind; typed nulls are compatible."""
    mixed = ListLiteral(values=(IntegerLiteral(value=1), StringLiteral(value="a")))
    with pytest.raises(SemanticConflictError):
        validate(_plan(Project(expressions=(lit(mixed),))))
    with_null = ListLiteral(values=(LongLiteral(value=1), NullLiteral(type=IntegerType())))
    validate(_plan(Project(expressions=(lit(with_null),))))


def test_typed_null_declares_nullability_on_type() -> None:
    """Ensure a typed null cannot carry its own nullable flag."""
    node = Project(expressions=(lit(NullLiteral(type=StringType(), nullable=True)),))
    with pytest.raises(SemanticConflictError) as excinfo:
        validate(_plan(node))
    assert excinfo.value.rule == "null_nullable_on_type"


def test_extension_anchors_must_be_declared() -> None:
    """Ensure variation anchors resolve once an extension table is present."""
    literal = lit(IntegerLiteral(value=1, type_variation_reference=7))
    plan = Plan(
        root=Project(expressions=(literal,)),
        extensions=(ExtensionDeclaration(anchor=3, name="u32"),),
    )
    with pytest.raises(StructuralError) as excinfo:
        validate(plan)
    assert excinfo.value.rule == "type_variation_reference_declared"
    declared = Plan(
        root=Project(expressions=(literal,)),
        extensions=(ExtensionDeclaration(anchor=7, name="u32", kind=ExtensionKind.TYPE_VARIATION),),
    )
    validate(declared)


def test_unknown_relation_is_a_test_fixture() -> None:
    """Ensure the unknown relation only passes when fixtures are allowed."""
    with pytest.raises(StructuralError):
        validate(_plan(Unknown()))
    validate(_plan(Unknown()), config=PlanIRConfig(allow_test_fixtures=True))


def test_positional_rename_checked_when_schema_is_static() -> None:
    """Ensure positional renames are counted against static schemas only."""
    local = LocalRelation(
        attributes=(
            QualifiedAttribute(name="a", type=IntegerType()),
            QualifiedAttribute(name="b", type=DecimalType(precision=10, scale=2)),
        )
    )
    assert static_column_count(Filter(input=local, condition=col("a"))) == 2
    with pytest.raises(ArityError):
        validate(_plan(RenameColumnsBySameLengthNames(input=local, column_names=("x",))))
    validate(_plan(RenameColumnsBySameLengthNames(input=local, column_names=("x", "y"))))
    validate(_plan(RenameColumnsBySameLengthNames(input=TABLE, column_names=("x",))))


def test_summary_statistics() -> None:
    """Ensure summary statistics are known names or percentiles."""
    validate(_plan(StatSummary(input=TABLE, statistics=("count", "75%"))))
    with pytest.raises(RangeError):
        validate(_plan(StatSummary(input=TABLE, statistics=("median",))))


def test_check_plan_accumulates_in_pre_order() -> None:
    """Ensure every violation is reported, outermost first."""
    node = Limit(input=Offset(input=TABLE, offset=-1), limit=-1)
    violations = check_plan(_plan(node))
    assert [render_path(violation.path) for violation in violations] == [
        "limit",
        "limit/input:offset",
    ]


def test_validate_depth_guard() -> None:
    """Ensure a deep expression chain raises instead of exhausting the stack."""
    expr = col("a")
    for _ in range(1_000):
        expr = call("negative", expr)
    plan = _plan(Filter(input=TABLE, condition=expr))
    with pytest.raises(DepthExceededError):
        validate(plan, config=PlanIRConfig(max_depth=100))
    validate(plan, config=PlanIRConfig(max_depth=10_000))
