"""Tests for the pyarrow bridge of plan data types."""

from __future__ import annotations

import pyarrow as pa
import pytest

from plan_ir.arrow_types import (
    attributes_from_schema,
    attributes_to_schema,
    from_arrow_type,
    to_arrow_type,
)
from plan_ir.expressions import QualifiedAttribute
from plan_ir.types import (
    BooleanType,
    DecimalType,
    DoubleType,
    FixedBinaryType,
    IntegerType,
    ListType,
    LongType,
    MapType,
    StringType,
    StructField,
    StructType,
    TimestampType,
    TimestampTZType,
    UserDefinedType,
    UUIDType,
    VarCharType,
)


@pytest.mark.parametrize(
    ("data_type", "expected"),
    [
        (BooleanType(), pa.bool_()),
        (IntegerType(), pa.int32()),
        (LongType(), pa.int64()),
        (DoubleType(), pa.float64()),
        (DecimalType(precision=12, scale=3), pa.decimal128(12, 3)),
        (FixedBinaryType(length=8), pa.binary(8)),
        (UUIDType(), pa.binary(16)),
        (VarCharType(length=10), pa.string()),
    ],
)
def test_to_arrow_type(data_type: object, expected: pa.DataType) -> None:
    """Ensure scalar kinds map to their Arrow counterparts."""
    assert to_arrow_type(data_type) == expected  # type: ignore[arg-type]


def test_timestamps_keep_zone_flag() -> None:
    """Ensure zoned and local timestamps stay distinguishable through Arrow."""
    assert from_arrow_type(to_arrow_type(TimestampType())) == TimestampType()
    assert from_arrow_type(to_arrow_type(TimestampTZType())) == TimestampTZType()


def test_nested_types_round_trip() -> None:
    """Ensure list, map and struct types survive a trip through Arrow."""
    nested = StructType(
        fields=(
            StructField(name="id", type=LongType(), nullable=False),
            StructField(
                name="tags",
                type=ListType(element_type=StringType(), element_nullable=False),
                metadata={"doc": "free-form tags"},
            ),
            StructField(
                name="scores",
                type=MapType(key_type=StringType(), value_type=DoubleType()),
            ),
        )
    )
    assert from_arrow_type(to_arrow_type(nested)) == nested


def test_schema_bridge_preserves_order() -> None:
    """Ensure attributes map to schema fields one to one."""
    attributes = (
        QualifiedAttribute(name="b", type=StringType()),
        QualifiedAttribute(name="a", type=DecimalType(precision=5, scale=2)),
    )
    schema = attributes_to_schema(attributes)
    assert schema.names == ["b", "a"]
    assert attributes_from_schema(schema) == attributes


def test_unmapped_types_raise() -> None:
    """Ensure types without a counterpart raise TypeError."""
    with pytest.raises(TypeError, match="user_defined|UserDefinedType"):
        to_arrow_type(UserDefinedType(type_reference=1))
    with pytest.raises(TypeError):
        from_arrow_type(pa.null())
