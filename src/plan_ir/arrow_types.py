"""Bridge between plan data types and pyarrow types.

Used to describe ``LocalRelation`` schemas as Arrow schemas and back.
Character types map to Arrow strings and ``uuid`` maps to 16-byte fixed
binary, so those kinds do not survive a round trip through Arrow.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import cast

import pyarrow as pa

from plan_ir.expressions import QualifiedAttribute
from plan_ir.types import (
    BinaryType,
    BooleanType,
    ByteType,
    DataType,
    DataTypeBase,
    DateType,
    DecimalType,
    DoubleType,
    FixedBinaryType,
    FixedCharType,
    FloatType,
    IntegerType,
    IntervalDayType,
    IntervalYearType,
    ListType,
    LongType,
    MapType,
    ShortType,
    StringType,
    StructField,
    StructType,
    TimestampType,
    TimestampTZType,
    TimeType,
    UUIDType,
    VarCharType,
)

_UUID_WIDTH = 16

_SIMPLE_TO_ARROW: dict[type[DataTypeBase], Callable[[], pa.DataType]] = {
    BooleanType: pa.bool_,
    ByteType: pa.int8,
    ShortType: pa.int16,
    IntegerType: pa.int32,
    LongType: pa.int64,
    FloatType: pa.float32,
    DoubleType: pa.float64,
    StringType: pa.string,
    FixedCharType: pa.string,
    VarCharType: pa.string,
    BinaryType: pa.binary,
    DateType: pa.date32,
    TimestampType: lambda: pa.timestamp("us", tz="UTC"),
    TimestampTZType: lambda: pa.timestamp("us"),
    TimeType: lambda: pa.time64("us"),
    IntervalYearType: pa.month_day_nano_interval,
    IntervalDayType: lambda: pa.duration("us"),
    UUIDType: lambda: pa.binary(_UUID_WIDTH),
}

_SIMPLE_FROM_ARROW: tuple[tuple[Callable[[pa.DataType], bool], Callable[[], DataType]], ...] = (
    (pa.types.is_boolean, BooleanType),
    (pa.types.is_int8, ByteType),
    (pa.types.is_int16, ShortType),
    (pa.types.is_int32, IntegerType),
    (pa.types.is_int64, LongType),
    (pa.types.is_float32, FloatType),
    (pa.types.is_float64, DoubleType),
    (lambda dt: pa.types.is_string(dt) or pa.types.is_large_string(dt), StringType),
    (lambda dt: pa.types.is_binary(dt) or pa.types.is_large_binary(dt), BinaryType),
    (lambda dt: pa.types.is_date32(dt) or pa.types.is_date64(dt), DateType),
    (pa.types.is_time, TimeType),
    (pa.types.is_interval, IntervalYearType),
    (pa.types.is_duration, IntervalDayType),
)


def to_arrow_type(data_type: DataTypeBase) -> pa.DataType:
    """Return the Arrow type for a plan data type.

    Returns
    -------
    pyarrow.DataType
        Equivalent Arrow type.

    Raises
    ------
    TypeError
        Raised for user-defined types, which have no Arrow equivalent.
    """
    simple = _SIMPLE_TO_ARROW.get(type(data_type))
    if simple is not None:
        return simple()
    if isinstance(data_type, DecimalType):
        return pa.decimal128(data_type.precision, data_type.scale)
    if isinstance(data_type, FixedBinaryType):
        return pa.binary(data_type.length)
    if isinstance(data_type, ListType):
        item = pa.field("item", to_arrow_type(data_type.element_type), nullable=data_type.element_nullable)
        return pa.list_(item)
    if isinstance(data_type, MapType):
        value = pa.field("value", to_arrow_type(data_type.value_type), nullable=data_type.value_nullable)
        return pa.map_(to_arrow_type(data_type.key_type), value)
    if isinstance(data_type, StructType):
        return pa.struct([_struct_field_to_arrow(field) for field in data_type.fields])
    msg = f"No Arrow type for plan data type {type(data_type).__name__}."
    raise TypeError(msg)


def from_arrow_type(arrow_type: pa.DataType) -> DataType:
    """Return the plan data type for an Arrow type.

    Returns
    -------
    DataType
        Equivalent plan data type.

    Raises
    ------
    TypeError
        Raised for Arrow types without a plan equivalent.
    """
    for check, factory in _SIMPLE_FROM_ARROW:
        if check(arrow_type):
            return factory()
    if pa.types.is_timestamp(arrow_type):
        tz = cast("pa.TimestampType", arrow_type).tz
        return TimestampType() if tz else TimestampTZType()
    if pa.types.is_decimal(arrow_type):
        decimal_type = cast("pa.Decimal128Type", arrow_type)
        return DecimalType(precision=decimal_type.precision, scale=decimal_type.scale)
    if pa.types.is_fixed_size_binary(arrow_type):
        return FixedBinaryType(length=cast("pa.FixedSizeBinaryType", arrow_type).byte_width)
    if pa.types.is_map(arrow_type):
        map_type = cast("pa.MapType", arrow_type)
        return MapType(
            key_type=from_arrow_type(map_type.key_type),
            value_type=from_arrow_type(map_type.item_type),
            value_nullable=map_type.item_field.nullable,
        )
    if pa.types.is_list(arrow_type) or pa.types.is_large_list(arrow_type):
        list_type = cast("pa.ListType | pa.LargeListType", arrow_type)
        return ListType(
            element_type=from_arrow_type(list_type.value_type),
            element_nullable=list_type.value_field.nullable,
        )
    if pa.types.is_struct(arrow_type):
        struct_type = cast("pa.StructType", arrow_type)
        return StructType(fields=tuple(_struct_field_from_arrow(field) for field in struct_type))
    msg = f"No plan data type for Arrow type {arrow_type}."
    raise TypeError(msg)


def attributes_to_schema(attributes: Iterable[QualifiedAttribute]) -> pa.Schema:
    """Return the Arrow schema described by local relation attributes.

    Returns
    -------
    pyarrow.Schema
        Schema with one nullable field per attribute.
    """
    return pa.schema([pa.field(attr.name, to_arrow_type(attr.type)) for attr in attributes])


def attributes_from_schema(schema: pa.Schema) -> tuple[QualifiedAttribute, ...]:
    """Return local relation attributes for an Arrow schema.

    Returns
    -------
    tuple[QualifiedAttribute, ...]
        One attribute per schema field, in order.
    """
    return tuple(
        QualifiedAttribute(name=field.name, type=from_arrow_type(field.type)) for field in schema
    )


def _struct_field_to_arrow(field: StructField) -> pa.Field:
    metadata = dict(field.metadata) if field.metadata else None
    return pa.field(field.name, to_arrow_type(field.type), nullable=field.nullable, metadata=metadata)


def _struct_field_from_arrow(field: pa.Field) -> StructField:
    metadata = {
        key.decode("utf-8", errors="replace"): value.decode("utf-8", errors="replace")
        for key, value in (field.metadata or {}).items()
    }
    return StructField(
        name=field.name,
        type=from_arrow_type(field.type),
        nullable=field.nullable,
        metadata=metadata,
    )


__all__ = [
    "attributes_from_schema",
    "attributes_to_schema",
    "from_arrow_type",
    "to_arrow_type",
]
