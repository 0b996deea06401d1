"""Data type model shared by typed literals and literal-table schemas.

Each data type kind is a tagged struct; the integer tag is the wire tag of
the kind and never changes once published.
"""

from __future__ import annotations

from typing import ClassVar

from core_types import Int32, UInt32
from serde_msgspec import StructBaseCompat


class DataTypeBase(StructBaseCompat, tag_field="kind"):
    """Common fields of every data type kind.

    A bare ``DataTypeBase`` instance carries no kind and is rejected by the
    validation layer.
    """

    wire_name: ClassVar[str] = "data_type"

    type_variation_reference: UInt32 = 0


class BooleanType(DataTypeBase, tag=1):
    wire_name: ClassVar[str] = "boolean"


class ByteType(DataTypeBase, tag=2):
    wire_name: ClassVar[str] = "i8"


class ShortType(DataTypeBase, tag=3):
    wire_name: ClassVar[str] = "i16"


class IntegerType(DataTypeBase, tag=5):
    wire_name: ClassVar[str] = "i32"


class LongType(DataTypeBase, tag=7):
    wire_name: ClassVar[str] = "i64"


class FloatType(DataTypeBase, tag=10):
    wire_name: ClassVar[str] = "fp32"


class DoubleType(DataTypeBase, tag=11):
    wire_name: ClassVar[str] = "fp64"


class StringType(DataTypeBase, tag=12):
    wire_name: ClassVar[str] = "string"


class BinaryType(DataTypeBase, tag=13):
    wire_name: ClassVar[str] = "binary"


class TimestampType(DataTypeBase, tag=14):
    wire_name: ClassVar[str] = "timestamp"


class DateType(DataTypeBase, tag=16):
    wire_name: ClassVar[str] = "date"


class TimeType(DataTypeBase, tag=17):
    wire_name: ClassVar[str] = "time"


class IntervalYearType(DataTypeBase, tag=19):
    wire_name: ClassVar[str] = "interval_year"


class IntervalDayType(DataTypeBase, tag=20):
    wire_name: ClassVar[str] = "interval_day"


class FixedCharType(DataTypeBase, tag=21):
    wire_name: ClassVar[str] = "fixed_char"

    length: Int32


class VarCharType(DataTypeBase, tag=22):
    wire_name: ClassVar[str] = "var_char"

    length: Int32


class FixedBinaryType(DataTypeBase, tag=23):
    wire_name: ClassVar[str] = "fixed_binary"

    length: Int32


class DecimalType(DataTypeBase, tag=24):
    """Fixed-precision decimal; precision is at most 38."""

    wire_name: ClassVar[str] = "decimal"

    precision: Int32 = 38
    scale: Int32 = 0


class StructField(StructBaseCompat):
    """Named member of a struct type."""

    name: str
    type: DataType | None = None
    nullable: bool = True
    metadata: dict[str, str] = {}


class StructType(DataTypeBase, tag=25):
    wire_name: ClassVar[str] = "struct"

    fields: tuple[StructField, ...] = ()


class ListType(DataTypeBase, tag=27):
    wire_name: ClassVar[str] = "list"

    element_type: DataType | None = None
    element_nullable: bool = True


class MapType(DataTypeBase, tag=28):
    wire_name: ClassVar[str] = "map"

    key_type: DataType | None = None
    value_type: DataType | None = None
    value_nullable: bool = True


class TimestampTZType(DataTypeBase, tag=29):
    wire_name: ClassVar[str] = "timestamp_tz"


class UserDefinedType(DataTypeBase, tag=31):
    """Opaque type resolved through the plan's extension table."""

    wire_name: ClassVar[str] = "user_defined"

    type_reference: UInt32


class UUIDType(DataTypeBase, tag=32):
    wire_name: ClassVar[str] = "uuid"


DataType = (
    BooleanType
    | ByteType
    | ShortType
    | IntegerType
    | LongType
    | FloatType
    | DoubleType
    | StringType
    | BinaryType
    | TimestampType
    | DateType
    | TimeType
    | IntervalYearType
    | IntervalDayType
    | FixedCharType
    | VarCharType
    | FixedBinaryType
    | DecimalType
    | StructType
    | ListType
    | MapType
    | TimestampTZType
    | UserDefinedType
    | UUIDType
)

DATA_TYPE_VARIANTS: tuple[type[DataTypeBase], ...] = (
    BooleanType,
    ByteType,
    ShortType,
    IntegerType,
    LongType,
    FloatType,
    DoubleType,
    StringType,
    BinaryType,
    TimestampType,
    DateType,
    TimeType,
    IntervalYearType,
    IntervalDayType,
    FixedCharType,
    VarCharType,
    FixedBinaryType,
    DecimalType,
    StructType,
    ListType,
    MapType,
    TimestampTZType,
    UserDefinedType,
    UUIDType,
)

MAX_DECIMAL_PRECISION = 38


def simple_string(data_type: DataTypeBase | None) -> str:
    """Return a short human readable type name such as ``decimal(10,2)``.

    Returns
    -------
    str
        Type name used in rendered plans and error messages.
    """
    if data_type is None:
        return "?"
    if isinstance(data_type, DecimalType):
        return f"decimal({data_type.precision},{data_type.scale})"
    if isinstance(data_type, (FixedCharType, VarCharType, FixedBinaryType)):
        return f"{data_type.wire_name}({data_type.length})"
    if isinstance(data_type, ListType):
        return f"list<{simple_string(data_type.element_type)}>"
    if isinstance(data_type, MapType):
        key = simple_string(data_type.key_type)
        value = simple_string(data_type.value_type)
        return f"map<{key},{value}>"
    if isinstance(data_type, StructType):
        members = ",".join(f"{field.name}:{simple_string(field.type)}" for field in data_type.fields)
        return f"struct<{members}>"
    if isinstance(data_type, UserDefinedType):
        return f"user_defined({data_type.type_reference})"
    return data_type.wire_name


__all__ = [
    "DATA_TYPE_VARIANTS",
    "MAX_DECIMAL_PRECISION",
    "BinaryType",
    "BooleanType",
    "ByteType",
    "DataType",
    "DataTypeBase",
    "DateType",
    "DecimalType",
    "DoubleType",
    "FixedBinaryType",
    "FixedCharType",
    "FloatType",
    "IntegerType",
    "IntervalDayType",
    "IntervalYearType",
    "ListType",
    "LongType",
    "MapType",
    "ShortType",
    "StringType",
    "StructField",
    "StructType",
    "TimeType",
    "TimestampTZType",
    "TimestampType",
    "UUIDType",
    "UserDefinedType",
    "VarCharType",
    "simple_string",
]
