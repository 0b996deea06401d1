"""Literal value model.

Literals are tagged structs keyed by ``literal_type``. Every kind except the
typed null carries ``nullable`` and ``type_variation_reference``; the typed
null declares both on its data type instead.

Decimal values are always sixteen little-endian two's-complement bytes
regardless of precision, and intervals are stored decomposed so producer and
consumer never have to agree on a unit conversion.
"""

from __future__ import annotations

import datetime as dt
import decimal
from typing import ClassVar

from core_types import Int32, Int64, UInt32
from plan_ir.types import DataType, ListType, MapType
from serde_msgspec import StructBaseCompat

DECIMAL_WIDTH = 16
MICROS_PER_SECOND = 1_000_000
SECONDS_PER_DAY = 86_400
MICROS_PER_DAY = SECONDS_PER_DAY * MICROS_PER_SECOND
UUID_WIDTH = 16
_EPOCH = dt.datetime(1970, 1, 1, tzinfo=dt.UTC)
_EPOCH_DATE = dt.date(1970, 1, 1)


class LiteralBase(StructBaseCompat, tag_field="literal_type"):
    """Fields shared by every literal kind.

    ``nullable`` declares that the literal's static type admits null,
    independently of the concrete non-null value carried here.
    ``type_variation_reference`` is an anchor into the plan's extension
    table (``0`` means no variation).
    """

    wire_name: ClassVar[str] = "literal"

    nullable: bool = False
    type_variation_reference: UInt32 = 0


class BooleanLiteral(LiteralBase, tag=1):
    wire_name: ClassVar[str] = "boolean"

    value: bool


class ByteLiteral(LiteralBase, tag=2):
    wire_name: ClassVar[str] = "i8"

    value: Int32


class ShortLiteral(LiteralBase, tag=3):
    wire_name: ClassVar[str] = "i16"

    value: Int32


class IntegerLiteral(LiteralBase, tag=5):
    wire_name: ClassVar[str] = "i32"

    value: Int32


class LongLiteral(LiteralBase, tag=7):
    wire_name: ClassVar[str] = "i64"

    value: Int64


class FloatLiteral(LiteralBase, tag=10):
    wire_name: ClassVar[str] = "fp32"

    value: float


class DoubleLiteral(LiteralBase, tag=11):
    wire_name: ClassVar[str] = "fp64"

    value: float


class StringLiteral(LiteralBase, tag=12):
    wire_name: ClassVar[str] = "string"

    value: str


class BinaryLiteral(LiteralBase, tag=13):
    wire_name: ClassVar[str] = "binary"

    value: bytes


class TimestampLiteral(LiteralBase, tag=14):
    """Absolute instant in microseconds since the UNIX epoch."""

    wire_name: ClassVar[str] = "timestamp"

    value: Int64

    @classmethod
    def from_datetime(cls, value: dt.datetime, **common: object) -> TimestampLiteral:
        """Build a timestamp literal from an aware or UTC-naive datetime.

        Returns
        -------
        TimestampLiteral
            Literal holding the instant in microseconds.
        """
        return cls(value=_datetime_to_micros(value), **common)

    def to_datetime(self) -> dt.datetime:
        """Return the instant as an aware UTC datetime.

        Returns
        -------
        datetime.datetime
            UTC datetime.
        """
        return _EPOCH + dt.timedelta(microseconds=self.value)


class DateLiteral(LiteralBase, tag=16):
    """Whole days since the UNIX epoch."""

    wire_name: ClassVar[str] = "date"

    value: Int32

    @classmethod
    def from_date(cls, value: dt.date, **common: object) -> DateLiteral:
        """Build a date literal from a calendar date.

        Returns
        -------
        DateLiteral
            Literal holding days since the epoch.
        """
        return cls(value=(value - _EPOCH_DATE).days, **common)

    def to_date(self) -> dt.date:
        """Return the calendar date.

        Returns
        -------
        datetime.date
            Calendar date.
        """
        return _EPOCH_DATE + dt.timedelta(days=self.value)


class TimeLiteral(LiteralBase, tag=17):
    """Microseconds past midnight, without a date component."""

    wire_name: ClassVar[str] = "time"

    value: Int64

    @classmethod
    def from_time(cls, value: dt.time, **common: object) -> TimeLiteral:
        """Build a time literal from a wall-clock time.

        Returns
        -------
        TimeLiteral
            Literal holding microseconds past midnight.
        """
        micros = (
            (value.hour * 3600 + value.minute * 60 + value.second) * MICROS_PER_SECOND
            + value.microsecond
        )
        return cls(value=micros, **common)


class IntervalYearToMonth(StructBaseCompat):
    years: Int32 = 0
    months: Int32 = 0


class IntervalYearToMonthLiteral(LiteralBase, tag=19):
    wire_name: ClassVar[str] = "interval_year_to_month"

    value: IntervalYearToMonth

    def total_months(self) -> int:
        """Return the interval length in months.

        Returns
        -------
        int
            ``years * 12 + months``.
        """
        return self.value.years * 12 + self.value.months


class IntervalDayToSecond(StructBaseCompat):
    days: Int32 = 0
    seconds: Int32 = 0
    microseconds: Int32 = 0


class IntervalDayToSecondLiteral(LiteralBase, tag=20):
    wire_name: ClassVar[str] = "interval_day_to_second"

    value: IntervalDayToSecond

    @classmethod
    def from_timedelta(cls, value: dt.timedelta, **common: object) -> IntervalDayToSecondLiteral:
        """Decompose a timedelta into days, seconds and microseconds.

        Returns
        -------
        IntervalDayToSecondLiteral
            Literal with the normalized ``timedelta`` components.
        """
        parts = IntervalDayToSecond(
            days=value.days,
            seconds=value.seconds,
            microseconds=value.microseconds,
        )
        return cls(value=parts, **common)

    def to_timedelta(self) -> dt.timedelta:
        """Recompose the interval as a timedelta.

        Returns
        -------
        datetime.timedelta
            Equivalent duration.
        """
        return dt.timedelta(
            days=self.value.days,
            seconds=self.value.seconds,
            microseconds=self.value.microseconds,
        )


class FixedCharLiteral(LiteralBase, tag=21):
    wire_name: ClassVar[str] = "fixed_char"

    value: str


class VarChar(StructBaseCompat):
    value: str
    length: Int32


class VarCharLiteral(LiteralBase, tag=22):
    wire_name: ClassVar[str] = "var_char"

    value: VarChar


class FixedBinaryLiteral(LiteralBase, tag=23):
    wire_name: ClassVar[str] = "fixed_binary"

    value: bytes


class Decimal(StructBaseCompat):
    """Decimal payload: sixteen bytes plus declared precision and scale."""

    value: bytes
    precision: Int32
    scale: Int32 = 0


class DecimalLiteral(LiteralBase, tag=24):
    wire_name: ClassVar[str] = "decimal"

    value: Decimal

    @classmethod
    def from_int(
        cls,
        unscaled: int,
        *,
        precision: int,
        scale: int = 0,
        **common: object,
    ) -> DecimalLiteral:
        """Build a decimal literal from its unscaled integer value.

        Returns
        -------
        DecimalLiteral
            Literal whose payload is the 16-byte encoding of ``unscaled``.
        """
        payload = Decimal(
            value=encode_decimal_bytes(unscaled),
            precision=precision,
            scale=scale,
        )
        return cls(value=payload, **common)

    @classmethod
    def from_decimal(
        cls,
        value: decimal.Decimal,
        *,
        precision: int,
        scale: int,
        **common: object,
    ) -> DecimalLiteral:
        """Build a decimal literal by rescaling ``value`` to ``scale``.

        Returns
        -------
        DecimalLiteral
            Literal holding the rescaled value.

        Raises
        ------
        ValueError
            Raised when rescaling would lose digits.
        """
        sign, digits, exponent = value.as_tuple()
        if not isinstance(exponent, int):
            msg = f"Decimal {value} is not finite."
            raise ValueError(msg)
        coefficient = int("".join(str(digit) for digit in digits) or "0")
        shift = exponent + scale
        if shift >= 0:
            unscaled = coefficient * 10**shift
        else:
            unscaled, remainder = divmod(coefficient, 10**-shift)
            if remainder:
                msg = f"Decimal {value} does not fit scale {scale}."
                raise ValueError(msg)
        if sign:
            unscaled = -unscaled
        return cls.from_int(unscaled, precision=precision, scale=scale, **common)

    def unscaled(self) -> int:
        """Return the unscaled integer stored in the 16-byte payload.

        Returns
        -------
        int
            Signed unscaled value.
        """
        return decode_decimal_bytes(self.value.value)

    def to_decimal(self) -> decimal.Decimal:
        """Return the value as a ``decimal.Decimal`` honoring the scale.

        Returns
        -------
        decimal.Decimal
            Scaled value.
        """
        unscaled = self.unscaled()
        digits = tuple(int(digit) for digit in str(abs(unscaled)))
        return decimal.Decimal((int(unscaled < 0), digits, -self.value.scale))


class StructLiteral(LiteralBase, tag=25):
    """Possibly heterogeneously typed sequence of literals."""

    wire_name: ClassVar[str] = "struct"

    fields: tuple[Literal, ...] = ()


class MapKeyValue(StructBaseCompat):
    key: Literal
    value: Literal


class MapLiteral(LiteralBase, tag=26):
    wire_name: ClassVar[str] = "map"

    key_values: tuple[MapKeyValue, ...] = ()


class TimestampTZLiteral(LiteralBase, tag=27):
    """Microseconds since the epoch, interpreted in the session time zone."""

    wire_name: ClassVar[str] = "timestamp_tz"

    value: Int64

    @classmethod
    def from_datetime(cls, value: dt.datetime, **common: object) -> TimestampTZLiteral:
        """Build a zoned timestamp literal from a datetime.

        Returns
        -------
        TimestampTZLiteral
            Literal holding microseconds since the epoch.
        """
        return cls(value=_datetime_to_micros(value), **common)


class UUIDLiteral(LiteralBase, tag=28):
    wire_name: ClassVar[str] = "uuid"

    value: bytes


class NullLiteral(LiteralBase, tag=29):
    """Typed null; nullability and variation are declared on ``type``."""

    wire_name: ClassVar[str] = "null"

    type: DataType | None = None


class ListLiteral(LiteralBase, tag=30):
    """Homogeneously typed sequence of literals."""

    wire_name: ClassVar[str] = "list"

    values: tuple[Literal, ...] = ()


class EmptyListLiteral(LiteralBase, tag=31):
    wire_name: ClassVar[str] = "empty_list"

    type: ListType | None = None


class EmptyMapLiteral(LiteralBase, tag=32):
    wire_name: ClassVar[str] = "empty_map"

    type: MapType | None = None


class AnyPayload(StructBaseCompat):
    """Self-describing opaque payload; never interpreted by this package."""

    type_url: str
    value: bytes = b""


class UserDefinedLiteral(LiteralBase, tag=33):
    """Escape hatch for engine-specific values."""

    wire_name: ClassVar[str] = "user_defined"

    type_reference: UInt32
    value: AnyPayload


Literal = (
    BooleanLiteral
    | ByteLiteral
    | ShortLiteral
    | IntegerLiteral
    | LongLiteral
    | FloatLiteral
    | DoubleLiteral
    | StringLiteral
    | BinaryLiteral
    | TimestampLiteral
    | DateLiteral
    | TimeLiteral
    | IntervalYearToMonthLiteral
    | IntervalDayToSecondLiteral
    | FixedCharLiteral
    | VarCharLiteral
    | FixedBinaryLiteral
    | DecimalLiteral
    | StructLiteral
    | MapLiteral
    | TimestampTZLiteral
    | UUIDLiteral
    | NullLiteral
    | ListLiteral
    | EmptyListLiteral
    | EmptyMapLiteral
    | UserDefinedLiteral
)

LITERAL_VARIANTS: tuple[type[LiteralBase], ...] = (
    BooleanLiteral,
    ByteLiteral,
    ShortLiteral,
    IntegerLiteral,
    LongLiteral,
    FloatLiteral,
    DoubleLiteral,
    StringLiteral,
    BinaryLiteral,
    TimestampLiteral,
    DateLiteral,
    TimeLiteral,
    IntervalYearToMonthLiteral,
    IntervalDayToSecondLiteral,
    FixedCharLiteral,
    VarCharLiteral,
    FixedBinaryLiteral,
    DecimalLiteral,
    StructLiteral,
    MapLiteral,
    TimestampTZLiteral,
    UUIDLiteral,
    NullLiteral,
    ListLiteral,
    EmptyListLiteral,
    EmptyMapLiteral,
    UserDefinedLiteral,
)


def encode_decimal_bytes(unscaled: int) -> bytes:
    """Encode an unscaled decimal as 16 little-endian two's-complement bytes.

    Returns
    -------
    bytes
        Fixed-width payload.

    Raises
    ------
    OverflowError
        Raised when the value does not fit in 128 bits.
    """
    return unscaled.to_bytes(DECIMAL_WIDTH, "little", signed=True)


def decode_decimal_bytes(payload: bytes) -> int:
    """Decode the 16-byte decimal payload into a signed integer.

    Returns
    -------
    int
        Unscaled value.
    """
    return int.from_bytes(payload, "little", signed=True)


def _datetime_to_micros(value: dt.datetime) -> int:
    if value.tzinfo is None:
        value = value.replace(tzinfo=dt.UTC)
    delta = value - _EPOCH
    return (delta.days * SECONDS_PER_DAY + delta.seconds) * MICROS_PER_SECOND + delta.microseconds


__all__ = [
    "DECIMAL_WIDTH",
    "LITERAL_VARIANTS",
    "MICROS_PER_DAY",
    "UUID_WIDTH",
    "AnyPayload",
    "BinaryLiteral",
    "BooleanLiteral",
    "ByteLiteral",
    "DateLiteral",
    "Decimal",
    "DecimalLiteral",
    "DoubleLiteral",
    "EmptyListLiteral",
    "EmptyMapLiteral",
    "FixedBinaryLiteral",
    "FixedCharLiteral",
    "FloatLiteral",
    "IntegerLiteral",
    "IntervalDayToSecond",
    "IntervalDayToSecondLiteral",
    "IntervalYearToMonth",
    "IntervalYearToMonthLiteral",
    "ListLiteral",
    "Literal",
    "LiteralBase",
    "LongLiteral",
    "MapKeyValue",
    "MapLiteral",
    "NullLiteral",
    "ShortLiteral",
    "StringLiteral",
    "StructLiteral",
    "TimeLiteral",
    "TimestampLiteral",
    "TimestampTZLiteral",
    "UUIDLiteral",
    "UserDefinedLiteral",
    "VarChar",
    "VarCharLiteral",
    "decode_decimal_bytes",
    "encode_decimal_bytes",
]
