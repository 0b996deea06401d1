"""Coercion of span attributes to OpenTelemetry value types."""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from opentelemetry.util.types import AttributeValue

from serde_msgspec import dumps_json
from utils.env_utils import env_int

_COUNT_LIMIT = env_int("OTEL_ATTRIBUTE_COUNT_LIMIT", minimum=0)
_LENGTH_LIMIT = env_int("OTEL_ATTRIBUTE_VALUE_LENGTH_LIMIT", minimum=0)

type _Scalar = str | bool | int | float


def _clip(text: str) -> str:
    return text if _LENGTH_LIMIT is None else text[:_LENGTH_LIMIT]


def _scalar(value: object) -> _Scalar:
    if isinstance(value, str):
        return _clip(value)
    if isinstance(value, (bool, int, float)):
        return value
    if isinstance(value, (bytes, bytearray, memoryview)):
        return _clip(bytes(value).hex())
    if isinstance(value, Mapping):
        return _clip(dumps_json(dict(value)).decode("utf-8"))
    return _clip(str(value))


def _homogeneous(items: list[_Scalar]) -> AttributeValue:
    # Attribute arrays must hold a single primitive type.
    if all(isinstance(item, bool) for item in items):
        return [bool(item) for item in items]
    numeric = [item for item in items if isinstance(item, (int, float)) and not isinstance(item, bool)]
    if len(numeric) == len(items):
        if all(isinstance(item, int) for item in numeric):
            return [int(item) for item in numeric]
        return [float(item) for item in numeric]
    return [item if isinstance(item, str) else _clip(str(item)) for item in items]


def _attribute_value(value: object) -> AttributeValue:
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        return _homogeneous([_scalar(item) for item in value if item is not None])
    return _scalar(value)


def normalize_attributes(attrs: Mapping[str, object] | None) -> dict[str, AttributeValue]:
    """Return ``attrs`` with values coerced to OpenTelemetry attribute types.

    ``None`` values are dropped, bytes become hex and mappings become JSON
    text. ``OTEL_ATTRIBUTE_VALUE_LENGTH_LIMIT`` clips strings and
    ``OTEL_ATTRIBUTE_COUNT_LIMIT`` keeps the alphabetically first keys.

    Returns
    -------
    dict[str, AttributeValue]
        Attributes safe to set on a span.
    """
    if not attrs:
        return {}
    normalized = {str(key): _attribute_value(value) for key, value in attrs.items() if value is not None}
    if _COUNT_LIMIT is None or len(normalized) <= _COUNT_LIMIT:
        return normalized
    return {key: normalized[key] for key in sorted(normalized)[:_COUNT_LIMIT]}


__all__ = ["normalize_attributes"]
