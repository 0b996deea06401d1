"""msgspec struct bases and the wire encoders shared by planwire."""

from __future__ import annotations

import functools
from typing import Literal

import msgspec

type WireFormat = Literal["msgpack", "json"]


class StructBaseStrict(
    msgspec.Struct,
    frozen=True,
    kw_only=True,
    omit_defaults=True,
    repr_omit_defaults=True,
    forbid_unknown_fields=True,
):
    """Frozen struct for local settings; unknown fields are an error."""


class StructBaseCompat(
    msgspec.Struct,
    frozen=True,
    kw_only=True,
    omit_defaults=True,
    repr_omit_defaults=True,
    forbid_unknown_fields=False,
):
    """Frozen wire struct; fields added by newer peers are skipped on decode."""


# Deterministic map ordering keeps encodings byte-stable across runs.
MSGPACK_ENCODER = msgspec.msgpack.Encoder(order="deterministic")
JSON_ENCODER = msgspec.json.Encoder(order="deterministic")

_LOCATION_MARKER = " - at `"


def dumps_msgpack(obj: object) -> bytes:
    """Encode ``obj`` as MessagePack with deterministic map order.

    Returns
    -------
    bytes
        MessagePack payload.
    """
    return MSGPACK_ENCODER.encode(obj)


def dumps_json(obj: object, *, pretty: bool = False) -> bytes:
    """Encode ``obj`` as compact JSON, or indented when ``pretty`` is set.

    Returns
    -------
    bytes
        JSON payload.
    """
    raw = JSON_ENCODER.encode(obj)
    return msgspec.json.format(raw, indent=2) if pretty else raw


def loads_untyped(data: bytes | str, *, wire_format: WireFormat) -> object:
    """Decode a payload into builtin types without a schema.

    Returns
    -------
    object
        Builtin value tree (dicts, lists and scalars).
    """
    if wire_format == "json":
        return msgspec.json.decode(data)
    return msgspec.msgpack.decode(data)


@functools.cache
def typed_decoder[T](
    target_type: type[T],
    wire_format: WireFormat,
) -> msgspec.msgpack.Decoder[T] | msgspec.json.Decoder[T]:
    """Return a cached decoder for ``target_type`` in the given wire format.

    Returns
    -------
    msgspec.msgpack.Decoder | msgspec.json.Decoder
        Reusable typed decoder.
    """
    if wire_format == "json":
        return msgspec.json.Decoder(target_type)
    return msgspec.msgpack.Decoder(target_type)


def validation_error_payload(exc: msgspec.ValidationError) -> dict[str, str]:
    """Split a msgspec validation message into its summary and location.

    msgspec reports errors as ``"<summary> - at `$.root.input`"``; the
    location part is absent for errors at the top level.

    Returns
    -------
    dict[str, str]
        ``type`` and ``summary``, plus ``path`` when msgspec gave one.
    """
    message = str(exc).strip()
    payload = {"type": type(exc).__name__}
    summary, marker, rest = message.rpartition(_LOCATION_MARKER)
    if marker and rest.endswith("`"):
        payload["summary"] = summary.strip()
        payload["path"] = rest[:-1]
    else:
        payload["summary"] = message
    return payload


__all__ = [
    "JSON_ENCODER",
    "MSGPACK_ENCODER",
    "StructBaseCompat",
    "StructBaseStrict",
    "WireFormat",
    "dumps_json",
    "dumps_msgpack",
    "loads_untyped",
    "typed_decoder",
    "validation_error_payload",
]
