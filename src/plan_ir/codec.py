"""MessagePack and JSON codec for plans.

``encode`` writes the tagged-union tree with msgspec. ``decode`` runs in
three passes:

1. an untyped decode that only checks the payload is well-formed,
2. an iterative prescan over the builtin tree that rejects unknown or
   reserved variant tags and excessive nesting with a precise plan path,
3. a typed decode into ``Plan`` whose field errors are mapped onto the
   plan error hierarchy.

No pass recurses in Python, so hostile nesting is reported as
``DepthExceededError`` rather than crashing the interpreter.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from typing import cast

import msgspec

from obs.otel import SCOPE_CODEC, stage_span
from plan_ir.config import PlanIRConfig, resolve_config
from plan_ir.errors import (
    DecodeError,
    DepthExceededError,
    OneofUnsetError,
    PlanError,
    UnsupportedVariantError,
)
from plan_ir.oneof import UNIONS_BY_TAG_FIELD, UnionSpec, wire_name
from plan_ir.paths import ROOT_PATH, PlanPath, extend_path, join_label
from plan_ir.relations import RESERVED_TAGS, WIRE_VERSION, Plan
from plan_ir.traversal import node_name, walk
from serde_msgspec import (
    WireFormat,
    dumps_json,
    dumps_msgpack,
    loads_untyped,
    typed_decoder,
    validation_error_payload,
)
from utils.hashing import canonical_digest

logger = logging.getLogger(__name__)

_PATH_TOKEN_RE = re.compile(r"\.([A-Za-z_][A-Za-z0-9_]*)|\[(\d+)\]")
_MISSING_FIELD_RE = re.compile(r"missing required field `(?P<field>[^`]+)`")
_BASE_TYPES = frozenset(spec.base for spec in UNIONS_BY_TAG_FIELD.values() if spec.base is not None)


def encode(plan: Plan, *, config: PlanIRConfig | None = None) -> bytes:
    """Encode a plan as MessagePack bytes.

    Parameters
    ----------
    plan
        Plan to encode.
    config
        Optional limits; defaults to ``PlanIRConfig()``.

    Returns
    -------
    bytes
        Wire payload.
    """
    return _encode(plan, wire_format="msgpack", config=config)


def encode_json(
    plan: Plan,
    *,
    config: PlanIRConfig | None = None,
    pretty: bool = False,
) -> bytes:
    """Encode a plan as JSON bytes for inspection and fixtures.

    Returns
    -------
    bytes
        JSON payload; binary fields are base64 text.
    """
    return _encode(plan, wire_format="json", config=config, pretty=pretty)


def decode(data: bytes, *, config: PlanIRConfig | None = None) -> Plan:
    """Decode MessagePack bytes into a plan.

    Parameters
    ----------
    data
        Wire payload.
    config
        Optional limits; defaults to ``PlanIRConfig()``.

    Returns
    -------
    Plan
        Decoded plan. Decoding does not run the validation layer.
    """
    return _decode(data, wire_format="msgpack", config=config)


def decode_json(data: bytes | str, *, config: PlanIRConfig | None = None) -> Plan:
    """Decode JSON text produced by ``encode_json``.

    Returns
    -------
    Plan
        Decoded plan.
    """
    payload = data.encode("utf-8") if isinstance(data, str) else data
    return _decode(payload, wire_format="json", config=config)


def plan_fingerprint(plan: Plan) -> str:
    """Return the SHA-256 hex digest of the canonical MessagePack encoding.

    Returns
    -------
    str
        Stable fingerprint; equal plans share a fingerprint.
    """
    return canonical_digest(plan)


def _encode(
    plan: Plan,
    *,
    wire_format: WireFormat,
    config: PlanIRConfig | None,
    pretty: bool = False,
) -> bytes:
    cfg = resolve_config(config)
    attrs = {"planwire.format": wire_format, "planwire.max_depth": cfg.max_depth}
    with stage_span("plan_ir.encode", stage="encode", scope_name=SCOPE_CODEC, attributes=attrs) as span:
        if not isinstance(plan, Plan):
            msg = f"Expected a Plan, got {type(plan).__name__}."
            raise TypeError(msg)
        _check_encodable(plan, max_depth=cfg.max_depth)
        try:
            payload = dumps_msgpack(plan) if wire_format == "msgpack" else dumps_json(plan, pretty=pretty)
        except RecursionError as exc:
            msg = "Plan nesting exceeds the interpreter recursion limit during encoding."
            raise DepthExceededError(msg) from exc
        span.set_attribute("planwire.bytes", len(payload))
        span.set_attribute("planwire.root", node_name(plan.root))
    logger.debug("Encoded %s plan (%d bytes, root=%s).", wire_format, len(payload), node_name(plan.root))
    return payload


def _check_encodable(plan: Plan, *, max_depth: int) -> None:
    for node, path, _ in walk(plan.root, max_depth=max_depth):
        if type(node) in _BASE_TYPES:
            msg = f"{wire_name(type(node)).capitalize()} holds no variant."
            raise OneofUnsetError(msg, path=path, rule=f"{wire_name(type(node))}_oneof")


def _decode(data: bytes, *, wire_format: WireFormat, config: PlanIRConfig | None) -> Plan:
    cfg = resolve_config(config)
    attrs = {
        "planwire.format": wire_format,
        "planwire.max_depth": cfg.max_depth,
        "planwire.bytes": len(data),
    }
    with stage_span("plan_ir.decode", stage="decode", scope_name=SCOPE_CODEC, attributes=attrs) as span:
        raw = _decode_untyped(data, wire_format=wire_format)
        _check_envelope(raw)
        if isinstance(raw, Mapping) and "root" in raw:
            _prescan(raw["root"], max_depth=cfg.max_depth)
        plan = _decode_typed(data, raw, wire_format=wire_format)
        span.set_attribute("planwire.root", node_name(plan.root))
    logger.debug("Decoded %s plan (%d bytes, root=%s).", wire_format, len(data), node_name(plan.root))
    return plan


def _decode_untyped(data: bytes, *, wire_format: WireFormat) -> object:
    try:
        return loads_untyped(data, wire_format=wire_format)
    except RecursionError as exc:
        msg = "Payload nesting exceeds the interpreter recursion limit."
        raise DepthExceededError(msg) from exc
    except msgspec.DecodeError as exc:
        msg = f"Malformed {wire_format} payload: {exc}."
        raise DecodeError(msg, rule="malformed_payload") from exc


def _check_envelope(raw: object) -> None:
    if not isinstance(raw, Mapping):
        msg = f"Plan payload must be a map, got {type(raw).__name__}."
        raise DecodeError(msg, rule="plan_envelope")
    version = raw.get("version", WIRE_VERSION)
    if isinstance(version, bool) or version != WIRE_VERSION:
        msg = f"Unsupported wire version {version!r}; this build reads version {WIRE_VERSION}."
        raise DecodeError(msg, rule="wire_version")


def _node_tag(value: object) -> tuple[UnionSpec, int] | None:
    """Return the union and tag of an untyped node map.

    Returns
    -------
    tuple[UnionSpec, int] | None
        Union spec and integer tag, or ``None`` for plain containers.
    """
    if not isinstance(value, Mapping):
        return None
    for tag_field, spec in UNIONS_BY_TAG_FIELD.items():
        tag = value.get(tag_field)
        if isinstance(tag, int) and not isinstance(tag, bool):
            return spec, tag
    return None


def _untyped_variant_name(spec: UnionSpec, tag: int) -> str:
    cls = spec.by_tag.get(tag)
    return f"{spec.label}<{tag}>" if cls is None else wire_name(cls)


def _prescan(root: object, *, max_depth: int) -> None:
    stack: list[tuple[object, PlanPath, str | None, int]] = [(root, ROOT_PATH, None, 0)]
    while stack:
        value, path, via, depth = stack.pop()
        children: list[tuple[object, PlanPath, str | None, int]] = []
        tagged = _node_tag(value)
        if tagged is not None:
            spec, tag = tagged
            node_path = extend_path(path, _untyped_variant_name(spec, tag), via, tag=tag)
            if tag not in spec.by_tag:
                reserved = tag in RESERVED_TAGS.get(spec.tag_field, frozenset())
                state = "reserved" if reserved else "not supported by this build"
                msg = f"{spec.label.capitalize()} tag {tag} is {state}."
                raise UnsupportedVariantError(msg, path=node_path, location=spec.tag_field)
            if depth + 1 > max_depth:
                msg = f"Plan nesting exceeds the maximum depth of {max_depth}."
                raise DepthExceededError(msg, path=node_path)
            node = cast("Mapping[str, object]", value)
            children.extend(
                (item, node_path, key, depth + 1)
                for key, item in node.items()
                if key != spec.tag_field
            )
        elif isinstance(value, Mapping):
            children.extend((item, path, join_label(via, str(key)), depth) for key, item in value.items())
        elif isinstance(value, list):
            children.extend(
                (item, path, join_label(via, f"[{index}]"), depth) for index, item in enumerate(value)
            )
        stack.extend(reversed(children))


def _decode_typed(data: bytes, raw: object, *, wire_format: WireFormat) -> Plan:
    try:
        plan = typed_decoder(Plan, wire_format).decode(data)
    except RecursionError as exc:
        msg = "Payload nesting exceeds the interpreter recursion limit."
        raise DepthExceededError(msg) from exc
    except msgspec.ValidationError as exc:
        raise _translate_validation_error(exc, raw) from exc
    except msgspec.DecodeError as exc:
        msg = f"Malformed {wire_format} payload: {exc}."
        raise DecodeError(msg, rule="malformed_payload") from exc
    return plan


def _translate_validation_error(exc: msgspec.ValidationError, raw: object) -> PlanError:
    payload = validation_error_payload(exc)
    summary = payload.get("summary", str(exc))
    location = payload.get("path")
    missing = _MISSING_FIELD_RE.search(summary)
    unset_union = None if missing is None else UNIONS_BY_TAG_FIELD.get(missing.group("field"))
    path = _plan_path_for(raw, location, unset_union=unset_union)
    if unset_union is not None:
        msg = f"{unset_union.label.capitalize()} holds no variant ({summary})."
        return OneofUnsetError(msg, path=path, rule=f"{unset_union.label}_oneof", location=location)
    msg = f"Payload does not match the plan schema: {summary}."
    return DecodeError(msg, path=path, rule="schema_mismatch", location=location)


def _plan_path_for(
    raw: object,
    location: str | None,
    *,
    unset_union: UnionSpec | None = None,
) -> PlanPath:
    """Translate a msgspec ``$.root.input`` location into a plan path.

    Returns
    -------
    PlanPath
        Path of the deepest node on the location, extended with the unset
        slot when ``unset_union`` is given.
    """
    if not location or not location.startswith("$"):
        return ROOT_PATH
    path: PlanPath = ROOT_PATH
    via: str | None = None
    value = raw
    for match in _PATH_TOKEN_RE.finditer(location, 1):
        key, index = match.group(1), match.group(2)
        if key is not None and isinstance(value, Mapping) and key in value:
            value = value[key]
            label = key
        elif index is not None and isinstance(value, list) and int(index) < len(value):
            value = value[int(index)]
            label = f"[{index}]"
        else:
            break
        via = None if not path and label == "root" else join_label(via, label)
        tagged = _node_tag(value)
        if tagged is not None:
            spec, tag = tagged
            path = extend_path(path, _untyped_variant_name(spec, tag), via, tag=tag)
            via = None
    if unset_union is not None and isinstance(value, Mapping) and _node_tag(value) is None:
        path = extend_path(path, unset_union.label, via)
    return path


__all__ = [
    "decode",
    "decode_json",
    "encode",
    "encode_json",
    "plan_fingerprint",
]
