"""Wire-level intermediate representation for relational query plans."""

from __future__ import annotations

import importlib
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from plan_ir.arrow_types import (
        attributes_from_schema,
        attributes_to_schema,
        from_arrow_type,
        to_arrow_type,
    )
    from plan_ir.codec import decode, decode_json, encode, encode_json, plan_fingerprint
    from plan_ir.config import PlanIRConfig
    from plan_ir.errors import (
        ArityError,
        DecodeError,
        DepthExceededError,
        OneofMultiSetError,
        OneofUnsetError,
        PlanError,
        PlanValidationError,
        RangeError,
        SemanticConflictError,
        StructuralError,
        UnsupportedVariantError,
    )
    from plan_ir.oneof import build_expression, build_literal, build_read_type, build_relation
    from plan_ir.paths import PathSegment, PlanPath, render_path
    from plan_ir.relations import WIRE_VERSION, Plan, Relation
    from plan_ir.render import render_plan
    from plan_ir.validation import check_plan, validate

__all__ = [
    "WIRE_VERSION",
    "ArityError",
    "DecodeError",
    "DepthExceededError",
    "OneofMultiSetError",
    "OneofUnsetError",
    "PathSegment",
    "Plan",
    "PlanError",
    "PlanIRConfig",
    "PlanPath",
    "PlanValidationError",
    "RangeError",
    "Relation",
    "SemanticConflictError",
    "StructuralError",
    "UnsupportedVariantError",
    "attributes_from_schema",
    "attributes_to_schema",
    "build_expression",
    "build_literal",
    "build_read_type",
    "build_relation",
    "check_plan",
    "decode",
    "decode_json",
    "encode",
    "encode_json",
    "from_arrow_type",
    "plan_fingerprint",
    "render_path",
    "render_plan",
    "to_arrow_type",
    "validate",
]

_EXPORT_MAP: dict[str, tuple[str, str]] = {
    "WIRE_VERSION": ("plan_ir.relations", "WIRE_VERSION"),
    "ArityError": ("plan_ir.errors", "ArityError"),
    "DecodeError": ("plan_ir.errors", "DecodeError"),
    "DepthExceededError": ("plan_ir.errors", "DepthExceededError"),
    "OneofMultiSetError": ("plan_ir.errors", "OneofMultiSetError"),
    "OneofUnsetError": ("plan_ir.errors", "OneofUnsetError"),
    "PathSegment": ("plan_ir.paths", "PathSegment"),
    "Plan": ("plan_ir.relations", "Plan"),
    "PlanError": ("plan_ir.errors", "PlanError"),
    "PlanIRConfig": ("plan_ir.config", "PlanIRConfig"),
    "PlanPath": ("plan_ir.paths", "PlanPath"),
    "PlanValidationError": ("plan_ir.errors", "PlanValidationError"),
    "RangeError": ("plan_ir.errors", "RangeError"),
    "Relation": ("plan_ir.relations", "Relation"),
    "SemanticConflictError": ("plan_ir.errors", "SemanticConflictError"),
    "StructuralError": ("plan_ir.errors", "StructuralError"),
    "UnsupportedVariantError": ("plan_ir.errors", "UnsupportedVariantError"),
    "attributes_from_schema": ("plan_ir.arrow_types", "attributes_from_schema"),
    "attributes_to_schema": ("plan_ir.arrow_types", "attributes_to_schema"),
    "build_expression": ("plan_ir.oneof", "build_expression"),
    "build_literal": ("plan_ir.oneof", "build_literal"),
    "build_read_type": ("plan_ir.oneof", "build_read_type"),
    "build_relation": ("plan_ir.oneof", "build_relation"),
    "check_plan": ("plan_ir.validation", "check_plan"),
    "decode": ("plan_ir.codec", "decode"),
    "decode_json": ("plan_ir.codec", "decode_json"),
    "encode": ("plan_ir.codec", "encode"),
    "encode_json": ("plan_ir.codec", "encode_json"),
    "from_arrow_type": ("plan_ir.arrow_types", "from_arrow_type"),
    "plan_fingerprint": ("plan_ir.codec", "plan_fingerprint"),
    "render_path": ("plan_ir.paths", "render_path"),
    "render_plan": ("plan_ir.render", "render_plan"),
    "to_arrow_type": ("plan_ir.arrow_types", "to_arrow_type"),
    "validate": ("plan_ir.validation", "validate"),
}


def __getattr__(name: str) -> object:
    export = _EXPORT_MAP.get(name)
    if export is None:
        msg = f"module {__name__!r} has no attribute {name!r}"
        raise AttributeError(msg)
    module_name, attr_name = export
    module = importlib.import_module(module_name)
    value = getattr(module, attr_name)
    globals()[name] = value
    return value


def __dir__() -> list[str]:
    return sorted(__all__)
