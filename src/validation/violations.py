"""Plan rule violations and their mapping onto plan errors."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from plan_ir.errors import (
    ArityError,
    OneofUnsetError,
    PlanError,
    RangeError,
    SemanticConflictError,
    StructuralError,
)
from plan_ir.paths import ROOT_PATH, PlanPath, render_path


class ViolationType(Enum):
    """Types of plan violations."""

    ONEOF_UNSET = "oneof_unset"
    MISSING_VALUE = "missing_value"
    INVALID_VALUE = "invalid_value"
    UNRESOLVED_ANCHOR = "unresolved_anchor"
    CONFLICT = "conflict"
    ARITY_MISMATCH = "arity_mismatch"
    DUPLICATE_VALUES = "duplicate_values"
    OUT_OF_RANGE = "out_of_range"
    HETEROGENEOUS = "heterogeneous"


@dataclass(frozen=True)
class PlanViolation:
    """Single rule violation found at a node of a plan tree.

    ``field`` names the offending field of the node, ``expected`` and
    ``actual`` describe the rule bound and the observed value and ``other``
    names the conflicting field for conflicts.
    """

    violation_type: ViolationType
    rule: str
    path: PlanPath = ROOT_PATH
    field: str | None = None
    expected: str | None = None
    actual: str | None = None
    other: str | None = None
    detail: str | None = None

    def __str__(self) -> str:
        """Return a human-readable violation message.

        Returns
        -------
        str
            Human-readable violation message.
        """
        formatter = _VIOLATION_FORMATTERS.get(self.violation_type, _default_violation_message)
        message = formatter(self)
        if self.detail:
            return f"{message}: {self.detail}"
        return message

    def to_error(self) -> PlanError:
        """Return the plan error raised for this violation.

        Returns
        -------
        PlanError
            Error of the class matching the violation type.
        """
        error_type = _VIOLATION_ERRORS[self.violation_type]
        return error_type(str(self), path=self.path, rule=self.rule)

    def to_payload(self) -> dict[str, object]:
        """Return a JSON-friendly description of the violation.

        Returns
        -------
        dict[str, object]
            Violation type, error class, rule, message and path.
        """
        return {
            "type": self.violation_type.value,
            "error": _VIOLATION_ERRORS[self.violation_type].__name__,
            "rule": self.rule,
            "message": str(self),
            "path": render_path(self.path),
        }


def _default_violation_message(violation: PlanViolation) -> str:
    return f"Plan violation: {violation.violation_type.value}"


def _field_name(violation: PlanViolation) -> str:
    return f"'{violation.field}'" if violation.field else "value"


def _format_oneof_unset(violation: PlanViolation) -> str:
    return f"No variant set for {_field_name(violation)}"


def _format_missing_value(violation: PlanViolation) -> str:
    return f"Missing required {_field_name(violation)}"


def _format_invalid_value(violation: PlanViolation) -> str:
    if violation.expected is not None:
        return (
            f"Invalid {_field_name(violation)}: "
            f"expected {violation.expected}, got {violation.actual}"
        )
    return f"Invalid {_field_name(violation)}"


def _format_unresolved_anchor(violation: PlanViolation) -> str:
    return (
        f"Extension anchor {violation.actual} for {_field_name(violation)} "
        f"is not declared as {violation.expected}"
    )


def _format_conflict(violation: PlanViolation) -> str:
    return f"Fields {_field_name(violation)} and '{violation.other}' are mutually exclusive"


def _format_arity_mismatch(violation: PlanViolation) -> str:
    return (
        f"Arity mismatch for {_field_name(violation)}: "
        f"expected {violation.expected}, got {violation.actual}"
    )


def _format_duplicate_values(violation: PlanViolation) -> str:
    return f"Duplicate values in {_field_name(violation)}: {violation.actual}"


def _format_out_of_range(violation: PlanViolation) -> str:
    return (
        f"Value out of range for {_field_name(violation)}: "
        f"expected {violation.expected}, got {violation.actual}"
    )


def _format_heterogeneous(violation: PlanViolation) -> str:
    return f"Mixed literal kinds in {_field_name(violation)}: {violation.actual}"


_VIOLATION_FORMATTERS: dict[ViolationType, Callable[[PlanViolation], str]] = {
    ViolationType.ONEOF_UNSET: _format_oneof_unset,
    ViolationType.MISSING_VALUE: _format_missing_value,
    ViolationType.INVALID_VALUE: _format_invalid_value,
    ViolationType.UNRESOLVED_ANCHOR: _format_unresolved_anchor,
    ViolationType.CONFLICT: _format_conflict,
    ViolationType.ARITY_MISMATCH: _format_arity_mismatch,
    ViolationType.DUPLICATE_VALUES: _format_duplicate_values,
    ViolationType.OUT_OF_RANGE: _format_out_of_range,
    ViolationType.HETEROGENEOUS: _format_heterogeneous,
}

_VIOLATION_ERRORS: dict[ViolationType, type[PlanError]] = {
    ViolationType.ONEOF_UNSET: OneofUnsetError,
    ViolationType.MISSING_VALUE: StructuralError,
    ViolationType.INVALID_VALUE: StructuralError,
    ViolationType.UNRESOLVED_ANCHOR: StructuralError,
    ViolationType.CONFLICT: SemanticConflictError,
    ViolationType.ARITY_MISMATCH: ArityError,
    ViolationType.DUPLICATE_VALUES: ArityError,
    ViolationType.OUT_OF_RANGE: RangeError,
    ViolationType.HETEROGENEOUS: SemanticConflictError,
}


__all__ = ["PlanViolation", "ViolationType"]
