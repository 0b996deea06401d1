"""Error types raised by the plan codec and validation layer.

Every error carries the root-to-node path of the offending node and the code
of the rule that was violated. Nothing in this package repairs a plan: a
raised error is terminal for the plan instance.
"""

from __future__ import annotations

from plan_ir.paths import ROOT_PATH, PlanPath, render_path


class PlanError(ValueError):
    """Base class for plan IR errors."""

    default_rule: str = "plan_error"

    def __init__(
        self,
        message: str,
        *,
        path: PlanPath = ROOT_PATH,
        rule: str | None = None,
        location: str | None = None,
    ) -> None:
        self.message = message
        self.path = path
        self.rule = rule or self.default_rule
        self.location = location
        super().__init__(self._format())

    def _format(self) -> str:
        text = f"{self.message} [rule={self.rule}] at {render_path(self.path)}"
        if self.location is not None:
            text = f"{text} (wire location {self.location})"
        return text

    def to_payload(self) -> dict[str, object]:
        """Return a JSON-friendly description of the error.

        Returns
        -------
        dict[str, object]
            Error class, rule code, message and path.
        """
        payload: dict[str, object] = {
            "type": self.__class__.__name__,
            "rule": self.rule,
            "message": self.message,
            "path": render_path(self.path),
        }
        if self.location is not None:
            payload["location"] = self.location
        return payload


class DecodeError(PlanError):
    """Raised for malformed, truncated or mistyped wire payloads."""

    default_rule = "decode"


class UnsupportedVariantError(DecodeError):
    """Raised when a variant tag is newer than this build recognizes."""

    default_rule = "unsupported_variant"


class OneofUnsetError(PlanError):
    """Raised when a oneof slot holds no variant."""

    default_rule = "oneof_unset"


class OneofMultiSetError(PlanError):
    """Raised when more than one variant is supplied for a oneof slot."""

    default_rule = "oneof_multi_set"


class DepthExceededError(PlanError):
    """Raised when a tree nests deeper than the configured maximum."""

    default_rule = "max_depth"


class PlanValidationError(PlanError):
    """Base class for validation-layer rule violations."""

    default_rule = "validation"


class StructuralError(PlanValidationError):
    """Raised when a required child relation, expression or value is missing."""

    default_rule = "structural"


class SemanticConflictError(PlanValidationError):
    """Raised when mutually exclusive fields are both populated."""

    default_rule = "semantic_conflict"


class ArityError(PlanValidationError):
    """Raised when collection lengths or uniqueness constraints are violated."""

    default_rule = "arity"


class RangeError(PlanValidationError):
    """Raised when a scalar falls outside its allowed bounds."""

    default_rule = "range"


__all__ = [
    "ArityError",
    "DecodeError",
    "DepthExceededError",
    "OneofMultiSetError",
    "OneofUnsetError",
    "PlanError",
    "PlanValidationError",
    "RangeError",
    "SemanticConflictError",
    "StructuralError",
    "UnsupportedVariantError",
]
