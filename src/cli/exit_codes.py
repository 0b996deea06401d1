"""Exit code taxonomy for the planwire CLI."""

from __future__ import annotations

from enum import IntEnum

from plan_ir.errors import (
    ArityError,
    DecodeError,
    DepthExceededError,
    OneofMultiSetError,
    OneofUnsetError,
    PlanError,
    RangeError,
    SemanticConflictError,
    StructuralError,
    UnsupportedVariantError,
)


class ExitCode(IntEnum):
    """Standard exit codes for CLI commands.

    Exit codes follow Unix conventions with domain-specific extensions:
    - 0: Success
    - 1-9: General errors (parse, validation, config)
    - 10-19: Wire decoding errors
    - 20-29: Plan validation errors
    """

    SUCCESS = 0
    GENERAL_ERROR = 1
    PARSE_ERROR = 2
    VALIDATION_ERROR = 3
    CONFIG_ERROR = 4

    # Wire decoding errors (10-19)
    DECODE_ERROR = 10
    UNSUPPORTED_VARIANT = 11
    ONEOF_ERROR = 12
    DEPTH_EXCEEDED = 13

    # Plan validation errors (20-29)
    STRUCTURAL_ERROR = 20
    SEMANTIC_CONFLICT = 21
    ARITY_ERROR = 22
    RANGE_ERROR = 23

    @classmethod
    def from_exception(cls, exc: BaseException) -> ExitCode:
        """Map an exception to an appropriate exit code.

        Parameters
        ----------
        exc
            Exception to classify.

        Returns
        -------
        ExitCode
            Exit code appropriate for the exception type.
        """
        cyclopts_code = _exit_code_for_cyclopts(exc)
        if cyclopts_code is not None:
            return cyclopts_code

        plan_code = _exit_code_for_plan_error(exc)
        if plan_code is not None:
            return plan_code

        type_code = _exit_code_for_exception_type(exc)
        if type_code is not None:
            return type_code

        return cls.GENERAL_ERROR


# Subclasses precede their bases.
_PLAN_ERROR_CODES: tuple[tuple[type[PlanError], ExitCode], ...] = (
    (UnsupportedVariantError, ExitCode.UNSUPPORTED_VARIANT),
    (DecodeError, ExitCode.DECODE_ERROR),
    (OneofUnsetError, ExitCode.ONEOF_ERROR),
    (OneofMultiSetError, ExitCode.ONEOF_ERROR),
    (DepthExceededError, ExitCode.DEPTH_EXCEEDED),
    (StructuralError, ExitCode.STRUCTURAL_ERROR),
    (SemanticConflictError, ExitCode.SEMANTIC_CONFLICT),
    (ArityError, ExitCode.ARITY_ERROR),
    (RangeError, ExitCode.RANGE_ERROR),
)


def _exit_code_for_cyclopts(exc: BaseException) -> ExitCode | None:
    module = exc.__class__.__module__
    if not module.startswith("cyclopts"):
        return None
    if exc.__class__.__name__ == "ValidationError":
        return ExitCode.VALIDATION_ERROR
    return ExitCode.PARSE_ERROR


def _exit_code_for_plan_error(exc: BaseException) -> ExitCode | None:
    if not isinstance(exc, PlanError):
        return None
    for error_type, exit_code in _PLAN_ERROR_CODES:
        if isinstance(exc, error_type):
            return exit_code
    return ExitCode.VALIDATION_ERROR


def _exit_code_for_exception_type(exc: BaseException) -> ExitCode | None:
    if isinstance(exc, (ValueError, TypeError)):
        return ExitCode.VALIDATION_ERROR
    if isinstance(exc, (FileNotFoundError, FileExistsError, PermissionError, IsADirectoryError)):
        return ExitCode.CONFIG_ERROR
    return None


__all__ = ["ExitCode"]
