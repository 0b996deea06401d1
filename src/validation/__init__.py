"""Validation utilities and shared violation types."""

from validation.violations import PlanViolation, ViolationType

__all__ = ["PlanViolation", "ViolationType"]
