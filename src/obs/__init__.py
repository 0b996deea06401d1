"""Observability helpers for planwire."""

from obs.otel import stage_span

__all__ = ["stage_span"]
