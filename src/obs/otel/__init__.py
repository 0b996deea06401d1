"""OpenTelemetry helpers for planwire."""

from obs.otel.attributes import normalize_attributes
from obs.otel.scopes import SCOPE_CLI, SCOPE_CODEC, SCOPE_VALIDATION
from obs.otel.tracing import get_tracer, record_exception, set_span_attributes, stage_span

__all__ = [
    "SCOPE_CLI",
    "SCOPE_CODEC",
    "SCOPE_VALIDATION",
    "get_tracer",
    "normalize_attributes",
    "record_exception",
    "set_span_attributes",
    "stage_span",
]
