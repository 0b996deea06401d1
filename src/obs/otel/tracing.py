"""Stage spans around the codec, validation and CLI entry points."""

from __future__ import annotations

import time
from collections.abc import Iterator, Mapping
from contextlib import contextmanager

from opentelemetry import trace
from opentelemetry.trace import Span, Status, StatusCode

from obs.otel.attributes import normalize_attributes
from obs.otel.scope_metadata import instrumentation_schema_url, instrumentation_version

STAGE_ATTRIBUTE = "planwire.stage"


def get_tracer(scope_name: str) -> trace.Tracer:
    """Return the tracer of an instrumentation scope.

    Resolved on every call so a provider installed after import is used.

    Returns
    -------
    opentelemetry.trace.Tracer
        Tracer for ``scope_name``.
    """
    return trace.get_tracer(
        scope_name,
        instrumenting_library_version=instrumentation_version() or "unknown",
        schema_url=instrumentation_schema_url(),
    )


def set_span_attributes(span: Span, attrs: Mapping[str, object] | None) -> None:
    """Normalize ``attrs`` and set them on ``span``."""
    span.set_attributes(normalize_attributes(attrs))


def record_exception(span: Span, exc: BaseException) -> None:
    """Attach ``exc`` as a span event and mark the span failed."""
    span.record_exception(exc)
    span.set_status(Status(StatusCode.ERROR, description=type(exc).__name__))


@contextmanager
def stage_span(
    name: str,
    *,
    stage: str,
    scope_name: str,
    attributes: Mapping[str, object] | None = None,
) -> Iterator[Span]:
    """Run the body inside a span tagged with its stage.

    On exit the span gets ``status`` (``ok`` or ``error``) and
    ``duration_s``. Exceptions are recorded on the span and re-raised.

    Yields
    ------
    Span
        The active span.
    """
    started = time.monotonic()
    outcome = "error"
    span_attrs = normalize_attributes({STAGE_ATTRIBUTE: stage, **(attributes or {})})
    with get_tracer(scope_name).start_as_current_span(
        name,
        attributes=span_attrs,
        record_exception=False,
        set_status_on_exception=False,
    ) as span:
        try:
            yield span
            outcome = "ok"
        except Exception as exc:
            record_exception(span, exc)
            raise
        finally:
            span.set_attributes({"status": outcome, "duration_s": time.monotonic() - started})


__all__ = [
    "STAGE_ATTRIBUTE",
    "get_tracer",
    "record_exception",
    "set_span_attributes",
    "stage_span",
]
