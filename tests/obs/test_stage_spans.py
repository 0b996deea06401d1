"""Tests for the spans emitted by the codec, validation layer and CLI."""

from __future__ import annotations

from pathlib import Path

import pytest
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter
from opentelemetry.trace import StatusCode

from cli.app import meta_launcher
from obs.otel import SCOPE_CLI, SCOPE_CODEC, SCOPE_VALIDATION, normalize_attributes
from plan_ir.codec import decode, encode, encode_json
from plan_ir.errors import DecodeError, SemanticConflictError
from plan_ir.expressions import call, col
from plan_ir.relations import Join, JoinType, NamedTable, Plan, Read
from plan_ir.validation import validate


def _spans(exporter: InMemorySpanExporter, name: str) -> list:
    return [span for span in exporter.get_finished_spans() if span.name == name]


def test_codec_spans(span_exporter: InMemorySpanExporter, sample_plan: Plan) -> None:
    """Ensure encode and decode each emit one stage span."""
    payload = encode(sample_plan)
    decode(payload)
    (encode_span,) = _spans(span_exporter, "plan_ir.encode")
    (decode_span,) = _spans(span_exporter, "plan_ir.decode")
    assert encode_span.instrumentation_scope.name == SCOPE_CODEC
    assert encode_span.attributes["planwire.stage"] == "encode"
    assert encode_span.attributes["planwire.format"] == "msgpack"
    assert encode_span.attributes["planwire.bytes"] == len(payload)
    assert decode_span.attributes["planwire.root"] == "limit"
    assert decode_span.attributes["status"] == "ok"


def test_decode_failure_marks_span(span_exporter: InMemorySpanExporter) -> None:
    """Ensure failed decodes record the error on the span."""
    with pytest.raises(DecodeError):
        decode(b"\xc1")
    (span,) = _spans(span_exporter, "plan_ir.decode")
    assert span.status.status_code is StatusCode.ERROR
    assert span.attributes["status"] == "error"
    assert any(event.name == "exception" for event in span.events)


def test_validate_span_records_rule(span_exporter: InMemorySpanExporter) -> None:
    """Ensure a rejected plan tags the validation span with the rule."""
    plan = Plan(
        root=Join(
            left=Read(read_type=NamedTable(unparsed_identifier="t")),
            right=Read(read_type=NamedTable(unparsed_identifier="u")),
            join_type=JoinType.INNER,
            join_condition=call("=", col("t.id"), col("u.id")),
            using_columns=("id",),
        )
    )
    with pytest.raises(SemanticConflictError):
        validate(plan)
    (span,) = _spans(span_exporter, "plan_ir.validate")
    assert span.instrumentation_scope.name == SCOPE_VALIDATION
    assert span.attributes["planwire.rule"] == "join_condition_using_columns_exclusive"
    assert span.status.status_code is StatusCode.ERROR


def test_cli_span_records_exit_code(
    span_exporter: InMemorySpanExporter, tmp_path: Path, sample_plan: Plan
) -> None:
    """Ensure CLI invocations run inside a span carrying the exit code."""
    source = tmp_path / "plan.json"
    source.write_bytes(encode_json(sample_plan))
    assert meta_launcher("validate", str(source)) == 0
    (span,) = _spans(span_exporter, "cli.command")
    assert span.instrumentation_scope.name == SCOPE_CLI
    assert span.attributes["cli.command"] == "validate"
    assert span.attributes["cli.exit_code"] == 0
    decode_spans = _spans(span_exporter, "plan_ir.decode")
    assert decode_spans
    assert decode_spans[0].parent is not None
    assert decode_spans[0].parent.span_id == span.context.span_id


def test_normalize_attributes() -> None:
    """Ensure attribute values are coerced to OpenTelemetry types."""
    attrs = normalize_attributes(
        {"a": b"\x01\x02", "b": {"k": 1}, "c": [1, 2.5], "d": None, "e": Path("x")}
    )
    assert attrs["a"] == "0102"
    assert attrs["b"] == '{"k":1}'
    assert attrs["c"] == [1.0, 2.5]
    assert "d" not in attrs
    assert attrs["e"] == "x"
