"""Shared fixtures for planwire tests."""

from __future__ import annotations

import pytest
from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

from plan_ir.expressions import Alias, call, col, lit
from plan_ir.literals import IntegerLiteral, StringLiteral
from plan_ir.relations import (
    Filter,
    Join,
    JoinType,
    Limit,
    NamedTable,
    Plan,
    Project,
    Read,
    Sort,
    SortDirection,
    SortField,
    SortNulls,
)

_SPAN_EXPORTER = InMemorySpanExporter()
_PROVIDER_STATE: dict[str, bool] = {"installed": False}


def read_table(name: str) -> Read:
    """Return a read of a named table.

    Returns
    -------
    Read
        Read relation.
    """
    return Read(read_type=NamedTable(unparsed_identifier=name))


def build_sample_plan() -> Plan:
    """Return a small valid plan touching joins, filters, sorts and limits.

    Returns
    -------
    Plan
        Valid plan.
    """
    join = Join(
        left=read_table("orders"),
        right=read_table("customers"),
        join_type=JoinType.INNER,
        using_columns=("customer_id",),
    )
    condition = call(">", col("amount"), lit(IntegerLiteral(value=100)))
    project = Project(
        input=Filter(input=join, condition=condition),
        expressions=(
            col("customer_id"),
            Alias(expr=call("upper", col("name")), name=("name_upper",)),
            lit(StringLiteral(value="vip", nullable=True)),
        ),
    )
    ordered = Sort(
        input=project,
        sort_fields=(
            SortField(
                expression=col("customer_id"),
                direction=SortDirection.ASCENDING,
                nulls=SortNulls.LAST,
            ),
        ),
    )
    return Plan(root=Limit(input=ordered, limit=10))


@pytest.fixture
def sample_plan() -> Plan:
    """Return the shared sample plan.

    Returns
    -------
    Plan
        Valid plan.
    """
    return build_sample_plan()


@pytest.fixture
def span_exporter() -> InMemorySpanExporter:
    """Install an in-memory tracer provider once and return a cleared exporter.

    Returns
    -------
    InMemorySpanExporter
        Exporter receiving every finished span.
    """
    if not _PROVIDER_STATE["installed"]:
        provider = TracerProvider()
        provider.add_span_processor(SimpleSpanProcessor(_SPAN_EXPORTER))
        trace.set_tracer_provider(provider)
        _PROVIDER_STATE["installed"] = True
    _SPAN_EXPORTER.clear()
    return _SPAN_EXPORTER
