"""Per-request trace metadata for log correlation.

The active OpenTelemetry span is looked up once at the request boundary and
turned into a :class:`TraceContextSnapshot`; handlers receive the snapshot as a
parameter instead of reading the ambient context again.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

from opentelemetry import trace
from opentelemetry.trace import SpanContext


@dataclass(frozen=True)
class TraceContextSnapshot:
    trace_id: str
    span_id: str
    trace_flags: str
    is_valid: bool

    @classmethod
    def from_span_context(cls, span_context: SpanContext) -> "TraceContextSnapshot":
        # Zero ids (no active span) render as empty strings.
        return cls(
            trace_id=trace.format_trace_id(span_context.trace_id) if span_context.trace_id else "",
            span_id=trace.format_span_id(span_context.span_id) if span_context.span_id else "",
            trace_flags=format(int(span_context.trace_flags), "02x"),
            is_valid=span_context.is_valid,
        )

    def log_fields(self) -> dict[str, str]:
        fields = asdict(self)
        fields.pop("is_valid")
        return fields


def current_trace_context() -> TraceContextSnapshot:
    return TraceContextSnapshot.from_span_context(trace.get_current_span().get_span_context())


async def request_trace_context() -> TraceContextSnapshot:
    """FastAPI dependency: snapshot of the span active for this request.

    Async so it runs in the request's task and sees the server span started by
    the tracing middleware.
    """

    return current_trace_context()


def annotate(logger: Any, trace_context: TraceContextSnapshot) -> Any:
    """Return ``logger`` bound with trace_id/span_id/trace_flags.

    Without a valid span the logger is returned unchanged.
    """

    if not trace_context.is_valid:
        return logger
    return logger.bind(**trace_context.log_fields())
