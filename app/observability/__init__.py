"""Observability helpers for the hello service.

Structured logging (structlog over stdlib), OpenTelemetry tracing lifecycle and
the per-request trace context that correlates log entries with spans.
"""
