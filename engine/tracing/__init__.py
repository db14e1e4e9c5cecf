"""Tracing infrastructure for observability."""

from engine.tracing.tracer import (
    Tracer,
    TraceMetadata,
    NoOpTracer,
    StoreTracer,
    emit_event,
    filter_safe_metadata,
)
from engine.tracing.tracer_factory import create_tracer, get_tracer_backend

__all__ = [
    "Tracer",
    "TraceMetadata",
    "NoOpTracer",
    "StoreTracer",
    "emit_event",
    "filter_safe_metadata",
    "create_tracer",
    "get_tracer_backend",
]
