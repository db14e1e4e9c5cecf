"""
Tracer factory and initialization logic.

Implements TRACER_BACKEND setting:
- "noop" (default): No observability
- "local": Events kept in an in-memory ObservabilityStore
"""

import os
from typing import Optional

from engine.observability import ObservabilityStore
from engine.tracing.tracer import NoOpTracer, StoreTracer, Tracer

_VALID_BACKENDS = {"noop", "local"}


def get_tracer_backend() -> str:
    """
    Get the configured tracer backend.

    Environment Variable:
        TRACER_BACKEND: "noop" (default) or "local"

    Returns:
        Backend name (lowercase); unknown values fall back to "noop"
    """
    backend = os.getenv("TRACER_BACKEND", "noop").lower().strip()
    if backend not in _VALID_BACKENDS:
        return "noop"
    return backend


def create_tracer(
    backend: Optional[str] = None, store: Optional[ObservabilityStore] = None
) -> Tracer:
    """
    Create a tracer instance.

    Args:
        backend: Explicit backend name; read from the environment when None
        store: Store for the "local" backend (a new one is created if omitted)

    Returns:
        Tracer instance (never None, defaults to NoOpTracer)
    """
    backend = (backend or get_tracer_backend()).lower().strip()
    if backend == "local":
        return StoreTracer(store or ObservabilityStore())
    return NoOpTracer()
