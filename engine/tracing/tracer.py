"""
Tool-agnostic tracing abstraction.

This module defines the Tracer interface for structured diagnostic events.
Tracing is strictly passive:
- Never influences execution
- Never mutates engine state
- Never affects which results are returned
- Failures are silent and non-fatal

Event metadata is structural only (kinds, counts, durations, error types);
prompts, clipboard content and model output are never traced.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

# Metadata keys that must never reach a sink
_DENIED_KEYS = frozenset({"content", "prompt", "system_prompt", "user_prompt", "output", "result"})


@dataclass
class TraceMetadata:
    """Identity attached to every event."""

    trace_id: str  # Mandatory: one per batch / custom request
    session_id: Optional[str] = None  # Optional: caller session


def filter_safe_metadata(metadata: Dict[str, Any]) -> Dict[str, Any]:
    """Drop denied keys and non-scalar values."""
    safe: Dict[str, Any] = {}
    for key, value in metadata.items():
        if key in _DENIED_KEYS:
            continue
        if value is None or isinstance(value, (str, int, float, bool)):
            safe[key] = value
    return safe


class Tracer(ABC):
    """
    Abstract tracing interface.

    All implementations MUST guarantee:
    - No control flow influence
    - Non-fatal failures (never raise)
    """

    @abstractmethod
    def record_event(
        self, name: str, metadata: Dict[str, Any], trace_metadata: TraceMetadata
    ) -> None:
        """
        Record a point-in-time event.

        Args:
            name: Event name (e.g., "transformation_failed")
            metadata: Event data (kind, error type, timestamp, ...)
            trace_metadata: Trace identity

        MUST NOT raise.
        """
        pass

    @abstractmethod
    def is_enabled(self) -> bool:
        """Used to skip building metadata when tracing is off."""
        pass


class NoOpTracer(Tracer):
    """Satisfies the Tracer interface but does nothing."""

    def record_event(
        self, name: str, metadata: Dict[str, Any], trace_metadata: TraceMetadata
    ) -> None:
        pass

    def is_enabled(self) -> bool:
        return False


class StoreTracer(Tracer):
    """Writes filtered events into a local ObservabilityStore."""

    def __init__(self, store):
        self.store = store

    def record_event(
        self, name: str, metadata: Dict[str, Any], trace_metadata: TraceMetadata
    ) -> None:
        try:
            self.store.record_event(
                name=name,
                trace_id=trace_metadata.trace_id,
                session_id=trace_metadata.session_id,
                metadata=filter_safe_metadata(metadata),
            )
        except Exception as e:
            logger.debug(f"Failed to record event {name}: {e}")

    def is_enabled(self) -> bool:
        return True


def emit_event(
    tracer: Optional[Tracer],
    name: str,
    metadata: Dict[str, Any],
    trace_metadata: TraceMetadata,
) -> None:
    """Best-effort event emission; tracer errors are swallowed."""
    if tracer is None or not tracer.is_enabled():
        return
    try:
        tracer.record_event(name, metadata, trace_metadata)
    except Exception as e:
        logger.debug(f"Tracer failed on {name}: {e}")
