"""
Local observability module for development.

Read-only inspection of engine diagnostics without affecting behavior.
"""

from engine.observability.store import ObservabilityStore, EventRecord

__all__ = [
    "ObservabilityStore",
    "EventRecord",
]
