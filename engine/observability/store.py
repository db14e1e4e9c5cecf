"""
In-memory observability store for local development.

Collects diagnostic events emitted by the engine.
- Bounded size (FIFO eviction)
- Thread-safe
- Non-blocking
- No persistence
- No sensitive data (metadata only)
"""

from collections import deque
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional
import threading
import logging

logger = logging.getLogger(__name__)


@dataclass
class EventRecord:
    """Metadata of one diagnostic event."""

    name: str
    trace_id: str
    timestamp: str
    session_id: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)


class ObservabilityStore:
    """
    Thread-safe, bounded in-memory store for diagnostic events.

    Stores only event names, trace identity and structural metadata.
    """

    def __init__(self, max_events: int = 500):
        self.max_events = max_events
        self.events: deque = deque(maxlen=max_events)
        self._lock = threading.RLock()
        self._counts: Dict[str, int] = {}

    def record_event(
        self,
        name: str,
        trace_id: str,
        session_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        try:
            with self._lock:
                self.events.append(
                    EventRecord(
                        name=name,
                        trace_id=trace_id,
                        timestamp=datetime.now().isoformat(),
                        session_id=session_id,
                        metadata=dict(metadata or {}),
                    )
                )
                self._counts[name] = self._counts.get(name, 0) + 1
        except Exception as e:
            logger.debug(f"Failed to record event: {e}")

    def get_recent_events(self, limit: int = 100, name: Optional[str] = None) -> List[Dict[str, Any]]:
        """Most recent events first, optionally filtered by name."""
        with self._lock:
            records = [r for r in reversed(self.events) if name is None or r.name == name]
        return [asdict(r) for r in records[:limit]]

    def get_stats(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "events_stored": len(self.events),
                "max_events": self.max_events,
                "counts": dict(self._counts),
            }

    def clear(self) -> None:
        with self._lock:
            self.events.clear()
            self._counts.clear()
