"""
Backend availability monitoring.

Keeps the one piece of state shared across calls in a session: the last
BackendStatus. The monitor is its only writer; consumers read the cached
value, which is re-probed once older than the TTL.

State machine (no terminal state while the monitor runs):

    UNKNOWN -> PROBING -> READY        (reachable, model present)
                       -> DEGRADED     (reachable, model missing)
                       -> UNAVAILABLE  (unreachable)
    READY / DEGRADED / UNAVAILABLE -> PROBING  (on the fixed timer)
"""

import asyncio
import logging
import time
import uuid
from enum import Enum
from typing import Any, Callable, Dict, Optional

from inference import BackendConfig, BackendGateway, BackendStatus
from engine.tracing import TraceMetadata, Tracer, emit_event

logger = logging.getLogger(__name__)

STATUS_TTL_S = 30.0
PROBE_INTERVAL_S = 30.0


class BackendState(str, Enum):
    UNKNOWN = "unknown"
    PROBING = "probing"
    READY = "ready"
    DEGRADED = "degraded"
    UNAVAILABLE = "unavailable"


def state_for(status: BackendStatus) -> BackendState:
    if not status.server_reachable:
        return BackendState.UNAVAILABLE
    if not status.model_available:
        return BackendState.DEGRADED
    return BackendState.READY


class BackendMonitor:
    """
    Cached, periodically refreshed view of backend health.

    status()  -> cached BackendStatus while fresh, otherwise a new probe
    refresh() -> always probes (used for the pre-flight check of a batch,
                 with the config that batch will generate with)
    start()   -> background task probing every `interval_s` while consumers are active
    """

    def __init__(
        self,
        gateway: BackendGateway,
        ttl_s: float = STATUS_TTL_S,
        interval_s: float = PROBE_INTERVAL_S,
        tracer: Optional[Tracer] = None,
        clock: Callable[[], float] = time.monotonic,
        config: Optional[BackendConfig] = None,
    ):
        self.gateway = gateway
        self.config = config or gateway.config
        self.ttl_s = ttl_s
        self.interval_s = interval_s
        self.tracer = tracer
        self._clock = clock

        self._status: Optional[BackendStatus] = None
        self._checked_at: Optional[float] = None
        self._state = BackendState.UNKNOWN
        self._lock = asyncio.Lock()
        self._task: Optional[asyncio.Task] = None

    @property
    def state(self) -> BackendState:
        return self._state

    @property
    def cached_status(self) -> Optional[BackendStatus]:
        return self._status

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def is_fresh(self) -> bool:
        if self._status is None or self._checked_at is None:
            return False
        return (self._clock() - self._checked_at) < self.ttl_s

    def set_config(self, config: BackendConfig) -> None:
        """Monitor different settings; the cached status is stale from now on."""
        self.config = config
        self._checked_at = None

    async def status(self) -> BackendStatus:
        if self.is_fresh():
            return self._status  # type: ignore[return-value]
        return await self.refresh()

    async def refresh(self, config: Optional[BackendConfig] = None) -> BackendStatus:
        """Probe now; `config` overrides the monitored settings for this probe only."""
        async with self._lock:
            previous = self._state
            self._state = BackendState.PROBING
            started = self._clock()
            try:
                status = await self.gateway.probe(config or self.config)
            except asyncio.CancelledError:
                self._state = previous
                raise

            self._status = status
            self._checked_at = self._clock()
            self._state = state_for(status)

        if self._state != previous:
            log = logger.info if self._state == BackendState.READY else logger.warning
            log(f"Backend state {previous.value} -> {self._state.value}: {status.diagnostic}")

        emit_event(
            self.tracer,
            "backend_probe_completed",
            {
                "state": self._state.value,
                "server_reachable": status.server_reachable,
                "model_available": status.model_available,
                "duration_ms": round((self._checked_at - started) * 1000, 1),
            },
            TraceMetadata(trace_id=f"probe-{uuid.uuid4().hex[:12]}"),
        )
        return status

    async def _run(self) -> None:
        while True:
            await self.refresh()
            await asyncio.sleep(self.interval_s)

    def start(self) -> None:
        """Begin perpetual probing. Must be called from a running event loop."""
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())
        logger.info(f"Backend monitor started (interval {self.interval_s}s, ttl {self.ttl_s}s)")

    async def stop(self) -> None:
        if self._task is None:
            return
        task, self._task = self._task, None
        task.cancel()
        await asyncio.wait({task})
        logger.info("Backend monitor stopped")

    def snapshot(self) -> Dict[str, Any]:
        """Non-blocking view for the UI layer."""
        return {
            "state": self._state.value,
            "fresh": self.is_fresh(),
            "status": self._status.to_dict() if self._status else None,
        }
