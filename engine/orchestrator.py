"""
Batch orchestration of clipboard transformations.

generate_batch() drives every planned spec through the gateway one at a
time, in planner order:

  1. Pre-flight probe with the batch's own config; an unusable backend
     (or a model missing under that config) aborts with BackendUnavailable
     before any generation call
  2. Plan specs for the content
  3. For each spec: complete -> score -> append. A failed spec is logged,
     traced and skipped; it never aborts the batch
  4. Cancellation is checked before each dispatch and threaded into the
     in-flight call. A cancelled batch returns [] (partial results dropped)
  5. Results sorted by confidence, descending; ties keep planner order

Requests are never fanned out: the backend is a single local process and
sequential dispatch keeps result order reproducible.
"""

import logging
import time
import uuid
from datetime import datetime
from typing import List, Optional

from inference import (
    BackendConfig,
    BackendError,
    BackendGateway,
    BackendUnavailable,
    CancellationToken,
    RequestCancelled,
)
from engine.health import BackendMonitor
from engine.planner import PromptPlanner
from engine.scoring import ScoringPolicy
from engine.tracing import TraceMetadata, Tracer, emit_event
from engine.types import ContentCategory, PromptSpec, TransformationResult, new_result_id

logger = logging.getLogger(__name__)


class OrchestrationEngine:
    """
    Explicit service object; construct one per application with the injected
    gateway and configuration and pass it to callers.
    """

    def __init__(
        self,
        gateway: BackendGateway,
        config: Optional[BackendConfig] = None,
        monitor: Optional[BackendMonitor] = None,
        planner: Optional[PromptPlanner] = None,
        scorer: Optional[ScoringPolicy] = None,
        tracer: Optional[Tracer] = None,
    ):
        self.gateway = gateway
        self.config = config or gateway.config
        self.tracer = tracer
        self.monitor = monitor or BackendMonitor(gateway, tracer=tracer, config=self.config)
        self.planner = planner or PromptPlanner()
        self.scorer = scorer or ScoringPolicy()

    def update_config(self, **overrides) -> BackendConfig:
        """Apply a partial runtime override (e.g. temperature from settings)."""
        self.config = self.config.with_overrides(**overrides)
        self.monitor.set_config(self.config)
        return self.config

    async def generate_batch(
        self,
        content: str,
        category: Optional[ContentCategory] = None,
        config: Optional[BackendConfig] = None,
        cancel_token: Optional[CancellationToken] = None,
        session_id: Optional[str] = None,
    ) -> List[TransformationResult]:
        """
        Generate ranked transformation suggestions for `content`.

        Raises:
            BackendUnavailable: pre-flight probe failed (server or model missing)

        Returns:
            Results sorted by confidence descending; [] when cancelled or when
            every spec failed.
        """
        cfg = config or self.config
        trace = TraceMetadata(trace_id=f"batch-{uuid.uuid4().hex[:12]}", session_id=session_id)

        if cancel_token is not None and cancel_token.cancelled:
            self._record_cancelled(trace, completed=0, planned=0)
            return []

        status = await self.monitor.refresh(cfg)
        if not status.ready:
            logger.warning(f"Batch aborted, backend not ready: {status.diagnostic}")
            emit_event(self.tracer, "batch_aborted", {
                "server_reachable": status.server_reachable,
                "model_available": status.model_available,
            }, trace)
            raise BackendUnavailable(status)

        specs = self.planner.plan(content, category)
        emit_event(self.tracer, "batch_started", {
            "category": category.value if isinstance(category, ContentCategory) else category,
            "planned": len(specs),
            "model": cfg.model_name,
        }, trace)

        results: List[TransformationResult] = []
        seen_ids = set()
        started = time.monotonic()

        for spec in specs:
            if cancel_token is not None and cancel_token.cancelled:
                break

            try:
                text = await self.gateway.complete(
                    spec.system_prompt, spec.user_prompt, cfg, cancel_token
                )
            except RequestCancelled:
                break
            except BackendError as e:
                self._record_failure(spec, e, cfg, trace)
                continue

            result = self._build_result(content, text, spec, seen_ids)
            results.append(result)
            emit_event(self.tracer, "transformation_completed", {
                "spec_type": spec.kind.value,
                "confidence": result.confidence,
            }, trace)

        if cancel_token is not None and cancel_token.cancelled:
            self._record_cancelled(trace, completed=len(results), planned=len(specs))
            return []

        ranked = sorted(results, key=lambda r: r.confidence, reverse=True)
        emit_event(self.tracer, "batch_completed", {
            "planned": len(specs),
            "succeeded": len(ranked),
            "failed": len(specs) - len(ranked),
            "duration_ms": round((time.monotonic() - started) * 1000, 1),
        }, trace)
        if not ranked:
            logger.info("No suggestions available: every transformation failed")
        return ranked

    def _build_result(
        self, content: str, text: str, spec: PromptSpec, seen_ids: set
    ) -> TransformationResult:
        result_id = new_result_id(spec.kind.value)
        while result_id in seen_ids:
            result_id = new_result_id(spec.kind.value)
        seen_ids.add(result_id)

        return TransformationResult(
            id=result_id,
            title=spec.title,
            description=spec.description,
            result_text=text.strip(),
            confidence=self.scorer.score(content, text, spec.kind),
            kind=spec.kind,
        )

    def _record_failure(
        self, spec: PromptSpec, error: BackendError, cfg: BackendConfig, trace: TraceMetadata
    ) -> None:
        logger.warning(f"Failed to generate {spec.kind.value} transformation: [{error.kind}] {error}")
        emit_event(self.tracer, "transformation_failed", {
            "error_kind": error.kind,
            "spec_type": spec.kind.value,
            "status_code": error.status_code,
            "model": cfg.model_name,
            "timestamp": datetime.now().isoformat(),
        }, trace)

    def _record_cancelled(self, trace: TraceMetadata, completed: int, planned: int) -> None:
        logger.info(f"Batch cancelled after {completed}/{planned} transformations; results discarded")
        emit_event(self.tracer, "batch_cancelled", {
            "completed": completed,
            "planned": planned,
        }, trace)
