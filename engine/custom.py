import logging
import uuid
from typing import Optional, Sequence

from inference import (
    BackendConfig,
    BackendError,
    BackendGateway,
    CancellationToken,
    RequestCancelled,
)
from engine.prompting import CUSTOM_SYSTEM_PROMPT, build_custom_prompt
from engine.tracing import TraceMetadata, Tracer, emit_event
from engine.types import TransformationKind, TransformationResult, new_result_id

logger = logging.getLogger(__name__)

CUSTOM_CONFIDENCE = 0.8
CUSTOM_TITLE = "Custom Transformation"


class CustomInstructionProcessor:
    """
    Single-shot transformation from a user-authored instruction.

    Bypasses the planner and issues exactly one gateway call. Unlike batch
    mode, backend failures propagate to the caller; cancellation returns
    None without an error.
    """

    def __init__(
        self,
        gateway: BackendGateway,
        config: Optional[BackendConfig] = None,
        tracer: Optional[Tracer] = None,
        system_prompt: str = CUSTOM_SYSTEM_PROMPT,
    ):
        self.gateway = gateway
        self.config = config or gateway.config
        self.tracer = tracer
        self.system_prompt = system_prompt

    async def process_custom(
        self,
        content: str,
        instruction: str,
        context_snippets: Optional[Sequence[str]] = None,
        config: Optional[BackendConfig] = None,
        cancel_token: Optional[CancellationToken] = None,
        session_id: Optional[str] = None,
    ) -> Optional[TransformationResult]:
        """
        Apply `instruction` to `content`.

        Raises:
            ValueError: instruction is empty
            BackendError: any backend failure, unmodified

        Returns:
            One TransformationResult, or None if cancelled.
        """
        if not instruction or not instruction.strip():
            raise ValueError("instruction must not be empty")

        cfg = config or self.config
        trace = TraceMetadata(trace_id=f"custom-{uuid.uuid4().hex[:12]}", session_id=session_id)
        user_prompt = build_custom_prompt(content, instruction.strip(), context_snippets)

        try:
            text = await self.gateway.complete(self.system_prompt, user_prompt, cfg, cancel_token)
        except RequestCancelled:
            logger.info("Custom transformation cancelled by caller")
            emit_event(self.tracer, "custom_transformation_cancelled", {}, trace)
            return None
        except BackendError as e:
            logger.error(f"AI processing failed: [{e.kind}] {e}")
            emit_event(self.tracer, "custom_transformation_failed", {
                "error_kind": e.kind,
                "status_code": e.status_code,
                "model": cfg.model_name,
            }, trace)
            raise

        if cancel_token is not None and cancel_token.cancelled:
            emit_event(self.tracer, "custom_transformation_cancelled", {}, trace)
            return None

        emit_event(self.tracer, "custom_transformation_completed", {
            "context_snippets": len(context_snippets or []),
        }, trace)
        return TransformationResult(
            id=new_result_id("custom"),
            title=CUSTOM_TITLE,
            description=instruction.strip(),
            result_text=text.strip(),
            confidence=CUSTOM_CONFIDENCE,
            kind=TransformationKind.ENHANCEMENT,
        )
