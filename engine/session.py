"""
Per-caller request tracking.

A session owns at most one in-flight request. Starting a new batch (or
custom request) cancels the token of the previous one; the superseded call
then returns its empty/None result. Requests are never merged or queued.

A session with nothing in flight holds no state, so the registry drops it
as soon as it goes idle; the next request under the same id starts afresh.
"""

import logging
from typing import Callable, Dict, List, Optional, Sequence

from inference import BackendConfig, CancellationToken
from engine.custom import CustomInstructionProcessor
from engine.orchestrator import OrchestrationEngine
from engine.types import ContentCategory, TransformationResult

logger = logging.getLogger(__name__)


class TransformationSession:
    def __init__(
        self,
        session_id: str,
        engine: OrchestrationEngine,
        processor: CustomInstructionProcessor,
        on_idle: Optional[Callable[["TransformationSession"], None]] = None,
    ):
        self.session_id = session_id
        self.engine = engine
        self.processor = processor
        self._on_idle = on_idle
        self._active: Optional[CancellationToken] = None

    @property
    def has_active_request(self) -> bool:
        return self._active is not None and not self._active.cancelled

    def _supersede(self) -> CancellationToken:
        if self._active is not None and not self._active.cancelled:
            logger.debug(f"Session {self.session_id}: superseding in-flight request")
            self._active.cancel()
        token = CancellationToken()
        self._active = token
        return token

    def _release(self, token: CancellationToken) -> None:
        if self._active is token:
            self._active = None
            self._idle()

    def _idle(self) -> None:
        if self._on_idle is not None:
            self._on_idle(self)

    async def generate(
        self,
        content: str,
        category: Optional[ContentCategory] = None,
        config: Optional[BackendConfig] = None,
    ) -> List[TransformationResult]:
        token = self._supersede()
        try:
            return await self.engine.generate_batch(
                content, category, config, token, session_id=self.session_id
            )
        finally:
            self._release(token)

    async def process_custom(
        self,
        content: str,
        instruction: str,
        context_snippets: Optional[Sequence[str]] = None,
        config: Optional[BackendConfig] = None,
    ) -> Optional[TransformationResult]:
        token = self._supersede()
        try:
            return await self.processor.process_custom(
                content, instruction, context_snippets, config, token,
                session_id=self.session_id,
            )
        finally:
            self._release(token)

    def cancel(self) -> bool:
        """Cancel the in-flight request. Returns False if there was none."""
        if not self.has_active_request:
            return False
        self._active.cancel()  # type: ignore[union-attr]
        self._active = None
        self._idle()
        return True


class SessionRegistry:
    """Maps caller session ids to their TransformationSession."""

    def __init__(self, engine: OrchestrationEngine, processor: CustomInstructionProcessor):
        self.engine = engine
        self.processor = processor
        self._sessions: Dict[str, TransformationSession] = {}

    def get(self, session_id: str) -> TransformationSession:
        session = self._sessions.get(session_id)
        if session is None:
            session = TransformationSession(
                session_id, self.engine, self.processor, on_idle=self._discard
            )
            self._sessions[session_id] = session
        return session

    def _discard(self, session: TransformationSession) -> None:
        if self._sessions.get(session.session_id) is session and not session.has_active_request:
            del self._sessions[session.session_id]

    def cancel(self, session_id: str) -> bool:
        session = self._sessions.get(session_id)
        return session.cancel() if session else False

    def close(self, session_id: str) -> bool:
        """Forget a session, cancelling whatever it has in flight."""
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        session.cancel()
        return True

    def __len__(self) -> int:
        return len(self._sessions)
