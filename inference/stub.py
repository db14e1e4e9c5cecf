import asyncio
from typing import Callable, List, Optional, Sequence, Tuple, Union

from .base import BackendGateway
from .cancellation import CancellationToken, run_cancellable
from .types import BackendConfig, BackendStatus

Reply = Union[str, BaseException]
Responder = Callable[[str, str], str]


class StubGateway(BackendGateway):
    """
    Deterministic fake backend for testing and CI.

    Replies are consumed in order from `replies`; an exception instance in the
    list is raised instead of returned. When the list is exhausted (or a
    `responder` callable is given) the reply is computed from the prompts.
    Every dispatched call is recorded in `calls` as (system, user).
    """

    def __init__(
        self,
        replies: Optional[Sequence[Reply]] = None,
        status: Optional[BackendStatus] = None,
        responder: Optional[Responder] = None,
        delay_s: float = 0.0,
        config: Optional[BackendConfig] = None,
    ):
        super().__init__(config)
        self._replies: List[Reply] = list(replies or [])
        self._responder = responder
        self.status = status or BackendStatus(
            server_reachable=True,
            model_available=True,
            diagnostic="Stub backend ready",
        )
        self.delay_s = delay_s
        self.calls: List[Tuple[str, str]] = []
        self.probe_count = 0
        self.probed_configs: List[BackendConfig] = []

    async def probe(self, config: Optional[BackendConfig] = None) -> BackendStatus:
        self.probe_count += 1
        self.probed_configs.append(config or self.config)
        return self.status

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        config: Optional[BackendConfig] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> str:
        return await run_cancellable(self._reply(system_prompt, user_prompt), cancel_token)

    async def _reply(self, system_prompt: str, user_prompt: str) -> str:
        self.calls.append((system_prompt, user_prompt))
        if self.delay_s:
            await asyncio.sleep(self.delay_s)

        if self._replies:
            reply = self._replies.pop(0)
            if isinstance(reply, BaseException):
                raise reply
            return reply

        if self._responder is not None:
            return self._responder(system_prompt, user_prompt)

        return f"Stubbed transformation:\n{user_prompt}"
