from abc import ABC, abstractmethod
from typing import Optional

from .cancellation import CancellationToken
from .types import BackendConfig, BackendStatus


class BackendGateway(ABC):
    """
    Abstract model boundary.
    Engine code must depend ONLY on this interface.
    """

    def __init__(self, config: Optional[BackendConfig] = None):
        self.config = config or BackendConfig()

    @abstractmethod
    async def probe(self, config: Optional[BackendConfig] = None) -> BackendStatus:
        """
        Check server reachability and presence of the configured model.

        Probes `config` when given (the settings a request will actually use),
        otherwise the gateway's own config. Never raises.
        """
        raise NotImplementedError

    @abstractmethod
    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        config: Optional[BackendConfig] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> str:
        """
        Run one system+user exchange and return the completion text.

        Raises a BackendError subclass on failure, RequestCancelled when
        cancel_token fires before or during the call.
        """
        raise NotImplementedError
