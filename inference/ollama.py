import asyncio
import logging
from typing import Optional

import httpx

from .base import BackendGateway
from .cancellation import CancellationToken, run_cancellable
from .errors import (
    BackendTimeout,
    BackendUnreachable,
    MalformedResponse,
    ModelUnavailable,
)
from .types import (
    BackendConfig,
    BackendStatus,
    ChatCompletionRequest,
    ChatCompletionResponse,
    ChatMessage,
    TagsResponse,
)

logger = logging.getLogger(__name__)

# Ollama requires a bearer token on the OpenAI-compatible API but never checks it
PLACEHOLDER_API_KEY = "ollama"
PROBE_TIMEOUT_S = 5.0


class OllamaGateway(BackendGateway):
    """
    Ollama backend reached through its OpenAI-compatible chat API.

    - probe():    GET {server_root}/api/tags, fixed 5 s timeout, never raises
    - complete(): POST {base_url}/chat/completions, non-streaming, bounded by
                  config.timeout_ms and abortable through a CancellationToken

    A fresh httpx.AsyncClient is opened per call so that aborting a request
    also closes its connection.
    """

    def __init__(
        self,
        config: Optional[BackendConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize Ollama gateway.

        Args:
            config:    Backend connection settings (defaults to BackendConfig())
            transport: Optional httpx transport (unit-test hook)
        """
        super().__init__(config)
        self._transport = transport

    def _client(self, timeout: float) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=timeout, transport=self._transport)

    async def probe(self, config: Optional[BackendConfig] = None) -> BackendStatus:
        cfg = config or self.config
        url = f"{cfg.server_root}/api/tags"

        try:
            async with self._client(PROBE_TIMEOUT_S) as client:
                response = await client.get(url, headers={"Content-Type": "application/json"})
        except httpx.TimeoutException:
            return BackendStatus(
                server_reachable=False,
                model_available=False,
                diagnostic="Ollama server timed out. Make sure it is running: ollama serve",
            )
        except httpx.InvalidURL as e:
            return BackendStatus(
                server_reachable=False,
                model_available=False,
                diagnostic=f"Invalid Ollama URL {cfg.base_url}: {e}",
            )
        except httpx.HTTPError as e:
            logger.debug(f"Probe of {url} failed: {e}")
            return BackendStatus(
                server_reachable=False,
                model_available=False,
                diagnostic="Ollama not running. Please start it with: ollama serve",
            )
        except Exception as e:
            return BackendStatus(
                server_reachable=False,
                model_available=False,
                diagnostic=f"Unknown error checking Ollama status: {e}",
            )

        if not response.is_success:
            return BackendStatus(
                server_reachable=False,
                model_available=False,
                diagnostic=f"Ollama server not responding (HTTP {response.status_code})",
            )

        try:
            tags = TagsResponse.model_validate(response.json())
        except ValueError:
            return BackendStatus(
                server_reachable=False,
                model_available=False,
                diagnostic="Ollama server returned an unreadable model listing",
            )

        has_model = any(
            tag.name == cfg.model_name or cfg.family in tag.name for tag in tags.models
        )
        diagnostic = (
            f"Ollama is running with {cfg.model_name}"
            if has_model
            else f"Model {cfg.model_name} not found. Run: ollama pull {cfg.model_name}"
        )
        return BackendStatus(
            server_reachable=True,
            model_available=has_model,
            diagnostic=diagnostic,
        )

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        config: Optional[BackendConfig] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> str:
        cfg = config or self.config
        return await run_cancellable(
            self._post_chat(system_prompt, user_prompt, cfg), cancel_token
        )

    async def _post_chat(self, system_prompt: str, user_prompt: str, cfg: BackendConfig) -> str:
        url = f"{cfg.base_url.rstrip('/')}/chat/completions"
        payload = ChatCompletionRequest(
            model=cfg.model_name,
            messages=[
                ChatMessage(role="system", content=system_prompt),
                ChatMessage(role="user", content=user_prompt),
            ],
            temperature=cfg.temperature,
            max_tokens=cfg.max_tokens,
            stream=False,
        )
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {PLACEHOLDER_API_KEY}",
        }

        try:
            async with self._client(cfg.timeout_s) as client:
                # httpx limits each phase separately; timeout_ms bounds the whole exchange
                response = await asyncio.wait_for(
                    client.post(url, json=payload.model_dump(), headers=headers),
                    timeout=cfg.timeout_s,
                )
        except (httpx.TimeoutException, asyncio.TimeoutError) as e:
            raise BackendTimeout(
                f"AI request timed out after {cfg.timeout_ms} ms"
            ) from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise BackendUnreachable(
                f"Cannot connect to AI service at {cfg.base_url}: {e}"
            ) from e

        if response.status_code == 404:
            raise ModelUnavailable(
                f"Model {cfg.model_name} not available: {response.text[:200]}",
                status_code=404,
            )
        if response.is_error:
            raise BackendUnreachable(
                f"Ollama API error: {response.status_code} - {response.text[:200]}",
                status_code=response.status_code,
            )

        try:
            data = ChatCompletionResponse.model_validate(response.json())
        except ValueError as e:
            raise MalformedResponse("Response body is not a chat completion") from e

        content = data.first_content()
        if content is None:
            raise MalformedResponse("Invalid response from Ollama API: no message content")
        return content
