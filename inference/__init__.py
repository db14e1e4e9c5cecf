"""
Model boundary layer for LLM inference.

This package provides a clean abstraction for the local model backend,
allowing the orchestration engine to remain agnostic of the transport.

Supported gateways:
- StubGateway: Deterministic fake backend (default for CI/tests)
- OllamaGateway: Local Ollama over its OpenAI-compatible chat API

Example usage:
    from inference import OllamaGateway, BackendConfig, CancellationToken

    gateway = OllamaGateway(BackendConfig(model_name="gpt-oss:20b"))
    status = await gateway.probe()
    text = await gateway.complete("You are helpful.", "Summarize: ...",
                                  cancel_token=CancellationToken())
"""

from .types import BackendConfig, BackendStatus, ChatMessage
from .errors import (
    BackendError,
    BackendUnreachable,
    BackendTimeout,
    MalformedResponse,
    ModelUnavailable,
    RequestCancelled,
    BackendUnavailable,
)
from .cancellation import CancellationToken, run_cancellable
from .base import BackendGateway
from .stub import StubGateway
from .ollama import OllamaGateway

__all__ = [
    "BackendConfig",
    "BackendStatus",
    "ChatMessage",
    "BackendError",
    "BackendUnreachable",
    "BackendTimeout",
    "MalformedResponse",
    "ModelUnavailable",
    "RequestCancelled",
    "BackendUnavailable",
    "CancellationToken",
    "run_cancellable",
    "BackendGateway",
    "StubGateway",
    "OllamaGateway",
]
