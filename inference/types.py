from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

# Bounds accepted by the settings layer
MIN_TEMPERATURE = 0.0
MAX_TEMPERATURE = 2.0
MIN_MAX_TOKENS = 50
MAX_MAX_TOKENS = 4000

DEFAULT_BASE_URL = "http://localhost:11434/v1"
DEFAULT_MODEL_NAME = "gpt-oss:20b"
DEFAULT_TIMEOUT_MS = 30000

ChatRole = Literal["system", "user", "assistant"]


@dataclass(frozen=True)
class BackendConfig:
    """
    Connection and generation settings for the local model backend.

    Supplied by the settings provider. Use with_overrides() for runtime
    changes; instances are never mutated in place.
    """

    base_url: str = DEFAULT_BASE_URL
    model_name: str = DEFAULT_MODEL_NAME
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    temperature: float = 0.7
    max_tokens: int = 1000
    model_family: Optional[str] = None  # substring match token, e.g. "gpt-oss"

    def __post_init__(self):
        if not self.base_url:
            raise ValueError("base_url must not be empty")
        if not self.model_name:
            raise ValueError("model_name must not be empty")
        if self.timeout_ms <= 0:
            raise ValueError(f"timeout_ms must be positive, got {self.timeout_ms}")
        if not MIN_TEMPERATURE <= self.temperature <= MAX_TEMPERATURE:
            raise ValueError(
                f"temperature must be within [{MIN_TEMPERATURE}, {MAX_TEMPERATURE}], "
                f"got {self.temperature}"
            )
        if not MIN_MAX_TOKENS <= self.max_tokens <= MAX_MAX_TOKENS:
            raise ValueError(
                f"max_tokens must be within [{MIN_MAX_TOKENS}, {MAX_MAX_TOKENS}], "
                f"got {self.max_tokens}"
            )

    @property
    def family(self) -> str:
        """Model family token used for availability matching."""
        return self.model_family or self.model_name.split(":", 1)[0]

    @property
    def timeout_s(self) -> float:
        return self.timeout_ms / 1000.0

    @property
    def server_root(self) -> str:
        """Base URL with the OpenAI-compatible suffix removed."""
        root = self.base_url.rstrip("/")
        if root.endswith("/v1"):
            root = root[: -len("/v1")]
        return root

    def with_overrides(self, **overrides) -> "BackendConfig":
        """Return a copy with the given fields replaced (None values ignored)."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes)


@dataclass(frozen=True)
class BackendStatus:
    """Result of a health probe against the backend."""

    server_reachable: bool
    model_available: bool
    diagnostic: str = ""
    checked_at: datetime = field(default_factory=datetime.now)

    @property
    def ready(self) -> bool:
        return self.server_reachable and self.model_available

    def to_dict(self) -> dict:
        return {
            "server_reachable": self.server_reachable,
            "model_available": self.model_available,
            "diagnostic": self.diagnostic,
            "checked_at": self.checked_at.isoformat(),
        }


# ── Wire schemas (OpenAI-compatible chat API served by Ollama) ────────────────


class ChatMessage(BaseModel):
    role: ChatRole
    content: str


class ChatCompletionRequest(BaseModel):
    model: str
    messages: List[ChatMessage]
    temperature: float
    max_tokens: int
    stream: bool = False


class _CompletionMessage(BaseModel):
    role: Optional[str] = None
    content: Optional[str] = None


class _CompletionChoice(BaseModel):
    message: Optional[_CompletionMessage] = None
    finish_reason: Optional[str] = None


class ChatCompletionResponse(BaseModel):
    choices: List[_CompletionChoice] = Field(default_factory=list)

    def first_content(self) -> Optional[str]:
        """choices[0].message.content, or None when any part is missing."""
        if not self.choices:
            return None
        message = self.choices[0].message
        if message is None or not message.content:
            return None
        return message.content


class _ModelTag(BaseModel):
    name: str


class TagsResponse(BaseModel):
    """GET /api/tags listing."""

    models: List[_ModelTag] = Field(default_factory=list)
