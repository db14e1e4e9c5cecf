"""
Infrastructure configuration system.

Environment-based backend selection with sensible defaults.
All components default to the local-first stack (Ollama on localhost).
"""

import os
from typing import Literal, Optional
from dataclasses import dataclass

from inference import BackendConfig, BackendGateway, OllamaGateway, StubGateway
from inference.types import DEFAULT_BASE_URL, DEFAULT_MODEL_NAME, DEFAULT_TIMEOUT_MS
from engine.health import PROBE_INTERVAL_S, STATUS_TTL_S
from engine.observability import ObservabilityStore
from engine.tracing import Tracer, create_tracer


LLMBackendType = Literal["stub", "ollama"]
TracerBackendType = Literal["noop", "local"]


@dataclass
class InfraConfig:
    """Infrastructure configuration from environment."""

    # LLM
    llm_backend: LLMBackendType
    ollama_base_url: str
    ollama_model: str
    ollama_model_family: Optional[str]

    # Generation
    timeout_ms: int
    temperature: float
    max_tokens: int

    # Health monitoring
    probe_interval_s: float
    status_ttl_s: float

    # Observability
    tracer_backend: TracerBackendType

    @classmethod
    def from_env(cls) -> "InfraConfig":
        """
        Load configuration from environment variables.

        Defaults target a local Ollama serving gpt-oss:20b through its
        OpenAI-compatible endpoint.
        """
        return cls(
            llm_backend=os.getenv("LLM_BACKEND", "ollama").lower(),  # type: ignore
            ollama_base_url=os.getenv("OLLAMA_BASE_URL", DEFAULT_BASE_URL),
            ollama_model=os.getenv("OLLAMA_MODEL", DEFAULT_MODEL_NAME),
            ollama_model_family=os.getenv("OLLAMA_MODEL_FAMILY") or None,

            timeout_ms=int(os.getenv("AI_TIMEOUT_MS", str(DEFAULT_TIMEOUT_MS))),
            temperature=float(os.getenv("AI_TEMPERATURE", "0.7")),
            max_tokens=int(os.getenv("AI_MAX_TOKENS", "1000")),

            probe_interval_s=float(os.getenv("AI_PROBE_INTERVAL_S", str(PROBE_INTERVAL_S))),
            status_ttl_s=float(os.getenv("AI_STATUS_TTL_S", str(STATUS_TTL_S))),

            tracer_backend=os.getenv("TRACER_BACKEND", "noop").lower(),  # type: ignore
        )

    def backend_config(self) -> BackendConfig:
        """Validated BackendConfig (raises ValueError on out-of-range values)."""
        return BackendConfig(
            base_url=self.ollama_base_url,
            model_name=self.ollama_model,
            timeout_ms=self.timeout_ms,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            model_family=self.ollama_model_family,
        )

    def create_gateway(self) -> BackendGateway:
        """Create gateway instance based on configuration."""
        if self.llm_backend == "stub":
            return StubGateway(config=self.backend_config())
        # Default to ollama
        return OllamaGateway(config=self.backend_config())

    def create_tracer(self, store: Optional[ObservabilityStore] = None) -> Tracer:
        return create_tracer(backend=self.tracer_backend, store=store)


def get_config() -> InfraConfig:
    """Get infrastructure configuration from the current environment."""
    return InfraConfig.from_env()
