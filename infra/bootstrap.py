"""
Infrastructure initialization and bootstrap.

Builds the engine's service graph from configuration. The result is an
ordinary object owned by the application (e.g. the FastAPI lifespan) and
passed by reference; there is no process-wide instance.
"""

from typing import Optional

from inference import BackendGateway
from engine import (
    BackendMonitor,
    CustomInstructionProcessor,
    OrchestrationEngine,
    SessionRegistry,
)
from engine.observability import ObservabilityStore
from engine.tracing import Tracer

from .config import InfraConfig, get_config


class EngineBootstrap:
    """Wires gateway, monitor, tracer, engine, custom processor and sessions."""

    def __init__(
        self,
        config: Optional[InfraConfig] = None,
        gateway: Optional[BackendGateway] = None,
    ):
        self.config = config or get_config()
        self.store = ObservabilityStore()
        self.tracer: Tracer = self.config.create_tracer(self.store)
        self.gateway = gateway or self.config.create_gateway()

        self.monitor = BackendMonitor(
            self.gateway,
            ttl_s=self.config.status_ttl_s,
            interval_s=self.config.probe_interval_s,
            tracer=self.tracer,
        )
        self.engine = OrchestrationEngine(
            self.gateway,
            config=self.gateway.config,
            monitor=self.monitor,
            tracer=self.tracer,
        )
        self.processor = CustomInstructionProcessor(
            self.gateway,
            config=self.gateway.config,
            tracer=self.tracer,
        )
        self.sessions = SessionRegistry(self.engine, self.processor)

    def __repr__(self) -> str:
        return (
            f"EngineBootstrap(llm={self.config.llm_backend}, "
            f"model={self.gateway.config.model_name}, "
            f"tracer={self.config.tracer_backend})"
        )


def bootstrap_engine(
    config: Optional[InfraConfig] = None,
    gateway: Optional[BackendGateway] = None,
) -> EngineBootstrap:
    """Create a fully wired service graph."""
    return EngineBootstrap(config=config, gateway=gateway)
