"""
Infrastructure module exports.

Configuration and bootstrap for the engine's service graph.
"""

from .config import InfraConfig, get_config, LLMBackendType, TracerBackendType
from .bootstrap import EngineBootstrap, bootstrap_engine

__all__ = [
    "InfraConfig",
    "get_config",
    "LLMBackendType",
    "TracerBackendType",
    "EngineBootstrap",
    "bootstrap_engine",
]
