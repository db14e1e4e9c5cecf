"""
AI transformation orchestration engine.

Plans transformation requests for classified clipboard content, runs them
against the local model backend, scores and ranks the results, and offers
a single-shot custom instruction path.

Example usage:
    from inference import OllamaGateway, BackendConfig
    from engine import OrchestrationEngine, ContentCategory

    engine = OrchestrationEngine(OllamaGateway(BackendConfig()))
    results = await engine.generate_batch("def add(a, b): ...", ContentCategory.CODE)
"""

from engine.types import (
    TransformationKind,
    ContentCategory,
    PromptSpec,
    TransformationResult,
)
from engine.planner import PromptPlanner, HeuristicClassifier, ContentClassifier
from engine.scoring import ScoringPolicy
from engine.health import BackendMonitor, BackendState
from engine.orchestrator import OrchestrationEngine
from engine.custom import CustomInstructionProcessor
from engine.session import TransformationSession, SessionRegistry

__all__ = [
    "TransformationKind",
    "ContentCategory",
    "PromptSpec",
    "TransformationResult",
    "PromptPlanner",
    "HeuristicClassifier",
    "ContentClassifier",
    "ScoringPolicy",
    "BackendMonitor",
    "BackendState",
    "OrchestrationEngine",
    "CustomInstructionProcessor",
    "TransformationSession",
    "SessionRegistry",
]
