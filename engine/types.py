import random
import string
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict


class TransformationKind(str, Enum):
    """Closed set of transformations the engine can request."""

    LANGUAGE_CONVERSION = "language_conversion"
    FORMAT_CONVERSION = "format_conversion"
    SUMMARIZATION = "summarization"
    EXPLANATION = "explanation"
    TRANSLATION = "translation"
    CLEANUP = "cleanup"
    ENHANCEMENT = "enhancement"
    VALIDATION = "validation"


class ContentCategory(str, Enum):
    """Labels produced by the content classifier."""

    TEXT = "text"
    CODE = "code"
    JSON = "json"
    EMAIL = "email"
    URL = "url"
    MARKDOWN = "markdown"
    CSV = "csv"
    HTML = "html"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class PromptSpec:
    """One planned transformation request, prior to execution."""

    kind: TransformationKind
    title: str
    description: str
    system_prompt: str
    user_prompt: str


@dataclass
class TransformationResult:
    """
    A completed transformation handed to the UI layer.

    `applied` starts False; only the consumer flips it via mark_applied().
    """

    id: str
    title: str
    description: str
    result_text: str
    confidence: float
    kind: TransformationKind
    applied: bool = False

    def mark_applied(self) -> None:
        self.applied = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "result": self.result_text,
            "confidence": self.confidence,
            "applied": self.applied,
            "type": self.kind.value,
        }


_ID_ALPHABET = string.ascii_lowercase + string.digits


def new_result_id(prefix: str) -> str:
    """Time + random id: unique within one call, not across calls."""
    suffix = "".join(random.choices(_ID_ALPHABET, k=9))
    return f"{prefix}-{int(time.time() * 1000)}-{suffix}"
