"""
Transformation planning.

Maps classified clipboard content to an ordered list of PromptSpecs. The
mapping is an explicit lookup table keyed by ContentCategory; every
category has a row and the explanation spec always closes the plan.

Planning is pure: identical (content, category) inputs produce identical
ordered output, which keeps confidence tie-breaks reproducible.
"""

import json
import logging
from typing import Dict, List, Optional, Protocol, Tuple

from engine.prompting import (
    CLEAN_CODE,
    EXPLAIN,
    PROFESSIONAL_TONE,
    SUMMARIZE,
    TO_CSV,
    TO_TYPESCRIPT,
    PromptTemplate,
)
from engine.types import ContentCategory, PromptSpec

logger = logging.getLogger(__name__)


# Category → templates emitted before the trailing explanation
_CATEGORY_TEMPLATES: Dict[ContentCategory, Tuple[PromptTemplate, ...]] = {
    ContentCategory.CODE: (TO_TYPESCRIPT, CLEAN_CODE),
    ContentCategory.TEXT: (PROFESSIONAL_TONE, SUMMARIZE),
    ContentCategory.EMAIL: (PROFESSIONAL_TONE, SUMMARIZE),
    ContentCategory.JSON: (TO_CSV,),
    ContentCategory.URL: (),
    ContentCategory.MARKDOWN: (),
    ContentCategory.CSV: (),
    ContentCategory.HTML: (),
    ContentCategory.UNKNOWN: (),
}

_TRAILING_TEMPLATES: Tuple[PromptTemplate, ...] = (EXPLAIN,)

_missing = set(ContentCategory) - set(_CATEGORY_TEMPLATES)
if _missing:
    raise RuntimeError(f"No plan defined for categories: {sorted(c.value for c in _missing)}")


CODE_INDICATORS: Tuple[str, ...] = (
    "function", "def ", "class ", "import ", "const ", "let ", "var ",
    "=>", "{", "}", "()", "if (", "for (", "while (", "//", "/*", "*/",
    "public ", "private ", "protected ", "static ", "async ", "await ",
)


class ContentClassifier(Protocol):
    """Collaborator that labels clipboard content."""

    def classify(self, content: str) -> ContentCategory: ...


def looks_like_code(content: str) -> bool:
    return any(indicator in content for indicator in CODE_INDICATORS)


def looks_like_json(content: str) -> bool:
    trimmed = content.strip()
    bracketed = (trimmed.startswith("{") and trimmed.endswith("}")) or (
        trimmed.startswith("[") and trimmed.endswith("]")
    )
    if not bracketed:
        return False
    try:
        json.loads(trimmed)
    except ValueError:
        return False
    return True


class HeuristicClassifier:
    """
    Fallback classifier used when no label is supplied.

    Only distinguishes json-like and code-like content; json wins since
    well-formed JSON also trips the brace markers of the code check.
    """

    def classify(self, content: str) -> ContentCategory:
        if looks_like_json(content):
            return ContentCategory.JSON
        if looks_like_code(content):
            return ContentCategory.CODE
        return ContentCategory.UNKNOWN


class PromptPlanner:
    """Deterministic planner from (content, category) to ordered PromptSpecs."""

    def __init__(self, classifier: Optional[ContentClassifier] = None):
        self.classifier = classifier or HeuristicClassifier()

    def resolve_category(
        self, content: str, category: Optional[ContentCategory] = None
    ) -> ContentCategory:
        """Use the supplied label; ask the classifier when it is absent or unknown."""
        if category is not None and category != ContentCategory.UNKNOWN:
            return ContentCategory(category)
        resolved = self.classifier.classify(content)
        logger.debug(f"No category supplied, classifier resolved {resolved.value}")
        return resolved

    def plan(
        self, content: str, category: Optional[ContentCategory] = None
    ) -> List[PromptSpec]:
        resolved = self.resolve_category(content, category)
        templates = _CATEGORY_TEMPLATES[resolved] + _TRAILING_TEMPLATES
        return [
            PromptSpec(
                kind=t.kind,
                title=t.title,
                description=t.description,
                system_prompt=t.system_prompt,
                user_prompt=t.render(content),
            )
            for t in templates
        ]
