"""
Prompt Builder Layer
====================

Prompt text for every transformation the engine requests.

Responsibilities:
- Defines the system prompt of each planned transformation
- Renders the user prompt that embeds the clipboard content
- Assembles the single custom-instruction prompt (content + context + request)
- Enforces a character budget on caller-supplied context snippets

Invariants:
- Clipboard content and the user's instruction are never truncated
- Context snippets keep caller order; combined they never exceed
  _MAX_CONTEXT_CHARS (later snippets are cut first)
- The system prompt is sent by the gateway in the 'system' role and is
  never embedded in the returned user prompt
"""

from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from engine.types import TransformationKind

# ── Budget Constants ──────────────────────────────────────────────────────────
_MAX_CONTEXT_CHARS: int = 4000   # cap on combined context snippets
_MIN_SNIPPET_CHARS: int = 40     # below this a truncated snippet is dropped


# ── Custom instruction contract ───────────────────────────────────────────────
CUSTOM_SYSTEM_PROMPT = """You are an AI assistant that helps transform clipboard content.
The user has copied some content and wants you to process it according to their instructions.
Be helpful, accurate, and preserve important information while following their request."""


@dataclass(frozen=True)
class PromptTemplate:
    """Static text of one planned transformation; the user prompt is rendered per content."""

    kind: TransformationKind
    title: str
    description: str
    system_prompt: str
    render: Callable[[str], str]


def _fenced(content: str, lang: str = "") -> str:
    return f"```{lang}\n{content}\n```"


TO_TYPESCRIPT = PromptTemplate(
    kind=TransformationKind.LANGUAGE_CONVERSION,
    title="Convert to TypeScript",
    description="Convert code to TypeScript with proper types",
    system_prompt=(
        "You are a code conversion expert. Convert code to TypeScript while "
        "preserving functionality and adding proper type annotations."
    ),
    render=lambda content: f"Convert this code to TypeScript:\n{_fenced(content)}",
)

CLEAN_CODE = PromptTemplate(
    kind=TransformationKind.CLEANUP,
    title="Clean & Format Code",
    description="Clean up and format the code with best practices",
    system_prompt=(
        "You are a code formatter and cleaner. Improve code quality, formatting, "
        "and readability while preserving functionality."
    ),
    render=lambda content: f"Clean and format this code:\n{_fenced(content)}",
)

PROFESSIONAL_TONE = PromptTemplate(
    kind=TransformationKind.ENHANCEMENT,
    title="Professional Tone",
    description="Rewrite in a professional, business-appropriate tone",
    system_prompt=(
        "You are a professional writing assistant. Rewrite text to be more "
        "professional and business-appropriate while preserving the core message."
    ),
    render=lambda content: f"Make this text more professional:\n\n{content}",
)

SUMMARIZE = PromptTemplate(
    kind=TransformationKind.SUMMARIZATION,
    title="Summarize",
    description="Create a concise summary of the content",
    system_prompt=(
        "You are a summarization expert. Create clear, concise summaries that "
        "capture the key points."
    ),
    render=lambda content: f"Summarize this text:\n\n{content}",
)

TO_CSV = PromptTemplate(
    kind=TransformationKind.FORMAT_CONVERSION,
    title="Convert to CSV",
    description="Convert JSON data to CSV format",
    system_prompt=(
        "You are a data conversion expert. Convert data between formats while "
        "preserving all information."
    ),
    render=lambda content: f"Convert this JSON to CSV format:\n{_fenced(content, 'json')}",
)

EXPLAIN = PromptTemplate(
    kind=TransformationKind.EXPLANATION,
    title="Explain Content",
    description="Provide a clear explanation of what this content does or means",
    system_prompt=(
        "You are an expert explainer. Break down complex content into "
        "easy-to-understand explanations."
    ),
    render=lambda content: f"Explain what this content does or means:\n\n{content}",
)


def _bounded_snippets(snippets: Sequence[str]) -> List[str]:
    """Keep snippets in order until the combined budget is spent."""
    kept: List[str] = []
    remaining = _MAX_CONTEXT_CHARS
    for snippet in snippets:
        text = snippet.strip() if snippet else ""
        if not text:
            continue
        if len(text) > remaining:
            text = text[:remaining]
            if len(text) < _MIN_SNIPPET_CHARS:
                break
        kept.append(text)
        remaining -= len(text)
        if remaining <= 0:
            break
    return kept


def build_custom_prompt(
    content: str,
    instruction: str,
    context_snippets: Optional[Sequence[str]] = None,
) -> str:
    """
    Assemble the user prompt for a custom instruction.

    Layout: the clipboard content as a fenced block, then any context
    snippets (numbered, caller order), then the user's request.

    Args:
        content: Clipboard content (never truncated).
        instruction: Free-text request from the user (never truncated).
        context_snippets: Optional extra material, budget-capped.

    Returns:
        User prompt string for a single gateway call.
    """
    parts: List[str] = [f"Here is the clipboard content:\n{_fenced(content)}"]

    snippets = _bounded_snippets(context_snippets or [])
    if snippets:
        numbered = "\n\n".join(f"[{i}] {s}" for i, s in enumerate(snippets, 1))
        parts.append(f"Additional context:\n{numbered}")

    parts.append(f"User's request: {instruction}")
    parts.append("Please process the content according to the user's request:")

    return "\n\n".join(parts)
