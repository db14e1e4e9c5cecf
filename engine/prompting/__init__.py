"""
Prompt Builder layer for the transformation engine.

Exports the per-transformation templates and the custom prompt assembler.
"""

from .prompt_builder import (
    CUSTOM_SYSTEM_PROMPT,
    PromptTemplate,
    TO_TYPESCRIPT,
    CLEAN_CODE,
    PROFESSIONAL_TONE,
    SUMMARIZE,
    TO_CSV,
    EXPLAIN,
    build_custom_prompt,
)

__all__ = [
    "CUSTOM_SYSTEM_PROMPT",
    "PromptTemplate",
    "TO_TYPESCRIPT",
    "CLEAN_CODE",
    "PROFESSIONAL_TONE",
    "SUMMARIZE",
    "TO_CSV",
    "EXPLAIN",
    "build_custom_prompt",
]
