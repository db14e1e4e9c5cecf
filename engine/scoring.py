import re
from typing import List

from engine.types import TransformationKind

BASE_CONFIDENCE = 0.7
CHECK_WEIGHT = 0.1
MAX_CONFIDENCE = 1.0

MIN_LENGTH_RATIO = 0.3
MAX_LENGTH_RATIO = 3.0
MIN_PRESERVED_SHARE = 0.3
SIGNIFICANT_WORD_LEN = 3  # words longer than this count as significant

_WORD_SPLIT_RE = re.compile(r"\W+")


def _words(text: str) -> List[str]:
    return [w for w in _WORD_SPLIT_RE.split(text.lower()) if w]


class ScoringPolicy:
    """
    Coarse confidence heuristic for a completed transformation.

    Starts at 0.7 and adds 0.1 for each passing check, capped at 1.0:
      1. output length is within (0.3x, 3x) of the original
      2. at least 30% of the original's significant words survive
      3. kind-specific marker present (type keywords for language
         conversion, a field separator for format conversion)

    This is an approximation of "looks well-formed", not a correctness
    signal; verbose but poor rewrites can still score high.
    """

    def score(self, original: str, transformed: str, kind: TransformationKind) -> float:
        confidence = BASE_CONFIDENCE

        if self.length_ratio_ok(original, transformed):
            confidence += CHECK_WEIGHT
        if self.content_preserved(original, transformed):
            confidence += CHECK_WEIGHT
        if self.kind_markers_present(transformed, kind):
            confidence += CHECK_WEIGHT

        return round(min(confidence, MAX_CONFIDENCE), 2)

    @staticmethod
    def length_ratio_ok(original: str, transformed: str) -> bool:
        if not original:
            return False
        ratio = len(transformed) / len(original)
        return MIN_LENGTH_RATIO < ratio < MAX_LENGTH_RATIO

    @staticmethod
    def content_preserved(original: str, transformed: str) -> bool:
        significant = [w for w in _words(original) if len(w) > SIGNIFICANT_WORD_LEN]
        if not significant:
            return False
        transformed_words = set(_words(transformed))
        preserved = [w for w in significant if w in transformed_words]
        return len(preserved) / len(significant) >= MIN_PRESERVED_SHARE

    @staticmethod
    def kind_markers_present(transformed: str, kind: TransformationKind) -> bool:
        if kind == TransformationKind.LANGUAGE_CONVERSION:
            return "interface" in transformed or "type " in transformed
        if kind == TransformationKind.FORMAT_CONVERSION:
            return "," in transformed
        return False
