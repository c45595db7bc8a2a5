"""
Readability and challenge scoring for Decipher Engine.

This module grades a single snippet for readability and compares an original
and a transformed snippet with a five-term challenge rubric that also reads
the session's transformation history. Every function here is total over
arbitrary strings: empty input yields a defined, clamped result.
"""

from typing import Any, Dict, Iterable, Mapping, Optional, Sequence, Union
import re

from .models import HistoryEntry, ScoreBreakdown
from ..utils.helpers import (
    analyze_variable_names,
    change_ratio,
    count_occurrences,
    extract_function_signatures,
    max_nesting_level,
    round_half_up,
    token_entropy,
)

HistoryLike = Sequence[Union[HistoryEntry, Mapping[str, Any]]]

READABILITY_LABELS = (
    (80, "Excellent"),
    (60, "Good"),
    (40, "Fair"),
    (20, "Poor"),
)


def _entry_transformer_id(entry: Union[HistoryEntry, Mapping[str, Any]]) -> str:
    if isinstance(entry, Mapping):
        return str(entry.get("transformer_id") or entry.get("transformerId") or "")
    return str(getattr(entry, "transformer_id", "") or "")


class ReadabilityScorer:
    """Single-snippet readability score in [0, 100]."""

    BASE_SCORE = 100
    DANGEROUS_CALL_PENALTY = 10
    SHORT_NAME_PENALTY = 5
    DEEP_NESTING_PENALTY = 5
    LENGTH_PENALTY = 5
    LENGTH_THRESHOLD = 500
    DESCRIPTIVE_NAME_BONUS = 10
    SHORT_FUNCTION_BONUS = 5
    SHORT_FUNCTION_LINES = 15

    EVAL_CALL = re.compile(r"eval\s*\(")
    FUNCTION_CONSTRUCTOR = re.compile(r"new\s+Function\s*\(")
    SINGLE_CHAR_DECLARATION = re.compile(r"\b(var|let|const)\s+([a-zA-Z])\b")
    DEEP_NESTING = re.compile(r"\{[^{}]*\{[^{}]*\{[^{}]*\{")
    DESCRIPTIVE_DECLARATION = re.compile(
        r"\b(var|let|const)\s+([a-z][a-zA-Z0-9]*[A-Z][a-zA-Z0-9]*|[a-zA-Z]+_[a-zA-Z]+)\b"
    )
    NAMED_FUNCTION = re.compile(r"function\s+([a-zA-Z_$][a-zA-Z0-9_$]*)\s*\([^)]*\)\s*\{([^}]*)\}")
    ARROW_FUNCTION = re.compile(r"\([^)]*\)\s*=>\s*\{([^}]*)\}")

    @classmethod
    def score(cls, code: Optional[str]) -> int:
        if not code or not isinstance(code, str):
            return 0

        score = cls.BASE_SCORE

        dangerous = len(cls.EVAL_CALL.findall(code)) + len(cls.FUNCTION_CONSTRUCTOR.findall(code))
        score -= dangerous * cls.DANGEROUS_CALL_PENALTY
        score -= len(cls.SINGLE_CHAR_DECLARATION.findall(code)) * cls.SHORT_NAME_PENALTY
        score -= len(cls.DEEP_NESTING.findall(code)) * cls.DEEP_NESTING_PENALTY
        if len(code) > cls.LENGTH_THRESHOLD:
            score -= cls.LENGTH_PENALTY

        score += len(cls.DESCRIPTIVE_DECLARATION.findall(code)) * cls.DESCRIPTIVE_NAME_BONUS

        bodies = [m.group(2) for m in cls.NAMED_FUNCTION.finditer(code)]
        bodies.extend(m.group(1) for m in cls.ARROW_FUNCTION.finditer(code))
        for body in bodies:
            if body.count("\n") + 1 < cls.SHORT_FUNCTION_LINES:
                score += cls.SHORT_FUNCTION_BONUS

        return max(0, min(100, score))


class ChallengeScorer:
    """Five-term challenge rubric with history-aware bonus and penalty rules."""

    # Term caps
    CLARITY_MAX = 40
    ACCURACY_MAX = 25
    OBFUSCATION_MAX = 15
    EFFICIENCY_MAX = 10
    STEP_WISE_MAX = 10

    KEY_OPERATORS = ("return", "new", "typeof", "instanceof", "await", "yield")

    DANGEROUS_MARKERS = (
        (re.compile(r"eval\s*\("), 3),
        (re.compile(r"new\s+Function\s*\("), 3),
        (re.compile(r"setTimeout\s*\(\s*['\"`].*?['\"`]"), 2),
    )
    ENCODED_MARKERS = (
        (re.compile(r"\\x[0-9a-f]{2}", re.IGNORECASE), 2),
        (re.compile(r"\\u[0-9a-f]{4}", re.IGNORECASE), 2),
    )
    DEAD_CODE_MARKERS = (
        (re.compile(r"if\s*\(\s*false\s*\)"), 1),
        (re.compile(r"if\s*\(\s*0\s*\)"), 1),
        (re.compile(r"\{\s*\}"), 1),
    )
    EVAL_CALL = re.compile(r"eval\s*\(")
    FUNCTION_CONSTRUCTOR = re.compile(r"new\s+Function\s*\(")

    PERSISTENT_MARKER_STEPS = 3
    PERSISTENT_MARKER_PENALTY = 3
    CLEAN_BONUS = 10
    CLEAN_BONUS_MAX_STEPS = 5
    CLEAN_BONUS_MIN_READABILITY = 80
    ASSISTED_BONUS = 5
    RETAINED_MARKER_PENALTY = 10
    RETAINED_MARKER_STEPS = 5

    @classmethod
    def score(
        cls,
        original_code: Optional[str],
        transformed_code: Optional[str],
        history: Optional[HistoryLike] = None,
        is_manual_mode: bool = True,
    ) -> ScoreBreakdown:
        original = original_code or ""
        transformed = transformed_code or ""
        history = list(history or ())

        bonus, penalty = cls.bonus_penalty(transformed, history)
        return ScoreBreakdown.from_terms(
            clarity_gain=cls.clarity_gain(original, transformed),
            transform_accuracy=cls.transform_accuracy(original, transformed),
            obfuscation_reduction=cls.obfuscation_reduction(original, transformed, history),
            efficiency=cls.efficiency(original, transformed, history, is_manual_mode),
            step_wise_optimization=cls.step_wise_optimization(history),
            bonus=bonus,
            penalty=penalty,
        )

    @classmethod
    def clarity_gain(cls, original: str, transformed: str) -> int:
        """Entropy drop, naming improvement and nesting reduction (0-40)."""
        score = 0

        entropy_drop = token_entropy(original) - token_entropy(transformed)
        if entropy_drop > 0:
            score += min(15, round_half_up(entropy_drop * 10))

        before = analyze_variable_names(original)
        after = analyze_variable_names(transformed)
        if after["avg_length"] > before["avg_length"]:
            score += min(10, round_half_up((after["avg_length"] - before["avg_length"]) * 5))
        if after["descriptive_names"] > before["descriptive_names"]:
            score += min(5, after["descriptive_names"] - before["descriptive_names"])

        nesting_drop = max_nesting_level(original) - max_nesting_level(transformed)
        if nesting_drop > 0:
            score += min(10, nesting_drop * 3)

        return min(cls.CLARITY_MAX, score)

    @classmethod
    def transform_accuracy(cls, original: str, transformed: str) -> int:
        """Structural preservation check (0-25). Key operators are substring counts."""
        score = cls.ACCURACY_MAX

        original_functions = len(extract_function_signatures(original))
        transformed_functions = len(extract_function_signatures(transformed))
        if original_functions > 0 and transformed_functions == 0:
            score -= 15
        elif abs(original_functions - transformed_functions) > 1:
            score -= 10

        for operator in cls.KEY_OPERATORS:
            if count_occurrences(original, operator) > 0 and count_occurrences(transformed, operator) == 0:
                score -= 2

        return max(0, score)

    @classmethod
    def obfuscation_reduction(cls, original: str, transformed: str, history: HistoryLike) -> int:
        """Weighted removal of obfuscation markers (0-15).

        Each encoded-escape family is floored at 0, so adding escapes cannot
        cancel credit earned by other families.
        """
        score = 0

        for pattern, weight in cls.DANGEROUS_MARKERS:
            before = len(pattern.findall(original))
            after = len(pattern.findall(transformed))
            if before > 0 and after == 0:
                score += weight
            elif before > after:
                score += int((before - after) / before * weight)

        for pattern, weight in cls.ENCODED_MARKERS:
            before = len(pattern.findall(original))
            after = len(pattern.findall(transformed))
            if before > 0:
                score += max(0, (before - after) * weight // before)

        for pattern, weight in cls.DEAD_CODE_MARKERS:
            before = len(pattern.findall(original))
            after = len(pattern.findall(transformed))
            if before > after:
                score += min(weight, before - after)

        if len(history) > cls.PERSISTENT_MARKER_STEPS and (
            cls.EVAL_CALL.search(transformed) or cls.FUNCTION_CONSTRUCTOR.search(transformed)
        ):
            score = max(0, score - cls.PERSISTENT_MARKER_PENALTY)

        return max(0, min(cls.OBFUSCATION_MAX, score))

    @classmethod
    def efficiency(cls, original: str, transformed: str, history: HistoryLike, is_manual_mode: bool) -> int:
        """Change per step in manual mode, readability delta in auto mode (0-10)."""
        score = 5

        if is_manual_mode:
            ratio = change_ratio(original, transformed)
            steps = len(history)
            if ratio > 0.3 and steps <= 3:
                score += 5
            elif ratio > 0.2 and steps <= 5:
                score += 3
            elif ratio > 0.1:
                score += 1
            elif steps > 10 and ratio < 0.05:
                score -= 3
        else:
            delta = ReadabilityScorer.score(transformed) - ReadabilityScorer.score(original)
            if delta > 30:
                score += 5
            elif delta > 15:
                score += 3
            elif delta < 0:
                score -= 3

        return max(0, min(cls.EFFICIENCY_MAX, score))

    @classmethod
    def step_wise_optimization(cls, history: HistoryLike) -> int:
        """Penalize repeated rules and long histories (0-10). Empty history is neutral."""
        if not history:
            return 5

        score = cls.STEP_WISE_MAX

        uses: Dict[str, int] = {}
        for entry in history:
            transformer_id = _entry_transformer_id(entry)
            uses[transformer_id] = uses.get(transformer_id, 0) + 1
        redundant = sum(count - 3 for count in uses.values() if count > 3)
        score -= min(5, redundant)

        if len(history) > 10:
            score -= 5
        elif len(history) > 5:
            score -= 2

        return max(0, score)

    @classmethod
    def bonus_penalty(cls, transformed: str, history: HistoryLike):
        bonus = 0
        penalty = 0

        if (
            len(history) <= cls.CLEAN_BONUS_MAX_STEPS
            and ReadabilityScorer.score(transformed) > cls.CLEAN_BONUS_MIN_READABILITY
            and "eval" not in transformed
        ):
            bonus += cls.CLEAN_BONUS

        if any(
            "auto" in transformer_id or "ai" in transformer_id
            for transformer_id in (_entry_transformer_id(entry) for entry in history)
        ):
            bonus += cls.ASSISTED_BONUS

        if len(history) > cls.RETAINED_MARKER_STEPS and (
            "eval" in transformed or "new Function" in transformed
        ):
            penalty += cls.RETAINED_MARKER_PENALTY

        return bonus, penalty


def calculate_readability_score(code: Optional[str]) -> int:
    """Readability of one snippet, 0-100. Empty input scores 0."""
    return ReadabilityScorer.score(code)


def readability_label(score: int) -> str:
    for threshold, label in READABILITY_LABELS:
        if score >= threshold:
            return label
    return "Very Poor"


def get_challenge_score(
    original_code: Optional[str],
    transformed_code: Optional[str],
    history: Optional[Iterable[Any]] = None,
    is_manual_mode: bool = True,
) -> Dict[str, Any]:
    """Score one step. Returns ``{"score": int, "breakdown": ScoreBreakdown}``."""
    breakdown = ChallengeScorer.score(
        original_code, transformed_code, list(history or ()), is_manual_mode
    )
    return {"score": breakdown.total, "breakdown": breakdown}
