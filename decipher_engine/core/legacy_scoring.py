"""
Legacy scalar scorer.

Older flows graded a step with base points per rule, scaled by snippet size
and amount of change, plus rule-specific bonuses. It is only consulted when
the challenge score is zero.
"""

from typing import Optional
import re

from ..utils.helpers import (
    count_occurrences,
    declared_names,
    indentation_issues,
    max_nesting_level,
    round_half_up,
)

TRANSFORMATION_POINTS = {
    "format": 10,
    "minify": 20,
    "es6-to-es5": 30,
    "jsx-to-js": 40,
    "rename-variables": 25,
    "flatten-control-flow": 35,
    "remove-dead-code": 30,
}
DEFAULT_POINTS = 5

CONSTANT_FALSE_IF = re.compile(r"if\s*\(\s*(false|0)\s*\)")
EMPTY_BLOCK = re.compile(r"\{\s*\}")


def complexity_factor(original_code: str, transformed_code: str) -> float:
    """Length factor times change factor."""
    original_length = len(original_code)

    length_factor = 1.0
    if original_length > 1000:
        length_factor = 1.5
    elif original_length > 500:
        length_factor = 1.25
    elif original_length > 200:
        length_factor = 1.1

    change_factor = 1.0
    if original_length:
        change = abs(len(transformed_code) - original_length) / original_length
        if change > 0.5:
            change_factor = 1.5
        elif change > 0.3:
            change_factor = 1.3
        elif change > 0.1:
            change_factor = 1.1

    return length_factor * change_factor


def _size_reduction(original_code: str, transformed_code: str) -> float:
    if not original_code:
        return 0.0
    return (len(original_code) - len(transformed_code)) / len(original_code)


def bonus_points(original_code: str, transformed_code: str, transformer_id: str) -> int:
    bonus = 0

    if transformer_id == "format":
        fixed = indentation_issues(original_code) - indentation_issues(transformed_code)
        if fixed > 0:
            bonus += fixed * 2

    elif transformer_id == "minify":
        reduction = _size_reduction(original_code, transformed_code)
        if reduction > 0.5:
            bonus += 30
        elif reduction > 0.3:
            bonus += 20
        elif reduction > 0.1:
            bonus += 10

    elif transformer_id == "es6-to-es5":
        arrows = count_occurrences(original_code, "=>") - count_occurrences(transformed_code, "=>")
        declarations = (
            count_occurrences(original_code, "let ") + count_occurrences(original_code, "const ")
        ) - (
            count_occurrences(transformed_code, "let ") + count_occurrences(transformed_code, "const ")
        )
        bonus += arrows * 5 + declarations * 3

    elif transformer_id == "jsx-to-js":
        bonus += (count_occurrences(original_code, "<") - count_occurrences(transformed_code, "<")) * 5

    elif transformer_id == "rename-variables":
        before = declared_names(original_code)
        after = declared_names(transformed_code)
        before_avg = sum(map(len, before)) / len(before) if before else 0
        after_avg = sum(map(len, after)) / len(after) if after else 0
        if after_avg > before_avg:
            bonus += round_half_up((after_avg - before_avg) * 10)

        before_single = sum(1 for name in before if len(name) == 1)
        after_single = sum(1 for name in after if len(name) == 1)
        if after_single < before_single:
            bonus += (before_single - after_single) * 5

    elif transformer_id == "flatten-control-flow":
        reduced = max_nesting_level(original_code) - max_nesting_level(transformed_code)
        if reduced > 0:
            bonus += reduced * 10

    elif transformer_id == "remove-dead-code":
        removed_ifs = len(CONSTANT_FALSE_IF.findall(original_code)) - len(CONSTANT_FALSE_IF.findall(transformed_code))
        bonus += removed_ifs * 15
        removed_blocks = len(EMPTY_BLOCK.findall(original_code)) - len(EMPTY_BLOCK.findall(transformed_code))
        bonus += removed_blocks * 5

        reduction = _size_reduction(original_code, transformed_code)
        if reduction > 0.2:
            bonus += 20
        elif reduction > 0.1:
            bonus += 10
        elif reduction > 0.05:
            bonus += 5

    return bonus


def calculate_score(original_code: Optional[str], transformed_code: Optional[str], transformer_id: str) -> int:
    """Legacy score for one step."""
    original_code = original_code or ""
    transformed_code = transformed_code or ""
    base = TRANSFORMATION_POINTS.get(transformer_id, DEFAULT_POINTS)
    return round_half_up(
        base * complexity_factor(original_code, transformed_code)
        + bonus_points(original_code, transformed_code, transformer_id)
    )


def combine_scores(challenge_score: int, legacy_score: int) -> int:
    """The challenge score wins unless it is zero."""
    return challenge_score or legacy_score
