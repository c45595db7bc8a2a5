import math
import re
from collections import Counter
from typing import Any, Dict, List

# =========================
# Shared Patterns
# =========================

TOKEN_SPLIT_PATTERN = re.compile(r"[\s(){}\[\];,.+\-*/=!<>&|^%?:~]+")
VAR_DECLARATION_PATTERN = re.compile(r"\b(var|let|const)\s+([a-zA-Z_$][a-zA-Z0-9_$]*)\b")
IDENTIFIER_PATTERN = re.compile(r"[a-zA-Z_$][a-zA-Z0-9_$]*")

FUNCTION_SIGNATURE_PATTERNS = [
    re.compile(r"function\s+([a-zA-Z_$][a-zA-Z0-9_$]*)\s*\([^)]*\)"),
    re.compile(r"([a-zA-Z_$][a-zA-Z0-9_$]*)\s*=\s*function\s*\([^)]*\)"),
    re.compile(r"([a-zA-Z_$][a-zA-Z0-9_$]*)\s*:\s*function\s*\([^)]*\)"),
    re.compile(r"([a-zA-Z_$][a-zA-Z0-9_$]*)\s*=\s*\([^)]*\)\s*=>"),
]

# =========================
# Utility Functions
# =========================


def round_half_up(value: float) -> int:
    """Round halves away from zero for positive values (2.5 -> 3)."""
    return int(math.floor(value + 0.5))


def _shannon(counts, total: int) -> float:
    ent = 0.0
    for count in counts:
        p = count / total
        ent -= p * math.log2(p)
    return ent


def entropy(text: str) -> float:
    """Calculate Shannon entropy over character frequency."""
    if not text:
        return 0.0
    return _shannon(Counter(text).values(), len(text))


def tokenize(text: str) -> List[str]:
    """Split code on whitespace and punctuation, dropping empty tokens."""
    if not text:
        return []
    return [token for token in TOKEN_SPLIT_PATTERN.split(text) if token]


def token_entropy(text: str) -> float:
    """Calculate Shannon entropy over token frequency."""
    tokens = tokenize(text)
    if not tokens:
        return 0.0
    return _shannon(Counter(tokens).values(), len(tokens))


def count_tokens(text: str) -> int:
    """Count tokens using the same split as token_entropy."""
    return len(tokenize(text))


def max_nesting_level(text: str) -> int:
    """Maximum running brace depth, counted line by line.

    This is a textual approximation: braces inside strings and comments count
    exactly like code braces.
    """
    current = 0
    deepest = 0
    for line in (text or "").split("\n"):
        current += line.count("{") - line.count("}")
        deepest = max(deepest, current)
    return deepest


def count_occurrences(text: str, substring: str) -> int:
    """Count non-overlapping occurrences of substring."""
    if not text or not substring:
        return 0
    return text.count(substring)


def indentation_issues(text: str) -> int:
    """Count lines whose leading whitespace differs from 2 spaces per brace depth.

    A closing brace is checked against the depth of the block it closes.
    """
    issues = 0
    expected = 0
    for line in (text or "").split("\n"):
        trimmed = line.strip()
        if not trimmed:
            continue

        actual = len(line) - len(line.lstrip())
        if actual != expected * 2:
            issues += 1

        if trimmed.endswith("{"):
            expected += 1
        elif trimmed.startswith("}"):
            expected = max(0, expected - 1)
    return issues


def declared_names(text: str) -> List[str]:
    """Names declared with var/let/const, in source order."""
    return [match.group(2) for match in VAR_DECLARATION_PATTERN.finditer(text or "")]


def analyze_variable_names(text: str) -> Dict[str, Any]:
    """Summarize declared variable names."""
    names = declared_names(text)
    total_length = sum(len(name) for name in names)
    return {
        "count": len(names),
        "avg_length": total_length / len(names) if names else 0.0,
        "short_names": sum(1 for name in names if len(name) <= 2),
        "descriptive_names": sum(
            1
            for name in names
            if len(name) > 3 and (re.search(r"[A-Z]", name) or "_" in name)
        ),
    }


def extract_function_signatures(text: str) -> List[str]:
    """Collect function signature snippets (declarations, expressions, arrows)."""
    signatures: List[str] = []
    for pattern in FUNCTION_SIGNATURE_PATTERNS:
        signatures.extend(match.group(0) for match in pattern.finditer(text or ""))
    return signatures


def change_ratio(original: str, transformed: str) -> float:
    """Fraction of character positions that differ.

    Not an edit distance: an insertion near the start shifts every later
    position and counts them all as changed.
    """
    if not original:
        return 0.0
    transformed = transformed or ""
    longest = max(len(original), len(transformed))
    differences = sum(
        1
        for i in range(longest)
        if i >= len(original) or i >= len(transformed) or original[i] != transformed[i]
    )
    return differences / longest


def word_pattern(name: str) -> re.Pattern:
    """Whole-word pattern for a JavaScript identifier (``$`` counts as a word char)."""
    return re.compile(r"(?<![a-zA-Z0-9_$])" + re.escape(name) + r"(?![a-zA-Z0-9_$])")


def count_whole_word(text: str, name: str) -> int:
    return len(word_pattern(name).findall(text or ""))


def analyze_code(text: str) -> Dict[str, Any]:
    """Metrics summary used in reports."""
    return {
        "length": len(text or ""),
        "lines": len((text or "").split("\n")) if text else 0,
        "entropy": round(entropy(text), 4),
        "token_entropy": round(token_entropy(text), 4),
        "tokens": count_tokens(text),
        "max_nesting_level": max_nesting_level(text),
        "indentation_issues": indentation_issues(text),
        "variables": analyze_variable_names(text),
        "functions": len(extract_function_signatures(text)),
    }
