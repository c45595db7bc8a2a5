"""Narrow-pattern control-flow simplifications.

Three independent rewrites, each a no-op when its pattern is absent:

- three-level nested if/else -> flat if / else-if chain
- ``while (true)`` with a single conditional break -> conditioned while
- switch over ``obj[key]`` with literal cases -> if / else-if chain

No parsing happens here. Bodies may hold at most one level of nested braces.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple
import logging
import re

from ..core.models import OptionSpec, TransformResult
from .base import Transformer, format_code

logger = logging.getLogger(__name__)

BLOCK_BODY = r"((?:[^{}]|\{[^{}]*\})*)"

NESTED_IF = re.compile(
    r"\bif\s*\(([^{}]*)\)\s*\{\s*"
    r"if\s*\(([^{}]*)\)\s*\{\s*"
    r"if\s*\(([^{}]*)\)\s*\{([^{}]*)\}\s*else\s*\{([^{}]*)\}\s*"
    r"\}\s*else\s*\{([^{}]*)\}\s*"
    r"\}(?:\s*else\s*\{([^{}]*)\})?"
)
WHILE_TRUE = re.compile(r"\bwhile\s*\(\s*true\s*\)\s*\{" + BLOCK_BODY + r"\}")
BREAK_IF = re.compile(r"\bif\s*\(([^{}]*?)\)\s*\{\s*break\s*;?\s*\}")
MAPPING_SWITCH = re.compile(
    r"\bswitch\s*\(\s*([A-Za-z_$][\w$]*)\[([^\[\]()]+)\]\s*\)\s*\{" + BLOCK_BODY + r"\}"
)
CASE_LABEL = re.compile(
    r"\bcase\s+(-?\d+(?:\.\d+)?|'[^']*'|\"[^\"]*\")\s*:|\bdefault\s*:"
)
TRAILING_BREAK = re.compile(r"\bbreak\s*;?\s*$")
TERMINAL_STATEMENT = re.compile(r"(?:^|[;{}\s])(?:return|throw|continue)\b[^;{}]*;?\s*$")
SINGLE_OPERAND = re.compile(r"!\s*[\w$.\[\]]+")


def _wraps_whole(text: str) -> bool:
    """True when text is one parenthesized group, e.g. ``(a && b)``."""
    if not (text.startswith("(") and text.endswith(")")):
        return False
    depth = 0
    for idx, char in enumerate(text):
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0 and idx != len(text) - 1:
                return False
    return depth == 0


def negate_condition(condition: str) -> str:
    """Negate a loop-exit condition.

    A leading ``!`` is stripped only when it applies to the whole condition;
    anything else is wrapped as ``!(...)``.
    """
    condition = condition.strip()
    if SINGLE_OPERAND.fullmatch(condition):
        return condition[1:].strip()
    if condition.startswith("!") and _wraps_whole(condition[1:].strip()):
        return condition[1:].strip()[1:-1].strip()
    return f"!({condition})"


def _group(condition: str) -> str:
    condition = condition.strip()
    if ("||" in condition or "?" in condition) and not _wraps_whole(condition):
        return f"({condition})"
    return condition


def _line_break_before(match: re.Match) -> str:
    """Newline prefix so a rewrite starting with a comment begins on its own line."""
    line_start = match.string.rfind("\n", 0, match.start()) + 1
    return "\n" if match.string[line_start:match.start()].strip() else ""


class FlattenControlFlowTransformer(Transformer):
    """Simplify nested ifs, while(true) loops and mapping switches."""

    transformer_id = "flatten-control-flow"
    display_name = "Flatten Control Flow"
    description = "Simplifies nested control structures"
    options = {
        "max_depth": OptionSpec("number", 2, "Maximum nesting depth"),
    }

    def transform(self, code: str, options: Optional[Dict[str, Any]] = None) -> TransformResult:
        opts = self.resolve_options(options)
        stats = {"nested_ifs": 0, "while_true": 0, "switch_mappings": 0}
        flattened = code or ""

        # The pattern is always three levels deep.
        if 3 > opts["max_depth"]:
            flattened, stats["nested_ifs"] = self._rewrite(flattened, NESTED_IF, self._flatten_nested_if)
        flattened, stats["while_true"] = self._rewrite(flattened, WHILE_TRUE, self._rewrite_while_true)
        flattened, stats["switch_mappings"] = self._rewrite(flattened, MAPPING_SWITCH, self._rewrite_switch)

        stats["total_transformations"] = stats["nested_ifs"] + stats["while_true"] + stats["switch_mappings"]
        if stats["total_transformations"]:
            flattened = format_code(flattened)
            logger.debug(f"Flattened control flow: {stats}")
        return TransformResult(flattened, stats)

    @staticmethod
    def _rewrite(code: str, pattern: re.Pattern, builder) -> Tuple[str, int]:
        count = 0

        def replace(match: re.Match) -> str:
            nonlocal count
            rewritten = builder(match)
            if rewritten is None:
                return match.group(0)
            count += 1
            return rewritten

        return pattern.sub(replace, code), count

    @staticmethod
    def _flatten_nested_if(match: re.Match) -> str:
        c1, c2, c3, innermost, middle_else, outer_else, final_else = match.groups()
        c1, c2, c3 = _group(c1), _group(c2), _group(c3)

        lines = [
            "// Flattened nested if statements",
            f"if ({c1} && {c2} && {c3}) {{",
            innermost.strip(),
            "}",
            f"else if ({c1} && {c2}) {{",
            middle_else.strip(),
            "}",
            f"else if ({c1}) {{",
            outer_else.strip(),
            "}",
        ]
        if final_else is not None:
            lines.extend(["else {", final_else.strip(), "}"])
        return _line_break_before(match) + "\n".join(line for line in lines if line)

    @staticmethod
    def _rewrite_while_true(match: re.Match) -> Optional[str]:
        body = match.group(1)
        if len(re.findall(r"\bbreak\b", body)) != 1:
            return None
        exit_check = BREAK_IF.search(body)
        if exit_check is None:
            return None

        remaining = body[: exit_check.start()] + body[exit_check.end():]
        return f"while ({negate_condition(exit_check.group(1))}) {{{remaining}}}"

    @staticmethod
    def _rewrite_switch(match: re.Match) -> Optional[str]:
        mapping, key, body = match.groups()
        labels = list(CASE_LABEL.finditer(body))
        if not labels or body[: labels[0].start()].strip():
            return None

        branches: List[Tuple[List[str], str]] = []
        pending: List[str] = []
        default_body = None

        for idx, label in enumerate(labels):
            end = labels[idx + 1].start() if idx + 1 < len(labels) else len(body)
            raw = body[label.end():end].strip()
            is_last = idx + 1 == len(labels)

            statements = TRAILING_BREAK.sub("", raw).strip()
            if re.search(r"\bbreak\b", statements):
                return None
            ends_cleanly = statements != raw or is_last or bool(TERMINAL_STATEMENT.search(statements))

            if label.group(1) is None:
                if statements and not ends_cleanly:
                    return None
                pending = []
                default_body = statements
                continue

            pending.append(label.group(1))
            if not raw:
                continue
            if not ends_cleanly:
                return None
            branches.append((pending, statements))
            pending = []

        if not branches:
            return None

        subject = f"{mapping}[{key.strip()}]"
        lines = ["// Simplified mapping switch"]
        for idx, (values, statements) in enumerate(branches):
            test = " || ".join(f"{subject} === {value}" for value in values)
            lines.append(f"{'if' if idx == 0 else 'else if'} ({test}) {{")
            lines.append(statements)
            lines.append("}")
        if default_body:
            lines.extend(["else {", default_body, "}"])
        return _line_break_before(match) + "\n".join(lines)
