from typing import Any, Dict, Optional
import logging
import re

from ..core.models import OptionSpec, TransformResult
from ..utils.helpers import count_whole_word
from .base import Transformer, format_code

logger = logging.getLogger(__name__)

# Block bodies may contain one level of nested braces.
_BODY = r"\{(?:[^{}]|\{[^{}]*\})*\}"

# Markers are written so that none of the patterns below can match them again.
DEAD_CODE_RULES = (
    (
        "unreachable_if",
        re.compile(r"\bif\s*\(\s*false\s*\)\s*" + _BODY + r"(?!\s*else\b)"),
        "// Dead code removed: constant-false if block\n",
    ),
    (
        "unreachable_if",
        re.compile(r"\bif\s*\(\s*0\s*\)\s*" + _BODY + r"(?!\s*else\b)"),
        "// Dead code removed: constant-zero if block\n",
    ),
    (
        "unreachable_loops",
        re.compile(r"\bwhile\s*\(\s*false\s*\)\s*" + _BODY),
        "// Dead code removed: unreachable while loop\n",
    ),
    (
        "unreachable_loops",
        re.compile(r"\bfor\s*\([^;()]*;\s*false\s*;[^)]*\)\s*" + _BODY),
        "// Dead code removed: unreachable for loop\n",
    ),
)

# A branch chained after `else` must stay, or the next statement becomes its body.
AFTER_ELSE = re.compile(r"\belse\s*$")

EMPTY_BLOCK = re.compile(r"\{\s*\}")
DECLARATION = re.compile(r"\b(var|let|const)\s+([a-zA-Z_$][a-zA-Z0-9_$]*)(?:\s*=\s*([^;]+))?;")

# Conventional names that are never reported as unused.
NEVER_UNUSED = frozenset({"i", "j", "k", "e", "err", "error", "data", "result"})


def _balanced(text: str) -> bool:
    return text.count("{") == text.count("}") and text.count("(") == text.count(")")


def _in_line_comment(code: str, position: int) -> bool:
    line_start = code.rfind("\n", 0, position) + 1
    return "//" in code[line_start:position]


class RemoveDeadCodeTransformer(Transformer):
    """Remove constant-false branches, empty blocks and unused declarations.

    Removed blocks leave a one-line comment behind so the edit stays
    traceable. Unused-variable detection is a whole-word occurrence count over
    the entire snippet; scopes are not considered.
    """

    transformer_id = "remove-dead-code"
    display_name = "Remove Dead Code"
    description = "Eliminates unreachable and unused code"
    options = {
        "remove_empty_blocks": OptionSpec("boolean", True, "Remove empty blocks"),
    }

    def transform(self, code: str, options: Optional[Dict[str, Any]] = None) -> TransformResult:
        opts = self.resolve_options(options)
        stats = {"unreachable_if": 0, "unreachable_loops": 0, "empty_blocks": 0, "unused_variables": 0}
        cleaned = code or ""

        for stat_key, pattern, marker in DEAD_CODE_RULES:
            cleaned, removed = self._remove_blocks(pattern, marker, cleaned)
            stats[stat_key] += removed

        if opts["remove_empty_blocks"]:
            cleaned, stats["empty_blocks"] = self._normalize_empty_blocks(cleaned)

        cleaned, stats["unused_variables"] = self._remove_unused_declarations(cleaned)

        stats["total_removed"] = sum(stats.values())
        if stats["total_removed"]:
            cleaned = format_code(cleaned)
            logger.debug(f"Removed dead code: {stats}")
        return TransformResult(cleaned, stats)

    @staticmethod
    def _remove_blocks(pattern: re.Pattern, marker: str, code: str):
        removed = 0

        def replace(match: re.Match) -> str:
            nonlocal removed
            if AFTER_ELSE.search(match.string, 0, match.start()):
                return match.group(0)
            removed += 1
            return marker

        return pattern.sub(replace, code), removed

    @staticmethod
    def _normalize_empty_blocks(code: str):
        changed = 0

        def replace(match: re.Match) -> str:
            nonlocal changed
            if match.group(0) != "{}":
                changed += 1
            return "{}"

        return EMPTY_BLOCK.sub(replace, code), changed

    @staticmethod
    def _remove_unused_declarations(code: str):
        unused = {}
        for match in DECLARATION.finditer(code):
            name = match.group(2)
            if name in NEVER_UNUSED or name in unused:
                continue
            if not _balanced(match.group(0)) or _in_line_comment(code, match.start()):
                continue
            if count_whole_word(code, name) == 1:
                unused[name] = match.group(0)

        for name, declaration in unused.items():
            code = code.replace(declaration, f"// Removed unused variable: {name}\n", 1)
        return code, len(unused)
