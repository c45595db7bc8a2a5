"""Context-aware renaming of short variable names.

Candidate names (two characters or fewer) are collected from declarations and
function parameters. Each candidate gets a name from the first context
heuristic that recognizes it, in a fixed priority order:

1. loop headers (``for`` init -> index, ``while`` condition -> counter)
2. enclosing named function (get/fetch, calc/compute, set/update)
3. anonymous function parameter position (param, param2, ...)
4. array method callback parameter (item, acc)
5. switch subject indexing (mappings)
6. initializer shape (date, element, items, data, callback, value, text, isEnabled)

Anything left falls back to a fixed single-letter dictionary, or gets a
``Value`` suffix for two-letter names.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Set
import logging
import re

from ..core.models import OptionSpec, TransformResult
from ..utils.helpers import IDENTIFIER_PATTERN
from .base import Transformer, format_code

logger = logging.getLogger(__name__)

IDENT = r"[a-zA-Z_$][a-zA-Z0-9_$]*"

COMMON_VARIABLE_MAP = {
    "a": "value",
    "b": "input",
    "c": "result",
    "d": "data",
    "e": "error",
    "f": "func",
    "g": "group",
    "h": "handler",
    "i": "index",
    "j": "counter",
    "k": "key",
    "l": "length",
    "m": "map",
    "n": "number",
    "o": "object",
    "p": "param",
    "q": "queue",
    "r": "response",
    "s": "string",
    "t": "temp",
    "u": "user",
    "v": "value",
    "w": "width",
    "x": "xCoord",
    "y": "yCoord",
    "z": "zone",
}

BUILTINS = frozenset(
    {
        "window", "document", "console", "Math", "Array", "Object", "String",
        "Number", "Boolean", "Date", "RegExp", "Map", "Set", "Promise", "JSON",
        "Error", "Function", "parseInt", "parseFloat", "isNaN", "setTimeout",
        "setInterval", "clearTimeout", "clearInterval", "fetch", "XMLHttpRequest",
    }
)

# Short words that can never be variables.
RESERVED = frozenset({"if", "in", "do", "of"})

FOR_LOOP = re.compile(r"\bfor\s*\(\s*(?:var|let|const)?\s*(" + IDENT + r")\s*=")
WHILE_CONDITION = re.compile(r"\bwhile\s*\(([^)]*)\)")
NAMED_FUNCTION = re.compile(r"\bfunction\s+(" + IDENT + r")\s*\(([^)]*)\)")
ANONYMOUS_FUNCTION = re.compile(
    r"\b(?:var|let|const)\s+(" + IDENT + r")\s*=\s*function\s*\(([^)]*)\)"
)
ANY_FUNCTION_PARAMS = re.compile(r"\bfunction\s*(?:" + IDENT + r")?\s*\(([^)]*)\)")
ARRAY_CALLBACK = re.compile(
    r"\.(map|filter|reduce|forEach|find|some|every)\s*\(\s*"
    r"(?:function\s*\(([^)]*)\)|\(([^)]*)\)\s*=>|(" + IDENT + r")\s*=>)"
)
SWITCH_SUBJECT = re.compile(r"\bswitch\s*\(([^)]+)\)")
# The initializer is a lookahead so declarations nested inside it are still found.
DECLARATION = re.compile(r"\b(var|let|const)\s+(" + IDENT + r")(?=(?:\s*=\s*([^;]+))?)")


def _split_params(raw: str) -> List[str]:
    return [p.strip() for p in (raw or "").split(",") if p.strip()]


def _initializer_context(init: str) -> Optional[str]:
    init = init.strip()
    if "new Date" in init:
        return "date"
    if "getElementById" in init or "querySelector" in init:
        return "element"
    if "[]" in init or init.startswith("["):
        return "items"
    if "{}" in init or init.startswith("{"):
        return "data"
    if "function" in init or "=>" in init:
        return "callback"
    if re.search(r"\d", init) and not re.search(r"['\"`]", init):
        return "value"
    if re.search(r"['\"`]", init):
        return "text"
    if re.search(r"\b(true|false)\b", init):
        return "isEnabled"
    return None


class RenameVariablesTransformer(Transformer):
    """Replace short variable names with descriptive, context-derived ones."""

    transformer_id = "rename-variables"
    display_name = "Rename Variables"
    description = "Replaces short variable names with more descriptive ones"
    options = {
        "preserve_builtins": OptionSpec("boolean", True, "Preserve built-in names"),
    }

    def transform(self, code: str, options: Optional[Dict[str, Any]] = None) -> TransformResult:
        opts = self.resolve_options(options)
        empty = {"variables_renamed": 0, "total_replacements": 0, "rename_map": {}}
        if not code:
            return TransformResult(code or "", empty)

        candidates = self._collect_candidates(code, opts["preserve_builtins"])
        if not candidates:
            return TransformResult(code, empty)

        contexts = self._infer_contexts(code, set(candidates))
        rename_map = self._build_rename_map(code, candidates, contexts)

        pattern = re.compile(
            r"(?<![a-zA-Z0-9_$])("
            + "|".join(re.escape(name) for name in sorted(rename_map, key=len, reverse=True))
            + r")(?![a-zA-Z0-9_$])"
        )
        renamed, replacements = pattern.subn(lambda m: rename_map[m.group(1)], code)
        logger.debug(f"Renamed {len(rename_map)} variables ({replacements} replacements)")

        return TransformResult(
            format_code(renamed),
            {
                "variables_renamed": len(rename_map),
                "total_replacements": replacements,
                "rename_map": rename_map,
            },
        )

    def _collect_candidates(self, code: str, preserve_builtins: bool) -> List[str]:
        """Short declared names and function parameters, in first-seen order."""
        found: List[tuple] = []
        for match in DECLARATION.finditer(code):
            found.append((match.start(2), match.group(2)))
        for match in ANY_FUNCTION_PARAMS.finditer(code):
            offset = match.start(1)
            for param in _split_params(match.group(1)):
                found.append((offset, param))
        for match in ARRAY_CALLBACK.finditer(code):
            raw = match.group(2) or match.group(3) or match.group(4) or ""
            for param in _split_params(raw):
                found.append((match.start(), param))

        candidates: List[str] = []
        for _, name in sorted(found, key=lambda item: item[0]):
            if name in candidates or len(name) > 2:
                continue
            if not re.fullmatch(IDENT, name) or name in RESERVED:
                continue
            if preserve_builtins and name in BUILTINS:
                continue
            candidates.append(name)
        return candidates

    def _infer_contexts(self, code: str, candidates: Set[str]) -> Dict[str, str]:
        """Run the context heuristics in priority order; the first to name a variable wins."""
        contexts: Dict[str, str] = {}

        def claim(name: str, context: str):
            if name in candidates and name not in contexts:
                contexts[name] = context

        # (a) loop headers
        for match in FOR_LOOP.finditer(code):
            name = match.group(1)
            claim(name, "index" if name == "i" else f"{name}Index")
        for match in WHILE_CONDITION.finditer(code):
            for name in IDENTIFIER_PATTERN.findall(match.group(1)):
                claim(name, "counter")

        # (b) named function hints
        for match in NAMED_FUNCTION.finditer(code):
            func_name = match.group(1).lower()
            params = _split_params(match.group(2))
            if "get" in func_name or "fetch" in func_name:
                if params:
                    claim(params[0], "id")
            elif "calc" in func_name or "compute" in func_name:
                for idx, param in enumerate(params):
                    claim(param, "value" if idx == 0 else "factor")
            elif "set" in func_name or "update" in func_name:
                if params:
                    claim(params[0], "newValue")

        # (c) anonymous function parameters
        for match in ANONYMOUS_FUNCTION.finditer(code):
            for idx, param in enumerate(_split_params(match.group(2))):
                claim(param, "param" if idx == 0 else f"param{idx + 1}")

        # (d) array method callbacks
        for match in ARRAY_CALLBACK.finditer(code):
            method = match.group(1)
            params = _split_params(match.group(2) or match.group(3) or match.group(4) or "")
            if params:
                claim(params[0], "acc" if method == "reduce" else "item")

        # (e) switch over an indexed mapping object
        for match in SWITCH_SUBJECT.finditer(code):
            mapping = re.match(r"\s*(" + IDENT + r")\[", match.group(1))
            if mapping:
                claim(mapping.group(1), "mappings")

        # (f) initializer shape
        for match in DECLARATION.finditer(code):
            if match.group(3):
                context = _initializer_context(match.group(3))
                if context:
                    claim(match.group(2), context)

        return contexts

    @staticmethod
    def _build_rename_map(code: str, candidates: List[str], contexts: Dict[str, str]) -> Dict[str, str]:
        taken = set(IDENTIFIER_PATTERN.findall(code)) - set(candidates)
        rename_map: Dict[str, str] = {}
        for name in candidates:
            if name in contexts:
                proposal = contexts[name]
            elif len(name) == 1 and name in COMMON_VARIABLE_MAP:
                proposal = COMMON_VARIABLE_MAP[name]
            else:
                proposal = f"{name}Value"

            unique = proposal
            suffix = 2
            while unique in taken:
                unique = f"{proposal}{suffix}"
                suffix += 1
            taken.add(unique)
            rename_map[name] = unique
        return rename_map
