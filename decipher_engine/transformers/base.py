from abc import ABC, abstractmethod
from typing import Any, Dict, Mapping, Optional
import logging
import re

from ..core.models import OptionSpec, TransformerDescriptor, TransformResult
from ..utils.helpers import round_half_up

logger = logging.getLogger(__name__)


class Transformer(ABC):
    """Base class for all transformer rules.

    Subclasses declare ``transformer_id``, ``display_name``, ``description`` and
    ``options`` and implement ``transform``. A rule that finds nothing to do
    returns its input unchanged with zero-valued stats.
    """

    transformer_id: str = ""
    display_name: str = ""
    description: str = ""
    options: Mapping[str, OptionSpec] = {}

    @abstractmethod
    def transform(self, code: str, options: Optional[Dict[str, Any]] = None) -> TransformResult:
        """Rewrite the code. Return TransformResult(code, stats)."""
        pass

    @property
    def name(self) -> str:
        return self.transformer_id

    @property
    def descriptor(self) -> TransformerDescriptor:
        return TransformerDescriptor(
            id=self.transformer_id,
            name=self.display_name,
            description=self.description,
            options=dict(self.options),
        )

    def resolve_options(self, options: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        """Merge caller options over declared defaults, coercing declared types."""
        resolved = {key: spec.default for key, spec in self.options.items()}
        for key, value in (options or {}).items():
            spec = self.options.get(key)
            if spec is None:
                logger.debug(f"Ignoring unrecognized option {key} for {self.transformer_id}")
                continue
            resolved[key] = spec.coerce(key, value)
        return resolved


class FormatTransformer(Transformer):
    """Re-indent code by tracking brace depth (2 spaces per level)."""

    transformer_id = "format"
    display_name = "Format Code"
    description = "Formats code with proper indentation and spacing"
    options = {}

    def transform(self, code: str, options: Optional[Dict[str, Any]] = None) -> TransformResult:
        if not code:
            return TransformResult(code or "", {"lines": 0, "lines_changed": 0})

        lines = code.split("\n")
        formatted = []
        indent = 0
        for line in lines:
            trimmed = line.strip()
            if trimmed.endswith("{"):
                formatted.append("  " * indent + trimmed)
                indent += 1
            elif trimmed.startswith("}"):
                indent = max(0, indent - 1)
                formatted.append("  " * indent + trimmed)
            elif trimmed:
                formatted.append("  " * indent + trimmed)
            else:
                formatted.append("")

        changed = sum(1 for before, after in zip(lines, formatted) if before != after)
        return TransformResult("\n".join(formatted), {"lines": len(lines), "lines_changed": changed})


def format_code(code: str) -> str:
    """Shortcut used by the other rules after they rewrite text."""
    return FormatTransformer().transform(code).code


class MinifyTransformer(Transformer):
    """Strip comments and redundant whitespace."""

    transformer_id = "minify"
    display_name = "Minify Code"
    description = "Removes whitespace and shortens code"
    options = {
        "remove_comments": OptionSpec("boolean", True, "Remove comments"),
    }

    def transform(self, code: str, options: Optional[Dict[str, Any]] = None) -> TransformResult:
        opts = self.resolve_options(options)
        if not code:
            return TransformResult(code or "", {"original_size": 0, "minified_size": 0, "reduction": 0})

        processed = code
        if opts["remove_comments"]:
            processed = re.sub(r"//.*$", "", processed, flags=re.MULTILINE)
            processed = re.sub(r"/\*[\s\S]*?\*/", "", processed)

        processed = re.sub(r"\s+", " ", processed)
        processed = re.sub(r"\s*([{}:;,])\s*", r"\1", processed)
        processed = re.sub(r"\s*\(\s*", "(", processed)
        processed = re.sub(r"\s*\)\s*", ")", processed)
        processed = processed.strip()

        return TransformResult(
            processed,
            {
                "original_size": len(code),
                "minified_size": len(processed),
                "reduction": round_half_up((1 - len(processed) / len(code)) * 100),
            },
        )


class ES6ToES5Transformer(Transformer):
    """Best-effort ES6 -> ES5 downleveling.

    Handles arrow functions with block bodies, let/const and template literals
    with a single interpolation. Nested templates, destructuring and default
    parameters are left as they are.
    """

    transformer_id = "es6-to-es5"
    display_name = "ES6 to ES5"
    description = "Converts modern JavaScript to ES5 compatible code"
    options = {}

    NAMED_ARROW = re.compile(r"const\s+(\w+)\s*=\s*\(([^)]*)\)\s*=>\s*\{")
    ARROW = re.compile(r"\(([^)]*)\)\s*=>\s*\{")
    LET = re.compile(r"\blet\s+")
    CONST = re.compile(r"\bconst\s+")
    TEMPLATE = re.compile(r"`([^`$]*)\$\{([^}]*)\}([^`$]*)`")

    def transform(self, code: str, options: Optional[Dict[str, Any]] = None) -> TransformResult:
        converted, named = self.NAMED_ARROW.subn(r"function \1(\2) {", code or "")
        converted, anonymous = self.ARROW.subn(r"function(\1) {", converted)
        converted, lets = self.LET.subn("var ", converted)
        converted, consts = self.CONST.subn("var ", converted)
        converted, templates = self.TEMPLATE.subn(self._concat_template, converted)

        stats = {
            "arrow_functions": named + anonymous,
            "let_const": lets + consts,
            "template_literals": templates,
        }
        stats["total"] = sum(stats.values())
        return TransformResult(converted, stats)

    @staticmethod
    def _concat_template(match: re.Match) -> str:
        before, expression, after = match.groups()
        parts = []
        if before:
            parts.append('"' + before.replace('"', '\\"') + '"')
        parts.append(expression.strip())
        if after:
            parts.append('"' + after.replace('"', '\\"') + '"')
        if not before:
            # Keep the result a string even when the template starts with ${...}
            parts.insert(0, '""')
        return " + ".join(parts)


class JSXToJSTransformer(Transformer):
    """Best-effort JSX -> React.createElement for single-level elements.

    Nested elements, attribute expressions and self-closing tags are not
    converted.
    """

    transformer_id = "jsx-to-js"
    display_name = "JSX to JavaScript"
    description = "Converts JSX syntax to plain JavaScript"
    options = {}

    ELEMENT = re.compile(r"<(\w+)([^<>]*)>([^<]*)</\1>")
    ATTRIBUTE = re.compile(r"([\w-]+)\s*=\s*\"([^\"]*)\"")

    def transform(self, code: str, options: Optional[Dict[str, Any]] = None) -> TransformResult:
        converted, count = self.ELEMENT.subn(self._create_element, code or "")
        return TransformResult(converted, {"elements_converted": count})

    def _create_element(self, match: re.Match) -> str:
        tag, raw_attrs, text = match.groups()
        attrs = self.ATTRIBUTE.findall(raw_attrs)
        if attrs:
            props = "{" + ", ".join(f'"{key}": "{value}"' for key, value in attrs) + "}"
        else:
            props = "null"
        text = text.strip().replace('"', '\\"')
        return f'React.createElement("{tag}", {props}, "{text}")'
