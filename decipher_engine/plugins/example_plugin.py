"""
Example plugin for Decipher Engine.

Shows how to add a transformer from outside the package: subclass
``PluginTransformer``, declare an id and options, implement ``transform``.
Point ``plugin_dirs`` (or ``--plugin-dir``) at the directory holding this file.
"""

import re
from typing import Any, Dict, Optional

from decipher_engine.core.models import OptionSpec, TransformResult
from decipher_engine.plugins import PluginTransformer


class StripConsoleTransformer(PluginTransformer):
    """Remove single-line console calls such as ``console.log("x");``."""

    transformer_id = "strip-console"
    display_name = "Strip Console Calls"
    description = "Removes console logging statements"
    options = {
        "methods": OptionSpec("string", "log,debug,info", "Comma-separated console methods"),
    }

    def transform(self, code: str, options: Optional[Dict[str, Any]] = None) -> TransformResult:
        opts = self.resolve_options(options)
        methods = [m.strip() for m in opts["methods"].split(",") if m.strip()]
        if not code or not methods:
            return TransformResult(code or "", {"calls_removed": 0})

        pattern = re.compile(
            r"^[ \t]*console\.(?:" + "|".join(map(re.escape, methods)) + r")\([^\n]*\);?[ \t]*\n?",
            re.MULTILINE,
        )
        cleaned, removed = pattern.subn("", code)
        return TransformResult(cleaned, {"calls_removed": removed})

    @property
    def priority(self) -> int:
        return 5
