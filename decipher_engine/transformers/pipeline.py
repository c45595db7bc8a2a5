from typing import Any, Dict, Optional
import logging

from ..core.models import OptionSpec, TransformResult
from .base import FormatTransformer, Transformer
from .control_flow import FlattenControlFlowTransformer
from .dead_code import RemoveDeadCodeTransformer
from .renaming import RenameVariablesTransformer

logger = logging.getLogger(__name__)

# Growth bound for final_size relative to original_size on the bundled sample.
# Inserted comment markers and re-indentation can make the output longer.
SIZE_GROWTH_BOUND = 2


class AutoDeobfuscateTransformer(Transformer):
    """Fixed pipeline: remove-dead-code -> flatten-control-flow -> rename-variables -> format."""

    transformer_id = "auto-deobfuscate"
    display_name = "Auto Deobfuscate"
    description = "Automatically applies multiple transformations to improve code readability"
    options = {
        "preserve_builtins": OptionSpec("boolean", True, "Preserve built-in names"),
        "remove_empty_blocks": OptionSpec("boolean", True, "Remove empty blocks"),
        "max_depth": OptionSpec("number", 2, "Maximum nesting depth"),
    }

    def __init__(self):
        self.dead_code = RemoveDeadCodeTransformer()
        self.flatten = FlattenControlFlowTransformer()
        self.rename = RenameVariablesTransformer()
        self.formatter = FormatTransformer()

    def transform(self, code: str, options: Optional[Dict[str, Any]] = None) -> TransformResult:
        opts = self.resolve_options(options)
        code = code or ""

        dead = self.dead_code.transform(code, {"remove_empty_blocks": opts["remove_empty_blocks"]})
        flat = self.flatten.transform(dead.code, {"max_depth": opts["max_depth"]})
        renamed = self.rename.transform(flat.code, {"preserve_builtins": opts["preserve_builtins"]})
        final = self.formatter.transform(renamed.code).code

        transformations = {
            "dead_code_removed": (
                dead.stats["unreachable_if"]
                + dead.stats["unreachable_loops"]
                + dead.stats["unused_variables"]
            ),
            "control_flow_flattened": flat.stats["total_transformations"],
            "variables_renamed": renamed.stats["variables_renamed"],
        }
        total = sum(transformations.values())
        logger.info(f"Auto-deobfuscate applied {total} transformations")

        return TransformResult(
            final,
            {
                "transformations": transformations,
                "original_size": len(code),
                "final_size": len(final),
                "readability_improvement": min(100, 10 * total),
            },
        )
