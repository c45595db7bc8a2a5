from typing import Any, Dict, Iterable, List, Optional
import logging

from .models import TransformerDescriptor, TransformResult, UnknownTransformerError
from ..transformers.base import (
    Transformer, FormatTransformer, MinifyTransformer, ES6ToES5Transformer, JSXToJSTransformer
)
from ..transformers.control_flow import FlattenControlFlowTransformer
from ..transformers.dead_code import RemoveDeadCodeTransformer
from ..transformers.pipeline import AutoDeobfuscateTransformer
from ..transformers.renaming import RenameVariablesTransformer

logger = logging.getLogger(__name__)

# Built-in catalog, in display order. Never mutated.
BUILTIN_TRANSFORMERS = (
    FormatTransformer(),
    MinifyTransformer(),
    ES6ToES5Transformer(),
    JSXToJSTransformer(),
    RenameVariablesTransformer(),
    FlattenControlFlowTransformer(),
    RemoveDeadCodeTransformer(),
    AutoDeobfuscateTransformer(),
)


class TransformerRegistry:
    """Maps transformer ids to rules and dispatches calls to them."""

    def __init__(self, transformers: Optional[Iterable[Transformer]] = None,
                 enabled: Optional[Dict[str, bool]] = None):
        self._transformers: Dict[str, Transformer] = {}
        enabled = enabled or {}
        for transformer in (BUILTIN_TRANSFORMERS if transformers is None else transformers):
            if enabled.get(transformer.transformer_id, True):
                self._transformers[transformer.transformer_id] = transformer

    def register(self, transformer: Transformer) -> None:
        if transformer.transformer_id in self._transformers:
            logger.warning(f"Replacing transformer: {transformer.transformer_id}")
        self._transformers[transformer.transformer_id] = transformer
        logger.info(f"Registered transformer: {transformer.transformer_id}")

    def get(self, transformer_id: str) -> Transformer:
        try:
            return self._transformers[transformer_id]
        except KeyError:
            raise UnknownTransformerError(transformer_id) from None

    def ids(self) -> List[str]:
        return list(self._transformers)

    def descriptors(self) -> List[TransformerDescriptor]:
        return [transformer.descriptor for transformer in self._transformers.values()]

    def apply(self, code: str, transformer_id: str, options: Optional[Dict[str, Any]] = None) -> TransformResult:
        """Run one rule. Raises UnknownTransformerError for ids not in the registry."""
        transformer = self.get(transformer_id)
        return transformer.transform(code, transformer.resolve_options(options))

    def __contains__(self, transformer_id: str) -> bool:
        return transformer_id in self._transformers

    def __len__(self) -> int:
        return len(self._transformers)


default_registry = TransformerRegistry()


def list_transformers() -> List[TransformerDescriptor]:
    """Static catalog of the built-in transformers."""
    return [transformer.descriptor for transformer in BUILTIN_TRANSFORMERS]


def apply_transformation(code: str, transformer_id: str, options: Optional[Dict[str, Any]] = None) -> TransformResult:
    return default_registry.apply(code, transformer_id, options)
