"""
Plugin system for Decipher Engine.

Plugins are plain ``*.py`` files dropped into a configured directory. Every
``PluginTransformer`` subclass they define is instantiated and registered
next to the built-in transformers under its own ``transformer_id``.
"""

from typing import Dict, Any, List, Optional
import importlib.util
import sys
from pathlib import Path
import logging

from ..core.registry import TransformerRegistry
from ..transformers.base import Transformer

logger = logging.getLogger(__name__)


class PluginTransformer(Transformer):
    """Base class for plugin transformers."""

    @property
    def priority(self) -> int:
        """Registration order (higher first). A later plugin with the same id wins."""
        return 0


class PluginManager:
    """Loads plugin files and registers their transformers."""

    def __init__(self, plugin_dirs: List[Path] = None):
        self.plugin_dirs = [Path(d) for d in (plugin_dirs or [])]
        self.transformers: List[PluginTransformer] = []
        self.loaded_plugins: Dict[str, Any] = {}

    def add_plugin_dir(self, plugin_dir: Path):
        plugin_dir = Path(plugin_dir)
        if plugin_dir not in self.plugin_dirs:
            self.plugin_dirs.append(plugin_dir)

    def load_plugins(self):
        """Load all plugins from configured directories."""
        for plugin_dir in self.plugin_dirs:
            if plugin_dir.exists() and plugin_dir.is_dir():
                self._load_plugins_from_dir(plugin_dir)
            else:
                logger.warning(f"Plugin directory not found: {plugin_dir}")

        self.transformers.sort(key=lambda t: t.priority, reverse=True)

    def register_into(self, registry: TransformerRegistry, builtin_ids: Optional[List[str]] = None):
        """Add loaded transformers to a registry. Built-in ids are never replaced."""
        protected = set(builtin_ids if builtin_ids is not None else registry.ids())
        for transformer in reversed(self.transformers):
            if transformer.transformer_id in protected:
                logger.warning(f"Plugin transformer {transformer.transformer_id} shadows a built-in, skipped")
                continue
            registry.register(transformer)

    def _load_plugins_from_dir(self, plugin_dir: Path):
        for item in sorted(plugin_dir.iterdir()):
            if item.is_file() and item.suffix == ".py" and not item.name.startswith("_"):
                self._load_plugin_file(item)

    def _load_plugin_file(self, plugin_file: Path):
        module_name = f"decipher_engine_plugins_{plugin_file.stem}"
        try:
            spec = importlib.util.spec_from_file_location(module_name, plugin_file)
            if spec and spec.loader:
                module = importlib.util.module_from_spec(spec)
                sys.modules[module_name] = module
                spec.loader.exec_module(module)
                self._register_plugin_classes(module, plugin_file.stem)
                self.loaded_plugins[plugin_file.stem] = module
        except Exception as e:
            sys.modules.pop(module_name, None)
            logger.warning(f"Failed to load plugin {plugin_file}: {e}")

    def _register_plugin_classes(self, module, plugin_name: str):
        for attr_name in dir(module):
            attr = getattr(module, attr_name)
            if (
                isinstance(attr, type)
                and issubclass(attr, PluginTransformer)
                and attr is not PluginTransformer
                and attr.__module__ == module.__name__
            ):
                try:
                    instance = attr()
                except Exception as e:
                    logger.warning(f"Failed to instantiate {attr_name} from plugin {plugin_name}: {e}")
                    continue
                if not instance.transformer_id:
                    logger.warning(f"Plugin class {attr_name} has no transformer_id, skipped")
                    continue
                self.transformers.append(instance)
                logger.info(f"Loaded transformer plugin: {instance.transformer_id}")

    def get_transformers(self) -> List[PluginTransformer]:
        return self.transformers.copy()

    def get_plugin_info(self) -> Dict[str, Any]:
        return {
            "plugin_dirs": [str(d) for d in self.plugin_dirs],
            "loaded_plugins": list(self.loaded_plugins.keys()),
            "transformers": [t.transformer_id for t in self.transformers],
        }
