#!/usr/bin/env python3

import argparse
import json
import sys
from contextlib import nullcontext
from pathlib import Path

from . import __version__ as DECIPHER_VERSION
from .config import Config
from .core.engine import TransformEngine
from .core.models import (
    DecipherError,
    HistoryEntry,
    InputTooLargeError,
    InvalidOptionError,
    UnknownTransformerError,
)
from .core.offline_guard import block_network, is_network_blocked
from .core.oracle import HttpEquivalenceOracle, safe_validate
from .core.registry import TransformerRegistry
from .core.scoring import ReadabilityScorer, readability_label
from .core.session import GameSession, MODES
from .plugins import PluginManager
from .samples import available_samples, load_sample
from .utils.helpers import analyze_code

EXIT_OK = 0
EXIT_INPUT_ERROR = 1
EXIT_USAGE_ERROR = 2


def _fail(message: str, code: int):
    print(f"Error: {message}", file=sys.stderr)
    sys.exit(code)


def _parse_options(pairs):
    options = {}
    for pair in pairs or []:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            _fail(f"Option must look like key=value, got '{pair}'", EXIT_USAGE_ERROR)
        options[key.strip()] = value.strip()
    return options


def _load_history(path: Path):
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        _fail(f"Could not read history {path}: {e}", EXIT_INPUT_ERROR)
    if not isinstance(raw, list):
        _fail(f"History file {path} must contain a JSON list", EXIT_INPUT_ERROR)
    return [HistoryEntry.from_dict(item) for item in raw if isinstance(item, dict)]


def _read_input(args) -> str:
    if args.sample:
        try:
            return load_sample(args.sample)
        except FileNotFoundError as e:
            _fail(f"{e} (available: {', '.join(available_samples())})", EXIT_INPUT_ERROR)

    if not args.file:
        _fail("--file or --sample is required", EXIT_INPUT_ERROR)
    if not args.file.exists():
        _fail(f"Input file {args.file} does not exist", EXIT_INPUT_ERROR)
    try:
        code = args.file.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        _fail(f"Could not read file {args.file}: {e}", EXIT_INPUT_ERROR)
    if not code.strip():
        _fail(f"Input file {args.file} is empty", EXIT_INPUT_ERROR)
    return code


def build_registry(config: Config, extra_plugin_dirs=None) -> TransformerRegistry:
    """Built-in transformers plus any plugin transformers from configured directories."""
    registry = TransformerRegistry(enabled=config.get("transformers", {}))
    plugin_dirs = [Path(p) for p in (config.get("plugin_dirs") or [])]
    plugin_dirs.extend(Path(p) for p in (extra_plugin_dirs or []))
    if plugin_dirs:
        manager = PluginManager(plugin_dirs)
        manager.load_plugins()
        manager.register_into(registry)
    return registry


def main():
    parser = argparse.ArgumentParser(
        description="Decipher Engine - heuristic JavaScript deobfuscation and challenge scoring"
    )
    parser.add_argument("--version", action="version", version=f"decipher-engine {DECIPHER_VERSION}")
    parser.add_argument("--file", "-f", type=Path, help="JavaScript file to transform")
    parser.add_argument("--sample", help="Use a bundled sample instead of --file (e.g. obfuscated)")
    parser.add_argument(
        "--transformer", "-t", default="auto-deobfuscate",
        help="Transformer id to apply (default: auto-deobfuscate)",
    )
    parser.add_argument(
        "--option", "-O", action="append", metavar="KEY=VALUE",
        help="Transformer option, may be repeated (e.g. -O max_depth=1)",
    )
    parser.add_argument(
        "--list-transformers", action="store_true",
        help="List available transformers and their options as JSON and exit",
    )
    parser.add_argument("--mode", choices=list(MODES), help="Scoring mode (default from config)")
    parser.add_argument("--history", type=Path, help="JSON list of prior history entries")
    parser.add_argument("--history-out", type=Path, help="Write the updated history as JSON")
    parser.add_argument("--out", "-o", type=Path, help="Output JSON report file")
    parser.add_argument(
        "--stdout", choices=["json", "code", "none"], default="json",
        help="What to print: the JSON report (when --out is not set), the transformed code, or nothing",
    )
    parser.add_argument(
        "--validate", action="store_true",
        help="Ask the equivalence oracle whether the result matches the input",
    )
    parser.add_argument("--offline", action="store_true", help="Block all network access for this run")
    parser.add_argument("--config", type=Path, help="Configuration file path")
    parser.add_argument(
        "--plugin-dir", type=Path, action="append",
        help="Directory with plugin transformers, may be repeated",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
    parser.add_argument("--log-json", action="store_true", help="Emit logs as JSON lines")

    args = parser.parse_args()

    config = Config(args.config) if args.config else Config()

    if config.get("enable_logging", True):
        from .core.secure_logging import setup_secure_logging

        level = "DEBUG" if args.verbose else config.get("log_level", "INFO")
        setup_secure_logging(
            level,
            enable_redaction=bool(config.get("enable_redaction", True)),
            log_json=bool(args.log_json),
        )

    registry = build_registry(config, args.plugin_dir)

    if args.list_transformers:
        print(json.dumps({"transformers": [d.to_dict() for d in registry.descriptors()]}, indent=2))
        sys.exit(EXIT_OK)

    options = _parse_options(args.option)
    code = _read_input(args)
    history = _load_history(args.history) if args.history else []

    session = GameSession(TransformEngine(config, registry), history)
    session.select_mode(args.mode or config.get("default_mode", "manual"))

    offline_ctx = block_network() if args.offline else nullcontext()
    with offline_ctx:
        try:
            outcome = session.apply_transformation(code, args.transformer, options)
        except UnknownTransformerError as e:
            _fail(f"{e.message} (available: {', '.join(registry.ids())})", EXIT_USAGE_ERROR)
        except InvalidOptionError as e:
            _fail(str(e), EXIT_USAGE_ERROR)
        except InputTooLargeError as e:
            _fail(str(e), EXIT_INPUT_ERROR)
        except DecipherError as e:
            _fail(str(e), EXIT_INPUT_ERROR)

        verdict = None
        if args.validate:
            oracle = HttpEquivalenceOracle.from_config(config)
            verdict = safe_validate(oracle, code, outcome.result.code)
            session.record_verdict(code, outcome.result.code, verdict)
        network_blocked = is_network_blocked()

    original_readability = ReadabilityScorer.score(code)
    report = {
        "meta": {
            "version": DECIPHER_VERSION,
            "transformer": args.transformer,
            "mode": session.mode,
            "offline": bool(args.offline),
            "network_blocked": network_blocked,
        },
        "result": outcome.result.to_dict(),
        "readability": {
            "before": original_readability,
            "after": outcome.readability,
            "label": readability_label(outcome.readability),
        },
        "score": {
            "challenge": outcome.challenge_score,
            "legacy": outcome.legacy_score,
            "step": outcome.step_score,
            "breakdown": outcome.breakdown.to_dict() if outcome.breakdown else None,
        },
        "metrics": {"before": analyze_code(code), "after": analyze_code(outcome.result.code)},
        "session": session.summary(),
        "verdict": verdict.to_dict() if verdict else None,
    }

    if args.history_out:
        args.history_out.parent.mkdir(parents=True, exist_ok=True)
        args.history_out.write_text(
            json.dumps([entry.to_dict() for entry in session.history], indent=2), encoding="utf-8"
        )

    if args.out:
        args.out.parent.mkdir(parents=True, exist_ok=True)
        args.out.write_text(json.dumps(report, indent=2), encoding="utf-8")

    if args.stdout == "code":
        print(outcome.result.code)
    elif args.stdout == "json" and not args.out:
        print(json.dumps(report, indent=2))

    sys.exit(EXIT_OK)


if __name__ == "__main__":
    main()
