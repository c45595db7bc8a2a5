"""Bundled challenge snippets."""

from pathlib import Path

SAMPLES_DIR = Path(__file__).parent


def load_sample(name: str = "obfuscated") -> str:
    """Read a bundled ``<name>.js`` sample."""
    path = SAMPLES_DIR / f"{name}.js"
    if not path.is_file():
        raise FileNotFoundError(f"No bundled sample named '{name}'")
    return path.read_text(encoding="utf-8")


def available_samples():
    return sorted(p.stem for p in SAMPLES_DIR.glob("*.js"))
