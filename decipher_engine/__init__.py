"""Decipher Engine - heuristic JavaScript deobfuscation and challenge scoring."""

__version__ = "1.0.0"
