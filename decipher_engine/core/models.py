"""Core data models for Decipher Engine.

These records are shared by the transformer rules, the scorers and the game
session. They are plain dataclasses so they serialize cleanly to JSON for the
history log and the CLI report.

Design goals:
- Descriptors and option specs are immutable once the catalog is built
- Score breakdowns always satisfy the clamped total invariant
- History entries round-trip through JSON without losing fields
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

OPTION_TYPES = ("boolean", "number", "string")


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class DecipherError(Exception):
    """Base error for the engine. Carries a context dict for logging."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        context_str = f" - Context: {self.context}" if self.context else ""
        return f"{self.message}{context_str}"


class UnknownTransformerError(DecipherError):
    """Raised when a transformer id is not in the catalog."""

    def __init__(self, transformer_id: str):
        super().__init__(
            f"Unknown transformer '{transformer_id}'",
            {"transformer_id": transformer_id},
        )
        self.transformer_id = transformer_id


class InvalidOptionError(DecipherError, ValueError):
    """Raised when an option value cannot be coerced to its declared type."""

    def __init__(self, key: str, value: Any, expected: str):
        super().__init__(
            f"Option '{key}' expects a {expected} value",
            {"option": key, "value": value},
        )


class InputTooLargeError(DecipherError, ValueError):
    """Raised when the snippet exceeds the configured size limit."""

    def __init__(self, size: int, limit: int):
        super().__init__(
            f"Input of {size} characters exceeds the limit of {limit}",
            {"size": size, "limit": limit},
        )


@dataclass(frozen=True)
class OptionSpec:
    """Declared configuration option of a transformer."""

    type: str
    default: Any
    label: str

    def __post_init__(self):
        if self.type not in OPTION_TYPES:
            raise ValueError(f"Unsupported option type: {self.type}")

    def coerce(self, key: str, value: Any) -> Any:
        """Convert a caller-supplied value to the declared type."""
        if self.type == "boolean":
            if isinstance(value, bool):
                return value
            if isinstance(value, (int, float)) and value in (0, 1):
                return bool(value)
            if isinstance(value, str) and value.strip().lower() in {"true", "1", "yes", "on"}:
                return True
            if isinstance(value, str) and value.strip().lower() in {"false", "0", "no", "off"}:
                return False
            raise InvalidOptionError(key, value, "boolean")

        if self.type == "number":
            if isinstance(value, bool):
                raise InvalidOptionError(key, value, "number")
            if isinstance(value, (int, float)):
                return value
            try:
                text = str(value).strip()
                return int(text) if text.lstrip("-").isdigit() else float(text)
            except (TypeError, ValueError):
                raise InvalidOptionError(key, value, "number") from None

        return str(value)

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "default": self.default, "label": self.label}


@dataclass(frozen=True)
class TransformerDescriptor:
    """Catalog entry describing one transformer to the UI."""

    id: str
    name: str
    description: str
    options: Mapping[str, OptionSpec] = field(default_factory=dict)

    def defaults(self) -> Dict[str, Any]:
        return {key: spec.default for key, spec in self.options.items()}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "options": {key: spec.to_dict() for key, spec in self.options.items()},
        }


@dataclass
class TransformResult:
    """Rewritten code plus rule-specific statistics."""

    code: str
    stats: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "stats": self.stats}


@dataclass(frozen=True)
class ScoreBreakdown:
    """Per-term challenge score. Build with ``from_terms`` to keep the total honest."""

    clarity_gain: int = 0
    transform_accuracy: int = 0
    obfuscation_reduction: int = 0
    efficiency: int = 0
    step_wise_optimization: int = 0
    bonus: int = 0
    penalty: int = 0
    total: int = 0

    @classmethod
    def from_terms(
        cls,
        clarity_gain: int,
        transform_accuracy: int,
        obfuscation_reduction: int,
        efficiency: int,
        step_wise_optimization: int,
        bonus: int = 0,
        penalty: int = 0,
    ) -> "ScoreBreakdown":
        raw = (
            clarity_gain
            + transform_accuracy
            + obfuscation_reduction
            + efficiency
            + step_wise_optimization
            + bonus
            - penalty
        )
        return cls(
            clarity_gain=clarity_gain,
            transform_accuracy=transform_accuracy,
            obfuscation_reduction=obfuscation_reduction,
            efficiency=efficiency,
            step_wise_optimization=step_wise_optimization,
            bonus=bonus,
            penalty=penalty,
            total=max(0, min(100, int(raw))),
        )

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ScoreBreakdown":
        return cls(**{k: int(data.get(k, 0) or 0) for k in cls.__dataclass_fields__})


@dataclass(frozen=True)
class HistoryEntry:
    """One step of a session's append-only transformation log."""

    transformer_id: str
    options: Dict[str, Any]
    original_code: str
    transformed_code: str
    score: int
    breakdown: Optional[ScoreBreakdown] = None
    timestamp: str = field(default_factory=_utc_now_iso)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "transformer_id": self.transformer_id,
            "options": dict(self.options),
            "original_code": self.original_code,
            "transformed_code": self.transformed_code,
            "score": self.score,
            "breakdown": self.breakdown.to_dict() if self.breakdown else None,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "HistoryEntry":
        breakdown = data.get("breakdown")
        return cls(
            transformer_id=str(data.get("transformer_id", "")),
            options=dict(data.get("options") or {}),
            original_code=str(data.get("original_code", "")),
            transformed_code=str(data.get("transformed_code", "")),
            score=int(data.get("score", 0) or 0),
            breakdown=ScoreBreakdown.from_dict(breakdown) if breakdown else None,
            timestamp=str(data.get("timestamp") or _utc_now_iso()),
        )
