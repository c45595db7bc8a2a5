from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence
import logging

from ..config import Config
from .legacy_scoring import calculate_score, combine_scores
from .models import HistoryEntry, InputTooLargeError, ScoreBreakdown, TransformResult
from .registry import TransformerRegistry
from .scoring import ChallengeScorer, ReadabilityScorer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StepOutcome:
    """Everything one transformation step produces."""

    result: TransformResult
    readability: int
    challenge_score: int
    legacy_score: int
    step_score: int
    entry: HistoryEntry

    @property
    def breakdown(self) -> Optional[ScoreBreakdown]:
        return self.entry.breakdown

    def to_dict(self) -> Dict[str, Any]:
        return {
            "result": self.result.to_dict(),
            "readability": self.readability,
            "challenge_score": self.challenge_score,
            "legacy_score": self.legacy_score,
            "step_score": self.step_score,
            "entry": self.entry.to_dict(),
        }


class TransformEngine:
    """Apply a transformer, rate the result and build the history entry.

    The engine holds no session state: history is passed in and returned
    untouched, and the caller decides whether to append the new entry.
    """

    def __init__(self, config: Config = None, registry: TransformerRegistry = None):
        self.config = config or Config()
        self.max_input_size = int(self.config.get("max_input_size", 512 * 1024))
        self.registry = registry or TransformerRegistry(enabled=self.config.get("transformers", {}))

    def check_input(self, code: str) -> None:
        if len(code) > self.max_input_size:
            raise InputTooLargeError(len(code), self.max_input_size)

    def apply(
        self,
        code: str,
        transformer_id: str,
        options: Optional[Dict[str, Any]] = None,
        history: Sequence[HistoryEntry] = (),
        is_manual_mode: bool = True,
    ) -> StepOutcome:
        code = code or ""
        self.check_input(code)

        transformer = self.registry.get(transformer_id)
        merged = self.config.transformer_options(transformer_id)
        merged.update(options or {})
        resolved = transformer.resolve_options(merged)

        logger.info(f"Applying {transformer_id} to {len(code)} characters")
        result = transformer.transform(code, resolved)

        readability = ReadabilityScorer.score(result.code)
        breakdown = ChallengeScorer.score(code, result.code, list(history), is_manual_mode)
        legacy = calculate_score(code, result.code, transformer_id)
        step_score = combine_scores(breakdown.total, legacy)

        entry = HistoryEntry(
            transformer_id=transformer_id,
            options=resolved,
            original_code=code,
            transformed_code=result.code,
            score=step_score,
            breakdown=breakdown,
        )
        logger.debug(
            f"{transformer_id}: readability={readability} challenge={breakdown.total} "
            f"legacy={legacy} step={step_score}"
        )
        return StepOutcome(
            result=result,
            readability=readability,
            challenge_score=breakdown.total,
            legacy_score=legacy,
            step_score=step_score,
            entry=entry,
        )
