from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple
import logging

from .engine import StepOutcome, TransformEngine
from .models import DecipherError, HistoryEntry, ScoreBreakdown
from .oracle import OracleVerdict
from ..utils.helpers import round_half_up

logger = logging.getLogger(__name__)

MODES = ("manual", "auto")
MANUAL_ENTRY_ID = "manual-deobfuscation"

# Share of an oracle score credited to each rubric term.
VERDICT_SPLIT = {
    "clarity_gain": 0.4,
    "transform_accuracy": 0.25,
    "obfuscation_reduction": 0.15,
    "efficiency": 0.1,
    "step_wise_optimization": 0.1,
}

LEVEL_BADGES = (
    (1000, "Grand Master"),
    (500, "Master Transformer"),
    (200, "Code Wizard"),
    (100, "Code Adept"),
)


def level_badge(score: int) -> str:
    for threshold, name in LEVEL_BADGES:
        if score >= threshold:
            return name
    return "Apprentice"


def rank_leaderboard(entries: Iterable[Mapping[str, Any]]) -> List[Mapping[str, Any]]:
    """Entries sorted by score, highest first. Ties keep their input order."""
    return sorted(entries, key=lambda entry: entry.get("score", 0), reverse=True)


class GameSession:
    """Mode, running score and the append-only history of one challenge."""

    def __init__(self, engine: TransformEngine = None, history: Iterable[HistoryEntry] = ()):
        self.engine = engine or TransformEngine()
        self.mode: Optional[str] = None
        self._history: List[HistoryEntry] = list(history)
        self.score = sum(entry.score for entry in self._history)

    @property
    def history(self) -> Tuple[HistoryEntry, ...]:
        return tuple(self._history)

    @property
    def is_manual_mode(self) -> bool:
        return self.mode != "auto"

    def select_mode(self, mode: str) -> None:
        if mode not in MODES:
            raise DecipherError(f"Unknown mode '{mode}'", {"mode": mode, "allowed": list(MODES)})
        self.mode = mode
        logger.info(f"Session mode: {mode}")

    def apply_transformation(
        self, code: str, transformer_id: str, options: Optional[Dict[str, Any]] = None
    ) -> StepOutcome:
        outcome = self.engine.apply(code, transformer_id, options, self.history, self.is_manual_mode)
        self._append(outcome.entry)
        return outcome

    def record_verdict(self, original: str, user_code: str, verdict: OracleVerdict) -> Optional[HistoryEntry]:
        """Fold an oracle verdict into the history. Incorrect verdicts add nothing."""
        if not verdict.is_correct:
            logger.info(f"Verdict not accepted: {verdict.explanation}")
            return None

        terms = {key: round_half_up(verdict.score * share) for key, share in VERDICT_SPLIT.items()}
        entry = HistoryEntry(
            transformer_id=MANUAL_ENTRY_ID,
            options={},
            original_code=original,
            transformed_code=user_code,
            score=verdict.score,
            breakdown=ScoreBreakdown.from_terms(bonus=verdict.bonus, penalty=verdict.penalty, **terms),
        )
        self._append(entry)
        return entry

    def reset(self) -> None:
        self.mode = None
        self.score = 0
        self._history = []

    def summary(self) -> Dict[str, Any]:
        return {
            "mode": self.mode,
            "score": self.score,
            "level": level_badge(self.score),
            "steps": len(self._history),
        }

    def _append(self, entry: HistoryEntry) -> None:
        self._history.append(entry)
        self.score += entry.score
        logger.debug(f"History step {len(self._history)}: {entry.transformer_id} +{entry.score}")
