"""
Emotional Scorer

Maps raw provider readings onto the canonical [0, 1] scale and decides
whether a reading is reliable enough to be reported as a primary result.
"""

import math
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union

import structlog

from resonance_core.core.exceptions import ResonanceError
from resonance_core.scoring.models import EmotionalScore, ScoreSource

logger = structlog.get_logger(__name__)


DEFAULT_CONFIDENCE = 0.8

RawScore = Union[Mapping[str, Any], EmotionalScore]


class ScoreBelowThreshold(ResonanceError):
    """Raised when a primary score fails reliability validation."""

    code = "score_below_threshold"

    def __init__(self, message: str, score: EmotionalScore):
        super().__init__(message, details={"arousal": score.arousal})
        self.score = score


@dataclass
class ScoringThresholds:
    """Reliability policy for primary scores."""

    min_arousal: float = 0.5

    def __post_init__(self) -> None:
        if not 0.0 <= self.min_arousal <= 1.0:
            raise ValueError("min_arousal must be within [0, 1]")


def _clamp_unit(value: Any, default: float) -> float:
    if value is None or isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return default
    if not math.isfinite(number):
        return default
    return min(max(number, 0.0), 1.0)


def _in_unit_range(value: float) -> bool:
    return math.isfinite(value) and 0.0 <= value <= 1.0


class EmotionalScorer:
    """Normalizes and validates arousal/valence scores."""

    def __init__(self, thresholds: Optional[ScoringThresholds] = None):
        self.thresholds = thresholds or ScoringThresholds()

    def normalize_score(
        self,
        raw: RawScore,
        source: ScoreSource = ScoreSource.PRIMARY,
    ) -> EmotionalScore:
        """
        Clamp a raw reading into [0, 1].

        Missing or non-numeric arousal/valence become 0.0; a missing
        confidence defaults to 0.8. Normalizing an already normalized score
        returns an equal score.
        """
        if isinstance(raw, EmotionalScore):
            raw = {
                "arousal": raw.arousal,
                "valence": raw.valence,
                "confidence": raw.confidence,
            }

        return EmotionalScore(
            arousal=_clamp_unit(raw.get("arousal"), 0.0),
            valence=_clamp_unit(raw.get("valence"), 0.0),
            confidence=_clamp_unit(raw.get("confidence"), DEFAULT_CONFIDENCE),
            source=source,
        )

    def validate_score(self, score: EmotionalScore) -> bool:
        """Check range and arousal reliability."""
        in_range = all(
            _in_unit_range(value)
            for value in (score.arousal, score.valence, score.confidence)
        )
        is_valid = in_range and score.arousal >= self.thresholds.min_arousal

        logger.debug(
            "emotional_score_validated",
            is_valid=is_valid,
            arousal=score.arousal,
            valence=score.valence,
        )
        return is_valid

    def ensure_valid(self, score: EmotionalScore) -> EmotionalScore:
        if not self.validate_score(score):
            raise ScoreBelowThreshold(
                f"Emotional score below thresholds (arousal={score.arousal:.2f}, "
                f"min={self.thresholds.min_arousal:.2f})",
                score=score,
            )
        return score
