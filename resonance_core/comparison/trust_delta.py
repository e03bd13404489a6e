"""
Trust Delta Calculator

Weighted comparison of a personalized output's emotional vector against a
generic output's vector, on a 0-5 scale.

Each axis group contributes the mean signed difference of its dimensions,
mapped from [-1, 1] onto [0, 1]. Identical vectors therefore score 2.5,
and swapping the inputs yields ``5 - trust_delta``.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

import structlog

from resonance_core.scoring.models import (
    ComparisonResult,
    EmotionalDimension,
    EmotionalVector,
)

logger = structlog.get_logger(__name__)


MAX_TRUST_DELTA = 5.0

TONE_AXES: Tuple[EmotionalDimension, ...] = (
    EmotionalDimension.CALM,
    EmotionalDimension.POWER,
)
EMOTIONAL_IMPACT_AXES: Tuple[EmotionalDimension, ...] = (
    EmotionalDimension.AWE,
    EmotionalDimension.WONDER,
)
CULTURAL_SPECIFICITY_AXES: Tuple[EmotionalDimension, ...] = (
    EmotionalDimension.OWNERSHIP,
)


@dataclass(frozen=True)
class TrustDeltaWeights:
    """Weights of the three axis groups; must sum to 1."""

    tone: float = 0.5
    emotional_impact: float = 0.3
    cultural_specificity: float = 0.2

    def __post_init__(self) -> None:
        weights = (self.tone, self.emotional_impact, self.cultural_specificity)
        if any(w < 0 for w in weights):
            raise ValueError("Trust delta weights must not be negative")
        if abs(sum(weights) - 1.0) > 1e-9:
            raise ValueError(f"Trust delta weights must sum to 1, got {sum(weights)}")


@dataclass(frozen=True)
class TrustDeltaResult:
    """Trust delta plus the values behind it."""

    trust_delta: float
    tone_delta: float
    emotional_impact_delta: float
    cultural_specificity_delta: float
    breakdown: Mapping[str, float]

    def __post_init__(self) -> None:
        object.__setattr__(self, "breakdown", MappingProxyType(dict(self.breakdown)))

    def to_dict(self) -> Dict[str, Any]:
        """External response shape."""
        return {
            "trust_delta": self.trust_delta,
            "breakdown": dict(self.breakdown),
        }


def _group_delta(
    personalized: EmotionalVector,
    generic: EmotionalVector,
    axes: Tuple[EmotionalDimension, ...],
) -> float:
    signed = sum(personalized.get(a) - generic.get(a) for a in axes) / len(axes)
    return (1.0 + signed) / 2.0


class TrustDeltaCalculator:
    """Computes trust deltas between personalized and generic outputs."""

    def __init__(self, weights: Optional[TrustDeltaWeights] = None):
        self.weights = weights or TrustDeltaWeights()

    def compute_trust_delta(
        self,
        personalized: EmotionalVector,
        generic: EmotionalVector,
    ) -> TrustDeltaResult:
        tone = _group_delta(personalized, generic, TONE_AXES)
        impact = _group_delta(personalized, generic, EMOTIONAL_IMPACT_AXES)
        cultural = _group_delta(personalized, generic, CULTURAL_SPECIFICITY_AXES)

        weighted = (
            self.weights.tone * tone
            + self.weights.emotional_impact * impact
            + self.weights.cultural_specificity * cultural
        )
        trust_delta = min(max(MAX_TRUST_DELTA * weighted, 0.0), MAX_TRUST_DELTA)

        breakdown = {
            d.value: personalized.get(d) - generic.get(d) for d in EmotionalDimension
        }

        return TrustDeltaResult(
            trust_delta=trust_delta,
            tone_delta=tone,
            emotional_impact_delta=impact,
            cultural_specificity_delta=cultural,
            breakdown=breakdown,
        )

    def compare(
        self,
        comparison_id: str,
        personalized: EmotionalVector,
        generic: EmotionalVector,
    ) -> ComparisonResult:
        result = self.compute_trust_delta(personalized, generic)
        logger.info(
            "trust_delta_computed",
            comparison_id=comparison_id,
            trust_delta=round(result.trust_delta, 3),
        )
        return ComparisonResult(
            comparison_id=comparison_id,
            personalized_score=personalized,
            generic_score=generic,
            trust_delta=result.trust_delta,
            dimension_breakdown=result.breakdown,
        )
