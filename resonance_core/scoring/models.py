"""
Scoring Models

Value types shared by the analysis and comparison paths.
"""

import math
from dataclasses import dataclass, fields
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from resonance_core.core.exceptions import ResonanceError


class ScoreSource(str, Enum):
    """Which provider produced a score."""

    PRIMARY = "primary"
    FALLBACK = "fallback"


class EmotionalDimension(str, Enum):
    """Dimensions of the comparative emotional vector."""

    AWE = "awe"
    OWNERSHIP = "ownership"
    WONDER = "wonder"
    CALM = "calm"
    POWER = "power"


class InvalidEmotionalVector(ResonanceError, ValueError):
    """Raised when a vector dimension is missing or outside [0, 1]."""

    code = "invalid_emotional_vector"


@dataclass(frozen=True)
class EmotionalScore:
    """Normalized arousal/valence reading for one text sample."""

    arousal: float
    valence: float
    confidence: float
    source: ScoreSource = ScoreSource.PRIMARY

    def to_dict(self, error: Optional[str] = None) -> Dict[str, Any]:
        """External response shape."""
        return {
            "arousal": self.arousal,
            "valence": self.valence,
            "confidence": self.confidence,
            "source": self.source.value,
            "error": error,
        }


@dataclass(frozen=True)
class EmotionalVector:
    """
    Five-dimension emotional profile used for comparisons.

    Every dimension must be a finite number in [0, 1].
    """

    awe: float
    ownership: float
    wonder: float
    calm: float
    power: float

    def __post_init__(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise InvalidEmotionalVector(
                    f"{f.name} must be a number, got {type(value).__name__}",
                    details={"dimension": f.name},
                )
            if not math.isfinite(value) or not 0.0 <= value <= 1.0:
                raise InvalidEmotionalVector(
                    f"{f.name} must be within [0, 1], got {value}",
                    details={"dimension": f.name, "value": value},
                )
            object.__setattr__(self, f.name, float(value))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "EmotionalVector":
        missing = [d.value for d in EmotionalDimension if d.value not in data]
        if missing:
            raise InvalidEmotionalVector(
                f"Missing dimensions: {', '.join(missing)}",
                details={"missing": missing},
            )
        return cls(**{d.value: data[d.value] for d in EmotionalDimension})

    def get(self, dimension: EmotionalDimension) -> float:
        return getattr(self, dimension.value)

    def to_dict(self) -> Dict[str, float]:
        return {d.value: self.get(d) for d in EmotionalDimension}


@dataclass(frozen=True)
class ComparisonResult:
    """Personalized vs. generic comparison, read-only once built."""

    comparison_id: str
    personalized_score: EmotionalVector
    generic_score: EmotionalVector
    trust_delta: float
    dimension_breakdown: Mapping[str, float]

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "dimension_breakdown",
            MappingProxyType(dict(self.dimension_breakdown)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "comparison_id": self.comparison_id,
            "personalized_score": self.personalized_score.to_dict(),
            "generic_score": self.generic_score.to_dict(),
            "trust_delta": self.trust_delta,
            "breakdown": dict(self.dimension_breakdown),
        }
