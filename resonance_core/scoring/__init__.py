"""
Scoring
=======

Emotional score types, normalization and reliability validation.
"""

from resonance_core.scoring.models import (
    ComparisonResult,
    EmotionalDimension,
    EmotionalScore,
    EmotionalVector,
    InvalidEmotionalVector,
    ScoreSource,
)
from resonance_core.scoring.scorer import (
    EmotionalScorer,
    ScoreBelowThreshold,
    ScoringThresholds,
)

__all__ = [
    "ComparisonResult",
    "EmotionalDimension",
    "EmotionalScore",
    "EmotionalVector",
    "InvalidEmotionalVector",
    "ScoreSource",
    "EmotionalScorer",
    "ScoreBelowThreshold",
    "ScoringThresholds",
]
