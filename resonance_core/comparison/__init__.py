"""
Comparison
==========

Trust delta between personalized and generic emotional vectors.
"""

from resonance_core.comparison.trust_delta import (
    MAX_TRUST_DELTA,
    TrustDeltaCalculator,
    TrustDeltaResult,
    TrustDeltaWeights,
)

__all__ = [
    "MAX_TRUST_DELTA",
    "TrustDeltaCalculator",
    "TrustDeltaResult",
    "TrustDeltaWeights",
]
