"""
Emotional Analysis
==================

Primary/fallback orchestration of emotion scoring.
"""

from resonance_core.analysis.orchestrator import (
    AnalysisStatus,
    EmotionalAnalysisOrchestrator,
    FallbackExhausted,
    OrchestratorConfig,
    create_orchestrator,
)

__all__ = [
    "AnalysisStatus",
    "EmotionalAnalysisOrchestrator",
    "FallbackExhausted",
    "OrchestratorConfig",
    "create_orchestrator",
]
