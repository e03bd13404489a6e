"""
Resonance Core
==============

Emotional signal resilience and comparison engine.

This package provides:
- Rate limiting and circuit breaking for the primary emotion provider
- Score normalization and reliability validation
- Primary/fallback analysis orchestration
- Weighted trust-delta comparison of emotional vectors
"""

__version__ = "1.0.0"
