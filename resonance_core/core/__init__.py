"""
Core Utilities
==============

Shared exception base and logging setup.
"""

from resonance_core.core.exceptions import ResonanceError
from resonance_core.core.logging import get_logger, setup_logging

__all__ = [
    "ResonanceError",
    "get_logger",
    "setup_logging",
]
