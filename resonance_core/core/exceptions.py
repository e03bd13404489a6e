"""Base exception for the resonance engine."""

from typing import Any, Dict, Optional


class ResonanceError(Exception):
    """Base class for all resonance engine errors."""

    code: str = "resonance_error"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }
