"""Exception hierarchy for the simulation front office."""
from __future__ import annotations

from typing import Optional


class MyHomeError(Exception):
    """Base exception for all application errors."""


class ConfigurationError(MyHomeError):
    """Raised when settings are invalid or missing."""


class GatewayError(MyHomeError):
    """Raised when a backend call cannot produce a usable result."""


class NetworkError(GatewayError):
    """Raised when the backend could not be reached at all."""


class ApiError(GatewayError):
    """Raised when the backend answers with an error status or an unusable body."""

    def __init__(self, status: Optional[int], message: str):
        super().__init__(message)
        self.status = status
        self.message = message

    def __str__(self) -> str:
        return self.message
