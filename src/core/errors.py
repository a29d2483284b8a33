from __future__ import annotations


class CacheError(Exception):
    """Base error for the read-through cache package."""


class ValidationError(CacheError):
    """Raised when a constructor argument or user input is invalid."""


class NotFoundError(CacheError):
    """Raised when a requested document does not exist upstream."""


class ExternalServiceError(CacheError):
    """Raised when an upstream HTTP service fails."""
