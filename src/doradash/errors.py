"""Custom exception types for the GitHub DORA metrics dashboard."""

from typing import Any, Optional


class DoraMetricsError(Exception):
    """Base exception for all recoverable DORA metrics errors."""


class ConfigurationError(DoraMetricsError):
    """Raised when runtime configuration values are missing or invalid."""


class AuthenticationError(DoraMetricsError):
    """Raised when GitHub authentication credentials are unavailable or invalid."""


class ApiError(DoraMetricsError):
    """Raised when a GitHub API request fails or returns an unexpected response."""


class DataValidationError(DoraMetricsError):
    """Raised when a GitHub payload lacks or garbles a field metrics depend on.

    Attributes:
        field: Name of the offending payload field, when known.
        value: The raw value that could not be used.
    """

    def __init__(self, message: str, field: Optional[str] = None, value: Any = None) -> None:
        super().__init__(message)
        self.field = field
        self.value = value
