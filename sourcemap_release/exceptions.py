"""Custom exceptions for sourcemap-release."""

from typing import Optional


class SourcemapReleaseError(Exception):
    """Base exception for all sourcemap-release operations."""


class ConfigurationError(SourcemapReleaseError):
    """Raised when configuration validation fails."""


class TransportError(SourcemapReleaseError):
    """Raised when a request keeps failing at the network level after all retries."""


class APIError(SourcemapReleaseError):
    """Raised when the release API answers with a non-2xx status."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class EncodingError(SourcemapReleaseError):
    """Raised when the release API returns a body that is not a JSON object."""


class FileProcessingError(SourcemapReleaseError):
    """Raised when file operations fail."""
