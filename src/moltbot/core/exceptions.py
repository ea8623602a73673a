# SPDX-License-Identifier: MPL-2.0
"""Custom exceptions for Moltbot.

Key loading and signing errors are raised and propagate to the caller.
Verification never raises; every failure there is a plain ``False``.
"""

from typing import Any, Dict, Optional


class MoltbotError(Exception):
    """Base exception for all Moltbot errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        """Initialize the exception.

        Args:
            message: Error message
            details: Optional dictionary with additional error details
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


class CryptographicError(MoltbotError):
    """Raised when cryptographic operations fail."""

    pass


class InvalidKeyError(CryptographicError):
    """Raised when key material is malformed or not an Ed25519 key."""

    pass


class EncodingError(MoltbotError):
    """Raised when text cannot be converted to or from bytes."""

    pass


class CanonicalizationError(EncodingError):
    """Raised when a (prompt, output) pair has no canonical message."""

    pass


class KeyStoreError(MoltbotError):
    """Raised when key material cannot be read from or written to storage."""

    pass


class FeedError(MoltbotError):
    """Raised when the feed cannot be written."""

    pass


class ConfigurationError(MoltbotError):
    """Raised when configuration is invalid or missing."""

    pass
