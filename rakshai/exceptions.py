"""
Custom exception classes for the RakshAI analysis layer.

Every failure is terminal for the single in-flight request: nothing is
retried and no partial result is returned.  Errors surface immediately
with enough context for the caller to decide what to show the user.

Hierarchy:
    Exception
    +-- RakshAIError (base for all analysis errors)
    |   +-- ConfigError
    |   +-- CapabilityError
    |   +-- NetworkError
    |   |   +-- RequestTimeoutError
    |   +-- ParseError
    +-- ValidationError (ValueError)
"""

from typing import Optional


# =============================================================================
# BASE EXCEPTION
# =============================================================================


class RakshAIError(Exception):
    """Base exception for all analysis-layer errors."""

    pass


# =============================================================================
# CALLER INPUT
# =============================================================================


class ValidationError(ValueError):
    """Raised when caller input fails validation (blank text, bad category)."""

    pass


# =============================================================================
# CONFIGURATION / CAPABILITY
# =============================================================================


class ConfigError(RakshAIError):
    """Raised when required configuration or a credential is missing.

    Attributes:
        provider: Provider identity value the credential was needed for,
            if the error is credential-related.
        key_name: Configuration key the user should set.
    """

    def __init__(
        self,
        message: str,
        provider: Optional[str] = None,
        key_name: Optional[str] = None,
    ):
        self.provider = provider
        self.key_name = key_name
        super().__init__(message)


class CapabilityError(RakshAIError):
    """Raised when an operation is requested from a provider that lacks it.

    Attributes:
        operation: Name of the unsupported operation (e.g. ``"ocr"``).
        provider: Provider the operation was requested from.
        required_provider: Provider that does support the operation.
    """

    def __init__(self, operation: str, provider: str, required_provider: str):
        self.operation = operation
        self.provider = provider
        self.required_provider = required_provider
        super().__init__(
            f"{operation} is not supported by provider '{provider}'. "
            f"Switch to '{required_provider}' in Settings."
        )


# =============================================================================
# PROVIDER CALL FAILURES
# =============================================================================


class NetworkError(RakshAIError):
    """Raised on a non-success HTTP status or transport/SDK failure.

    Attributes:
        provider: Provider whose call failed.
        status_code: HTTP status or SDK error code, when available.
    """

    def __init__(
        self,
        message: str,
        provider: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        self.provider = provider
        self.status_code = status_code
        super().__init__(message)


class RequestTimeoutError(NetworkError):
    """Raised when a caller-supplied deadline elapses before the reply.

    Attributes:
        operation: Name of the operation that timed out.
        timeout: Deadline in seconds.
    """

    def __init__(
        self, operation: str, timeout: float, provider: Optional[str] = None
    ):
        self.operation = operation
        self.timeout = timeout
        super().__init__(
            f"'{operation}' timed out after {timeout} seconds",
            provider=provider,
        )


class ParseError(RakshAIError):
    """Raised when a provider reply is not the expected JSON payload.

    Attributes:
        raw_text: The reply text that could not be parsed.
    """

    def __init__(self, message: str, raw_text: str = ""):
        self.raw_text = raw_text
        super().__init__(message)


# =============================================================================
# PUBLIC API
# =============================================================================

__all__ = [
    "RakshAIError",
    "ValidationError",
    "ConfigError",
    "CapabilityError",
    "NetworkError",
    "RequestTimeoutError",
    "ParseError",
]
