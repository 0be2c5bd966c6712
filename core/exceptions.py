"""Custom exceptions for the Bridge API."""

from typing import Any


class BridgeAppException(Exception):
    """Base exception for the Bridge API."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ValidationException(BridgeAppException):
    """Raised when request validation fails."""

    pass


class NotFoundException(BridgeAppException):
    """Raised when a script or scene is not found."""

    pass


class ConflictException(BridgeAppException):
    """Raised when a request conflicts with work already in progress."""

    pass


class BridgeInProgressException(ConflictException):
    """Raised when a bridge scene is requested while another is still pending."""

    pass


class RateLimitException(BridgeAppException):
    """Raised when rate limit is exceeded."""

    pass


class AuthenticationException(BridgeAppException):
    """Raised when authentication fails."""

    pass


class ParsingException(BridgeAppException):
    """Raised when an uploaded screenplay cannot be parsed."""

    pass


class LLMException(BridgeAppException):
    """Raised when LLM provider interaction fails."""

    pass


class SynthesisException(BridgeAppException):
    """Raised when bridge scene synthesis fails."""

    pass
