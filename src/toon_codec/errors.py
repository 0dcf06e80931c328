"""
Error codes and exception types for toon-codec.

Error codes MUST stay stable across releases: callers log and match on
the string values, not on the exception class names.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """
    Encoding error codes.
    """
    INVALID_VALUE = "INVALID_VALUE"
    DEPTH_EXCEEDED = "DEPTH_EXCEEDED"


class ToonError(Exception):
    """
    Base class for all errors raised by the codec.
    """
    code: ErrorCode = ErrorCode.INVALID_VALUE

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code.value,
            "message": self.message,
            "details": self.details,
        }


class InvalidValueError(ToonError):
    """
    Raised in strict mode for a non-finite number or a value whose type is
    outside the JSON value space.
    """
    code = ErrorCode.INVALID_VALUE


class DepthExceededError(ToonError):
    """
    Raised when nesting goes deeper than the configured maximum.
    """
    code = ErrorCode.DEPTH_EXCEEDED
