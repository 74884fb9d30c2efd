"""
Custom exceptions for the FitSmart auditor.

This module defines a hierarchy of exceptions that provide clear error
handling throughout the application. Each exception includes:
- A descriptive message
- An error code for API responses
- HTTP status code mapping
- Optional details for debugging
"""

from enum import Enum
from typing import Any, Dict, List, Optional


class ErrorCode(str, Enum):
    """Error codes for consistent API error responses."""

    # General errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Input errors
    INPUT_VALIDATION_ERROR = "INPUT_VALIDATION_ERROR"
    CSV_UNMAPPABLE = "CSV_UNMAPPABLE"
    PROFILE_INCOMPLETE = "PROFILE_INCOMPLETE"

    # Flow errors
    FLOW_TRANSITION_INVALID = "FLOW_TRANSITION_INVALID"
    FLOW_BUSY = "FLOW_BUSY"
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"

    # LLM errors
    LLM_SERVICE_UNAVAILABLE = "LLM_SERVICE_UNAVAILABLE"
    LLM_RATE_LIMITED = "LLM_RATE_LIMITED"
    LLM_TIMEOUT = "LLM_TIMEOUT"
    LLM_API_ERROR = "LLM_API_ERROR"
    LLM_EMPTY_RESPONSE = "LLM_EMPTY_RESPONSE"
    LLM_RESPONSE_INVALID = "LLM_RESPONSE_INVALID"
    LLM_SCHEMA_INCOMPLETE = "LLM_SCHEMA_INCOMPLETE"
    LLM_UNSUPPORTED_MEDIA = "LLM_UNSUPPORTED_MEDIA"


class FitSmartError(Exception):
    """
    Base exception for all FitSmart errors.

    Attributes:
        message: Human-readable error message
        code: Error code from ErrorCode enum
        status_code: HTTP status code for API responses
        details: Optional dictionary with additional error details
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API response."""
        result: Dict[str, Any] = {
            "error": {
                "code": self.code.value,
                "message": self.message,
            }
        }
        if self.details:
            result["error"]["details"] = self.details
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code.value}, message={self.message!r})"


# ============================================================================
# Input Errors (4xx)
# ============================================================================

class InputValidationError(FitSmartError):
    """Raised when captured input is rejected before any network call."""

    def __init__(
        self,
        message: str,
        reason: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        error_details = details or {}
        error_details["reason"] = reason
        super().__init__(
            message=message,
            code=ErrorCode.INPUT_VALIDATION_ERROR,
            status_code=400,
            details=error_details,
        )
        self.reason = reason


class CsvUnmappableError(FitSmartError):
    """Raised when no column mapping strategy matches a CSV header."""

    def __init__(self, headers: Optional[List[str]] = None) -> None:
        super().__init__(
            message="Could not locate date and exercise columns in the CSV header",
            code=ErrorCode.CSV_UNMAPPABLE,
            status_code=422,
            details={"headers": headers or []},
        )


class ProfileValidationError(FitSmartError):
    """Raised when a profile is submitted with required fields missing."""

    def __init__(self, fields: List[str], message: Optional[str] = None) -> None:
        super().__init__(
            message=message or f"Profile is incomplete: {', '.join(fields)}",
            code=ErrorCode.PROFILE_INCOMPLETE,
            status_code=400,
            details={"fields": fields},
        )
        self.fields = fields


# ============================================================================
# Flow Errors (404/409)
# ============================================================================

class FlowTransitionError(FitSmartError):
    """Raised when an operation is not legal in the current stage."""

    def __init__(self, operation: str, stage: str) -> None:
        super().__init__(
            message=f"Cannot {operation} while in stage {stage}",
            code=ErrorCode.FLOW_TRANSITION_INVALID,
            status_code=409,
            details={"operation": operation, "stage": stage},
        )


class FlowBusyError(FitSmartError):
    """Raised when a transition is requested while a stage call is pending."""

    def __init__(self, stage: str) -> None:
        super().__init__(
            message="An analysis is already in progress for this session",
            code=ErrorCode.FLOW_BUSY,
            status_code=409,
            details={"stage": stage},
        )


class SessionNotFoundError(FitSmartError):
    """Raised when a session id is unknown."""

    def __init__(self, session_id: str) -> None:
        super().__init__(
            message=f"Session with ID '{session_id}' not found",
            code=ErrorCode.SESSION_NOT_FOUND,
            status_code=404,
            details={"session_id": session_id},
        )


# ============================================================================
# LLM Errors (5xx)
# ============================================================================

class LLMError(FitSmartError):
    """Base exception for reasoning engine errors."""

    def __init__(
        self,
        message: str = "Reasoning engine request failed",
        code: ErrorCode = ErrorCode.LLM_API_ERROR,
        status_code: int = 502,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message=message,
            code=code,
            status_code=status_code,
            details=details,
        )


class LLMServiceUnavailableError(LLMError):
    """Raised when the engine is unreachable or not configured."""

    def __init__(
        self,
        message: str = "Reasoning engine is currently unavailable",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCode.LLM_SERVICE_UNAVAILABLE,
            status_code=503,
            details=details,
        )


class LLMRateLimitError(LLMError):
    """Raised when the engine rate limits the request."""

    def __init__(self, retry_after: Optional[int] = None) -> None:
        details = {"retry_after": retry_after} if retry_after else None
        super().__init__(
            message="Reasoning engine rate limit exceeded",
            code=ErrorCode.LLM_RATE_LIMITED,
            status_code=429,
            details=details,
        )
        self.retry_after = retry_after


class LLMTimeoutError(LLMError):
    """Raised when an engine call exceeds its stage timeout."""

    def __init__(self, timeout: Optional[float] = None) -> None:
        details = {"timeout_seconds": timeout} if timeout else None
        super().__init__(
            message="Reasoning engine request timed out",
            code=ErrorCode.LLM_TIMEOUT,
            status_code=504,
            details=details,
        )


class EmptyResponseError(LLMError):
    """Raised when the engine returns no textual payload at all."""

    def __init__(self, stage: str) -> None:
        super().__init__(
            message=f"No {stage} response",
            code=ErrorCode.LLM_EMPTY_RESPONSE,
            details={"stage": stage},
        )
        self.stage = stage


class ResponseDecodeError(LLMError):
    """Raised when no JSON object can be recovered from the engine text."""

    def __init__(self, raw_length: int = 0) -> None:
        super().__init__(
            message="Could not analyze the AI response: response format invalid",
            code=ErrorCode.LLM_RESPONSE_INVALID,
            details={"raw_length": raw_length},
        )


class SchemaIncompleteError(LLMError):
    """Raised when decoded JSON lacks fields the stage contract requires."""

    def __init__(self, stage: str, errors: List[Dict[str, Any]]) -> None:
        super().__init__(
            message=f"The {stage} response is missing required fields",
            code=ErrorCode.LLM_SCHEMA_INCOMPLETE,
            details={"stage": stage, "errors": errors},
        )
        self.stage = stage


class UnsupportedMediaError(LLMError):
    """Raised when the configured engine cannot accept a media type."""

    def __init__(self, media_type: str, provider: str) -> None:
        super().__init__(
            message=f"Provider '{provider}' does not accept {media_type} content",
            code=ErrorCode.LLM_UNSUPPORTED_MEDIA,
            status_code=415,
            details={"media_type": media_type, "provider": provider},
        )
