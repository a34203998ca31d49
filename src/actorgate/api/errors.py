"""
Classified Errors for the ActorGate API Client

Every failure surfaced by the transport is a ClassifiedError tagged with a
kind from a closed taxonomy. The retry engine decides what to retry based on
that kind, and callers get the original response envelope and cause for
diagnostics.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(str, Enum):
    """Taxonomy of transport failures."""
    INVALID_RESPONSE_BODY = "invalid-response-body"
    NETWORK = "network"
    HTTP_STATUS = "http-status"
    TIMEOUT = "timeout"
    VALIDATION = "validation"


class ClassifiedError(Exception):
    """Base class for all errors raised by the transport layer"""

    kind: ErrorKind = ErrorKind.NETWORK

    def __init__(
        self,
        message: str,
        http_status: Optional[int] = None,
        cause: Optional[BaseException] = None,
        response: Any = None,
        retryable: Optional[bool] = None
    ):
        super().__init__(message)
        self.message = message
        self.http_status = http_status
        self.cause = cause
        self.response = response
        # None means "let the retry policy decide"
        self.retryable = retryable
        if cause is not None:
            self.__cause__ = cause

    def to_dict(self) -> Dict[str, Any]:
        """Error shape surfaced to callers"""
        result: Dict[str, Any] = {
            'kind': self.kind.value,
            'message': self.message
        }
        if self.http_status is not None:
            result['http_status'] = self.http_status
        if self.cause is not None:
            result['cause'] = f"{type(self.cause).__name__}: {self.cause}"
        summary = getattr(self.response, 'summary', None)
        if callable(summary):
            result['response'] = summary()
        return result

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kind={self.kind.value!r}, message={self.message!r})"


class InvalidResponseBodyError(ClassifiedError):
    """
    Raised when a response body is present but cannot be parsed.

    In most cases only a partial body was received, so the request is
    retried like a network failure.
    """

    kind = ErrorKind.INVALID_RESPONSE_BODY

    def __init__(self, response: Any, cause: BaseException):
        super().__init__(
            f"Response body could not be parsed.\nCause: {cause}",
            http_status=getattr(response, 'status_code', None),
            cause=cause,
            response=response
        )


class NetworkError(ClassifiedError):
    """Raised for connection-level failures"""

    kind = ErrorKind.NETWORK


class AttemptTimeoutError(ClassifiedError):
    """Raised when a single attempt exceeds its time budget"""

    kind = ErrorKind.TIMEOUT


class RequestValidationError(ClassifiedError):
    """Raised when a request is malformed before it leaves the client"""

    kind = ErrorKind.VALIDATION


class HttpStatusError(ClassifiedError):
    """Raised when the platform answers with an error status code"""

    kind = ErrorKind.HTTP_STATUS

    def __init__(
        self,
        message: str,
        http_status: int,
        response: Any = None,
        error_type: Optional[str] = None,
        attempt: int = 1,
        http_method: Optional[str] = None,
        path: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, http_status=http_status, response=response)
        self.error_type = error_type
        self.attempt = attempt
        self.http_method = http_method
        self.path = path
        self.details = details or {}

    @property
    def status_code(self) -> int:
        return self.http_status

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        result['attempt'] = self.attempt
        if self.error_type:
            result['error_type'] = self.error_type
        if self.http_method:
            result['http_method'] = self.http_method
        if self.path:
            result['path'] = self.path
        return result


class CallCancelledError(Exception):
    """Raised when a logical call is cancelled before it completes"""
    pass
