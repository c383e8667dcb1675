"""
ErrorClassifier module for mapping HTTP status codes onto typed error categories
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Type

from .exceptions import RESTAdapterError


class ErrorKind(Enum):
    """Closed set of outcomes a status code can be classified into"""
    SUCCESS = "success"
    PERMISSION_DENIED = "permission_denied"
    NOT_FOUND = "not_found"
    RATE_LIMITED = "rate_limited"
    SERVER_ERROR = "server_error"
    RETRYABLE_CLIENT_ERROR = "retryable_client_error"
    NON_RETRYABLE_ERROR = "non_retryable_error"


@dataclass(frozen=True)
class StatusCodeConfig:
    """Status codes used for classification, success range is half-open"""
    success_start: int = 200
    success_end: int = 299
    permission_denied: int = 403
    not_found: int = 404
    rate_limited: int = 429
    server_error: int = 500


class HTTPResponseError(RESTAdapterError):
    """Base error for a response whose status code was classified as a failure"""

    kind = ErrorKind.NON_RETRYABLE_ERROR

    def __init__(self, status_code: int, body: str):
        super().__init__(f"code: {status_code} response: {body}")
        self.status_code = status_code
        self.body = body


class PermissionDeniedError(HTTPResponseError):
    """Raised for the permission denied status code (403 by default)"""
    kind = ErrorKind.PERMISSION_DENIED


class NotFoundError(HTTPResponseError):
    """Raised for the not found status code (404 by default)"""
    kind = ErrorKind.NOT_FOUND


class RateLimitError(HTTPResponseError):
    """Raised for the rate limit status code (429 by default)"""
    kind = ErrorKind.RATE_LIMITED


class InternalServerError(HTTPResponseError):
    """Raised for the server error status code (500 by default)"""
    kind = ErrorKind.SERVER_ERROR


class RetryableError(HTTPResponseError):
    """Raised for any other 4xx status code"""
    kind = ErrorKind.RETRYABLE_CLIENT_ERROR


class NonRetryableError(HTTPResponseError):
    """Raised for anything outside the success range not covered above"""
    kind = ErrorKind.NON_RETRYABLE_ERROR


ERROR_TYPES: Dict[ErrorKind, Type[HTTPResponseError]] = {
    ErrorKind.PERMISSION_DENIED: PermissionDeniedError,
    ErrorKind.NOT_FOUND: NotFoundError,
    ErrorKind.RATE_LIMITED: RateLimitError,
    ErrorKind.SERVER_ERROR: InternalServerError,
    ErrorKind.RETRYABLE_CLIENT_ERROR: RetryableError,
    ErrorKind.NON_RETRYABLE_ERROR: NonRetryableError,
}


@dataclass(frozen=True)
class Classification:
    """Result of classifying a status code, carrying the raw body text as context"""
    kind: ErrorKind
    status_code: int
    body: str

    @property
    def is_success(self) -> bool:
        return self.kind is ErrorKind.SUCCESS

    def to_error(self) -> HTTPResponseError:
        """
        Build the exception matching this classification

        Raises:
            ValueError: If the classification is a success
        """
        if self.is_success:
            raise ValueError("A successful classification has no matching error")
        return ERROR_TYPES[self.kind](self.status_code, self.body)

    def raise_for_kind(self) -> None:
        """Raise the matching HTTPResponseError unless this is a success"""
        if not self.is_success:
            raise self.to_error()


def classify(status_code: int, body: str = "",
             codes: StatusCodeConfig = StatusCodeConfig()) -> Classification:
    """
    Classify a status code into exactly one ErrorKind

    Special codes are checked before the generic 4xx and catch-all fallbacks.

    Args:
        status_code: HTTP status code of the response
        body: Raw response body text
        codes: Status code configuration to classify against

    Returns:
        Classification carrying kind, status code and body
    """
    if codes.success_start <= status_code < codes.success_end:
        kind = ErrorKind.SUCCESS
    elif status_code == codes.permission_denied:
        kind = ErrorKind.PERMISSION_DENIED
    elif status_code == codes.not_found:
        kind = ErrorKind.NOT_FOUND
    elif status_code == codes.rate_limited:
        kind = ErrorKind.RATE_LIMITED
    elif status_code == codes.server_error:
        kind = ErrorKind.SERVER_ERROR
    elif 400 <= status_code < 500:
        kind = ErrorKind.RETRYABLE_CLIENT_ERROR
    else:
        kind = ErrorKind.NON_RETRYABLE_ERROR

    return Classification(kind=kind, status_code=status_code, body=body)


def raise_for_status(status_code: int, body: str = "",
                     codes: StatusCodeConfig = StatusCodeConfig()) -> None:
    """
    Classify a status code and raise the matching error when it is not a success

    Raises:
        HTTPResponseError: Subclass matching the classified kind
    """
    classify(status_code, body, codes).raise_for_kind()
