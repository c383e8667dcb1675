"""
Generic REST API Adapter package
Provides verb helpers, typed status classification and concurrent aggregation of paginated responses
"""

from .exceptions import (
    RESTAdapterError,
    TransportError,
    MalformedDocumentError,
    MissingPaginationFieldError,
    ConfigurationError,
    EnvironmentVariableError
)
from .error_classifier import (
    ErrorKind,
    StatusCodeConfig,
    Classification,
    classify,
    raise_for_status,
    HTTPResponseError,
    PermissionDeniedError,
    NotFoundError,
    RateLimitError,
    InternalServerError,
    RetryableError,
    NonRetryableError
)
from .http_client import HTTPClient, APIRequest, RawResponse
from .json_document import JSONDocument, MISSING
from .pagination_strategy import PaginationEngine, PageLocator, PageResponse, PagedResult
from .config_loader import ConfigLoader, ClientConfig
from .rest_client import RESTClient, RESTResponse

__all__ = [
    'RESTAdapterError',
    'TransportError',
    'MalformedDocumentError',
    'MissingPaginationFieldError',
    'ConfigurationError',
    'EnvironmentVariableError',
    'ErrorKind',
    'StatusCodeConfig',
    'Classification',
    'classify',
    'raise_for_status',
    'HTTPResponseError',
    'PermissionDeniedError',
    'NotFoundError',
    'RateLimitError',
    'InternalServerError',
    'RetryableError',
    'NonRetryableError',
    'HTTPClient',
    'APIRequest',
    'RawResponse',
    'JSONDocument',
    'MISSING',
    'PaginationEngine',
    'PageLocator',
    'PageResponse',
    'PagedResult',
    'ConfigLoader',
    'ClientConfig',
    'RESTClient',
    'RESTResponse'
]
