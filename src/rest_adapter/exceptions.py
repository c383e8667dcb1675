"""
Exception hierarchy shared by the REST adapter components
"""

from typing import Optional


class RESTAdapterError(Exception):
    """Base class for all REST adapter errors"""
    pass


class TransportError(RESTAdapterError):
    """Raised when a request fails at the network level before any status code is received"""

    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(message)
        self.url = url


class MalformedDocumentError(RESTAdapterError):
    """Raised when a response body cannot be parsed as JSON where strict parsing is required"""
    pass


class MissingPaginationFieldError(RESTAdapterError):
    """Raised when the page count field cannot be resolved from a paginated response"""

    def __init__(self, message: str, field_name: Optional[str] = None):
        super().__init__(message)
        self.field_name = field_name


class ConfigurationError(RESTAdapterError):
    """Raised when configuration is invalid or incomplete"""
    pass


class EnvironmentVariableError(RESTAdapterError):
    """Raised when required environment variables are missing"""
    pass
