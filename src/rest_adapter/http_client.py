"""
HTTPClient module for executing HTTP requests synchronously or asynchronously
"""

import base64
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

import requests
from requests.structures import CaseInsensitiveDict

from .exceptions import TransportError

logger = logging.getLogger(__name__)


@dataclass
class APIRequest:
    """Represents a single API request"""
    url: str
    method: str = "GET"
    parameters: Dict[str, Any] = field(default_factory=dict)
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[bytes] = None


@dataclass(frozen=True)
class RawResponse:
    """Status, headers and undecoded body of a completed request"""
    status_code: int
    body: bytes = b""
    headers: Mapping[str, str] = field(default_factory=CaseInsensitiveDict)

    @property
    def text(self) -> str:
        return self.body.decode('utf-8', errors='replace')


class HTTPClient:
    """HTTP transport with a shared session, authentication header and worker pool"""

    def __init__(self, timeout: float = 20.0, verify_ssl: bool = True,
                 max_workers: Optional[int] = None):
        self.timeout = timeout
        self.verify_ssl = verify_ssl
        self.max_workers = max_workers
        self.headers: Dict[str, str] = {}
        self.session: Optional[requests.Session] = None
        self._executor: Optional[ThreadPoolExecutor] = None
        self._lock = threading.Lock()

        if not verify_ssl:
            logger.warning("TLS certificate verification is disabled for this client")

    def authenticate(self, credentials: Dict[str, Any]) -> None:
        """
        Configure the authentication header based on credential type

        Args:
            credentials: Dictionary containing authentication information

        Raises:
            ValueError: If authentication type is not supported
        """
        auth_type = credentials.get('type')

        if auth_type == 'bearer_token':
            self.headers['Authorization'] = f"Bearer {credentials['token']}"

        elif auth_type == 'basic':
            self.headers['Authorization'] = basic_credential(
                credentials['username'], credentials['password']
            )

        elif auth_type == 'api_key':
            self.headers['X-API-Key'] = credentials['api_key']

        else:
            raise ValueError(f"Unsupported authentication type: {auth_type}")

    def execute(self, request: APIRequest) -> RawResponse:
        """
        Execute a request and block until the response body has been read

        Non-success status codes are returned, not raised, so the caller can
        inspect status and body before deciding how to react.

        Args:
            request: APIRequest object containing request details

        Returns:
            RawResponse with status code, headers and body bytes

        Raises:
            TransportError: If the request fails before a response is received
        """
        session = self._get_session()
        combined_headers = {**self.headers, **request.headers}

        logger.debug(f"Request: {request.method.upper()} {request.url}")

        try:
            response = session.request(
                request.method.upper(),
                request.url,
                params=request.parameters or None,
                data=request.body,
                headers=combined_headers,
                timeout=self.timeout,
                verify=self.verify_ssl
            )
        except requests.exceptions.RequestException as e:
            raise TransportError(f"Request to {request.url} failed: {e}", url=request.url) from e

        return RawResponse(
            status_code=response.status_code,
            body=response.content or b"",
            headers=CaseInsensitiveDict(response.headers)
        )

    def execute_async(self, request: APIRequest) -> "Future[RawResponse]":
        """
        Submit a request to the worker pool

        Args:
            request: APIRequest object containing request details

        Returns:
            Future resolving to a RawResponse; transport failures are raised
            from Future.result()
        """
        return self._get_executor().submit(self.execute, request)

    def _get_session(self) -> requests.Session:
        with self._lock:
            if self.session is None:
                self.session = requests.Session()
            return self.session

    def _get_executor(self) -> ThreadPoolExecutor:
        with self._lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self.max_workers,
                    thread_name_prefix="rest-adapter"
                )
            return self._executor

    def close_connection(self) -> None:
        """
        Close HTTP session and worker pool, releasing resources
        """
        with self._lock:
            executor, self._executor = self._executor, None
            session, self.session = self.session, None

        if executor:
            executor.shutdown(wait=True)
        if session:
            session.close()

    def __enter__(self) -> "HTTPClient":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close_connection()


def basic_credential(username: str, password: str) -> str:
    """Build an HTTP Basic authorization header value"""
    token = base64.b64encode(f"{username}:{password}".encode('latin-1')).decode('ascii')
    return f"Basic {token}"
