"""
RESTClient module providing verb helpers, response validation and paginated fetches
"""

import dataclasses
import json
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from .config_loader import ClientConfig, ConfigLoader
from .error_classifier import Classification, StatusCodeConfig, classify
from .exceptions import MalformedDocumentError
from .http_client import APIRequest, HTTPClient, RawResponse
from .json_document import JSONDocument
from .pagination_strategy import PagedResult, PageLocator, PageResponse, PaginationEngine

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json; charset=utf-8"


@dataclass(frozen=True)
class RESTResponse:
    """Immutable result of a single REST call"""
    status_code: int
    body: bytes = b""
    headers: Mapping[str, str] = field(default_factory=dict)
    codes: StatusCodeConfig = field(default_factory=StatusCodeConfig)

    @classmethod
    def from_raw(cls, response: RawResponse, codes: StatusCodeConfig) -> "RESTResponse":
        return cls(status_code=response.status_code, body=response.body,
                   headers=response.headers, codes=codes)

    @property
    def text(self) -> str:
        return self.body.decode('utf-8', errors='replace')

    @property
    def classification(self) -> Classification:
        return classify(self.status_code, self.text, self.codes)

    def code(self) -> int:
        return self.status_code

    def validate(self) -> "RESTResponse":
        """
        Convert the stored status code into a classified error

        Returns:
            self when the status code is in the success range

        Raises:
            HTTPResponseError: Subclass matching the classified status code
        """
        self.classification.raise_for_kind()
        return self

    def json(self) -> JSONDocument:
        """
        Parse the body strictly

        Raises:
            MalformedDocumentError: If the body is not valid JSON
        """
        return JSONDocument.parse(self.body)

    def json_array(self) -> JSONDocument:
        """
        Parse the body strictly, requiring a top-level array

        Raises:
            MalformedDocumentError: If the body is not a valid JSON array
        """
        document = self.json()
        if not document.is_array:
            raise MalformedDocumentError("Response body is not a JSON array")
        return document

    def json_search(self, key: str) -> List[str]:
        """Return every value found under key anywhere in the body"""
        return self.json().find_values_as_text(key)


class RESTClient:
    """
    Client for one REST host

    Each call returns a fresh immutable result instead of mutating client
    state, so results of earlier calls stay valid after later ones. A client
    still handles one logical call at a time.
    """

    def __init__(self, hostname: str, token: Optional[str] = None,
                 username: Optional[str] = None, password: Optional[str] = None,
                 use_ssl: bool = True, port: Optional[int] = None,
                 verify_ssl: bool = True, timeout: float = 20.0,
                 status_codes: StatusCodeConfig = StatusCodeConfig(),
                 locator: PageLocator = PageLocator(),
                 max_workers: Optional[int] = None,
                 credentials: Optional[Dict[str, Any]] = None,
                 http_client: Optional[HTTPClient] = None):
        self.hostname = hostname
        self.use_ssl = use_ssl
        self.port = port if port is not None else (443 if use_ssl else 80)
        self.status_codes = status_codes
        self.locator = locator

        self.http_client = http_client or HTTPClient(
            timeout=timeout, verify_ssl=verify_ssl, max_workers=max_workers
        )

        # The authorization header is computed once per client
        if token is not None:
            self.http_client.authenticate({'type': 'bearer_token', 'token': token})
        elif username is not None and password is not None:
            self.http_client.authenticate({'type': 'basic', 'username': username, 'password': password})
        elif credentials is not None:
            self.http_client.authenticate(credentials)
        else:
            raise ValueError("A token, a username and password, or credentials are required")

        self.pagination = PaginationEngine(self.http_client, codes=status_codes)

    @classmethod
    def from_config(cls, config: ClientConfig) -> "RESTClient":
        """
        Build a client from a loaded TOML configuration

        Raises:
            EnvironmentVariableError: If a referenced credential variable is not set
            ValueError: If the authentication type is not supported
        """
        return cls(
            hostname=config.hostname,
            use_ssl=config.use_ssl,
            port=config.port,
            verify_ssl=config.verify_ssl,
            timeout=config.timeout,
            status_codes=config.status_codes,
            locator=config.pagination,
            max_workers=config.max_workers,
            credentials=ConfigLoader.build_credentials(config)
        )

    def build_url(self, endpoint: str) -> str:
        """Build the absolute URL for an endpoint path"""
        scheme = "https" if self.use_ssl else "http"
        default_port = 443 if self.use_ssl else 80
        netloc = self.hostname if self.port == default_port else f"{self.hostname}:{self.port}"
        return f"{scheme}://{netloc}/{endpoint.lstrip('/')}"

    def get(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> RESTResponse:
        return self._call("GET", endpoint, params=params)

    def delete(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> RESTResponse:
        return self._call("DELETE", endpoint, params=params)

    def post(self, endpoint: str, body: Any = None) -> RESTResponse:
        return self._call("POST", endpoint, body=body)

    def put(self, endpoint: str, body: Any = None) -> RESTResponse:
        return self._call("PUT", endpoint, body=body)

    def patch(self, endpoint: str, body: Any = None) -> RESTResponse:
        return self._call("PATCH", endpoint, body=body)

    def get_page(self, endpoint: str, page: int = 1,
                 locator: Optional[PageLocator] = None, **overrides: Any) -> PageResponse:
        """
        Fetch one page of a paginated endpoint

        Args:
            endpoint: Endpoint path
            page: Page number to request
            locator: Page locator, defaults to the client's locator
            overrides: Locator fields to replace for this call

        Returns:
            PageResponse with the leniently parsed page document
        """
        return self.pagination.fetch_page(self.build_url(endpoint),
                                          self._locator(locator, overrides), page)

    def get_paged(self, endpoint: str, locator: Optional[PageLocator] = None,
                  **overrides: Any) -> PagedResult:
        """
        Fetch and aggregate every page of a paginated endpoint

        Args:
            endpoint: Endpoint path
            locator: Page locator, defaults to the client's locator
            overrides: Locator fields to replace for this call, e.g. data_key="items"

        Returns:
            PagedResult with records of all pages in page order

        Raises:
            TransportError: If any page request fails at the network level
            MissingPaginationFieldError: If the page count cannot be resolved
        """
        return self.pagination.fetch_paged(self.build_url(endpoint),
                                           self._locator(locator, overrides))

    def wait_for_code(self, endpoint: str, code: int, retry_count: int,
                      interval: float = 0.1) -> bool:
        """
        Poll an endpoint until it returns the given status code

        Returns:
            True once the code is observed, False after retry_count attempts
        """
        for attempt in range(1, retry_count + 1):
            if self.get(endpoint).status_code == code:
                return True
            logger.debug(f"Waiting for {code} from {endpoint} (attempt {attempt}/{retry_count})")
            time.sleep(interval)
        return False

    def wait_for_json_value(self, endpoint: str, key: str, value: str, retry_count: int,
                            interval: float = 0.1) -> bool:
        """
        Poll an endpoint until the JSON value under key serialises to value

        Returns:
            True once the value is observed, False after retry_count attempts

        Raises:
            HTTPResponseError: If a poll returns a non-success status code
            MalformedDocumentError: If a poll returns an unparseable body
        """
        for attempt in range(1, retry_count + 1):
            document = self.get(endpoint).validate().json()
            current = document.get(key)
            if not current.is_missing and current.to_json() == value:
                return True
            logger.debug(f"Waiting for {key}={value} from {endpoint} (attempt {attempt}/{retry_count})")
            time.sleep(interval)
        return False

    def close(self) -> None:
        self.http_client.close_connection()

    def __enter__(self) -> "RESTClient":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    def _locator(self, locator: Optional[PageLocator], overrides: Dict[str, Any]) -> PageLocator:
        locator = locator or self.locator
        if overrides:
            locator = dataclasses.replace(locator, **overrides)
        return locator

    def _call(self, method: str, endpoint: str, params: Optional[Dict[str, Any]] = None,
              body: Any = None) -> RESTResponse:
        request = APIRequest(url=self.build_url(endpoint), method=method,
                             parameters=params or {})
        if body is not None:
            request.body = json.dumps(body).encode('utf-8')
            request.headers['Content-Type'] = JSON_CONTENT_TYPE

        return RESTResponse.from_raw(self.http_client.execute(request), self.status_codes)
