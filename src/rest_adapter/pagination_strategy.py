"""
PaginationStrategy module for aggregating page-numbered API responses into a single result
"""

import logging
from concurrent.futures import FIRST_EXCEPTION, Future, wait
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .error_classifier import Classification, StatusCodeConfig, classify
from .exceptions import MalformedDocumentError, MissingPaginationFieldError
from .http_client import APIRequest, HTTPClient, RawResponse
from .json_document import MISSING, JSONDocument

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PageLocator:
    """Field and parameter names describing where a paginated API keeps its data and metadata"""
    page_tag: str = "page"
    pages_tag: str = "total_pages"
    total_tag: Optional[str] = "total"
    per_page_tag: Optional[str] = "per_page"
    per_page: int = 10
    data_key: str = "data"
    cursor: Optional[str] = None
    category: Optional[str] = None

    def page_parameters(self, page: int) -> Dict[str, Any]:
        """
        Build the query parameters for one page

        Args:
            page: Page number, starting at 1

        Returns:
            Query parameters; the page size is only included when a
            per-page parameter name and a positive size are configured
        """
        params: Dict[str, Any] = {self.page_tag: page}
        if self.per_page_tag and self.per_page > 0:
            params[self.per_page_tag] = self.per_page
        return params


@dataclass(frozen=True)
class PageResponse:
    """A single fetched page with its leniently parsed document"""
    document: JSONDocument
    status_code: int
    body: bytes = b""
    codes: StatusCodeConfig = field(default_factory=StatusCodeConfig)

    @property
    def classification(self) -> Classification:
        return classify(self.status_code, self.body.decode('utf-8', errors='replace'), self.codes)

    def validate(self) -> "PageResponse":
        """Return self on success, otherwise raise the classified HTTPResponseError"""
        self.classification.raise_for_kind()
        return self

    def json_data(self, key: Optional[str] = None) -> JSONDocument:
        """Return the page document, or the child under key (MISSING if absent)"""
        if key is None:
            return self.document
        return self.document.get(key)

    def json_list(self, key: str) -> List[Any]:
        """Return a deep copy of the array stored under key, empty when absent"""
        return self.document.get(key).to_list()


@dataclass(frozen=True)
class PagedResult:
    """Records of every page concatenated in ascending page order"""
    records: List[Any]
    total_count: Optional[int] = None
    pages: int = 0
    status_code: int = 200
    body: bytes = b""
    codes: StatusCodeConfig = field(default_factory=StatusCodeConfig)

    @property
    def classification(self) -> Classification:
        return classify(self.status_code, self.body.decode('utf-8', errors='replace'), self.codes)

    def validate(self) -> "PagedResult":
        """Return self on success, otherwise raise the classified HTTPResponseError"""
        self.classification.raise_for_kind()
        return self

    def page_count(self) -> int:
        """Total item count reported by the API, 0 when none was recorded"""
        return self.total_count or 0


class PaginationEngine:
    """Fetches page one, reads the page count, then fans out the remaining pages concurrently"""

    def __init__(self, http_client: HTTPClient,
                 codes: StatusCodeConfig = StatusCodeConfig()):
        self.http_client = http_client
        self.codes = codes

    def fetch_page(self, url: str, locator: PageLocator, page: int = 1) -> PageResponse:
        """
        Fetch a single page without resolving pagination metadata

        Args:
            url: Absolute endpoint URL
            locator: Page locator configuration
            page: Page number to request

        Returns:
            PageResponse holding the leniently parsed document

        Raises:
            TransportError: If the request fails at the network level
        """
        response = self.http_client.execute(self._page_request(url, locator, page))
        return PageResponse(
            document=self._parse_page(response, page),
            status_code=response.status_code,
            body=response.body,
            codes=self.codes
        )

    def fetch_paged(self, url: str, locator: PageLocator) -> PagedResult:
        """
        Fetch every page of an endpoint and concatenate the data arrays

        Page one is fetched synchronously because only its metadata reveals
        how many pages exist. Pages 2..N are then requested concurrently and
        merged by page index, so the result order never depends on which
        request completes first.

        Args:
            url: Absolute endpoint URL
            locator: Page locator configuration

        Returns:
            PagedResult with the aggregated records and total item count

        Raises:
            TransportError: If any page request fails at the network level
            MissingPaginationFieldError: If the page count cannot be resolved
        """
        first = self.http_client.execute(self._page_request(url, locator, 1))
        document = self._parse_page(first, 1)

        if not document.has(locator.data_key):
            logger.warning(f"Page 1 of {url} has no '{locator.data_key}' field, returning no records")
            return PagedResult(records=[], status_code=first.status_code,
                               body=first.body, codes=self.codes)

        records = self._extract_records(document, locator, 1)

        record = self._resolve_pagination_record(document, locator)
        pages = self._read_page_count(record, locator)
        total_count = self._read_total_count(record, locator)

        status_code, body = first.status_code, first.body

        if pages <= 1:
            logger.info(f"Fetched {len(records)} records from {url} in a single page")
            return PagedResult(records=records, total_count=total_count, pages=max(pages, 1),
                               status_code=status_code, body=body, codes=self.codes)

        responses = self._fetch_remaining(url, locator, pages)

        for page, response in enumerate(responses, start=2):
            if response.status_code >= 400 and status_code < 400:
                status_code, body = response.status_code, response.body
            records.extend(self._extract_records(self._parse_page(response, page), locator, page))

        logger.info(f"Fetched {len(records)} records from {url} across {pages} pages")
        return PagedResult(records=records, total_count=total_count, pages=pages,
                           status_code=status_code, body=body, codes=self.codes)

    def _fetch_remaining(self, url: str, locator: PageLocator, pages: int) -> List[RawResponse]:
        futures: List[Future] = [
            self.http_client.execute_async(self._page_request(url, locator, page))
            for page in range(2, pages + 1)
        ]

        done, pending = wait(futures, return_when=FIRST_EXCEPTION)
        if any(future.exception() is not None for future in done):
            for future in pending:
                future.cancel()
            # Requests already running must settle before the lowest page failure is chosen
            wait(futures)
            for future in futures:
                if not future.cancelled() and future.exception() is not None:
                    future.result()

        # One slot per page index, filled in page order
        slots: List[Optional[RawResponse]] = [None] * len(futures)
        for index, future in enumerate(futures):
            slots[index] = future.result()
        return slots

    def _page_request(self, url: str, locator: PageLocator, page: int) -> APIRequest:
        return APIRequest(url=url, method="GET", parameters=locator.page_parameters(page))

    def _parse_page(self, response: RawResponse, page: int) -> JSONDocument:
        # Per-page parse failures are not fatal during pagination
        if not response.body:
            logger.warning(f"Page {page} returned an empty body (status {response.status_code})")
            return MISSING
        try:
            return JSONDocument.parse(response.body)
        except MalformedDocumentError as e:
            logger.warning(f"Page {page} could not be parsed and contributes no records: {e}")
            return MISSING

    def _extract_records(self, document: JSONDocument, locator: PageLocator, page: int) -> List[Any]:
        data = document.get(locator.data_key)
        if data.is_missing:
            logger.warning(f"Page {page} has no '{locator.data_key}' field, skipping")
            return []
        if not data.is_array:
            logger.warning(f"Page {page} field '{locator.data_key}' is not an array, skipping")
            return []
        return data.to_list()

    def _resolve_pagination_record(self, document: JSONDocument,
                                   locator: PageLocator) -> JSONDocument:
        record = document
        for wrapper in (locator.cursor, locator.category):
            if wrapper is None:
                continue
            record = record.get(wrapper)
            if record.is_missing:
                raise MissingPaginationFieldError(
                    f"Pagination wrapper '{wrapper}' not found in response", field_name=wrapper
                )
        return record

    def _read_page_count(self, record: JSONDocument, locator: PageLocator) -> int:
        pages = _parse_int(record.get(locator.pages_tag).value)
        if pages is None:
            raise MissingPaginationFieldError(
                f"Page count field '{locator.pages_tag}' missing or not an integer",
                field_name=locator.pages_tag
            )
        return pages

    def _read_total_count(self, record: JSONDocument, locator: PageLocator) -> Optional[int]:
        if not locator.total_tag:
            return None
        return _parse_int(record.get(locator.total_tag).value)


def _parse_int(value: Any) -> Optional[int]:
    """Return value as an int when it holds an integer, otherwise None"""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None
