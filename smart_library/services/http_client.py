import logging
from typing import Any, Dict, List, Optional

import httpx

from smart_library.book import Book
from smart_library.config import settings
from smart_library.errors import CatalogAPIError

logger = logging.getLogger(__name__)

BOOKS_PATH = "/api/books"


class CatalogHTTPClient:
    """Thin HTTP client for the catalog API.

    One request per call and no retries: a failed call surfaces immediately
    as ``CatalogAPIError``. An existing ``httpx.Client`` (for instance a
    FastAPI ``TestClient``) can be passed in instead of a base URL.
    """

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None,
                 client: Optional[httpx.Client] = None) -> None:
        self._owns_client = client is None
        self._client = client or httpx.Client(
            base_url=base_url or settings.api_base_url,
            timeout=timeout if timeout is not None else settings.client_timeout,
        )

    def list_books(self) -> List[Book]:
        data = self._request("GET", BOOKS_PATH, fallback="Failed to fetch books")
        return [Book.from_dict(item) for item in data]

    def create_book(self, payload: Dict[str, Any]) -> Book:
        data = self._request("POST", BOOKS_PATH, fallback="Failed to add book", json=payload)
        return Book.from_dict(data)

    def delete_book(self, book_id: str) -> Book:
        data = self._request("DELETE", f"{BOOKS_PATH}/{book_id}", fallback="Failed to delete book")
        return Book.from_dict(data["deletedBook"])

    def _request(self, method: str, path: str, fallback: str, **kwargs) -> Any:
        try:
            response = self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"{method} {path} failed: {e}")
            raise CatalogAPIError(f"{fallback}: {e}") from e

        try:
            data = response.json()
        except ValueError:
            data = None

        if not response.is_success:
            message = data.get("message") if isinstance(data, dict) else None
            logger.error(f"{method} {path} returned {response.status_code}: {message or response.text}")
            raise CatalogAPIError(message or fallback, status_code=response.status_code)
        if data is None:
            raise CatalogAPIError(f"{fallback}: response was not JSON", status_code=response.status_code)
        return data

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "CatalogHTTPClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
