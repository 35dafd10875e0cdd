"""Google Books catalog adapter.

Talks to the public volumes API over **httpx** and normalises each volume
into a :class:`BookRecord`.  Both operations fail soft: whatever goes wrong
upstream (timeout, bad key, quota, outage, junk payload) is logged with a
category and the caller gets ``[]`` / ``None``, so the enrichment stage and
the genre fallback can treat "nothing found" the same way regardless of cause.
"""

import logging
from typing import Any, Optional

import httpx

from shelfwise.domain.entities import DEFAULT_DESCRIPTION, DEFAULT_TITLE, BookRecord
from shelfwise.domain.exceptions import CatalogError
from shelfwise.domain.repositories import ICatalogService

logger = logging.getLogger(__name__)

MAX_RESULTS_LIMIT = 40  # upstream caps maxResults at 40


class GoogleBooksCatalog(ICatalogService):
    """Catalog search backed by the Google Books volumes API.

    Constructor args:
        api_key:    Optional API key; anonymous requests work with a lower quota.
        base_url:   API root (default ``https://www.googleapis.com/books/v1``).
        timeout:    Per-request timeout in seconds (default 10).
        transport:  Optional httpx transport, used by tests to stub the API.
    """

    def __init__(
        self,
        api_key: str = "",
        base_url: str = "https://www.googleapis.com/books/v1",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    # -- internal helpers ---------------------------------------------------

    async def _get(self, path: str, params: Optional[dict[str, Any]] = None) -> Any:
        """GET ``{base_url}{path}`` and return decoded JSON.

        Every failure is re-raised as :class:`CatalogError` with a category so
        the public operations have a single thing to catch.
        """
        query = dict(params or {})
        if self.api_key:
            query["key"] = self.api_key
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                resp = await client.get(f"{self.base_url}{path}", params=query)
                resp.raise_for_status()
                return resp.json()
        except httpx.TimeoutException as exc:
            raise CatalogError("timeout", "request timed out") from exc
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            if status in (401, 403):
                raise CatalogError("auth", f"rejected credentials (HTTP {status})") from exc
            if status == 429:
                raise CatalogError("rate_limit", "quota exceeded (HTTP 429)") from exc
            if status == 404:
                raise CatalogError("not_found", "no such volume (HTTP 404)") from exc
            raise CatalogError("http", f"unexpected HTTP {status}") from exc
        except httpx.HTTPError as exc:
            raise CatalogError("network", str(exc) or exc.__class__.__name__) from exc
        except ValueError as exc:
            raise CatalogError("malformed", "response body is not JSON") from exc

    # -- ICatalogService interface ------------------------------------------

    async def search(self, query: str, max_results: int = 10) -> list[BookRecord]:
        """Search volumes; returns ``[]`` on no match or on any upstream failure."""
        if not query or not query.strip():
            return []
        limit = max(1, min(max_results, MAX_RESULTS_LIMIT))
        logger.info("Catalog search: %r (max %d)", query, limit)
        try:
            data = await self._get("/volumes", {"q": query, "maxResults": limit})
        except CatalogError as exc:
            logger.warning("Catalog search failed for %r [%s]: %s", query, exc.category, exc)
            return []

        items = data.get("items") if isinstance(data, dict) else None
        if not items or not isinstance(items, list):
            logger.info("No catalog results for %r", query)
            return []

        books = [volume_to_book(item) for item in items[:limit] if isinstance(item, dict)]
        logger.info("Catalog search %r returned %d book(s)", query, len(books))
        return books

    async def get_by_id(self, external_id: str) -> Optional[BookRecord]:
        """Fetch a single volume; ``None`` when missing or on any upstream failure."""
        if not external_id:
            return None
        try:
            data = await self._get(f"/volumes/{external_id}")
        except CatalogError as exc:
            if exc.category == "not_found":
                logger.info("Catalog volume %s not found", external_id)
            else:
                logger.warning(
                    "Catalog lookup failed for %s [%s]: %s", external_id, exc.category, exc
                )
            return None
        if not isinstance(data, dict):
            logger.warning("Catalog lookup for %s returned a non-object payload", external_id)
            return None
        return volume_to_book(data)


# ---------------------------------------------------------------------------
# Payload mapping
# ---------------------------------------------------------------------------
def _as_str(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value
    return None


def _as_str_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    seen: list[str] = []
    for item in value:
        if isinstance(item, str) and item.strip() and item not in seen:
            seen.append(item)
    return seen


def _as_int(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)) and value > 0:
        return int(value)
    return 0


def _as_rating(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0.0
    return float(min(max(value, 0.0), 5.0))


def _extract_isbn(identifiers: Any) -> Optional[str]:
    if not isinstance(identifiers, list):
        return None
    isbn_10 = None
    for ident in identifiers:
        if not isinstance(ident, dict):
            continue
        if ident.get("type") == "ISBN_13":
            return _as_str(ident.get("identifier"))
        if ident.get("type") == "ISBN_10":
            isbn_10 = _as_str(ident.get("identifier"))
    return isbn_10


def volume_to_book(item: dict[str, Any]) -> BookRecord:
    """Map one Google Books volume into a :class:`BookRecord` with defaults."""
    info = item.get("volumeInfo")
    if not isinstance(info, dict):
        info = {}
    images = info.get("imageLinks")
    if not isinstance(images, dict):
        images = {}

    thumbnail = _as_str(images.get("thumbnail")) or _as_str(images.get("smallThumbnail"))
    cover = (
        _as_str(images.get("large"))
        or _as_str(images.get("medium"))
        or _as_str(images.get("small"))
        or thumbnail
    )

    return BookRecord(
        external_id=_as_str(item.get("id")),
        title=_as_str(info.get("title")) or DEFAULT_TITLE,
        subtitle=_as_str(info.get("subtitle")),
        authors=_as_str_list(info.get("authors")),
        description=_as_str(info.get("description")) or DEFAULT_DESCRIPTION,
        thumbnail_url=thumbnail,
        cover_url=cover,
        categories=_as_str_list(info.get("categories")),
        page_count=_as_int(info.get("pageCount")),
        average_rating=_as_rating(info.get("averageRating")),
        ratings_count=_as_int(info.get("ratingsCount")),
        publisher=_as_str(info.get("publisher")),
        published_date=_as_str(info.get("publishedDate")),
        isbn=_extract_isbn(info.get("industryIdentifiers")),
        preview_link=_as_str(info.get("previewLink")),
        info_link=_as_str(info.get("infoLink")),
    )
