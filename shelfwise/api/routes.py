"""Book catalog API routes (search, lookup, AI description)."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status

from shelfwise.api.schemas import BookDescriptionResponse, BookResponse, BookSearchResponse
from shelfwise.core.dependencies import (
    get_catalog_service,
    get_current_user_id,
    get_model_client,
)
from shelfwise.domain.repositories import ICatalogService
from shelfwise.infrastructure.llm.client import RecommendationModelClient

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/books", tags=["books"])


@router.get("/search", response_model=BookSearchResponse)
async def search_books(
    user_id: Annotated[str, Depends(get_current_user_id)],
    catalog: Annotated[ICatalogService, Depends(get_catalog_service)],
    q: Annotated[str, Query(min_length=1, max_length=300)],
    max_results: Annotated[int, Query(ge=1, le=40)] = 10,
) -> BookSearchResponse:
    """Search the book catalog.

    Upstream failures yield an empty list rather than an error.
    """
    books = await catalog.search(q, max_results)
    return BookSearchResponse(
        books=[BookResponse.model_validate(b) for b in books],
        total=len(books),
        query=q,
    )


@router.get("/{external_id}", response_model=BookResponse)
async def get_book(
    external_id: str,
    user_id: Annotated[str, Depends(get_current_user_id)],
    catalog: Annotated[ICatalogService, Depends(get_catalog_service)],
) -> BookResponse:
    """Fetch one catalog volume by its catalog id."""
    book = await catalog.get_by_id(external_id)
    if book is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Book not found")
    return BookResponse.model_validate(book)


@router.get("/{external_id}/description", response_model=BookDescriptionResponse)
async def describe_book(
    external_id: str,
    user_id: Annotated[str, Depends(get_current_user_id)],
    catalog: Annotated[ICatalogService, Depends(get_catalog_service)],
    model_client: Annotated[RecommendationModelClient, Depends(get_model_client)],
) -> BookDescriptionResponse:
    """AI-written blurb for a catalog volume ("Title by Author" if the models are down)."""
    book = await catalog.get_by_id(external_id)
    if book is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Book not found")
    author = ", ".join(book.authors) or "Unknown"
    description = await model_client.describe_book(book.title, author)
    return BookDescriptionResponse(
        external_id=external_id, title=book.title, description=description
    )
