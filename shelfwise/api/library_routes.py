"""Personal library API routes (collection and reading status)."""

import logging
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status

from shelfwise.api.schemas import (
    LibraryAddRequest,
    LibraryEntryResponse,
    LibraryListResponse,
    LibraryUpdateRequest,
)
from shelfwise.core.dependencies import (
    get_catalog_service,
    get_current_user_id,
    get_library_repository,
)
from shelfwise.domain.exceptions import LibraryEntryNotFoundError
from shelfwise.domain.repositories import ICatalogService, ILibraryRepository

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/library", tags=["library"])


@router.get("", response_model=LibraryListResponse)
async def list_library(
    user_id: Annotated[str, Depends(get_current_user_id)],
    library_repo: Annotated[ILibraryRepository, Depends(get_library_repository)],
) -> LibraryListResponse:
    """List the current user's library, most recently added first."""
    entries = await library_repo.list_entries(user_id)
    return LibraryListResponse(
        entries=[LibraryEntryResponse.model_validate(e) for e in entries],
        total=len(entries),
    )


@router.post("", response_model=LibraryEntryResponse, status_code=status.HTTP_201_CREATED)
async def add_to_library(
    body: LibraryAddRequest,
    user_id: Annotated[str, Depends(get_current_user_id)],
    library_repo: Annotated[ILibraryRepository, Depends(get_library_repository)],
    catalog: Annotated[ICatalogService, Depends(get_catalog_service)],
) -> LibraryEntryResponse:
    """Add a catalog book to the library; adding the same book twice is a no-op."""
    book = await catalog.get_by_id(body.external_id)
    if book is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Book not found in catalog"
        )
    # Library books are keyed by catalog id; without one every add would insert a new row.
    if not book.external_id:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Catalog volume has no id",
        )
    entry = await library_repo.add_book(user_id, book, body.status)
    logger.info("User %s added %r (%s)", user_id, book.title, entry.status.value)
    return LibraryEntryResponse.model_validate(entry)


@router.patch("/{entry_id}", response_model=LibraryEntryResponse)
async def update_library_entry(
    entry_id: UUID,
    body: LibraryUpdateRequest,
    user_id: Annotated[str, Depends(get_current_user_id)],
    library_repo: Annotated[ILibraryRepository, Depends(get_library_repository)],
) -> LibraryEntryResponse:
    """Change reading status and/or the user's own rating."""
    try:
        entry = await library_repo.update_entry(
            user_id, entry_id, status=body.status, user_rating=body.user_rating
        )
    except LibraryEntryNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Entry not found")
    return LibraryEntryResponse.model_validate(entry)
