"""Pydantic schemas for API requests and responses."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from shelfwise.domain.entities import ReadingStatus, RecommendationSource


# ---------------------------------------------------------------------------
# Books
# ---------------------------------------------------------------------------
class BookResponse(BaseModel):
    external_id: Optional[str] = None
    title: str
    subtitle: Optional[str] = None
    authors: list[str] = Field(default_factory=list)
    description: str
    thumbnail_url: Optional[str] = None
    cover_url: Optional[str] = None
    categories: list[str] = Field(default_factory=list)
    page_count: int = 0
    average_rating: float = 0.0
    ratings_count: int = 0
    publisher: Optional[str] = None
    published_date: Optional[str] = None
    isbn: Optional[str] = None
    preview_link: Optional[str] = None
    info_link: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class BookSearchResponse(BaseModel):
    books: list[BookResponse]
    total: int
    query: str


class BookDescriptionResponse(BaseModel):
    external_id: str
    title: str
    description: str


# ---------------------------------------------------------------------------
# Library
# ---------------------------------------------------------------------------
class LibraryAddRequest(BaseModel):
    external_id: str = Field(..., min_length=1, max_length=255)
    status: ReadingStatus = ReadingStatus.WANT_TO_READ


class LibraryUpdateRequest(BaseModel):
    status: Optional[ReadingStatus] = None
    user_rating: Optional[int] = Field(None, ge=1, le=5)


class LibraryEntryResponse(BaseModel):
    id: UUID
    book: BookResponse
    status: ReadingStatus
    user_rating: Optional[int] = None
    added_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class LibraryListResponse(BaseModel):
    entries: list[LibraryEntryResponse]
    total: int


# ---------------------------------------------------------------------------
# Recommendations
# ---------------------------------------------------------------------------
class RecommendedBookResponse(BookResponse):
    """A recommended book with the reason it was picked."""

    reason: str = Field(..., description="Human-readable reason for this recommendation")
    genre: str = Field("General", description="Genre the recommendation was made under")


class RecentBookResponse(BaseModel):
    title: str
    author: str
    genre: str

    model_config = ConfigDict(from_attributes=True)


class UserProfileResponse(BaseModel):
    """Taste profile; only ``total_books`` is set when the library is too small."""

    total_books: int
    top_genres: Optional[list[str]] = None
    favorite_authors: Optional[list[str]] = None
    recent_books: Optional[list[RecentBookResponse]] = None
    avg_rating: Optional[float] = None
    avg_page_count: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)


class RecommendationResponse(BaseModel):
    recommendations: list[RecommendedBookResponse]
    total: int
    user_profile: Optional[UserProfileResponse] = None
    source: Optional[RecommendationSource] = Field(
        None, description="AI-powered, Genre-based, Failed or Error; absent when gated"
    )
    message: Optional[str] = None


class ModelHealthResponse(BaseModel):
    healthy: bool
    primary_model: str
    fallback_model: Optional[str] = None
