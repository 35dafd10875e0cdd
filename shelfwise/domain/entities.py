"""Domain entities for ShelfWise."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Union
from uuid import UUID

DEFAULT_TITLE = "Unknown Title"
DEFAULT_DESCRIPTION = "No description available"
DEFAULT_GENRE = "General"


class ReadingStatus(str, Enum):
    WANT_TO_READ = "want_to_read"
    CURRENTLY_READING = "currently_reading"
    READ = "read"


class RecommendationSource(str, Enum):
    AI_POWERED = "AI-powered"
    GENRE_BASED = "Genre-based"
    FAILED = "Failed"
    ERROR = "Error"


@dataclass
class BookRecord:
    """Canonical catalog entry.

    Every string field that ends up in prompts or reasons has a concrete
    default; only identifiers and links may be ``None``.
    """

    title: str = DEFAULT_TITLE
    external_id: Optional[str] = None
    subtitle: Optional[str] = None
    authors: list[str] = field(default_factory=list)
    description: str = DEFAULT_DESCRIPTION
    thumbnail_url: Optional[str] = None
    cover_url: Optional[str] = None
    categories: list[str] = field(default_factory=list)
    page_count: int = 0
    average_rating: float = 0.0
    ratings_count: int = 0
    publisher: Optional[str] = None
    published_date: Optional[str] = None
    isbn: Optional[str] = None
    preview_link: Optional[str] = None
    info_link: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.title or not self.title.strip():
            self.title = DEFAULT_TITLE


@dataclass
class LibraryRow:
    """A library entry joined with its book, as read by the recommendation pipeline."""

    title: str
    authors: list[str] = field(default_factory=list)
    categories: list[str] = field(default_factory=list)
    average_rating: Optional[float] = None
    page_count: Optional[int] = None
    added_at: Optional[datetime] = None
    status: ReadingStatus = ReadingStatus.WANT_TO_READ
    user_rating: Optional[int] = None
    external_id: Optional[str] = None


@dataclass
class LibraryEntry:
    id: UUID
    user_id: str
    book: BookRecord
    status: ReadingStatus = ReadingStatus.WANT_TO_READ
    user_rating: Optional[int] = None
    added_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)


@dataclass(frozen=True)
class RecentBook:
    title: str
    author: str
    genre: str


@dataclass
class TasteProfile:
    """Per-request summary of a user's library; rebuilt every time, never stored."""

    total_books: int
    top_genres: list[str] = field(default_factory=list)
    favorite_authors: list[str] = field(default_factory=list)
    recent_books: list[RecentBook] = field(default_factory=list)
    avg_rating: float = 0.0
    avg_page_count: int = 0


@dataclass
class LibrarySummary:
    """Reported in place of a profile when the library is too small to build one."""

    total_books: int


@dataclass
class RecommendationCandidate:
    """One model-suggested book before catalog enrichment."""

    title: str
    author: str
    reason: str
    genre: str = DEFAULT_GENRE


@dataclass
class Recommendation:
    book: BookRecord
    reason: str
    genre: str = DEFAULT_GENRE


@dataclass
class RecommendationResult:
    recommendations: list[Recommendation] = field(default_factory=list)
    user_profile: Optional[Union[TasteProfile, LibrarySummary]] = None
    source: Optional[RecommendationSource] = None
    message: Optional[str] = None
