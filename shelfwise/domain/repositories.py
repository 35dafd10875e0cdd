"""Repository and external-service interfaces (ports) for dependency inversion."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional
from uuid import UUID

from shelfwise.domain.entities import (
    BookRecord,
    LibraryEntry,
    LibraryRow,
    ReadingStatus,
    RecommendationResult,
)


class ILibraryRepository(ABC):

    @abstractmethod
    async def get_library_rows(self, user_id: str) -> list[LibraryRow]:
        """Return the user's library, most recently added first."""
        pass

    @abstractmethod
    async def list_entries(self, user_id: str) -> list[LibraryEntry]:
        pass

    @abstractmethod
    async def add_book(
        self,
        user_id: str,
        book: BookRecord,
        status: ReadingStatus = ReadingStatus.WANT_TO_READ,
        added_at: Optional[datetime] = None,
    ) -> LibraryEntry:
        """Add a catalog book to the user's library (idempotent per book)."""
        pass

    @abstractmethod
    async def update_entry(
        self,
        user_id: str,
        entry_id: UUID,
        status: Optional[ReadingStatus] = None,
        user_rating: Optional[int] = None,
    ) -> LibraryEntry:
        pass


class ICatalogService(ABC):
    """Book catalog search.

    Implementations never raise on upstream failure: ``search`` returns ``[]``
    and ``get_by_id`` returns ``None``.
    """

    @abstractmethod
    async def search(self, query: str, max_results: int = 10) -> list[BookRecord]:
        pass

    @abstractmethod
    async def get_by_id(self, external_id: str) -> Optional[BookRecord]:
        pass


class ITextGenerator(ABC):
    """A single generative model endpoint: one prompt in, free-form text out."""

    model: str

    @abstractmethod
    async def generate(self, prompt: str) -> str:
        """Return the model's text; raise ``LLMInvocationError`` on any failure."""
        pass


class IRecommendationService(ABC):

    @abstractmethod
    async def get_recommendations_for_user(self, user_id: str) -> RecommendationResult:
        """Never raises; every outcome is a well-formed result."""
        pass
