"""Repository implementations.

Sessions must be created with ``expire_on_commit=False`` (see
``connection.async_session_maker``); entities are built from model attributes
after commit.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from shelfwise.domain.entities import (
    DEFAULT_DESCRIPTION,
    BookRecord,
    LibraryEntry,
    LibraryRow,
    ReadingStatus,
)
from shelfwise.domain.exceptions import LibraryEntryNotFoundError
from shelfwise.domain.repositories import ILibraryRepository
from shelfwise.infrastructure.database.models import BookModel, LibraryEntryModel


# ---------------------------------------------------------------------------
# Library Repository
# ---------------------------------------------------------------------------
class LibraryRepository(ILibraryRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_library_rows(self, user_id: str) -> list[LibraryRow]:
        entries = await self._entries_for(user_id)
        return [self._to_row(entry) for entry in entries]

    async def list_entries(self, user_id: str) -> list[LibraryEntry]:
        entries = await self._entries_for(user_id)
        return [self._to_entity(entry) for entry in entries]

    async def add_book(
        self,
        user_id: str,
        book: BookRecord,
        status: ReadingStatus = ReadingStatus.WANT_TO_READ,
        added_at: Optional[datetime] = None,
    ) -> LibraryEntry:
        db_book = await self._get_or_create_book(book)

        result = await self.session.execute(
            select(LibraryEntryModel).where(
                LibraryEntryModel.user_id == user_id,
                LibraryEntryModel.book_id == db_book.id,
            )
        )
        db_entry = result.scalar_one_or_none()
        if db_entry is None:
            now = added_at or datetime.utcnow()
            db_entry = LibraryEntryModel(
                id=uuid4(),
                user_id=user_id,
                book_id=db_book.id,
                book=db_book,
                status=ReadingStatus(status).value,
                added_at=now,
                updated_at=now,
            )
            self.session.add(db_entry)
            await self.session.commit()
        return self._to_entity(db_entry)

    async def update_entry(
        self,
        user_id: str,
        entry_id: UUID,
        status: Optional[ReadingStatus] = None,
        user_rating: Optional[int] = None,
    ) -> LibraryEntry:
        result = await self.session.execute(
            select(LibraryEntryModel).where(
                LibraryEntryModel.id == entry_id,
                LibraryEntryModel.user_id == user_id,
            )
        )
        db_entry = result.scalar_one_or_none()
        if db_entry is None:
            raise LibraryEntryNotFoundError(f"Library entry {entry_id} not found")
        if status is not None:
            db_entry.status = ReadingStatus(status).value
        if user_rating is not None:
            db_entry.user_rating = user_rating
        db_entry.updated_at = datetime.utcnow()
        await self.session.commit()
        return self._to_entity(db_entry)

    # -- Helpers --
    async def _entries_for(self, user_id: str) -> list[LibraryEntryModel]:
        result = await self.session.execute(
            select(LibraryEntryModel)
            .where(LibraryEntryModel.user_id == user_id)
            .order_by(LibraryEntryModel.added_at.desc())
        )
        return list(result.scalars().all())

    async def _get_or_create_book(self, book: BookRecord) -> BookModel:
        if book.external_id:
            result = await self.session.execute(
                select(BookModel).where(BookModel.google_books_id == book.external_id)
            )
            existing = result.scalar_one_or_none()
            if existing is not None:
                return existing

        db_book = BookModel(
            id=uuid4(),
            google_books_id=book.external_id,
            isbn=book.isbn,
            title=book.title,
            subtitle=book.subtitle,
            authors=list(book.authors),
            publisher=book.publisher,
            published_date=book.published_date,
            page_count=book.page_count or None,
            description=book.description,
            cover_url=book.cover_url,
            thumbnail_url=book.thumbnail_url,
            categories=list(book.categories),
            average_rating=book.average_rating or None,
            ratings_count=book.ratings_count,
        )
        self.session.add(db_book)
        await self.session.flush()
        return db_book

    @staticmethod
    def _to_book(model: BookModel) -> BookRecord:
        return BookRecord(
            external_id=model.google_books_id,
            title=model.title,
            subtitle=model.subtitle,
            authors=list(model.authors or []),
            description=model.description or DEFAULT_DESCRIPTION,
            thumbnail_url=model.thumbnail_url,
            cover_url=model.cover_url,
            categories=list(model.categories or []),
            page_count=model.page_count or 0,
            average_rating=model.average_rating or 0.0,
            ratings_count=model.ratings_count or 0,
            publisher=model.publisher,
            published_date=model.published_date,
            isbn=model.isbn,
        )

    @staticmethod
    def _to_row(model: LibraryEntryModel) -> LibraryRow:
        book = model.book
        return LibraryRow(
            title=book.title,
            authors=list(book.authors or []),
            categories=list(book.categories or []),
            average_rating=book.average_rating,
            page_count=book.page_count,
            added_at=model.added_at,
            status=ReadingStatus(model.status),
            user_rating=model.user_rating,
            external_id=book.google_books_id,
        )

    @classmethod
    def _to_entity(cls, model: LibraryEntryModel) -> LibraryEntry:
        return LibraryEntry(
            id=model.id,
            user_id=model.user_id,
            book=cls._to_book(model.book),
            status=ReadingStatus(model.status),
            user_rating=model.user_rating,
            added_at=model.added_at,
            updated_at=model.updated_at,
        )
