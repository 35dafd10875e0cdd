from datetime import datetime
from uuid import uuid4

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from shelfwise.domain.entities import ReadingStatus
from shelfwise.domain.exceptions import LibraryEntryNotFoundError
from shelfwise.infrastructure.database.models import Base
from shelfwise.infrastructure.database.repository import LibraryRepository


@pytest_asyncio.fixture
async def session():
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with maker() as session:
        yield session
    await engine.dispose()


@pytest.mark.asyncio
async def test_rows_come_back_newest_first(session, make_book):
    repo = LibraryRepository(session)
    await repo.add_book("u1", make_book("Old", categories=["History"]), added_at=datetime(2024, 1, 1))
    await repo.add_book("u1", make_book("New", categories=["Fantasy"]), added_at=datetime(2024, 3, 1))
    await repo.add_book("u1", make_book("Mid"), added_at=datetime(2024, 2, 1))

    rows = await repo.get_library_rows("u1")

    assert [row.title for row in rows] == ["New", "Mid", "Old"]
    assert rows[0].categories == ["Fantasy"]
    assert rows[0].authors == ["Someone"]
    assert rows[0].page_count == 350
    assert rows[0].average_rating == 4.2


@pytest.mark.asyncio
async def test_libraries_are_per_user(session, make_book):
    repo = LibraryRepository(session)
    await repo.add_book("u1", make_book("Mine"))

    assert await repo.get_library_rows("u2") == []
    assert len(await repo.get_library_rows("u1")) == 1


@pytest.mark.asyncio
async def test_adding_the_same_book_twice_is_idempotent(session, make_book):
    repo = LibraryRepository(session)
    book = make_book("Dune", external_id="dune-1")

    first = await repo.add_book("u1", book)
    second = await repo.add_book("u1", book, status=ReadingStatus.READ)

    assert first.id == second.id
    assert len(await repo.list_entries("u1")) == 1


@pytest.mark.asyncio
async def test_book_snapshot_is_shared_between_users(session, make_book):
    repo = LibraryRepository(session)
    book = make_book("Dune", external_id="dune-1")

    await repo.add_book("u1", book)
    entry = await repo.add_book("u2", book, status=ReadingStatus.CURRENTLY_READING)

    assert entry.book.external_id == "dune-1"
    assert entry.status == ReadingStatus.CURRENTLY_READING
    assert entry.user_id == "u2"


@pytest.mark.asyncio
async def test_update_entry_changes_status_and_rating(session, make_book):
    repo = LibraryRepository(session)
    entry = await repo.add_book("u1", make_book("Dune"))

    updated = await repo.update_entry("u1", entry.id, status=ReadingStatus.READ, user_rating=5)

    assert updated.status == ReadingStatus.READ
    assert updated.user_rating == 5
    rows = await repo.get_library_rows("u1")
    assert rows[0].status == ReadingStatus.READ
    assert rows[0].user_rating == 5


@pytest.mark.asyncio
async def test_update_entry_of_another_user_is_not_found(session, make_book):
    repo = LibraryRepository(session)
    entry = await repo.add_book("u1", make_book("Dune"))

    with pytest.raises(LibraryEntryNotFoundError):
        await repo.update_entry("u2", entry.id, status=ReadingStatus.READ)

    with pytest.raises(LibraryEntryNotFoundError):
        await repo.update_entry("u1", uuid4(), user_rating=3)
