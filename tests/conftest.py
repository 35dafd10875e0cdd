from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Optional

import pytest

from shelfwise.domain.entities import BookRecord, LibraryRow, RecommendationCandidate, TasteProfile


@pytest.fixture
def make_row() -> Callable[..., LibraryRow]:
    base = datetime(2024, 6, 1, 12, 0, 0)
    counter = {"n": 0}

    def _make(
        title: str = "Book",
        authors: Optional[list[str]] = None,
        categories: Optional[list[str]] = None,
        average_rating: Optional[float] = 4.0,
        page_count: Optional[int] = 300,
    ) -> LibraryRow:
        counter["n"] += 1
        return LibraryRow(
            title=title,
            authors=authors if authors is not None else ["Author"],
            categories=categories if categories is not None else [],
            average_rating=average_rating,
            page_count=page_count,
            # Callers pass rows newest first, so each later row is older.
            added_at=base - timedelta(days=counter["n"]),
        )

    return _make


@pytest.fixture
def make_book() -> Callable[..., BookRecord]:
    def _make(
        title: str = "Book",
        external_id: Optional[str] = None,
        categories: Optional[list[str]] = None,
        authors: Optional[list[str]] = None,
    ) -> BookRecord:
        return BookRecord(
            title=title,
            external_id=external_id or f"id-{title.lower().replace(' ', '-')}",
            authors=authors if authors is not None else ["Someone"],
            categories=categories if categories is not None else [],
            average_rating=4.2,
            ratings_count=100,
            page_count=350,
        )

    return _make


@pytest.fixture
def make_candidate() -> Callable[..., RecommendationCandidate]:
    def _make(title: str, genre: str = "Fantasy") -> RecommendationCandidate:
        return RecommendationCandidate(
            title=title,
            author=f"Author of {title}",
            genre=genre,
            reason=f"Because you will love {title}",
        )

    return _make


@pytest.fixture
def sample_profile() -> TasteProfile:
    return TasteProfile(
        total_books=5,
        top_genres=["Fantasy", "Sci-Fi"],
        favorite_authors=["Ursula K. Le Guin"],
        recent_books=[],
        avg_rating=4.2,
        avg_page_count=350,
    )
