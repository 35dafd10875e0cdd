"""Taste profile builder.

Derives the statistical summary the recommendation prompt is built from.
Pure function over rows the caller has already fetched; no I/O.
"""

import logging
import math
from collections import Counter
from typing import Optional, Sequence

from shelfwise.domain.entities import LibraryRow, RecentBook, TasteProfile

logger = logging.getLogger(__name__)

MIN_LIBRARY_SIZE = 3
TOP_GENRE_COUNT = 3
RECENT_BOOK_COUNT = 3
UNKNOWN = "Unknown"


def _round_half_up(value: float, digits: int = 0) -> float:
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor


def rank_genres(rows: Sequence[LibraryRow], limit: int = TOP_GENRE_COUNT) -> list[str]:
    """Most frequent categories first; equal counts keep first-seen order."""
    counts: Counter = Counter()
    for row in rows:
        counts.update(row.categories or [])
    # Counter preserves insertion order and sorted() is stable.
    ranked = sorted(counts.items(), key=lambda kv: -kv[1])
    return [genre for genre, _ in ranked[:limit]]


def repeat_authors(rows: Sequence[LibraryRow]) -> list[str]:
    """Authors credited on more than one row, in first-seen order."""
    counts: Counter = Counter()
    for row in rows:
        counts.update(row.authors or [])
    return [author for author, count in counts.items() if count > 1]


def build_taste_profile(
    rows: Sequence[LibraryRow], min_books: int = MIN_LIBRARY_SIZE
) -> Optional[TasteProfile]:
    """Build a :class:`TasteProfile`, or ``None`` when the library is too small.

    ``rows`` are expected most-recently-added first (the repository's order);
    ``recent_books`` is simply the head of that list.

    ``avg_page_count`` divides by every row, counting a missing page count
    as 0.  ``avg_rating`` only averages rows that carry a rating.
    """
    total = len(rows)
    if total < max(min_books, 1):
        logger.info("Library has %d book(s); need %d for a taste profile", total, min_books)
        return None

    ratings = [row.average_rating for row in rows if row.average_rating is not None]
    avg_rating = _round_half_up(sum(ratings) / len(ratings), 1) if ratings else 0.0

    total_pages = sum(row.page_count or 0 for row in rows)
    avg_page_count = int(_round_half_up(total_pages / total))

    recent = [
        RecentBook(
            title=row.title,
            author=row.authors[0] if row.authors else UNKNOWN,
            genre=row.categories[0] if row.categories else UNKNOWN,
        )
        for row in rows[:RECENT_BOOK_COUNT]
    ]

    profile = TasteProfile(
        total_books=total,
        top_genres=rank_genres(rows),
        favorite_authors=repeat_authors(rows),
        recent_books=recent,
        avg_rating=avg_rating,
        avg_page_count=avg_page_count,
    )
    logger.info(
        "Taste profile: %d books, genres=%s, authors=%s, avg rating %.1f, avg pages %d",
        profile.total_books,
        profile.top_genres or "none",
        profile.favorite_authors or "none",
        profile.avg_rating,
        profile.avg_page_count,
    )
    return profile
