"""Enrichment stage: attach catalog metadata to model-suggested titles.

All lookups are fanned out together with :func:`asyncio.gather` and joined
before returning.  A title with no catalog match is dropped, not padded with
a placeholder, so the output can be shorter than the input.
"""

import asyncio
import logging
from typing import Optional

from shelfwise.domain.entities import BookRecord, RecommendationCandidate
from shelfwise.domain.repositories import ICatalogService

logger = logging.getLogger(__name__)


class EnrichmentStage:
    """Concurrent best-match lookups against the catalog."""

    def __init__(self, catalog: ICatalogService):
        self.catalog = catalog

    async def _lookup(self, title: str) -> Optional[BookRecord]:
        # The catalog already fails soft; this guards against anything else
        # so one bad title cannot sink the batch.
        try:
            results = await self.catalog.search(title, 1)
        except Exception as exc:
            logger.warning("Enrichment lookup for %r failed: %s", title, exc)
            return None
        if not results:
            logger.info("No catalog match for %r", title)
            return None
        return results[0]

    async def enrich(self, titles: list[str]) -> list[BookRecord]:
        """Best catalog match per title; unmatched titles are dropped."""
        matches = await asyncio.gather(*(self._lookup(title) for title in titles))
        books = [book for book in matches if book is not None]
        logger.info("Enriched %d/%d title(s)", len(books), len(titles))
        return books

    async def enrich_candidates(
        self, candidates: list[RecommendationCandidate]
    ) -> list[tuple[RecommendationCandidate, BookRecord]]:
        """Like :meth:`enrich`, but each match stays paired with its candidate.

        Pairs are formed before unmatched entries are filtered out, so a
        dropped title never shifts another candidate's reason onto the wrong
        book.
        """
        matches = await asyncio.gather(*(self._lookup(c.title) for c in candidates))
        pairs = [
            (candidate, book)
            for candidate, book in zip(candidates, matches)
            if book is not None
        ]
        logger.info("Enriched %d/%d candidate(s)", len(pairs), len(candidates))
        return pairs
