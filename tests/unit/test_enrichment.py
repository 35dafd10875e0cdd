import asyncio
from typing import Optional

import pytest

from shelfwise.domain.entities import BookRecord
from shelfwise.domain.repositories import ICatalogService
from shelfwise.services.enrichment import EnrichmentStage


class StubCatalog(ICatalogService):
    """Looks titles up in a dict; titles mapped to an exception raise it."""

    def __init__(self, books: dict, delays: Optional[dict] = None):
        self.books = books
        self.delays = delays or {}
        self.queries: list[tuple[str, int]] = []

    async def search(self, query: str, max_results: int = 10) -> list[BookRecord]:
        self.queries.append((query, max_results))
        await asyncio.sleep(self.delays.get(query, 0))
        found = self.books.get(query)
        if isinstance(found, Exception):
            raise found
        return [found] if found else []

    async def get_by_id(self, external_id: str) -> Optional[BookRecord]:
        return None


@pytest.mark.asyncio
async def test_unmatched_title_is_dropped(make_book):
    catalog = StubCatalog({"First": make_book("First"), "Third": make_book("Third")})
    stage = EnrichmentStage(catalog)

    books = await stage.enrich(["First", "Second", "Third"])

    assert [b.title for b in books] == ["First", "Third"]
    assert sorted(catalog.queries) == [("First", 1), ("Second", 1), ("Third", 1)]


@pytest.mark.asyncio
async def test_one_failing_lookup_does_not_sink_the_batch(make_book):
    catalog = StubCatalog({"Good": make_book("Good"), "Bad": RuntimeError("boom")})

    books = await EnrichmentStage(catalog).enrich(["Bad", "Good"])

    assert [b.title for b in books] == ["Good"]


@pytest.mark.asyncio
async def test_lookups_run_concurrently(make_book):
    titles = [f"T{i}" for i in range(5)]
    catalog = StubCatalog(
        {t: make_book(t) for t in titles},
        delays={t: 0.2 for t in titles},
    )
    loop = asyncio.get_running_loop()

    started = loop.time()
    books = await EnrichmentStage(catalog).enrich(titles)
    elapsed = loop.time() - started

    assert len(books) == 5
    assert elapsed < 0.8  # sequential would take ~1.0s


@pytest.mark.asyncio
async def test_candidates_stay_paired_with_their_match(make_book, make_candidate):
    candidates = [make_candidate("Alpha"), make_candidate("Beta"), make_candidate("Gamma")]
    catalog = StubCatalog(
        {"Alpha": make_book("Alpha (Anniversary Edition)"), "Gamma": make_book("Gamma")}
    )

    pairs = await EnrichmentStage(catalog).enrich_candidates(candidates)

    assert [(c.title, b.title) for c, b in pairs] == [
        ("Alpha", "Alpha (Anniversary Edition)"),
        ("Gamma", "Gamma"),
    ]
    assert pairs[1][0].reason == "Because you will love Gamma"


@pytest.mark.asyncio
async def test_empty_input():
    stage = EnrichmentStage(StubCatalog({}))

    assert await stage.enrich([]) == []
    assert await stage.enrich_candidates([]) == []
