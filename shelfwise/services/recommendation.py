"""Recommendation orchestrator for ShelfWise.

Sequences the pipeline for one user request:

  1. LOAD            read the user's library rows
  2. PROFILE / GATE  build a taste profile, or stop when the library is too small
  3. MODEL           ask the model client for candidates (it handles model tiers)
  4. ENRICH          look every candidate up in the catalog, keep its reason
  5. GENRE_FALLBACK  no usable AI output: search the catalog by top genre
  6. FAILED / ERROR  nothing worked, or something blew up

Every path ends in a :class:`RecommendationResult` of the same shape, so the
HTTP layer never has to branch on exception types.  Read-only: nothing here
writes to the database.
"""

import logging
from typing import Optional

from shelfwise.domain.entities import (
    DEFAULT_GENRE,
    LibrarySummary,
    Recommendation,
    RecommendationCandidate,
    RecommendationResult,
    RecommendationSource,
    TasteProfile,
)
from shelfwise.domain.repositories import (
    ICatalogService,
    ILibraryRepository,
    IRecommendationService,
)
from shelfwise.infrastructure.llm.client import RecommendationModelClient
from shelfwise.services.enrichment import EnrichmentStage
from shelfwise.services.taste_profile import MIN_LIBRARY_SIZE, build_taste_profile

logger = logging.getLogger(__name__)

INSUFFICIENT_MESSAGE = "Add at least {min_books} books to get personalized recommendations"
FAILED_MESSAGE = "Unable to generate recommendations at this time. Please try again later."
ERROR_MESSAGE = "An error occurred while generating recommendations. Please try again later."
DEFAULT_AI_REASON = "Recommended based on your reading history"
GENERIC_FALLBACK_QUERY = "bestseller books highly rated"
GENERIC_FALLBACK_REASON = "Highly rated book that many readers enjoy"


class RecommendationService(IRecommendationService):
    """AI-first recommendations with a genre-search safety net.

    Constructor args:
        library_repository:  Source of the user's library rows.
        catalog:             Catalog used for enrichment and the genre fallback.
        model_client:        Two-tier model client; returns ``[]`` when both tiers fail.
        enrichment:          Optional pre-built stage (defaults to one over ``catalog``).
        min_library_size:    Books required before a profile is built (default 3).
        fallback_result_count:  Results requested from the genre fallback (default 10).
    """

    def __init__(
        self,
        library_repository: ILibraryRepository,
        catalog: ICatalogService,
        model_client: RecommendationModelClient,
        enrichment: Optional[EnrichmentStage] = None,
        min_library_size: int = MIN_LIBRARY_SIZE,
        fallback_result_count: int = 10,
    ):
        self.library_repository = library_repository
        self.catalog = catalog
        self.model_client = model_client
        self.enrichment = enrichment or EnrichmentStage(catalog)
        self.min_library_size = min_library_size
        self.fallback_result_count = fallback_result_count

    async def get_recommendations_for_user(self, user_id: str) -> RecommendationResult:
        logger.info("Generating recommendations for user %s", user_id)
        try:
            rows = await self.library_repository.get_library_rows(user_id)
            logger.info("User %s has %d book(s) in their library", user_id, len(rows))

            profile = build_taste_profile(rows, self.min_library_size)
            if profile is None:
                return RecommendationResult(
                    recommendations=[],
                    user_profile=LibrarySummary(total_books=len(rows)),
                    message=INSUFFICIENT_MESSAGE.format(min_books=self.min_library_size),
                )

            candidates = await self._request_candidates(profile)
            if not candidates:
                logger.warning("Model returned no recommendations; using genre fallback")
                return await self._genre_fallback(profile)

            recommendations = await self._enrich(candidates)
            if not recommendations:
                logger.warning("No AI candidate matched the catalog")
            logger.info(
                "Returning %d AI-powered recommendation(s) for user %s",
                len(recommendations),
                user_id,
            )
            return RecommendationResult(
                recommendations=recommendations,
                user_profile=profile,
                source=RecommendationSource.AI_POWERED,
            )
        except Exception:
            logger.exception("Recommendation pipeline failed for user %s", user_id)
            return RecommendationResult(
                recommendations=[],
                source=RecommendationSource.ERROR,
                message=ERROR_MESSAGE,
            )

    # -- Stages --
    async def _request_candidates(self, profile: TasteProfile) -> list[RecommendationCandidate]:
        try:
            return await self.model_client.get_recommendations(profile)
        except Exception as exc:
            logger.warning("Model client raised %s: %s", exc.__class__.__name__, exc)
            return []

    async def _enrich(self, candidates: list[RecommendationCandidate]) -> list[Recommendation]:
        pairs = await self.enrichment.enrich_candidates(candidates)
        return [
            Recommendation(
                book=book,
                reason=candidate.reason or DEFAULT_AI_REASON,
                genre=candidate.genre
                or (book.categories[0] if book.categories else DEFAULT_GENRE),
            )
            for candidate, book in pairs
        ]

    async def _genre_fallback(self, profile: TasteProfile) -> RecommendationResult:
        top_genre = profile.top_genres[0] if profile.top_genres else None
        if top_genre:
            query = f"{top_genre} books highly rated"
            reason = f"Popular {top_genre} book that readers love"
        else:
            query = GENERIC_FALLBACK_QUERY
            reason = GENERIC_FALLBACK_REASON

        logger.info("Genre fallback: searching catalog for %r", query)
        books = await self.catalog.search(query, self.fallback_result_count)
        if not books:
            logger.error("Genre fallback returned no results")
            return RecommendationResult(
                recommendations=[],
                user_profile=profile,
                source=RecommendationSource.FAILED,
                message=FAILED_MESSAGE,
            )

        recommendations = [
            Recommendation(
                book=book,
                reason=reason,
                genre=(book.categories[0] if book.categories else None)
                or top_genre
                or DEFAULT_GENRE,
            )
            for book in books
        ]
        logger.info("Returning %d genre-based recommendation(s)", len(recommendations))
        return RecommendationResult(
            recommendations=recommendations,
            user_profile=profile,
            source=RecommendationSource.GENRE_BASED,
        )
