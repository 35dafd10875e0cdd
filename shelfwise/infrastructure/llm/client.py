"""Recommendation model client with a two-tier model fallback.

The primary model is the newer, higher-quality one and is the first to fall
over under load; the fallback model is older and steadier.  Each tier gets the
identical prompt.  A tier fails when its call raises *or* when its answer
cannot be parsed, and the client moves to the next tier.  When every tier has
failed the client returns an empty list rather than raising, so the
orchestrator can apply its own genre-based fallback.
"""

import logging
from typing import Optional

from shelfwise.domain.entities import RecentBook, RecommendationCandidate, TasteProfile
from shelfwise.domain.repositories import ITextGenerator
from shelfwise.infrastructure.llm.parsing import parse_recommendations
from shelfwise.infrastructure.llm.prompts import (
    BOOK_DESCRIPTION_PROMPT,
    RECOMMENDATION_COUNT,
    render_recommendation_prompt,
)

logger = logging.getLogger(__name__)

HEALTH_CHECK_PROFILE = TasteProfile(
    total_books=5,
    top_genres=["Fantasy"],
    favorite_authors=["J.R.R. Tolkien"],
    recent_books=[RecentBook(title="The Hobbit", author="J.R.R. Tolkien", genre="Fantasy")],
    avg_rating=4.5,
    avg_page_count=320,
)


class RecommendationModelClient:
    """Turns a taste profile into recommendation candidates.

    Constructor args:
        primary:   Generator tried first.
        fallback:  Generator tried with the same prompt when ``primary`` fails.
                   Optional; without it a primary failure is final.
        count:     How many recommendations the prompt asks for (default 10).
    """

    def __init__(
        self,
        primary: ITextGenerator,
        fallback: Optional[ITextGenerator] = None,
        count: int = RECOMMENDATION_COUNT,
    ):
        self.primary = primary
        self.fallback = fallback
        self.count = count

    @property
    def tiers(self) -> list[tuple[str, ITextGenerator]]:
        tiers = [("primary", self.primary)]
        if self.fallback is not None:
            tiers.append(("fallback", self.fallback))
        return tiers

    async def get_recommendations(self, profile: TasteProfile) -> list[RecommendationCandidate]:
        """Return parsed candidates from the first tier that succeeds, else ``[]``."""
        prompt = render_recommendation_prompt(profile, self.count)

        for tier, generator in self.tiers:
            logger.info("Requesting recommendations from %s model %s", tier, generator.model)
            try:
                text = await generator.generate(prompt)
                candidates = parse_recommendations(text)
            except Exception as exc:
                logger.warning(
                    "%s model %s failed (%s: %s)",
                    tier.capitalize(),
                    generator.model,
                    exc.__class__.__name__,
                    exc,
                )
                continue

            logger.info(
                "%s model %s produced %d recommendation(s)",
                tier.capitalize(),
                generator.model,
                len(candidates),
            )
            return candidates

        logger.error(
            "All model tiers failed (rate limit, bad key, network or unparseable output); "
            "returning no recommendations"
        )
        return []

    async def describe_book(self, title: str, author: str) -> str:
        """Short AI-written description; ``"{title} by {author}"`` if every tier fails."""
        prompt = BOOK_DESCRIPTION_PROMPT.render_flat(title=title, author=author)
        for tier, generator in self.tiers:
            try:
                text = await generator.generate(prompt)
            except Exception as exc:
                logger.warning(
                    "%s model %s failed to describe %r: %s",
                    tier.capitalize(),
                    generator.model,
                    title,
                    exc,
                )
                continue
            return text.strip()
        return f"{title} by {author}"

    async def check_health(self) -> bool:
        """Run one recommendation request for a fixed sample profile."""
        candidates = await self.get_recommendations(HEALTH_CHECK_PROFILE)
        if candidates:
            logger.info("Model health check passed (%d recommendations)", len(candidates))
            return True
        logger.warning("Model health check returned no recommendations")
        return False
