"""Recommendation API routes."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends

from shelfwise.api.schemas import (
    BookResponse,
    ModelHealthResponse,
    RecommendationResponse,
    RecommendedBookResponse,
    UserProfileResponse,
)
from shelfwise.core.dependencies import (
    get_current_user_id,
    get_model_client,
    get_recommendation_service,
)
from shelfwise.domain.repositories import IRecommendationService
from shelfwise.infrastructure.llm.client import RecommendationModelClient

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/recommendations", tags=["recommendations"])


@router.get("", response_model=RecommendationResponse)
async def get_user_recommendations(
    user_id: Annotated[str, Depends(get_current_user_id)],
    recommendation_service: Annotated[IRecommendationService, Depends(get_recommendation_service)],
) -> RecommendationResponse:
    """Get personalised book suggestions for the current user.

    Always answers 200: the ``source`` field says which path produced the list
    (``AI-powered`` model suggestions enriched from the catalog, ``Genre-based``
    catalog search when the models are unavailable, ``Failed`` / ``Error`` when
    nothing could be produced).  With fewer than three books in the library the
    list is empty, ``source`` is absent and ``message`` explains what to do.
    """
    result = await recommendation_service.get_recommendations_for_user(user_id)

    recs = [
        RecommendedBookResponse(
            **BookResponse.model_validate(rec.book).model_dump(),
            reason=rec.reason,
            genre=rec.genre,
        )
        for rec in result.recommendations
    ]
    profile = (
        UserProfileResponse.model_validate(result.user_profile)
        if result.user_profile is not None
        else None
    )
    logger.info(
        "Recommendations for %s: %d (source=%s)",
        user_id,
        len(recs),
        result.source.value if result.source else "none",
    )
    return RecommendationResponse(
        recommendations=recs,
        total=len(recs),
        user_profile=profile,
        source=result.source,
        message=result.message,
    )


@router.get("/health", response_model=ModelHealthResponse)
async def model_health(
    model_client: Annotated[RecommendationModelClient, Depends(get_model_client)],
) -> ModelHealthResponse:
    """Ask the configured models for a sample recommendation list."""
    healthy = await model_client.check_health()
    return ModelHealthResponse(
        healthy=healthy,
        primary_model=model_client.primary.model,
        fallback_model=model_client.fallback.model if model_client.fallback else None,
    )
