"""Dependency injection container."""

from typing import Annotated, Optional

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from shelfwise.core.config import settings
from shelfwise.domain.repositories import (
    ICatalogService,
    ILibraryRepository,
    IRecommendationService,
    ITextGenerator,
)
from shelfwise.infrastructure.catalog.google_books import GoogleBooksCatalog
from shelfwise.infrastructure.database.connection import get_db
from shelfwise.infrastructure.database.repository import LibraryRepository
from shelfwise.infrastructure.llm.client import RecommendationModelClient
from shelfwise.infrastructure.llm.services import (
    GeminiTextGenerator,
    MockTextGenerator,
    OllamaTextGenerator,
    OpenAITextGenerator,
)
from shelfwise.services.enrichment import EnrichmentStage
from shelfwise.services.recommendation import RecommendationService


# ---------------------------------------------------------------------------
# Infrastructure providers
# ---------------------------------------------------------------------------
def get_catalog_service() -> ICatalogService:
    """Return the Google Books catalog adapter."""
    return GoogleBooksCatalog(
        api_key=settings.google_books_api_key,
        base_url=settings.google_books_base_url,
        timeout=settings.catalog_timeout,
    )


def build_text_generator(model: str) -> ITextGenerator:
    """Return a generator for ``model`` on the configured provider."""
    if settings.llm_provider == "mock":
        return MockTextGenerator(model=model)
    elif settings.llm_provider == "gemini":
        kwargs = {"base_url": settings.llm_base_url} if settings.llm_base_url else {}
        return GeminiTextGenerator(
            api_key=settings.llm_api_key,
            model=model,
            timeout=settings.llm_timeout,
            **kwargs,
        )
    elif settings.llm_provider == "ollama":
        return OllamaTextGenerator(
            base_url=settings.llm_base_url or "http://localhost:11434",
            model=model,
            timeout=settings.llm_timeout,
        )
    elif settings.llm_provider == "openai":
        return OpenAITextGenerator(
            api_key=settings.llm_api_key,
            model=model,
            timeout=settings.llm_timeout,
            base_url=settings.llm_base_url or None,
        )
    raise ValueError(f"Unknown LLM provider: {settings.llm_provider}")


def get_model_client() -> RecommendationModelClient:
    """Return the two-tier model client (primary, then fallback model)."""
    fallback: Optional[ITextGenerator] = None
    if settings.llm_fallback_model:
        fallback = build_text_generator(settings.llm_fallback_model)
    return RecommendationModelClient(
        primary=build_text_generator(settings.llm_primary_model),
        fallback=fallback,
    )


# ---------------------------------------------------------------------------
# Repository providers
# ---------------------------------------------------------------------------
async def get_library_repository(session: AsyncSession = Depends(get_db)) -> ILibraryRepository:
    return LibraryRepository(session)


# ---------------------------------------------------------------------------
# Service providers
# ---------------------------------------------------------------------------
async def get_recommendation_service(
    library_repo: ILibraryRepository = Depends(get_library_repository),
    catalog: ICatalogService = Depends(get_catalog_service),
    model_client: RecommendationModelClient = Depends(get_model_client),
) -> IRecommendationService:
    return RecommendationService(
        library_repository=library_repo,
        catalog=catalog,
        model_client=model_client,
        enrichment=EnrichmentStage(catalog),
        min_library_size=settings.min_library_size,
        fallback_result_count=settings.fallback_result_count,
    )


# ---------------------------------------------------------------------------
# Caller identity
# ---------------------------------------------------------------------------
async def get_current_user_id(
    x_user_id: Annotated[Optional[str], Header()] = None,
) -> str:
    """Return the caller's user id.

    Authentication happens upstream (gateway / identity provider), which
    forwards the verified subject in ``X-User-ID``.
    """
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing user identity",
        )
    return x_user_id.strip()
