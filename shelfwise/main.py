"""Main FastAPI application."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shelfwise.api.library_routes import router as library_router
from shelfwise.api.recommendation_routes import router as recommendation_router
from shelfwise.api.routes import router as books_router
from shelfwise.core.config import settings
from shelfwise.infrastructure.database.connection import init_db

# Configure logging
logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    logger.info("Starting ShelfWise application")
    await init_db()
    logger.info(
        "Database initialized; LLM provider=%s (primary=%s, fallback=%s)",
        settings.llm_provider,
        settings.llm_primary_model,
        settings.llm_fallback_model or "none",
    )
    yield
    logger.info("Shutting down ShelfWise application")


app = FastAPI(
    title="ShelfWise",
    description="Personal library tracker with AI-powered recommendations",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(books_router)
app.include_router(library_router)
app.include_router(recommendation_router)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
