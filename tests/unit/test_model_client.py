import json

import pytest

from shelfwise.domain.entities import RecentBook, TasteProfile
from shelfwise.domain.exceptions import LLMInvocationError
from shelfwise.domain.repositories import ITextGenerator
from shelfwise.infrastructure.llm.client import RecommendationModelClient
from shelfwise.infrastructure.llm.prompts import (
    BOOK_DESCRIPTION_PROMPT,
    render_recommendation_prompt,
)


class FakeGenerator(ITextGenerator):
    """Replays canned responses; exceptions in the list are raised."""

    def __init__(self, model: str, *responses):
        self.model = model
        self.responses = list(responses)
        self.prompts: list[str] = []

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def model_output(count: int = 10) -> str:
    items = [
        {"title": f"Book {i}", "author": f"Author {i}", "genre": "Fantasy", "reason": f"Reason {i}"}
        for i in range(count)
    ]
    return "```json\n" + json.dumps(items) + "\n```"


@pytest.mark.asyncio
async def test_primary_success_skips_fallback(sample_profile):
    primary = FakeGenerator("primary-model", model_output())
    fallback = FakeGenerator("fallback-model", model_output())
    client = RecommendationModelClient(primary, fallback)

    candidates = await client.get_recommendations(sample_profile)

    assert len(candidates) == 10
    assert candidates[0].title == "Book 0"
    assert fallback.prompts == []


@pytest.mark.asyncio
async def test_primary_error_falls_back_with_identical_prompt(sample_profile):
    primary = FakeGenerator("primary-model", LLMInvocationError("primary-model", "quota exceeded"))
    fallback = FakeGenerator("fallback-model", model_output(3))
    client = RecommendationModelClient(primary, fallback)

    candidates = await client.get_recommendations(sample_profile)

    assert [c.title for c in candidates] == ["Book 0", "Book 1", "Book 2"]
    assert fallback.prompts == primary.prompts
    assert len(fallback.prompts) == 1


@pytest.mark.asyncio
async def test_unparseable_primary_output_falls_back(sample_profile):
    primary = FakeGenerator("primary-model", "Sorry, I can't recommend books right now.")
    fallback = FakeGenerator("fallback-model", model_output(2))
    client = RecommendationModelClient(primary, fallback)

    candidates = await client.get_recommendations(sample_profile)

    assert len(candidates) == 2


@pytest.mark.asyncio
async def test_both_tiers_failing_returns_empty_list(sample_profile):
    primary = FakeGenerator("primary-model", LLMInvocationError("primary-model", "timed out"))
    fallback = FakeGenerator("fallback-model", RuntimeError("connection reset"))
    client = RecommendationModelClient(primary, fallback)

    assert await client.get_recommendations(sample_profile) == []
    assert len(fallback.prompts) == 1


@pytest.mark.asyncio
async def test_without_fallback_primary_failure_is_final(sample_profile):
    primary = FakeGenerator("primary-model", LLMInvocationError("primary-model", "blocked"))
    client = RecommendationModelClient(primary)

    assert await client.get_recommendations(sample_profile) == []


def test_prompt_renders_profile():
    profile = TasteProfile(
        total_books=7,
        top_genres=["Fantasy", "Sci-Fi"],
        favorite_authors=[],
        recent_books=[RecentBook(title="Dune", author="Frank Herbert", genre="Sci-Fi")],
        avg_rating=4,
        avg_page_count=410,
    )

    prompt = render_recommendation_prompt(profile)

    assert "- Total Books Read: 7" in prompt
    assert "- Average Rating Given: 4.0/5.0" in prompt
    assert "- Favorite Genres: Fantasy, Sci-Fi" in prompt
    assert "- Favorite Authors: Various" in prompt
    assert '  - "Dune" by Frank Herbert (Sci-Fi)' in prompt
    assert "exactly 10 book recommendations" in prompt
    assert '"reason":' in prompt


def test_prompt_without_recent_books(sample_profile):
    prompt = render_recommendation_prompt(sample_profile)

    assert "  - No recent books recorded" in prompt


@pytest.mark.asyncio
async def test_describe_book_uses_fallback_then_default():
    primary = FakeGenerator("p", LLMInvocationError("p", "down"), LLMInvocationError("p", "down"))
    fallback = FakeGenerator("f", "  A gripping tale.  ", LLMInvocationError("f", "down"))
    client = RecommendationModelClient(primary, fallback)

    assert await client.describe_book("Dune", "Frank Herbert") == "A gripping tale."
    assert await client.describe_book("Dune", "Frank Herbert") == "Dune by Frank Herbert"
    assert 'the book "Dune" by Frank Herbert' in primary.prompts[0]


@pytest.mark.asyncio
async def test_check_health():
    healthy = RecommendationModelClient(FakeGenerator("p", model_output(1)))
    unhealthy = RecommendationModelClient(FakeGenerator("p", "nope"))

    assert await healthy.check_health() is True
    assert await unhealthy.check_health() is False


def test_description_prompt_is_one_string_with_system_text_first():
    prompt = BOOK_DESCRIPTION_PROMPT.render_flat(title="Dune", author="Frank Herbert")

    system, user = prompt.split("\n\n", 1)
    assert system == BOOK_DESCRIPTION_PROMPT.system
    assert user.startswith('Provide a compelling 2-3 sentence description of the book "Dune"')
