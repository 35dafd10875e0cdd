"""Structured, reusable prompt templates for LLM interactions.

Prompts are kept apart from the model client so wording can change without
touching fallback or parsing logic, and so tests can assert on the exact text
a model receives.
"""

from dataclasses import dataclass, field
from typing import Any

from shelfwise.domain.entities import TasteProfile


@dataclass(frozen=True)
class PromptTemplate:
    """A reusable prompt template with named placeholders.

    Usage::

        tpl = PromptTemplate(
            name="book_description",
            system="You are a literary guide.",
            user="Describe {title} by {author}.",
        )
        prompt = tpl.render_flat(title="Dune", author="Frank Herbert")
    """

    name: str
    system: str
    user: str
    description: str = ""
    version: str = "1.0"
    tags: list[str] = field(default_factory=list)

    def render_flat(self, **kwargs: Any) -> str:
        """Return the prompt as one string, system text first."""
        sys_text = self.system.format(**kwargs)
        usr_text = self.user.format(**kwargs)
        return f"{sys_text}\n\n{usr_text}"


# =========================================================================
# Pre-defined prompts
# =========================================================================

RECOMMENDATION_PROMPT = PromptTemplate(
    name="book_recommendations",
    description="Suggest 10 books from a reader's taste profile as a JSON array.",
    version="1.0",
    tags=["recommendation", "json"],
    system=(
        "You are a knowledgeable book recommendation expert. Based on the user's "
        "reading profile below, suggest {count} books that they would likely enjoy."
    ),
    user=(
        "USER READING PROFILE:\n"
        "- Total Books Read: {total_books}\n"
        "- Average Rating Given: {avg_rating}/5.0\n"
        "- Favorite Genres: {genres}\n"
        "- Favorite Authors: {authors}\n"
        "\n"
        "RECENTLY READ BOOKS:\n"
        "{recent_books}\n"
        "\n"
        "INSTRUCTIONS:\n"
        "1. Analyze the user's reading patterns, preferred genres, and favorite authors\n"
        "2. Recommend {count} books that align with their tastes\n"
        "3. Provide diverse recommendations (mix of popular and hidden gems)\n"
        "4. Include books from similar genres but also introduce 1-2 books from "
        "complementary genres\n"
        "5. For each recommendation, explain WHY it matches the user's preferences\n"
        "6. Ensure all recommendations are actual, real books that exist\n"
        "\n"
        "RESPONSE FORMAT:\n"
        "Return ONLY a valid JSON array with exactly {count} book recommendations "
        "in this format:\n"
        "[\n"
        "  {{\n"
        '    "title": "Book Title",\n'
        '    "author": "Author Name",\n'
        '    "genre": "Primary Genre",\n'
        '    "reason": "Brief explanation (2-3 sentences) of why this book matches '
        "the user's reading profile\"\n"
        "  }}\n"
        "]\n"
        "\n"
        "IMPORTANT:\n"
        "- Return ONLY the JSON array, no additional text before or after\n"
        "- Ensure all books are real and accurately attributed to their authors\n"
        "- Make sure the JSON is properly formatted and parseable\n"
        "- Each reason should be personalized based on the user's specific reading history"
    ),
)

BOOK_DESCRIPTION_PROMPT = PromptTemplate(
    name="book_description",
    description="Short, engaging description of a single book.",
    version="1.0",
    tags=["catalog", "description"],
    system="You are a well-read bookseller writing shelf-talker blurbs.",
    user=(
        'Provide a compelling 2-3 sentence description of the book "{title}" by '
        "{author}. Focus on what makes it unique and why readers might enjoy it. "
        "Be concise and engaging."
    ),
)

RECOMMENDATION_COUNT = 10


def render_recommendation_prompt(
    profile: TasteProfile, count: int = RECOMMENDATION_COUNT
) -> str:
    """Render the taste profile into the fixed recommendation prompt."""
    if profile.recent_books:
        recent = "\n".join(
            f'  - "{book.title}" by {book.author} ({book.genre or "Unknown genre"})'
            for book in profile.recent_books
        )
    else:
        recent = "  - No recent books recorded"

    return RECOMMENDATION_PROMPT.render_flat(
        count=count,
        total_books=profile.total_books,
        avg_rating=f"{profile.avg_rating:.1f}",
        genres=", ".join(profile.top_genres) or "Various",
        authors=", ".join(profile.favorite_authors) or "Various",
        recent_books=recent,
    )
