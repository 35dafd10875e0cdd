"""Text generator implementations, one per model provider.

Each generator wraps exactly one model.  Unlike a best-effort helper, a
generator does **not** swallow failures: anything that prevents it from
returning usable text is raised as :class:`LLMInvocationError`, because the
recommendation model client needs to see the failure to move on to its
fallback tier.
"""

import json
import logging
from typing import Any, Optional

import httpx

from shelfwise.domain.exceptions import LLMInvocationError
from shelfwise.domain.repositories import ITextGenerator

logger = logging.getLogger(__name__)


def _http_error_message(exc: httpx.HTTPError) -> str:
    if isinstance(exc, httpx.TimeoutException):
        return "request timed out"
    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        if status == 429:
            return "quota exceeded (HTTP 429)"
        if status in (401, 403):
            return f"rejected credentials (HTTP {status})"
        return f"HTTP {status}"
    return str(exc) or exc.__class__.__name__


# ---------------------------------------------------------------------------
# Mock (development / testing)
# ---------------------------------------------------------------------------
_MOCK_BOOKS = [
    ("The Name of the Wind", "Patrick Rothfuss", "Fantasy"),
    ("Project Hail Mary", "Andy Weir", "Science Fiction"),
    ("The Night Circus", "Erin Morgenstern", "Fantasy"),
    ("Station Eleven", "Emily St. John Mandel", "Literary Fiction"),
    ("The Left Hand of Darkness", "Ursula K. Le Guin", "Science Fiction"),
    ("Piranesi", "Susanna Clarke", "Fantasy"),
    ("The Martian", "Andy Weir", "Science Fiction"),
    ("Educated", "Tara Westover", "Memoir"),
    ("The Goldfinch", "Donna Tartt", "Literary Fiction"),
    ("Dune", "Frank Herbert", "Science Fiction"),
]


class MockTextGenerator(ITextGenerator):
    """Returns deterministic output; useful for tests and offline dev."""

    def __init__(self, model: str = "mock"):
        self.model = model

    async def generate(self, prompt: str) -> str:
        logger.debug("MockTextGenerator prompt (%d chars)", len(prompt))
        if "JSON array" not in prompt:
            return "A memorable read that stays with you long after the last page."
        items = [
            {
                "title": title,
                "author": author,
                "genre": genre,
                "reason": f"A widely loved {genre.lower()} title that fits your reading history.",
            }
            for title, author, genre in _MOCK_BOOKS
        ]
        return "```json\n" + json.dumps(items, indent=2) + "\n```"


# ---------------------------------------------------------------------------
# Gemini (Google Generative Language REST API)
# ---------------------------------------------------------------------------
class GeminiTextGenerator(ITextGenerator):
    """Gemini model reached over the ``generateContent`` REST endpoint with **httpx**.

    Constructor args:
        api_key:    Google AI Studio key (sent as ``x-goog-api-key``).
        model:      Model name, e.g. ``gemini-2.0-flash-exp``.
        base_url:   API root (default ``https://generativelanguage.googleapis.com/v1beta``).
        timeout:    Per-request timeout in seconds (default 60).
        transport:  Optional httpx transport, used by tests to stub the API.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.0-flash-exp",
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    async def generate(self, prompt: str) -> str:
        if not self.api_key:
            raise LLMInvocationError(self.model, "no API key configured")

        payload = {"contents": [{"role": "user", "parts": [{"text": prompt}]}]}
        url = f"{self.base_url}/models/{self.model}:generateContent"
        logger.info("Gemini: requesting %s (%d-char prompt)", self.model, len(prompt))
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                resp = await client.post(
                    url, json=payload, headers={"x-goog-api-key": self.api_key}
                )
                resp.raise_for_status()
                data = resp.json()
        except httpx.HTTPError as exc:
            raise LLMInvocationError(self.model, _http_error_message(exc)) from exc
        except ValueError as exc:
            raise LLMInvocationError(self.model, "response body is not JSON") from exc

        return self._extract_text(data)

    def _extract_text(self, data: Any) -> str:
        if not isinstance(data, dict):
            raise LLMInvocationError(self.model, "unexpected response shape")
        candidates = data.get("candidates") or []
        if not candidates:
            block = (data.get("promptFeedback") or {}).get("blockReason")
            reason = f"prompt blocked ({block})" if block else "no candidates returned"
            raise LLMInvocationError(self.model, reason)

        first = candidates[0] or {}
        parts = (first.get("content") or {}).get("parts") or []
        text = "".join(part.get("text", "") for part in parts if isinstance(part, dict))
        if not text.strip():
            finish = first.get("finishReason", "unknown")
            raise LLMInvocationError(self.model, f"empty response (finishReason={finish})")
        return text


# ---------------------------------------------------------------------------
# Ollama (local models)
# ---------------------------------------------------------------------------
class OllamaTextGenerator(ITextGenerator):
    """Local model served by `Ollama <https://ollama.com>`_ over its REST API.

    Constructor args:
        base_url:  Ollama server URL (default ``http://localhost:11434``).
        model:     Model tag pulled into Ollama (default ``llama3``).
        timeout:   Per-request timeout in seconds (default 120).
    """

    def __init__(
        self,
        base_url: str = "http://localhost:11434",
        model: str = "llama3",
        timeout: float = 120.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout = timeout
        self._transport = transport

    async def generate(self, prompt: str) -> str:
        """Call ``POST /api/chat`` (non-streaming) and return the response text."""
        payload = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "stream": False,
            "options": {"temperature": 0.4},
        }
        logger.info("Ollama: requesting %s from %s", self.model, self.base_url)
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                resp = await client.post(f"{self.base_url}/api/chat", json=payload)
                resp.raise_for_status()
                data = resp.json()
        except httpx.HTTPError as exc:
            raise LLMInvocationError(self.model, _http_error_message(exc)) from exc
        except ValueError as exc:
            raise LLMInvocationError(self.model, "response body is not JSON") from exc

        content = ""
        if isinstance(data, dict):
            content = (data.get("message") or {}).get("content") or ""
        if not content.strip():
            raise LLMInvocationError(self.model, "empty response")
        return content


# ---------------------------------------------------------------------------
# OpenAI (remote API)
# ---------------------------------------------------------------------------
class OpenAITextGenerator(ITextGenerator):
    """OpenAI chat-completions model.

    Requires ``LLM_API_KEY`` in env.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        timeout: float = 60.0,
        base_url: Optional[str] = None,
    ):
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self.base_url = base_url or None

    async def generate(self, prompt: str) -> str:
        import openai

        try:
            client = openai.AsyncOpenAI(
                api_key=self.api_key, base_url=self.base_url, timeout=self.timeout
            )
            response = await client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                temperature=0.7,
            )
        except openai.OpenAIError as exc:
            raise LLMInvocationError(self.model, str(exc) or exc.__class__.__name__) from exc

        content = response.choices[0].message.content if response.choices else None
        if not content or not content.strip():
            raise LLMInvocationError(self.model, "empty response")
        return content
