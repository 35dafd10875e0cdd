"""Parse free-form model output into :class:`RecommendationCandidate` records.

Models are told to answer with a bare JSON array but routinely wrap it in a
Markdown fence or add a sentence of prose around it.  The parser peels those
layers off, then keeps only the elements that carry a title, an author and a
reason.
"""

import json
import logging
import re
from typing import Any, Optional

from shelfwise.domain.entities import DEFAULT_GENRE, RecommendationCandidate
from shelfwise.domain.exceptions import RecommendationParseError

logger = logging.getLogger(__name__)

_OPEN_FENCE_RE = re.compile(r"^\s*```[\w-]*[ \t]*\r?\n?")
_CLOSE_FENCE_RE = re.compile(r"\r?\n?```\s*$")
REQUIRED_FIELDS = ("title", "author", "reason")


def strip_code_fences(text: str) -> str:
    """Remove a Markdown fence wrapping the whole text, with or without a language tag."""
    text = _OPEN_FENCE_RE.sub("", text, count=1)
    return _CLOSE_FENCE_RE.sub("", text, count=1).strip()


def extract_json_array(text: str) -> Optional[str]:
    """Return the first balanced ``[...]`` substring, or ``None``.

    Brackets inside JSON string literals are ignored.
    """
    start = text.find("[")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for pos in range(start, len(text)):
            char = text[pos]
            if in_string:
                if escaped:
                    escaped = False
                elif char == "\\":
                    escaped = True
                elif char == '"':
                    in_string = False
                continue
            if char == '"':
                in_string = True
            elif char == "[":
                depth += 1
            elif char == "]":
                depth -= 1
                if depth == 0:
                    return text[start : pos + 1]
        start = text.find("[", start + 1)
    return None


def _clean(value: Any) -> str:
    if value is None or isinstance(value, (dict, list)):
        return ""
    return str(value).strip()


def _to_candidate(item: Any) -> Optional[RecommendationCandidate]:
    if not isinstance(item, dict):
        return None
    fields = {name: _clean(item.get(name)) for name in REQUIRED_FIELDS}
    if not all(fields.values()):
        return None
    return RecommendationCandidate(
        title=fields["title"],
        author=fields["author"],
        reason=fields["reason"],
        genre=_clean(item.get("genre")) or DEFAULT_GENRE,
    )


def parse_recommendations(text: str) -> list[RecommendationCandidate]:
    """Parse a model response into validated candidates.

    Raises:
        RecommendationParseError: the text holds no JSON array, the top-level
            value is not an array, or no element has title, author and reason.
    """
    if not text or not text.strip():
        raise RecommendationParseError("Empty response")

    cleaned = strip_code_fences(text)
    payload = extract_json_array(cleaned)
    if payload is None:
        # Nothing array-shaped; let json report what it actually is.
        payload = cleaned

    try:
        data = json.loads(payload)
    except json.JSONDecodeError as exc:
        raise RecommendationParseError(f"Response is not valid JSON: {exc.msg}") from exc

    if not isinstance(data, list):
        raise RecommendationParseError(
            f"Response is not an array (got {type(data).__name__})"
        )

    candidates = [c for c in (_to_candidate(item) for item in data) if c is not None]
    dropped = len(data) - len(candidates)
    if dropped:
        logger.info("Dropped %d incomplete recommendation(s) from model output", dropped)
    if not candidates:
        raise RecommendationParseError("No valid recommendations found in response")
    return candidates
