import json

import pytest

from shelfwise.domain.entities import RecommendationCandidate
from shelfwise.domain.exceptions import RecommendationParseError
from shelfwise.infrastructure.llm.parsing import (
    extract_json_array,
    parse_recommendations,
    strip_code_fences,
)

ONE_ITEM = '[{"title":"T","author":"A","genre":"G","reason":"R"}]'
EXPECTED = [RecommendationCandidate(title="T", author="A", genre="G", reason="R")]


def test_parses_fenced_json_with_language_tag():
    text = "```json\n" + ONE_ITEM + "\n```"

    assert parse_recommendations(text) == EXPECTED


def test_parses_bare_fence():
    text = "```\n" + ONE_ITEM + "\n```"

    assert parse_recommendations(text) == EXPECTED


def test_parses_array_surrounded_by_prose():
    text = "Sure! Here are some books you might like:\n" + ONE_ITEM + "\nEnjoy your reading."

    assert parse_recommendations(text) == EXPECTED


def test_brackets_inside_strings_do_not_end_the_array():
    items = [{"title": "Weird [Title]", "author": "A", "reason": "has ] in it"}]
    text = "Here: " + json.dumps(items) + " [end]"

    result = parse_recommendations(text)

    assert result[0].title == "Weird [Title]"
    assert result[0].reason == "has ] in it"


def test_missing_genre_defaults_to_general():
    text = '[{"title":"T","author":"A","reason":"R"}]'

    assert parse_recommendations(text)[0].genre == "General"


def test_incomplete_elements_are_dropped():
    items = [
        {"title": "Keep", "author": "A", "reason": "R"},
        {"title": "No reason", "author": "A"},
        {"author": "A", "reason": "R"},
        {"title": "Blank author", "author": "  ", "reason": "R"},
        "not an object",
    ]

    result = parse_recommendations(json.dumps(items))

    assert [c.title for c in result] == ["Keep"]


def test_object_instead_of_array_is_a_failure():
    with pytest.raises(RecommendationParseError):
        parse_recommendations('{"title":"T","author":"A","reason":"R"}')


def test_all_elements_lacking_reason_is_a_failure():
    text = '[{"title":"T","author":"A"},{"title":"U","author":"B","genre":"G"}]'

    with pytest.raises(RecommendationParseError):
        parse_recommendations(text)


@pytest.mark.parametrize("text", ["", "   ", "I cannot help with that.", "[not json]"])
def test_unparseable_text_is_a_failure(text):
    with pytest.raises(RecommendationParseError):
        parse_recommendations(text)


def test_strip_code_fences_removes_all_markers():
    assert strip_code_fences("```json\n[1]\n```") == "[1]"


def test_extract_json_array_returns_first_balanced_array():
    assert extract_json_array("x [1, [2, 3]] y [4]") == "[1, [2, 3]]"
    assert extract_json_array("no array here") is None


def test_backticks_inside_values_survive():
    items = [{"title": "T", "author": "A", "reason": "Try ```this``` one"}]
    text = "```json\n" + json.dumps(items) + "\n```"

    assert parse_recommendations(text)[0].reason == "Try ```this``` one"


def test_fenced_array_after_prose():
    text = "Here you go:\n```json\n" + ONE_ITEM + "\n```\nEnjoy!"

    assert parse_recommendations(text) == EXPECTED


def test_strip_code_fences_leaves_inner_fences():
    assert strip_code_fences("```\n[\"a ``` b\"]\n```") == '["a ``` b"]'
