"""Unit tests for name normalization, fuzzy matching and LLM JSON extraction."""

from __future__ import annotations

import pytest

from collabgraph.utils.errors import MalformedResponseError
from collabgraph.utils.llm_json import extract_json_array, extract_json_object
from collabgraph.utils.text_normalizer import (
    clean_display_name,
    fuzzy_match,
    name_key,
    same_person,
)


class TestNameKey:
    def test_collapses_and_casefolds(self) -> None:
        assert name_key("  max  PRODUCER") == "max producer"

    def test_nfkc(self) -> None:
        # Fullwidth letters fold to ASCII.
        assert name_key("ＡＢＣ") == "abc"

    def test_clean_display_name_preserves_case(self) -> None:
        assert clean_display_name("  Max \t Producer ") == "Max Producer"

    def test_same_person(self) -> None:
        assert same_person("Lee Writer", "LEE  writer")
        assert not same_person("Lee Writer", "Lee Writers")


class TestFuzzyMatch:
    def test_token_order_ignored(self) -> None:
        result = fuzzy_match("Swift Taylor", ["Taylor Swift", "Ed Sheeran"])
        assert result is not None
        assert result[0] == "Taylor Swift"
        assert result[1] == pytest.approx(1.0)

    def test_below_threshold(self) -> None:
        assert fuzzy_match("Taylor", ["Taylor Swift"], threshold=0.9) is None

    def test_small_typo_accepted(self) -> None:
        result = fuzzy_match("Taylor Swfit", ["Taylor Swift"], threshold=0.8)
        assert result is not None
        assert result[0] == "Taylor Swift"

    def test_empty_candidates(self) -> None:
        assert fuzzy_match("anything", []) is None


class TestLLMJson:
    def test_object_inside_fence_with_preamble(self) -> None:
        response = 'Here you go:\n```json\n{"collaborators": []}\n```'
        assert extract_json_object(response) == {"collaborators": []}

    def test_object_with_trailing_prose(self) -> None:
        assert extract_json_object('{"a": 1} hope this helps') == {"a": 1}

    def test_array(self) -> None:
        assert extract_json_array('Roles: ["artist", "songwriter"]') == ["artist", "songwriter"]

    def test_no_object(self) -> None:
        with pytest.raises(MalformedResponseError):
            extract_json_object("I don't know this artist.")

    def test_invalid_json(self) -> None:
        with pytest.raises(MalformedResponseError) as exc_info:
            extract_json_object('{"a": }', provider_name="generative")
        assert exc_info.value.provider_name == "generative"

    def test_array_where_object_expected(self) -> None:
        with pytest.raises(MalformedResponseError):
            extract_json_array('{"a": 1}')
