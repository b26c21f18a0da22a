"""Unit tests for the LLM-backed collaborator source."""

from __future__ import annotations

import asyncio
import json

import pytest

from collabgraph.models.graph import Role
from collabgraph.providers.sources.generative_source import GenerativeCollaboratorSource
from collabgraph.utils.errors import LLMError, SourceUnavailableError


def _answer(collaborators: list[dict]) -> str:
    return json.dumps({"collaborators": collaborators})


class TestGenerativeCollaboratorSource:
    @pytest.mark.asyncio
    async def test_example_scenario_drops_fabricated_top_collaborator(self, make_llm) -> None:
        llm = make_llm(
            responses=[
                _answer(
                    [
                        {
                            "name": "Max Producer",
                            "role": "producer",
                            "topCollaborators": ["Ava Example", "Other Artist", "Unknown"],
                        }
                    ]
                )
            ]
        )
        records = await GenerativeCollaboratorSource(llm).get_collaborators("Ava Example")

        assert len(records) == 1
        assert records[0].name == "Max Producer"
        assert records[0].role is Role.PRODUCER
        assert records[0].top_collaborators == ("Ava Example", "Other Artist")

    @pytest.mark.asyncio
    async def test_one_record_per_role(self, make_llm) -> None:
        llm = make_llm(
            responses=[_answer([{"name": "Lee Writer", "roles": ["producer", "songwriter", "dj"]}])]
        )
        records = await GenerativeCollaboratorSource(llm).get_collaborators("Ava Example")
        assert [(r.name, r.role) for r in records] == [
            ("Lee Writer", Role.PRODUCER),
            ("Lee Writer", Role.SONGWRITER),
        ]

    @pytest.mark.asyncio
    async def test_missing_roles_default_to_producer(self, make_llm) -> None:
        llm = make_llm(responses=[_answer([{"name": "Lee Writer"}])])
        records = await GenerativeCollaboratorSource(llm).get_collaborators("Ava Example")
        assert records[0].role is Role.PRODUCER

    @pytest.mark.asyncio
    async def test_fabricated_collaborators_dropped(self, make_llm) -> None:
        llm = make_llm(
            responses=[
                _answer(
                    [
                        {"name": "Producer A", "roles": ["producer"]},
                        {"name": "Artist 3", "roles": ["artist"]},
                        {"name": "unknown", "roles": ["songwriter"]},
                        {"name": "Max Martin", "roles": ["producer"]},
                    ]
                )
            ]
        )
        records = await GenerativeCollaboratorSource(llm).get_collaborators("Taylor Swift")
        assert [r.name for r in records] == ["Max Martin"]

    @pytest.mark.asyncio
    async def test_placeholder_words_in_longer_names_dropped(self, make_llm) -> None:
        llm = make_llm(
            responses=[
                _answer(
                    [
                        {"name": "Unknown Artist", "roles": ["artist"]},
                        {"name": "Anonymous Producer", "roles": ["producer"]},
                        {
                            "name": "Max Martin",
                            "roles": ["producer"],
                            "topCollaborators": ["Sample Producer", "Ed Sheeran"],
                        },
                    ]
                )
            ]
        )
        records = await GenerativeCollaboratorSource(llm).get_collaborators("Taylor Swift")
        assert [r.name for r in records] == ["Max Martin"]
        assert records[0].top_collaborators == ("Ed Sheeran",)

    @pytest.mark.asyncio
    async def test_top_collaborators_capped_at_three(self, make_llm) -> None:
        llm = make_llm(
            responses=[
                _answer(
                    [
                        {
                            "name": "Max Martin",
                            "roles": ["producer"],
                            "topCollaborators": ["A One", "B Two", "C Three", "D Four"],
                        }
                    ]
                )
            ]
        )
        records = await GenerativeCollaboratorSource(llm).get_collaborators("Taylor Swift")
        assert records[0].top_collaborators == ("A One", "B Two", "C Three")

    @pytest.mark.asyncio
    async def test_unparseable_response_is_empty_not_error(self, make_llm) -> None:
        llm = make_llm(responses=["I am not aware of this artist."])
        records = await GenerativeCollaboratorSource(llm).get_collaborators("Ava Example")
        assert records == []

    @pytest.mark.asyncio
    async def test_fenced_response_with_preamble(self, make_llm) -> None:
        body = _answer([{"name": "Max Martin", "roles": ["producer"]}])
        llm = make_llm(responses=[f"Sure! Here it is:\n```json\n{body}\n```"])
        records = await GenerativeCollaboratorSource(llm).get_collaborators("Taylor Swift")
        assert [r.name for r in records] == ["Max Martin"]

    @pytest.mark.asyncio
    async def test_non_list_collaborators_is_empty(self, make_llm) -> None:
        llm = make_llm(responses=['{"collaborators": "none"}'])
        records = await GenerativeCollaboratorSource(llm).get_collaborators("Ava Example")
        assert records == []

    @pytest.mark.asyncio
    async def test_llm_error_propagates_as_source_unavailable(self, make_llm) -> None:
        llm = make_llm(responses=[LLMError(message="rate limited", provider_name="openai")])
        with pytest.raises(SourceUnavailableError):
            await GenerativeCollaboratorSource(llm).get_collaborators("Ava Example")

    @pytest.mark.asyncio
    async def test_timeout_is_source_unavailable(self, make_llm) -> None:
        async def _slow(*_args, **_kwargs) -> str:
            await asyncio.sleep(1)
            return "{}"

        llm = make_llm()
        llm.complete = _slow  # type: ignore[method-assign]
        with pytest.raises(SourceUnavailableError, match="timed out"):
            await GenerativeCollaboratorSource(llm, timeout=0.01).get_collaborators("Ava Example")

    @pytest.mark.asyncio
    async def test_no_llm_configured(self) -> None:
        source = GenerativeCollaboratorSource(None)
        assert source.is_available() is False
        with pytest.raises(SourceUnavailableError):
            await source.get_collaborators("Ava Example")

    def test_prompt_requests_json_mode(self, make_llm) -> None:
        llm = make_llm(responses=['{"collaborators": []}'])
        asyncio.run(GenerativeCollaboratorSource(llm).get_collaborators("Ava Example"))
        assert llm.calls[0]["json_mode"] is True
        assert "Ava Example" in llm.calls[0]["user_prompt"]
