"""Tests for tag suggestion with Gemini and the keyword fallback."""

import json

import httpx
import pytest
from hypothesis import given, strategies as st

from sathi_seva.tagging.generator import (
    MAX_FALLBACK_TAGS,
    MAX_REMOTE_TAGS,
    TagSuggester,
    generate_fallback_tags,
    parse_tags_from_response,
)


def gemini_response(text):
    return httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": text}]}}]})


def make_suggester(handler, api_key="test-key"):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return TagSuggester(api_key=api_key, client=client)


class TestResponseParsing:
    """Cleaning up the model's comma-separated answer."""

    def test_strips_quotes_and_whitespace(self):
        assert parse_tags_from_response(' "Plumbing", \'Pipe Repair\' ,Leak Fixing\n') == [
            "Plumbing", "Pipe Repair", "Leak Fixing"
        ]

    def test_drops_empty_and_overlong_tags(self):
        long_tag = "x" * 31

        assert parse_tags_from_response(f"Cooking,, {long_tag}, Meal Prep") == ["Cooking", "Meal Prep"]

    def test_caps_number_of_tags(self):
        text = ", ".join(f"Tag {index}" for index in range(20))

        assert len(parse_tags_from_response(text)) == MAX_REMOTE_TAGS

    @given(text=st.text(max_size=200))
    def test_parsed_tags_are_always_well_formed(self, text):
        tags = parse_tags_from_response(text)

        assert len(tags) <= MAX_REMOTE_TAGS
        assert all(0 < len(tag) <= 30 for tag in tags)


class TestFallbackTags:
    """Keyword table used without Gemini."""

    def test_plumbing_description(self):
        assert generate_fallback_tags("Need a plumber to fix a leaking pipe") == [
            "Plumbing", "Pipe Repair", "Bathroom Fitting"
        ]

    def test_title_is_considered(self):
        assert "Gardening" in generate_fallback_tags("Weekly visit", title="Garden upkeep")

    def test_unknown_description_gives_no_tags(self):
        assert generate_fallback_tags("Something unusual") == []

    @given(text=st.text(max_size=200))
    def test_deterministic_and_capped(self, text):
        tags = generate_fallback_tags(text)

        assert tags == generate_fallback_tags(text)
        assert len(tags) <= MAX_FALLBACK_TAGS
        assert len(tags) == len(set(tags))


class TestTagSuggester:
    """Strategy selection."""

    @pytest.mark.asyncio
    async def test_gemini_tags_used_when_available(self):
        captured = []

        def handler(request):
            captured.append(request)
            return gemini_response("Electrical Work, Wiring, Fan Installation")

        suggester = make_suggester(handler)
        suggestion = await suggester.suggest("Install two ceiling fans", title="Fan fitting")
        await suggester.close()

        assert suggestion.source == "gemini"
        assert suggestion.tags == ["Electrical Work", "Wiring", "Fan Installation"]
        assert captured[0].url.params["key"] == "test-key"
        body = json.loads(captured[0].content)
        assert "Install two ceiling fans" in body["contents"][0]["parts"][0]["text"]
        assert "Fan fitting" in body["contents"][0]["parts"][0]["text"]

    @pytest.mark.asyncio
    async def test_missing_key_uses_fallback_without_calling_out(self):
        def handler(request):
            raise AssertionError("no request expected")

        suggester = make_suggester(handler, api_key="")
        suggestion = await suggester.suggest("Need someone to cook dinner")

        assert suggestion.source == "fallback"
        assert suggestion.tags == ["Cooking", "Meal Prep", "Indian Cuisine"]
        assert suggestion.error

    @pytest.mark.parametrize("response", [
        httpx.Response(500, json={"error": "boom"}),
        httpx.Response(200, json={"candidates": []}),
        httpx.Response(200, json={"unexpected": True}),
        httpx.Response(200, content=b"not json"),
    ])
    @pytest.mark.asyncio
    async def test_remote_failures_fall_back(self, response):
        suggester = make_suggester(lambda request: response)

        suggestion = await suggester.suggest("Bathroom plumbing repair")

        assert suggestion.success
        assert suggestion.source == "fallback"
        assert "Plumbing" in suggestion.tags

    @pytest.mark.asyncio
    async def test_empty_answer_falls_back(self):
        suggester = make_suggester(lambda request: gemini_response("  ,  , "))

        suggestion = await suggester.suggest("Dog walking twice a day, pet care")

        assert suggestion.source == "fallback"
        assert "Pet Care" in suggestion.tags

    @pytest.mark.asyncio
    async def test_transport_error_falls_back(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        suggester = make_suggester(handler)

        suggestion = await suggester.suggest("Laundry and ironing")

        assert suggestion.source == "fallback"
        assert suggestion.tags[:2] == ["Laundry", "Dry Cleaning"]
