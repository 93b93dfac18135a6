"""Tests for best-effort web research and hypothesis suggestion."""

import asyncio
import json

from app.chains import research_augmentation
from app.chains.research_augmentation import research_context
from app.chains.suggest_hypotheses import suggest_hypotheses
from app.core.schemas_enrichment import HypothesisSuggestionRequest
from tests.fakes.fake_anthropic import make_message, text_block

SUGGESTIONS = [
    {
        "belief": "We believe clinic owners will pay to skip claim formatting",
        "test": "Pre-sell to 5 clinics",
        "risks": ["desirable", "viable"],
        "focus_area_id": "fa-1",
        "archetype_id": "arch-1",
    },
    {
        "belief": "We believe insurers accept API submissions",
        "focus_area_id": "fa-invented",
        "archetype_id": "arch-archived",
    },
]


def _seed_context(fake_db):
    fake_db.seed("focus_areas", {"id": "fa-1", "title": "Faster claims", "status": "active"})
    fake_db.seed(
        "customer_archetypes",
        {"id": "arch-1", "name": "Clinic Owner", "status": "active"},
        {"id": "arch-archived", "name": "Old Persona", "status": "archived"},
    )
    fake_db.seed("hypotheses", {"id": "hyp-1", "belief": "Owners do billing themselves", "status": "active"})


class TestResearchContext:
    async def test_runs_queries_then_search_loop(self, anthropic):
        client = anthropic(
            make_message('["clinic billing software market 2026", "claim rejection rates"]'),
            make_message(content=[text_block("Searching...")], stop_reason="pause_turn"),
            make_message("Claim rejections cost clinics 5% of revenue (MGMA)."),
        )

        summary = await research_context("Clinics struggle with billing")

        assert summary == "Claim rejections cost clinics 5% of revenue (MGMA)."
        assert client.call_count == 3
        search_call = client.call_kwargs(1)
        assert search_call["tools"][0]["type"] == "web_search_20250305"
        assert "- claim rejection rates" in search_call["messages"][0]["content"]
        # The paused turn is echoed back so the model can resume it
        assert client.call_kwargs(2)["messages"][1]["role"] == "assistant"

    async def test_loop_stops_at_iteration_limit(self, anthropic):
        paused = [make_message(f"partial {i}", stop_reason="pause_turn") for i in range(4)]
        client = anthropic(make_message('["q1"]'), *paused)

        summary = await research_context("context")

        assert summary == "partial 3"
        assert client.call_count == 5

    async def test_tool_use_stop_ends_loop(self, anthropic):
        client = anthropic(make_message('["q1"]'), make_message("Found it.", stop_reason="tool_use"))

        summary = await research_context("context")

        assert summary == "Found it."
        assert client.call_count == 2
        assert [m["role"] for m in client.call_kwargs(1)["messages"]] == ["user"]

    async def test_unparseable_queries_yield_none(self, anthropic):
        client = anthropic(make_message("I would search for billing trends"))

        assert await research_context("context") is None
        assert client.call_count == 1

    async def test_empty_query_list_skips_search(self, anthropic):
        client = anthropic(make_message('["  "]'))

        assert await research_context("context") is None
        assert client.call_count == 1

    async def test_search_failure_yields_none(self, anthropic):
        anthropic(make_message('["q1"]'), RuntimeError("web search unavailable"))

        assert await research_context("context") is None

    async def test_timeout_yields_none(self, anthropic, monkeypatch):
        anthropic(make_message('["q1"]'))

        async def slow_loop(context, queries):
            await asyncio.sleep(1)
            return "too late"

        monkeypatch.setattr(research_augmentation, "_run_search_loop", slow_loop)
        monkeypatch.setattr(research_augmentation.get_settings(), "RESEARCH_TIMEOUT_SECONDS", 0.01)

        assert await research_context("context") is None


class TestSuggestHypotheses:
    async def test_clears_links_outside_context(self, anthropic, fake_db):
        _seed_context(fake_db)
        client = anthropic(make_message(json.dumps(SUGGESTIONS)))

        result = await suggest_hypotheses(HypothesisSuggestionRequest(count=2))

        first, second = result.suggestions
        assert (first.focus_area_id, first.archetype_id) == ("fa-1", "arch-1")
        assert [r.value for r in first.risks] == ["desirable", "viable"]
        assert (second.focus_area_id, second.archetype_id) == (None, None)
        assert result.research_used is False
        assert client.call_count == 1

        message = client.call_kwargs(0)["messages"][0]["content"]
        assert "Old Persona" not in message
        assert "(active) Owners do billing themselves" in message
        assert "Suggest 2 new hypotheses" in message

    async def test_context_reads_are_best_effort(self, anthropic, fake_db):
        for table in ("vision", "focus_areas", "customer_archetypes", "hypotheses"):
            fake_db.fail(table)
        anthropic(make_message(json.dumps(SUGGESTIONS[:1])))

        result = await suggest_hypotheses(HypothesisSuggestionRequest())

        assert result.suggestions[0].focus_area_id is None
        assert result.suggestions[0].archetype_id is None

    async def test_web_search_adds_research_section(self, anthropic, fake_db):
        _seed_context(fake_db)
        client = anthropic(
            make_message('["clinic billing trends"]'),
            make_message("Most clinics outsource billing."),
            make_message(json.dumps(SUGGESTIONS[:1])),
        )

        result = await suggest_hypotheses(HypothesisSuggestionRequest(enable_web_search=True))

        assert result.research_used is True
        message = client.call_kwargs(2)["messages"][0]["content"]
        assert "=== WEB RESEARCH ===\nMost clinics outsource billing." in message

    async def test_research_failure_falls_back_to_local_context(self, anthropic, fake_db):
        _seed_context(fake_db)
        client = anthropic(
            make_message("no queries here"),
            make_message(json.dumps(SUGGESTIONS[:1])),
        )

        result = await suggest_hypotheses(HypothesisSuggestionRequest(enable_web_search=True))

        assert result.research_used is False
        assert "WEB RESEARCH" not in client.call_kwargs(1)["messages"][0]["content"]

    async def test_no_research_without_context(self, anthropic):
        client = anthropic(make_message(json.dumps(SUGGESTIONS[:1])))

        result = await suggest_hypotheses(HypothesisSuggestionRequest(enable_web_search=True))

        assert result.research_used is False
        assert client.call_count == 1
