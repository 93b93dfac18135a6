"""Best-effort web research folded into hypothesis suggestion.

Two steps: a short call that turns the workspace context into 2-3 search
queries, then a tool-use loop with the model's server-side web search that
runs until the model stops pausing its turn or a hard bound is hit. Every
failure on this path is logged and reported as ``None``; the caller carries
on with local context only.
"""

import asyncio
import logging
import time

from app.core.config import get_settings
from app.core.errors import SignalError
from app.core.llm import ReplyShape, complete_text, get_anthropic_client, parse_llm_json
from app.core.llm_usage import log_llm_usage
from app.core.logging import get_logger, log_with_context

logger = get_logger(__name__)

OPERATION = "research_augmentation"

# Server-side web search pauses long turns; the paused turn is sent back as-is to resume
_CONTINUE_REASONS = {"pause_turn"}

QUERY_SYSTEM = """You plan web research for a product team about to write hypotheses.
Given their product context, write 2-3 focused web search queries that would surface market data, \
competitor moves or customer evidence relevant to their open questions.

Return ONLY a JSON array of query strings."""

RESEARCH_SYSTEM = """You are a research assistant. Run the web searches you are given, then write a concise \
summary (under 400 words) of findings relevant to the product context. Cite sources inline by name. \
Say plainly when evidence is thin."""


def web_search_tool(max_uses: int) -> dict:
    return {"type": "web_search_20250305", "name": "web_search", "max_uses": max_uses}


async def generate_search_queries(context: str) -> list[str]:
    settings = get_settings()
    reply = await complete_text(
        operation=f"{OPERATION}.queries",
        system=QUERY_SYSTEM,
        user_message=context,
        max_tokens=300,
        timeout_seconds=settings.ENRICH_TIMEOUT_SECONDS,
        failure_prefix="Failed to generate search queries",
        model=settings.RESEARCH_MODEL,
    )
    queries = parse_llm_json(
        reply.text,
        list[str],
        shape=ReplyShape.ARRAY,
        failure_message="Failed to parse search queries",
        invalid_message="Invalid search queries format",
        operation=OPERATION,
    )
    return [q.strip() for q in queries if q.strip()][:3]


async def _run_search_loop(context: str, queries: list[str]) -> str:
    """Drive the web-search tool loop and return the final summary text."""
    settings = get_settings()
    client = get_anthropic_client()
    tools = [web_search_tool(settings.RESEARCH_MAX_SEARCHES)]

    query_lines = "\n".join(f"- {q}" for q in queries)
    messages: list[dict] = [
        {
            "role": "user",
            "content": f"Product context:\n{context}\n\nSearch for:\n{query_lines}\n\nThen summarize what you found.",
        }
    ]

    text_parts: list[str] = []
    for iteration in range(1, settings.RESEARCH_MAX_ITERATIONS + 1):
        start = time.time()
        response = await client.messages.create(
            model=settings.RESEARCH_MODEL,
            max_tokens=2048,
            system=RESEARCH_SYSTEM,
            messages=messages,
            tools=tools,
        )
        log_llm_usage(
            operation=f"{OPERATION}.search",
            model=settings.RESEARCH_MODEL,
            provider="anthropic",
            tokens_input=response.usage.input_tokens,
            tokens_output=response.usage.output_tokens,
            duration_ms=int((time.time() - start) * 1000),
        )

        text_parts = [block.text for block in response.content if block.type == "text"]
        if response.stop_reason not in _CONTINUE_REASONS:
            break

        logger.debug(f"Research loop iteration {iteration} stopped with {response.stop_reason}, continuing")
        messages.append({"role": "assistant", "content": response.content})
    else:
        logger.info(f"Research loop hit the {settings.RESEARCH_MAX_ITERATIONS}-iteration limit")

    return "\n".join(text_parts).strip()


async def research_context(context: str) -> str | None:
    """Return a research summary for the given context, or None on any failure."""
    settings = get_settings()
    try:
        queries = await generate_search_queries(context)
        if not queries:
            logger.info("Research skipped: no search queries generated")
            return None
        summary = await asyncio.wait_for(
            _run_search_loop(context, queries),
            timeout=settings.RESEARCH_TIMEOUT_SECONDS,
        )
    except asyncio.TimeoutError:
        logger.warning(f"Research timed out after {settings.RESEARCH_TIMEOUT_SECONDS:g}s, continuing without it")
        return None
    except SignalError as e:
        logger.warning(f"Research skipped: {e.message}")
        return None
    except Exception as e:
        log_with_context(logger, logging.WARNING, f"Research failed: {e}", operation=OPERATION)
        return None

    return summary or None
