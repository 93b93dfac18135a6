"""Model invocation and reply extraction shared by the enrichment chains.

Every enrichment makes exactly one Messages API call through
``complete_text`` (no retries) and, for structured replies, turns the raw
text into data with ``extract_json`` / ``parse_llm_json``. Raw model text is
written to the server log on failure and never placed in an error message.
"""

import asyncio
import json
import logging
import re
import time
from enum import Enum
from typing import Any, TypeVar

from anthropic import AsyncAnthropic
from pydantic import BaseModel, TypeAdapter, ValidationError

from app.core.config import get_settings
from app.core.errors import FailedToParse, Internal
from app.core.llm_usage import log_llm_usage
from app.core.logging import get_logger, log_with_context
from app.core.schemas_enrichment import TokenUsage

logger = get_logger(__name__)

T = TypeVar("T")

_LEADING_FENCE = re.compile(r"^```[\w+-]*[ \t]*\n?")
_TRAILING_FENCE = re.compile(r"\n?[ \t]*```$")

# Cap on how much of a bad reply goes into the log line
_LOGGED_REPLY_CHARS = 4000


class ReplyShape(str, Enum):
    """Top-level JSON shape expected from a structured reply."""

    OBJECT = "object"
    ARRAY = "array"

    @property
    def brackets(self) -> tuple[str, str]:
        return ("{", "}") if self is ReplyShape.OBJECT else ("[", "]")


class ModelReply(BaseModel):
    text: str
    usage: TokenUsage
    model: str


def strip_llm_fences(raw_output: str) -> str:
    """Strip a leading code fence (with optional language tag) and a trailing fence."""
    cleaned = raw_output.strip()
    cleaned = _LEADING_FENCE.sub("", cleaned, count=1)
    cleaned = _TRAILING_FENCE.sub("", cleaned, count=1)
    return cleaned.strip()


def _log_bad_reply(message: str, raw_output: str, operation: str | None) -> None:
    log_with_context(
        logger,
        logging.ERROR,
        message,
        operation=operation or "unknown",
        raw_reply=raw_output[:_LOGGED_REPLY_CHARS],
    )


def extract_json(
    raw_output: str,
    shape: ReplyShape,
    failure_message: str,
    *,
    operation: str | None = None,
) -> Any:
    """Extract the JSON object or array from a model reply.

    After stripping fences, the candidate span runs from the first opening
    bracket of the requested shape to the last closing bracket of that shape.
    The span is not brace-balanced: stray brackets in surrounding prose end
    up inside it and make the parse fail.

    Raises:
        FailedToParse: No span was found or the span is not valid JSON.
    """
    cleaned = strip_llm_fences(raw_output)
    open_bracket, close_bracket = shape.brackets

    start = cleaned.find(open_bracket)
    end = cleaned.rfind(close_bracket)
    if start == -1 or end < start:
        _log_bad_reply(f"{failure_message}: no JSON {shape.value} in reply", raw_output, operation)
        raise FailedToParse(failure_message)

    try:
        return json.loads(cleaned[start : end + 1])
    except json.JSONDecodeError as e:
        _log_bad_reply(f"{failure_message}: {e}", raw_output, operation)
        raise FailedToParse(failure_message) from e


def parse_llm_json(
    raw_output: str,
    type_: type[T] | Any,
    *,
    shape: ReplyShape,
    failure_message: str,
    invalid_message: str,
    operation: str | None = None,
) -> T:
    """Extract JSON from a reply and validate it against a pydantic type.

    Raises:
        FailedToParse: Extraction failed (see ``extract_json``).
        Internal: The JSON parsed but does not have the required structure.
    """
    data = extract_json(raw_output, shape, failure_message, operation=operation)
    try:
        return TypeAdapter(type_).validate_python(data)
    except ValidationError as e:
        _log_bad_reply(f"{invalid_message}: {e.error_count()} validation errors", raw_output, operation)
        raise Internal(invalid_message) from e


def get_anthropic_client() -> AsyncAnthropic:
    """Anthropic client with SDK retries disabled; callers own the timeout."""
    settings = get_settings()
    return AsyncAnthropic(api_key=settings.ANTHROPIC_API_KEY, max_retries=0)


async def complete_text(
    *,
    operation: str,
    system: str,
    user_message: str,
    max_tokens: int,
    timeout_seconds: float,
    failure_prefix: str,
    model: str | None = None,
) -> ModelReply:
    """Make one Messages API call and return the text of its first block.

    Raises:
        Internal: Timeout, provider error, or a non-text first content block.
    """
    settings = get_settings()
    model_name = model or settings.ENRICHMENT_MODEL
    client = get_anthropic_client()

    start = time.time()
    try:
        response = await asyncio.wait_for(
            client.messages.create(
                model=model_name,
                max_tokens=max_tokens,
                system=system,
                messages=[{"role": "user", "content": user_message}],
            ),
            timeout=timeout_seconds,
        )
    except asyncio.TimeoutError as e:
        logger.error(f"{operation}: model call timed out after {timeout_seconds:g}s")
        raise Internal(f"{failure_prefix}: model call timed out after {timeout_seconds:g}s") from e
    except Exception as e:
        logger.error(f"{operation}: model call failed: {e}")
        raise Internal(f"{failure_prefix}: {e}") from e
    duration_ms = int((time.time() - start) * 1000)

    usage = TokenUsage(
        input_tokens=response.usage.input_tokens,
        output_tokens=response.usage.output_tokens,
    )
    log_llm_usage(
        operation=operation,
        model=model_name,
        provider="anthropic",
        tokens_input=usage.input_tokens,
        tokens_output=usage.output_tokens,
        duration_ms=duration_ms,
    )

    first_block = response.content[0] if response.content else None
    if first_block is None or first_block.type != "text":
        logger.error(f"{operation}: first content block is not text")
        raise Internal("Unexpected response format")

    return ModelReply(text=first_block.text, usage=usage, model=model_name)
