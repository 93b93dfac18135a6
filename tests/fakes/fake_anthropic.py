"""Scripted Anthropic client for enrichment tests."""

from types import SimpleNamespace
from unittest.mock import AsyncMock


def text_block(text: str) -> SimpleNamespace:
    return SimpleNamespace(type="text", text=text)


def make_message(
    text: str | None = None,
    *,
    content: list | None = None,
    stop_reason: str = "end_turn",
    input_tokens: int = 120,
    output_tokens: int = 45,
) -> SimpleNamespace:
    """A Messages API response with a single text block by default."""
    return SimpleNamespace(
        content=content if content is not None else [text_block(text or "")],
        stop_reason=stop_reason,
        usage=SimpleNamespace(input_tokens=input_tokens, output_tokens=output_tokens),
    )


class FakeAnthropic:
    """Returns (or raises) the scripted replies in order, one per call."""

    def __init__(self, *replies):
        self.messages = SimpleNamespace(create=AsyncMock(side_effect=list(replies)))

    @property
    def call_count(self) -> int:
        return self.messages.create.await_count

    def call_kwargs(self, index: int = 0) -> dict:
        return self.messages.create.call_args_list[index].kwargs
