"""Tests for reply extraction and the single-call model wrapper."""

import asyncio
from types import SimpleNamespace

import pytest

from app.core.errors import FailedToParse, Internal
from app.core.llm import ReplyShape, complete_text, extract_json, parse_llm_json, strip_llm_fences
from tests.fakes.fake_anthropic import make_message


class TestStripFences:
    def test_strips_language_tagged_fence(self):
        assert strip_llm_fences('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_strips_bare_fence(self):
        assert strip_llm_fences("```\n[1, 2]\n```") == "[1, 2]"

    def test_leaves_unfenced_text(self):
        assert strip_llm_fences('  {"a": 1}  ') == '{"a": 1}'


class TestExtractJson:
    def test_plain_object(self):
        assert extract_json('{"title": "Map"}', ReplyShape.OBJECT, "Failed") == {"title": "Map"}

    def test_fenced_object(self):
        raw = '```json\n{"steps": [{"order": 1}]}\n```'
        assert extract_json(raw, ReplyShape.OBJECT, "Failed") == {"steps": [{"order": 1}]}

    def test_array_inside_prose(self):
        raw = 'Here are the options:\n["One", "Two"]\nLet me know if you need more.'
        assert extract_json(raw, ReplyShape.ARRAY, "Failed") == ["One", "Two"]

    def test_no_brackets_raises_with_given_message(self):
        with pytest.raises(FailedToParse) as exc_info:
            extract_json("I cannot help with that.", ReplyShape.ARRAY, "Failed to parse vision suggestions")
        assert exc_info.value.message == "Failed to parse vision suggestions"
        assert exc_info.value.kind == "internal"

    def test_span_runs_first_open_to_last_close(self):
        # Two objects in prose produce one invalid span rather than the first object
        raw = 'First {"a": 1} and then {"b": 2}'
        with pytest.raises(FailedToParse):
            extract_json(raw, ReplyShape.OBJECT, "Failed")

    def test_close_before_open_is_not_a_span(self):
        with pytest.raises(FailedToParse):
            extract_json("] nothing here [", ReplyShape.ARRAY, "Failed")

    def test_raw_reply_is_not_in_error_message(self):
        raw = "sk-secret-value {not json at all}"
        with pytest.raises(FailedToParse) as exc_info:
            extract_json(raw, ReplyShape.OBJECT, "Failed to parse journey map data")
        assert "sk-secret-value" not in str(exc_info.value)
        assert exc_info.value.to_dict() == {
            "kind": "internal",
            "message": "Failed to parse journey map data",
        }


class TestParseLlmJson:
    def test_validates_against_type(self):
        result = parse_llm_json(
            '["a", "b"]',
            list[str],
            shape=ReplyShape.ARRAY,
            failure_message="Failed to parse",
            invalid_message="Invalid format",
        )
        assert result == ["a", "b"]

    def test_wrong_structure_is_internal_not_parse_failure(self):
        with pytest.raises(Internal) as exc_info:
            parse_llm_json(
                '[{"nested": true}]',
                list[str],
                shape=ReplyShape.ARRAY,
                failure_message="Failed to parse",
                invalid_message="Invalid suggestions format",
            )
        assert type(exc_info.value) is Internal
        assert exc_info.value.message == "Invalid suggestions format"


class TestCompleteText:
    async def test_returns_text_usage_and_model(self, anthropic):
        client = anthropic(make_message("Hello", input_tokens=11, output_tokens=7))

        reply = await complete_text(
            operation="test_op",
            system="You are terse.",
            user_message="Say hello",
            max_tokens=256,
            timeout_seconds=5,
            failure_prefix="Failed to test",
        )

        assert reply.text == "Hello"
        assert reply.usage.input_tokens == 11
        assert reply.usage.output_tokens == 7
        assert reply.model == "claude-sonnet-4-20250514"
        kwargs = client.call_kwargs()
        assert kwargs["max_tokens"] == 256
        assert kwargs["system"] == "You are terse."
        assert kwargs["messages"] == [{"role": "user", "content": "Say hello"}]

    async def test_provider_error_is_internal_with_prefix(self, anthropic):
        anthropic(RuntimeError("overloaded"))

        with pytest.raises(Internal) as exc_info:
            await complete_text(
                operation="test_op",
                system="s",
                user_message="u",
                max_tokens=10,
                timeout_seconds=5,
                failure_prefix="Failed to generate content",
            )
        assert exc_info.value.message == "Failed to generate content: overloaded"

    async def test_timeout_is_internal(self, anthropic):
        client = anthropic()

        async def slow(**kwargs):
            await asyncio.sleep(1)

        client.messages.create = slow

        with pytest.raises(Internal) as exc_info:
            await complete_text(
                operation="test_op",
                system="s",
                user_message="u",
                max_tokens=10,
                timeout_seconds=0.01,
                failure_prefix="Failed to generate content",
            )
        assert exc_info.value.message == "Failed to generate content: model call timed out after 0.01s"

    async def test_non_text_first_block_is_rejected(self, anthropic):
        anthropic(make_message(content=[SimpleNamespace(type="tool_use", id="t1")]))

        with pytest.raises(Internal) as exc_info:
            await complete_text(
                operation="test_op",
                system="s",
                user_message="u",
                max_tokens=10,
                timeout_seconds=5,
                failure_prefix="Failed",
            )
        assert exc_info.value.message == "Unexpected response format"

    async def test_empty_content_is_rejected(self, anthropic):
        anthropic(make_message(content=[]))

        with pytest.raises(Internal):
            await complete_text(
                operation="test_op",
                system="s",
                user_message="u",
                max_tokens=10,
                timeout_seconds=5,
                failure_prefix="Failed",
            )
