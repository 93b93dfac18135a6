"""Tests for audio transcription (OpenAI client mocked)."""

import base64
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from app.chains.transcribe_audio import normalize_mime_type, transcribe_audio
from app.core.errors import Internal, InvalidArgument
from app.core.schemas_enrichment import TranscriptionRequest

AUDIO = base64.b64encode(b"\x1aE\xdf\xa3 fake webm bytes").decode()

VERBOSE_RESPONSE = SimpleNamespace(
    text=" We spend every Friday on claims. ",
    language="english",
    duration=2.4,
    segments=[SimpleNamespace(id=0, start=0.0, end=2.4, text=" We spend every Friday on claims.")],
    words=[
        SimpleNamespace(word="We", start=0.0, end=0.2),
        SimpleNamespace(word="spend", start=0.2, end=0.5),
    ],
)


@pytest.fixture
def openai_client(monkeypatch):
    client = SimpleNamespace(
        audio=SimpleNamespace(transcriptions=SimpleNamespace(create=AsyncMock(return_value=VERBOSE_RESPONSE)))
    )
    monkeypatch.setattr("app.chains.transcribe_audio.get_openai_client", lambda: client)
    return client.audio.transcriptions.create


@pytest.mark.parametrize(
    ("mime_type", "expected"),
    [
        ("audio/webm;codecs=opus", "audio/webm"),
        (" Audio/MPEG ", "audio/mpeg"),
        ("audio/wav", "audio/wav"),
    ],
)
def test_normalize_mime_type(mime_type, expected):
    assert normalize_mime_type(mime_type) == expected


async def test_transcribes_with_word_and_segment_timings(openai_client):
    result = await transcribe_audio(
        TranscriptionRequest(audio_base64=AUDIO, mime_type="audio/webm;codecs=opus", language="en")
    )

    assert result.text == "We spend every Friday on claims."
    assert result.segments[0].text == "We spend every Friday on claims."
    assert [w.word for w in result.words] == ["We", "spend"]
    assert result.duration == 2.4
    assert (result.usage.input_tokens, result.usage.output_tokens) == (0, 0)

    kwargs = openai_client.await_args.kwargs
    assert kwargs["model"] == "whisper-1"
    assert kwargs["file"][0] == "recording.webm"
    assert kwargs["file"][1] == base64.b64decode(AUDIO)
    assert kwargs["timestamp_granularities"] == ["word", "segment"]
    assert kwargs["language"] == "en"


async def test_accepts_dict_response(openai_client):
    openai_client.return_value = {"text": "Hello", "segments": [], "words": [{"word": "Hello", "start": 0, "end": 1}]}

    result = await transcribe_audio(TranscriptionRequest(audio_base64=AUDIO, mime_type="audio/mp3"))

    assert result.text == "Hello"
    assert result.words[0].end == 1
    assert "language" not in openai_client.await_args.kwargs


async def test_reports_token_usage_when_provided(openai_client):
    openai_client.return_value = {"text": "Hello", "usage": {"input_tokens": 12, "output_tokens": 30}}

    result = await transcribe_audio(TranscriptionRequest(audio_base64=AUDIO, mime_type="audio/webm"))

    assert result.usage.input_tokens == 12
    assert result.usage.output_tokens == 30


async def test_unsupported_mime_type_rejected_before_call(openai_client):
    with pytest.raises(InvalidArgument) as exc_info:
        await transcribe_audio(TranscriptionRequest(audio_base64=AUDIO, mime_type="video/mp4"))

    assert exc_info.value.field == "mime_type"
    assert exc_info.value.message == "Unsupported audio type: video/mp4"
    openai_client.assert_not_awaited()


@pytest.mark.parametrize(
    ("request_kwargs", "field"),
    [
        ({"mime_type": "audio/webm"}, "audio_base64"),
        ({"audio_base64": AUDIO}, "mime_type"),
        ({"audio_base64": "not base64!!", "mime_type": "audio/webm"}, "audio_base64"),
    ],
)
async def test_invalid_payload(openai_client, request_kwargs, field):
    with pytest.raises(InvalidArgument) as exc_info:
        await transcribe_audio(TranscriptionRequest(**request_kwargs))

    assert exc_info.value.field == field
    openai_client.assert_not_awaited()


async def test_oversized_audio_rejected(openai_client, monkeypatch):
    from app.core.config import get_settings

    monkeypatch.setattr(get_settings(), "MAX_AUDIO_BYTES", 4)

    with pytest.raises(InvalidArgument) as exc_info:
        await transcribe_audio(TranscriptionRequest(audio_base64=AUDIO, mime_type="audio/webm"))

    assert exc_info.value.message == "Audio exceeds the 4 byte limit"
    openai_client.assert_not_awaited()


async def test_provider_error_is_internal(openai_client):
    openai_client.side_effect = RuntimeError("Invalid file format")

    with pytest.raises(Internal) as exc_info:
        await transcribe_audio(TranscriptionRequest(audio_base64=AUDIO, mime_type="audio/ogg"))

    assert exc_info.value.message == "Failed to transcribe audio: Invalid file format"
