"""Audio transcription through the OpenAI speech-to-text API.

Audio arrives base64-encoded with its MIME type. Type and size are checked
before the provider is called. Returns text plus word and segment timings.
"""

import asyncio
import base64
import binascii
import time

from openai import AsyncOpenAI

from app.chains._workspace_context import require_text
from app.core.config import get_settings
from app.core.errors import Internal, InvalidArgument
from app.core.llm_usage import log_llm_usage
from app.core.logging import get_logger
from app.core.schemas_enrichment import (
    TranscriptionRequest,
    TranscriptionResult,
    TokenUsage,
    TranscriptSegment,
    TranscriptWord,
)

logger = get_logger(__name__)

OPERATION = "transcribe_audio"

# MIME type -> upload file extension
AUDIO_EXTENSIONS: dict[str, str] = {
    "audio/webm": "webm",
    "audio/mp3": "mp3",
    "audio/mpeg": "mp3",
    "audio/mp4": "mp4",
    "audio/wav": "wav",
    "audio/x-wav": "wav",
    "audio/m4a": "m4a",
    "audio/x-m4a": "m4a",
    "audio/ogg": "ogg",
}


def get_openai_client() -> AsyncOpenAI:
    settings = get_settings()
    return AsyncOpenAI(api_key=settings.OPENAI_API_KEY, max_retries=0)


def normalize_mime_type(mime_type: str) -> str:
    """Drop codec parameters, e.g. ``audio/webm;codecs=opus`` -> ``audio/webm``."""
    return mime_type.split(";", 1)[0].strip().lower()


def decode_audio(audio_base64: str, max_bytes: int) -> bytes:
    try:
        audio = base64.b64decode(audio_base64, validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidArgument("audio_base64", "Audio is not valid base64") from e
    if not audio:
        raise InvalidArgument("audio_base64")
    if len(audio) > max_bytes:
        raise InvalidArgument("audio_base64", f"Audio exceeds the {max_bytes} byte limit")
    return audio


def _field(obj, name):
    if isinstance(obj, dict):
        return obj.get(name)
    return getattr(obj, name, None)


def _usage(reported) -> TokenUsage:
    """Token counts when the model reports them; duration-billed models report none."""
    return TokenUsage(
        input_tokens=_field(reported, "input_tokens") or 0,
        output_tokens=_field(reported, "output_tokens") or 0,
    )


async def transcribe_audio(request: TranscriptionRequest) -> TranscriptionResult:
    audio_base64 = require_text(request.audio_base64, "audio_base64")
    mime_type = normalize_mime_type(require_text(request.mime_type, "mime_type"))
    extension = AUDIO_EXTENSIONS.get(mime_type)
    if extension is None:
        raise InvalidArgument("mime_type", f"Unsupported audio type: {mime_type}")

    settings = get_settings()
    audio = decode_audio(audio_base64, settings.MAX_AUDIO_BYTES)

    params: dict = {
        "model": settings.TRANSCRIPTION_MODEL,
        "file": (f"recording.{extension}", audio, mime_type),
        "response_format": "verbose_json",
        "timestamp_granularities": ["word", "segment"],
    }
    if request.language:
        params["language"] = request.language

    client = get_openai_client()
    start = time.time()
    try:
        response = await asyncio.wait_for(
            client.audio.transcriptions.create(**params),
            timeout=settings.TRANSCRIBE_TIMEOUT_SECONDS,
        )
    except asyncio.TimeoutError as e:
        timeout = settings.TRANSCRIBE_TIMEOUT_SECONDS
        logger.error(f"{OPERATION}: transcription timed out after {timeout:g}s")
        raise Internal(f"Failed to transcribe audio: transcription timed out after {timeout:g}s") from e
    except Exception as e:
        logger.error(f"{OPERATION}: transcription failed: {e}")
        raise Internal(f"Failed to transcribe audio: {e}") from e

    usage = _usage(_field(response, "usage"))
    log_llm_usage(
        operation=OPERATION,
        model=settings.TRANSCRIPTION_MODEL,
        provider="openai",
        tokens_input=usage.input_tokens,
        tokens_output=usage.output_tokens,
        duration_ms=int((time.time() - start) * 1000),
    )

    segments = [
        TranscriptSegment(
            id=_field(s, "id"),
            start=_field(s, "start"),
            end=_field(s, "end"),
            text=(_field(s, "text") or "").strip(),
        )
        for s in _field(response, "segments") or []
    ]
    words = [
        TranscriptWord(word=_field(w, "word"), start=_field(w, "start"), end=_field(w, "end"))
        for w in _field(response, "words") or []
    ]

    logger.info(f"Transcribed {len(audio)} bytes of {mime_type} into {len(words)} words")
    return TranscriptionResult(
        text=(_field(response, "text") or "").strip(),
        segments=segments,
        words=words,
        language=_field(response, "language"),
        duration=_field(response, "duration"),
        usage=usage,
    )
