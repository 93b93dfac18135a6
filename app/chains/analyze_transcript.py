"""Transcript analysis for interviews, journey walkthroughs and general calls."""

from app.chains._workspace_context import clip, require_choice, require_text, section
from app.core.config import get_settings
from app.core.llm import ReplyShape, complete_text, parse_llm_json
from app.core.schemas_enrichment import (
    TranscriptAnalysis,
    TranscriptAnalysisRequest,
    TranscriptAnalysisResult,
)

OPERATION = "analyze_transcript"

SOURCE_FOCUS: dict[str, str] = {
    "interview": "This is a customer discovery interview. Focus on pains, current behaviour and evidence for or against assumptions.",
    "journey-map": "This is a walkthrough of a customer journey. Focus on steps, hand-offs, delays and where frustration peaks.",
    "general": "This is a general conversation. Focus on decisions, open questions and anything relevant to customers.",
}

ANALYSIS_SYSTEM = """You analyze transcripts for a product team.

Return ONLY a JSON object:
{
  "summary": "3-5 sentence summary",
  "key_insights": ["..."],
  "pain_points": ["..."],
  "notable_quotes": ["Verbatim quote"],
  "hypothesis_candidates": ["Testable belief suggested by the transcript"],
  "open_questions": ["..."]
}

Quotes must be verbatim from the transcript. Leave a list empty rather than invent content."""


async def analyze_transcript(request: TranscriptAnalysisRequest) -> TranscriptAnalysisResult:
    transcript = require_text(request.transcript, "transcript")
    source_type = require_choice(request.source_type or "general", "source_type", SOURCE_FOCUS)

    settings = get_settings()
    user_message = (
        SOURCE_FOCUS[source_type]
        + "\n\n"
        + section("TRANSCRIPT", clip(transcript, settings.MAX_TRANSCRIPT_CHARS))
        + "Analyze this transcript. Return ONLY the JSON object."
    )

    reply = await complete_text(
        operation=OPERATION,
        system=ANALYSIS_SYSTEM,
        user_message=user_message,
        max_tokens=2048,
        timeout_seconds=settings.HEAVY_ENRICH_TIMEOUT_SECONDS,
        failure_prefix="Failed to analyze transcript",
    )

    analysis = parse_llm_json(
        reply.text,
        TranscriptAnalysis,
        shape=ReplyShape.OBJECT,
        failure_message="Failed to parse transcript analysis",
        invalid_message="Invalid analysis format",
        operation=OPERATION,
    )
    return TranscriptAnalysisResult(analysis=analysis, usage=reply.usage)
