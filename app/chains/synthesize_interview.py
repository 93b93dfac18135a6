"""Interview note synthesis against an archetype's hypotheses.

Reads raw interview notes and reports insights, surprises, contradictions,
and which of the archetype's hypotheses the interview supports or refutes.
Hypothesis ids the archetype does not have are dropped from the result.
"""

from app.chains._workspace_context import clip, format_archetype, require_archetype, require_text, section
from app.core.config import get_settings
from app.core.llm import ReplyShape, complete_text, parse_llm_json
from app.core.logging import get_logger
from app.core.schemas_enrichment import (
    InterviewSynthesis,
    InterviewSynthesisRequest,
    InterviewSynthesisResult,
)

logger = get_logger(__name__)

OPERATION = "synthesize_interview"

SYNTHESIS_SYSTEM = """You synthesize customer discovery interviews for a product team.

Given the archetype (with hypothesis ids) and raw interview notes:
- key_insights: what the team learned, grounded in what was said
- surprises: anything that contradicts what the team expected
- contradictions: places where the interviewee contradicted themselves or other evidence
- validated_hypotheses: ids of hypotheses the interview clearly supports
- invalidated_hypotheses: ids of hypotheses the interview clearly refutes
- follow_up_questions: what to ask next time

Only mark a hypothesis validated or invalidated when the notes give direct evidence. Use ids exactly as given.

Return ONLY a JSON object with keys: summary, key_insights, surprises, contradictions, \
validated_hypotheses, invalidated_hypotheses, follow_up_questions."""


async def synthesize_interview(request: InterviewSynthesisRequest) -> InterviewSynthesisResult:
    raw_notes = require_text(request.raw_notes, "raw_notes")
    archetype = require_archetype(request.archetype_id, OPERATION)

    settings = get_settings()
    interviewee = ", ".join(part for part in (request.interviewee, request.role) if part)
    user_message = (
        section("ARCHETYPE", format_archetype(archetype, with_ids=True))
        + section("INTERVIEWEE", interviewee)
        + section("INTERVIEW NOTES", clip(raw_notes, settings.MAX_TRANSCRIPT_CHARS))
        + "Synthesize this interview. Return ONLY the JSON object."
    )

    reply = await complete_text(
        operation=OPERATION,
        system=SYNTHESIS_SYSTEM,
        user_message=user_message,
        max_tokens=2048,
        timeout_seconds=settings.HEAVY_ENRICH_TIMEOUT_SECONDS,
        failure_prefix="Failed to synthesize interview",
    )

    synthesis = parse_llm_json(
        reply.text,
        InterviewSynthesis,
        shape=ReplyShape.OBJECT,
        failure_message="Failed to parse interview synthesis",
        invalid_message="Invalid synthesis format",
        operation=OPERATION,
    )

    known_ids = {h.id for h in archetype.all_hypotheses()}
    synthesis.validated_hypotheses = [i for i in synthesis.validated_hypotheses if i in known_ids]
    synthesis.invalidated_hypotheses = [i for i in synthesis.invalidated_hypotheses if i in known_ids]

    return InterviewSynthesisResult(synthesis=synthesis, usage=reply.usage)
