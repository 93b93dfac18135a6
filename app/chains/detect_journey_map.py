"""Journey map detection from an interview or call transcript."""

from app.chains._workspace_context import (
    clip,
    format_archetype,
    load_archetype,
    load_idea,
    require_text,
    section,
)
from app.chains.generate_journey_map import JOURNEY_STEP_FORMAT, normalize_journey_map
from app.core.config import get_settings
from app.core.llm import ReplyShape, complete_text, parse_llm_json
from app.core.logging import get_logger
from app.core.schemas_enrichment import (
    DetectedJourneyMap,
    DetectJourneyMapRequest,
    DetectedJourneyMapResult,
)

logger = get_logger(__name__)

OPERATION = "detect_journey_map"

DETECT_SYSTEM = f"""You are an expert in customer journey mapping. You read interview and call transcripts \
and reconstruct the journey the customer actually describes.

Rules:
- Only include steps the transcript supports; do not invent steps to fill a template
- Use the customer's own framing for step titles where possible
- Rate negative_experience (1-5) from the frustration the customer expresses
- Rate positive_experience (1-5) as the opportunity a better solution would create
- Put a short supporting quote or paraphrase in pain_point_note for painful steps

Return ONLY a JSON object:
{{
  "journey_map": {JOURNEY_STEP_FORMAT},
  "summary": "2-3 sentences on what the transcript reveals about this journey"
}}"""


async def detect_journey_map(request: DetectJourneyMapRequest) -> DetectedJourneyMapResult:
    transcript = require_text(request.transcript, "transcript")

    settings = get_settings()
    archetype = load_archetype(request.archetype_id, OPERATION)
    idea = load_idea(request.idea_id, OPERATION)

    context = ""
    if archetype:
        context += section("CUSTOMER ARCHETYPE", format_archetype(archetype))
    if idea:
        job = idea.job
        idea_text = f"Idea: {idea.title}\n{idea.description}".strip()
        if job.customer:
            idea_text += f"\nJob: {job.customer} wants {job.progress} when {job.circumstance}"
        context += section("IDEA", idea_text)

    user_message = (
        context
        + section("TRANSCRIPT", clip(transcript, settings.MAX_TRANSCRIPT_CHARS))
        + "Detect the customer journey described in this transcript. Return ONLY the JSON object."
    )

    reply = await complete_text(
        operation=OPERATION,
        system=DETECT_SYSTEM,
        user_message=user_message,
        max_tokens=3000,
        timeout_seconds=settings.HEAVY_ENRICH_TIMEOUT_SECONDS,
        failure_prefix="Failed to detect journey map",
    )

    detected = parse_llm_json(
        reply.text,
        DetectedJourneyMap,
        shape=ReplyShape.OBJECT,
        failure_message="Failed to parse detected journey map",
        invalid_message="Invalid journey map format",
        operation=OPERATION,
    )

    return DetectedJourneyMapResult(
        journey_map=normalize_journey_map(detected.journey_map),
        summary=detected.summary,
        usage=reply.usage,
    )
