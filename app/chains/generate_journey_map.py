"""Journey map drafting from a Job to be Done.

The model drafts 5-8 sequential steps with the current pain (negative
experience) and the opportunity (positive experience) at each one. The
draft is returned to the caller; nothing is stored.
"""

from app.chains._workspace_context import format_vision, load_vision, section
from app.core.config import get_settings
from app.core.errors import InvalidArgument
from app.core.llm import ReplyShape, complete_text, parse_llm_json
from app.core.logging import get_logger
from app.core.schemas_enrichment import DraftJourneyMap, JourneyMapRequest, JourneyMapResult
from app.core.schemas_workspace import JobType

logger = get_logger(__name__)

OPERATION = "generate_journey_map"

JOURNEY_STEP_FORMAT = """{
  "title": "Journey map title",
  "subtitle": "Brief description of the journey",
  "steps": [
    {
      "order": 1,
      "title": "Step Title",
      "description": "What the customer does",
      "outcome": "What success looks like",
      "timeline_day": 0,
      "negative_experience": 3,
      "positive_experience": 4,
      "pain_point_note": "Why this is painful (optional)"
    }
  ]
}"""

JOURNEY_SYSTEM = f"""You are an expert in Jobs to be Done (JTBD) methodology and customer journey mapping. \
Create a journey map showing the steps a customer takes to accomplish a job, with their emotional experience at each stage.

For each step provide:
1. title: a short name (2-4 words)
2. description: what the customer is trying to do
3. outcome: what success looks like for this step
4. timeline_day: cumulative days from the start (e.g. 0, 2, 5, 10, 30, 90)
5. negative_experience (1-5): current pain WITHOUT a solution (5 = most painful)
6. positive_experience (1-5): potential satisfaction WITH a new solution (5 = most positive)
7. pain_point_note (optional): why this step is painful today

Guidelines:
- 5-8 sequential steps covering the full journey
- Realistic timelines for the type of job
- Pain point notes on at least 2-3 of the most painful steps
- Focus on CURRENT state pain, not the solution

Return ONLY a JSON object with this structure:
{JOURNEY_STEP_FORMAT}"""

_JOB_TYPE_GLOSS = {
    JobType.FUNCTIONAL: "getting something done",
    JobType.SOCIAL: "how others perceive them",
    JobType.EMOTIONAL: "how they want to feel",
}


def normalize_journey_map(journey_map: DraftJourneyMap) -> DraftJourneyMap:
    """Order steps by their ``order`` field."""
    return journey_map.model_copy(
        update={"steps": sorted(journey_map.steps, key=lambda s: s.order)}
    )


async def generate_journey_map(request: JourneyMapRequest) -> JourneyMapResult:
    job = request.job
    if job is None or not all(
        (value or "").strip() for value in (job.customer, job.progress, job.circumstance)
    ):
        raise InvalidArgument("job", "Complete Job to be Done information is required")

    vision_text = format_vision(
        load_vision(OPERATION), include_principles=False, include_business_model=True
    )

    lines = [
        "Create a customer journey map for the following Job to be Done:",
        "",
        f"**Customer:** {job.customer}",
        f"**Progress they want:** {job.progress}",
        f"**Circumstance:** {job.circumstance}",
        f"**Job Type:** {job.type.value} ({_JOB_TYPE_GLOSS[job.type]})",
        "",
    ]
    if request.idea_title:
        lines.append(f"**Idea Title:** {request.idea_title}")
    if request.idea_description:
        lines.append(f"**Idea Description:** {request.idea_description}")
    user_message = "\n".join(lines) + "\n\n" + section("COMPANY CONTEXT", vision_text)
    user_message += (
        "Show the steps this customer takes today, the pain at each step, the opportunity for improvement, "
        "realistic timelines, and pain point annotations for the most frustrating steps.\n\n"
        "Return ONLY a valid JSON object with the journey map data."
    )

    settings = get_settings()
    reply = await complete_text(
        operation=OPERATION,
        system=JOURNEY_SYSTEM,
        user_message=user_message,
        max_tokens=2048,
        timeout_seconds=settings.HEAVY_ENRICH_TIMEOUT_SECONDS,
        failure_prefix="Failed to generate journey map",
    )

    journey_map = parse_llm_json(
        reply.text,
        DraftJourneyMap,
        shape=ReplyShape.OBJECT,
        failure_message="Failed to parse journey map data",
        invalid_message="Invalid journey map format",
        operation=OPERATION,
    )

    logger.info(f"Generated journey map with {len(journey_map.steps)} steps")
    return JourneyMapResult(journey_map=normalize_journey_map(journey_map), usage=reply.usage)
