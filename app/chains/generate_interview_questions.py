"""Interview question generation for a customer archetype.

Questions target the archetype's unvalidated hypotheses. A question may name
the hypothesis it tests; ids the archetype does not have are cleared.
"""

from app.chains._workspace_context import format_archetype, require_archetype, section
from app.core.config import get_settings
from app.core.errors import Internal
from app.core.llm import ReplyShape, complete_text, parse_llm_json
from app.core.logging import get_logger
from app.core.schemas_enrichment import (
    GeneratedQuestion,
    InterviewQuestionsRequest,
    InterviewQuestionsResult,
)

logger = get_logger(__name__)

OPERATION = "generate_interview_questions"
DEFAULT_QUESTION_COUNT = 8

QUESTIONS_SYSTEM = """You write customer discovery interview questions in the spirit of "The Mom Test".

Rules:
- Ask about past behaviour and specifics, never about hypothetical futures or opinions of the idea
- No leading questions; don't reveal the hypothesis being tested
- Prioritise hypotheses that are still unvalidated
- Each question states its purpose, and the id of the hypothesis it tests when there is one

Return ONLY a JSON array:
[
  {"question": "Tell me about the last time...", "purpose": "What this uncovers", "hypothesis_id": "id or null"}
]"""


async def generate_interview_questions(request: InterviewQuestionsRequest) -> InterviewQuestionsResult:
    archetype = require_archetype(request.archetype_id, OPERATION)
    count = request.count or DEFAULT_QUESTION_COUNT

    existing = "\n".join(f"- {q.question}" for q in archetype.interview_questions)
    user_message = (
        section("ARCHETYPE", format_archetype(archetype, with_ids=True))
        + section("QUESTIONS ALREADY PLANNED", existing)
        + f"Write {count} new interview questions for this archetype. Return ONLY the JSON array."
    )

    settings = get_settings()
    reply = await complete_text(
        operation=OPERATION,
        system=QUESTIONS_SYSTEM,
        user_message=user_message,
        max_tokens=2048,
        timeout_seconds=settings.ENRICH_TIMEOUT_SECONDS,
        failure_prefix="Failed to generate interview questions",
    )

    questions = parse_llm_json(
        reply.text,
        list[GeneratedQuestion],
        shape=ReplyShape.ARRAY,
        failure_message="Failed to parse interview questions",
        invalid_message="Invalid questions format",
        operation=OPERATION,
    )
    if not questions:
        raise Internal("Invalid questions format")

    known_ids = {h.id for h in archetype.all_hypotheses()}
    for question in questions:
        if question.hypothesis_id and question.hypothesis_id not in known_ids:
            question.hypothesis_id = None

    logger.info(f"Generated {len(questions)} interview questions for archetype {archetype.id}")
    return InterviewQuestionsResult(questions=questions, usage=reply.usage)
