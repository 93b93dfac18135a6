"""Critique of a single archetype field before it is saved.

Pushes back on vague, generic or marketing-flavoured input and lists what
would have to be validated in interviews.
"""

from app.chains._workspace_context import require_choice, require_text
from app.core.archetype_scoring import BS_WORDS
from app.core.config import get_settings
from app.core.llm import ReplyShape, complete_text, parse_llm_json
from app.core.schemas_enrichment import ArchetypeCritique, ArchetypeCritiqueRequest, ArchetypeCritiqueResult
from app.core.schemas_workspace import ARCHETYPE_HYPOTHESIS_FIELDS

OPERATION = "critique_archetype_input"

CRITIQUABLE_FIELDS = (
    "job_title",
    "daily_reality",
    "background",
    "problem_statement",
    "decision_process",
    *ARCHETYPE_HYPOTHESIS_FIELDS,
    "value_propositions",
)

CRITIQUE_SYSTEM = """You are a blunt customer-discovery coach. Product teams describe customer archetypes \
before interviewing anyone, so everything they write is an assumption. Your job is to make those assumptions \
specific enough to be proven wrong.

Assess the input for:
- Specificity: a named segment and concrete situation, not "users" or "businesses"
- Observability: behaviour you could see or ask about, not feelings attributed without evidence
- Marketing speak: words like "seamless" or "innovative" that hide the real claim
- Testability: whether an interview could validate or invalidate it

Return ONLY a JSON object:
{
  "specificity_score": 1-5,
  "assessment": "One or two sentences of direct feedback",
  "issues": ["Concrete problem with the input"],
  "questions_to_validate": ["Interview question that would test this"],
  "suggested_rewrite": "A sharper version, or null if the input is already strong"
}"""


async def critique_archetype_input(request: ArchetypeCritiqueRequest) -> ArchetypeCritiqueResult:
    field = require_choice(request.field, "field", CRITIQUABLE_FIELDS)
    content = require_text(request.content, "content")

    lines = [f"Field: {field.replace('_', ' ')}"]
    if request.archetype_name:
        lines.append(f"Archetype: {request.archetype_name}")
    if request.stakeholder_role:
        lines.append(f"Stakeholder role: {request.stakeholder_role}")
    lines += ["", "Input to critique:", content]

    flagged = [word for word in BS_WORDS if word in content.lower()]
    if flagged:
        lines += ["", f"Marketing language detected: {', '.join(flagged)}"]

    settings = get_settings()
    reply = await complete_text(
        operation=OPERATION,
        system=CRITIQUE_SYSTEM,
        user_message="\n".join(lines),
        max_tokens=1024,
        timeout_seconds=settings.ENRICH_TIMEOUT_SECONDS,
        failure_prefix="Failed to critique archetype input",
    )

    critique = parse_llm_json(
        reply.text,
        ArchetypeCritique,
        shape=ReplyShape.OBJECT,
        failure_message="Failed to parse archetype critique",
        invalid_message="Invalid critique format",
        operation=OPERATION,
    )
    return ArchetypeCritiqueResult(critique=critique, usage=reply.usage)
