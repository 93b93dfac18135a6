"""Assumption extraction from a free-form archetype description.

Splits a paragraph about a customer into the six hypothesis categories an
archetype tracks, so each can be validated separately.
"""

from app.chains._workspace_context import format_vision, load_vision, require_text, section
from app.core.config import get_settings
from app.core.llm import ReplyShape, complete_text, parse_llm_json
from app.core.schemas_enrichment import (
    ArchetypeAssumptions,
    ArchetypeAssumptionsRequest,
    ArchetypeAssumptionsResult,
)

OPERATION = "extract_archetype_assumptions"

ASSUMPTIONS_SYSTEM = """You turn a product team's description of a customer into explicit, testable assumptions.

Sort every claim in the description into these categories:
- specific_pain_points: concrete problems the customer has
- current_solutions: how they cope today (tools, workarounds, people)
- primary_goals: outcomes they are trying to achieve
- success_metrics: how they would measure success
- buying_criteria: what they weigh when choosing a solution
- objections: reasons they would not buy or adopt

Rules:
- One assumption per item, phrased as a falsifiable statement
- Only extract what the description states or clearly implies; leave a category empty rather than invent
- Also write a one-sentence problem_statement summarising the core struggle

Return ONLY a JSON object with keys: problem_statement, specific_pain_points, current_solutions, \
primary_goals, success_metrics, buying_criteria, objections."""


async def extract_archetype_assumptions(
    request: ArchetypeAssumptionsRequest,
) -> ArchetypeAssumptionsResult:
    description = require_text(request.description, "description")

    header = []
    if request.archetype_name:
        header.append(f"Archetype: {request.archetype_name}")
    if request.stakeholder_role:
        header.append(f"Stakeholder role: {request.stakeholder_role}")

    user_message = (
        section("PRODUCT CONTEXT", format_vision(load_vision(OPERATION), include_principles=False))
        + section("ARCHETYPE", "\n".join(header))
        + section("DESCRIPTION", description)
        + "Extract the assumptions. Return ONLY the JSON object."
    )

    settings = get_settings()
    reply = await complete_text(
        operation=OPERATION,
        system=ASSUMPTIONS_SYSTEM,
        user_message=user_message,
        max_tokens=1500,
        timeout_seconds=settings.ENRICH_TIMEOUT_SECONDS,
        failure_prefix="Failed to extract archetype assumptions",
    )

    assumptions = parse_llm_json(
        reply.text,
        ArchetypeAssumptions,
        shape=ReplyShape.OBJECT,
        failure_message="Failed to parse archetype assumptions",
        invalid_message="Invalid assumptions format",
        operation=OPERATION,
    )
    return ArchetypeAssumptionsResult(assumptions=assumptions, usage=reply.usage)
