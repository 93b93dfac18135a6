"""Cross-entity hypothesis suggestion.

Builds context from the vision, focus areas, archetypes and existing
hypotheses (all best-effort reads), optionally adds a web research summary,
and asks the model for new testable hypotheses. Suggested links to focus
areas or archetypes that were not in the context are cleared.
"""

from app.chains._workspace_context import (
    best_effort,
    format_archetype,
    format_focus_areas,
    format_hypotheses,
    format_vision,
    load_vision,
    section,
)
from app.chains.research_augmentation import research_context
from app.core.config import get_settings
from app.core.errors import Internal
from app.core.llm import ReplyShape, complete_text, parse_llm_json
from app.core.logging import get_logger
from app.core.schemas_enrichment import (
    HypothesisSuggestion,
    HypothesisSuggestionRequest,
    HypothesisSuggestionsResult,
)
from app.core.schemas_workspace import ArchetypeStatus, FocusAreaStatus

logger = get_logger(__name__)

OPERATION = "suggest_hypotheses"
DEFAULT_SUGGESTION_COUNT = 5

_CLOSED_FOCUS_AREA_STATUSES = {FocusAreaStatus.ACHIEVED, FocusAreaStatus.ARCHIVED}

SUGGEST_SYSTEM = """You help a product team decide what to learn next. Suggest new hypotheses that are \
not already covered by their existing ones.

Each hypothesis must:
- State a belief that could turn out to be false ("We believe that...")
- Describe a cheap test that would prove it wrong
- Name the risks it addresses: "desirable" (do customers want it), "feasible" (can we build it), \
"viable" (does it work as a business)
- Link to a focus area id and/or archetype id from the context when one clearly applies, using ids exactly as given

Return ONLY a JSON array:
[
  {"belief": "...", "test": "...", "rationale": "...", "risks": ["desirable"], "focus_area_id": "id or null", "archetype_id": "id or null"}
]"""


def _load_focus_areas(focus_area_id: str | None):
    from app.db.focus_areas import list_focus_areas

    focus_areas = best_effort(list_focus_areas, "focus areas", OPERATION) or []
    if focus_area_id:
        return [fa for fa in focus_areas if fa.id == focus_area_id]
    return [fa for fa in focus_areas if fa.status not in _CLOSED_FOCUS_AREA_STATUSES]


def _load_archetypes(archetype_id: str | None):
    from app.db.archetypes import list_archetypes

    archetypes = best_effort(list_archetypes, "archetypes", OPERATION) or []
    if archetype_id:
        return [a for a in archetypes if a.id == archetype_id]
    return [a for a in archetypes if a.status != ArchetypeStatus.ARCHIVED]


def _load_hypotheses(focus_area_id: str | None, archetype_id: str | None):
    from app.db.hypotheses import list_hypotheses

    return best_effort(
        lambda: list_hypotheses(focus_area_id=focus_area_id, archetype_id=archetype_id),
        "hypotheses",
        OPERATION,
    ) or []


async def suggest_hypotheses(request: HypothesisSuggestionRequest) -> HypothesisSuggestionsResult:
    count = request.count or DEFAULT_SUGGESTION_COUNT

    vision = load_vision(OPERATION)
    focus_areas = _load_focus_areas(request.focus_area_id)
    archetypes = _load_archetypes(request.archetype_id)
    hypotheses = _load_hypotheses(request.focus_area_id, request.archetype_id)

    context = (
        section("PRODUCT VISION", format_vision(vision, include_principles=False, include_business_model=True))
        + section("FOCUS AREAS", format_focus_areas(focus_areas))
        + section(
            "CUSTOMER ARCHETYPES",
            "\n\n".join(f"[{a.id}]\n{format_archetype(a)}" for a in archetypes),
        )
        + section("EXISTING HYPOTHESES", format_hypotheses(hypotheses))
    )

    research = None
    if request.enable_web_search and context:
        research = await research_context(context)

    user_message = (
        context
        + section("WEB RESEARCH", research or "")
        + f"Suggest {count} new hypotheses. Return ONLY the JSON array."
    )

    settings = get_settings()
    reply = await complete_text(
        operation=OPERATION,
        system=SUGGEST_SYSTEM,
        user_message=user_message,
        max_tokens=3000,
        timeout_seconds=settings.HEAVY_ENRICH_TIMEOUT_SECONDS,
        failure_prefix="Failed to suggest hypotheses",
    )

    suggestions = parse_llm_json(
        reply.text,
        list[HypothesisSuggestion],
        shape=ReplyShape.ARRAY,
        failure_message="Failed to parse hypothesis suggestions",
        invalid_message="Invalid hypothesis suggestions format",
        operation=OPERATION,
    )
    if not suggestions:
        raise Internal("Invalid hypothesis suggestions format")

    focus_area_ids = {fa.id for fa in focus_areas}
    archetype_ids = {a.id for a in archetypes}
    for suggestion in suggestions:
        if suggestion.focus_area_id not in focus_area_ids:
            suggestion.focus_area_id = None
        if suggestion.archetype_id not in archetype_ids:
            suggestion.archetype_id = None

    logger.info(f"Suggested {len(suggestions)} hypotheses (research used: {research is not None})")
    return HypothesisSuggestionsResult(
        suggestions=suggestions,
        research_used=research is not None,
        usage=reply.usage,
    )
