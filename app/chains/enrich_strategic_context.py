"""Strategic context section enrichment.

Drafts or extends one section of the strategic context page, grounded in the
stored vision and the active focus areas. Returns prose, not JSON.
"""

from app.chains._workspace_context import (
    best_effort,
    format_focus_areas,
    format_vision,
    load_vision,
    require_choice,
    section,
)
from app.core.config import get_settings
from app.core.llm import complete_text
from app.core.logging import get_logger
from app.core.schemas_enrichment import EnrichedContentResult, StrategicContextRequest
from app.core.schemas_workspace import FocusAreaStatus

logger = get_logger(__name__)

OPERATION = "enrich_strategic_context"

SECTION_PROMPTS: dict[str, str] = {
    "market_dynamics": """Analyze the market dynamics for this company. Consider:
- Current trends affecting its customers and industry
- Regulatory changes impacting the industry
- Economic factors influencing purchasing decisions
- Emerging market opportunities""",
    "enabling_technologies": """Identify enabling technologies relevant to this company's product:
- AI and automation capabilities now feasible
- Mobile and communication technologies
- Data integration and interoperability advances
- Emerging tech that could be leveraged""",
    "competitive_landscape": """Analyze the competitive landscape for this company:
- Types of competitors (direct, indirect, potential)
- Key differentiators and positioning opportunities
- Market gaps and underserved needs
- Competitive threats to monitor""",
    "customer_pain_evolution": """Analyze how this company's customer pain points are evolving:
- Pain points that are getting worse
- Newly articulated frustrations
- Unmet needs becoming more urgent
- Changing expectations and behaviors""",
    "key_insights": """Synthesize strategic insights for this company:
- Patterns across market, technology, and customer signals
- Strategic implications
- Opportunities to prioritize
- Risks to mitigate""",
}

STRATEGY_SYSTEM = """You are a strategic analyst helping a product team stay aligned on vision, strategy, and execution.

Provide thoughtful, actionable analysis grounded in the company's actual vision, principles, and current focus areas. \
Be specific rather than generic. Focus on insights that would inform product and business decisions.

Format your response as structured content with clear sections and bullet points where appropriate. \
Keep the total response under 500 words."""


async def enrich_strategic_context(request: StrategicContextRequest) -> EnrichedContentResult:
    section_name = require_choice(request.section, "section", SECTION_PROMPTS)

    from app.db.focus_areas import list_focus_areas

    vision_text = format_vision(load_vision(OPERATION))
    focus_areas = best_effort(
        lambda: list_focus_areas(status=FocusAreaStatus.ACTIVE), "focus areas", OPERATION
    ) or []

    full_context = (
        section("COMPANY VISION & PRINCIPLES", vision_text)
        + section("CURRENT STRATEGIC FOCUS", format_focus_areas(focus_areas))
        + section("ADDITIONAL COMPANY CONTEXT", request.company_context or "")
    )

    user_message = SECTION_PROMPTS[section_name] + "\n\n"
    if full_context:
        user_message += f"Use the following context to inform your analysis:\n\n{full_context}"
    if request.current_content:
        user_message += (
            f"Current content to enhance:\n{request.current_content}\n\n"
            "Build on and improve this existing content while staying aligned with the company's vision and focus."
        )
    else:
        user_message += (
            "Generate fresh analysis for this section that aligns with the company's vision "
            "and current strategic focus."
        )

    settings = get_settings()
    reply = await complete_text(
        operation=OPERATION,
        system=STRATEGY_SYSTEM,
        user_message=user_message,
        max_tokens=1024,
        timeout_seconds=settings.ENRICH_TIMEOUT_SECONDS,
        failure_prefix="Failed to generate content",
    )

    logger.info(f"Enriched strategic context section {section_name}")
    return EnrichedContentResult(enriched_content=reply.text, usage=reply.usage)
