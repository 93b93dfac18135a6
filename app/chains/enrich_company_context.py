"""Company context enrichment for strategic planning prompts."""

from app.chains._workspace_context import section
from app.core.config import get_settings
from app.core.llm import complete_text
from app.core.schemas_enrichment import CompanyContextRequest, EnrichedContentResult

OPERATION = "enrich_company_context"

COMPANY_SYSTEM = """You are a strategic business analyst helping a product team articulate their company context \
for strategic planning.

Expand the basic company information provided into a rich company context covering:
1. Company Overview
2. Target Market
3. Business Model
4. Key Differentiators
5. Current Stage
6. Strategic Priorities
7. Market Position
8. Challenges & Opportunities

Guidelines:
- Expand on the provided information, don't contradict it
- Be specific rather than generic
- Keep the total length to 300-500 words, formatted in clear sections
- Where information is missing, make reasonable inferences but never fabricate specific numbers or claims

Return ONLY the enriched company context text, no additional commentary."""

EMPTY_CONTEXT_NOTE = (
    "No context provided yet. Please provide a template that the user can fill in with their company information."
)


async def enrich_company_context(request: CompanyContextRequest) -> EnrichedContentResult:
    provided = section("AUTO-POPULATED FROM VISION & PRINCIPLES", request.derived_context or "") + section(
        "CURRENT ADDITIONAL CONTEXT", request.current_context or ""
    )

    user_message = (
        "Please enrich the following company context for strategic planning purposes.\n\n"
        + (provided or EMPTY_CONTEXT_NOTE + "\n\n")
        + "Expand this into a comprehensive company context that covers: company overview, target market, "
        "business model, key differentiators, current stage, and strategic priorities. "
        "Keep the tone professional and strategic."
    )

    settings = get_settings()
    reply = await complete_text(
        operation=OPERATION,
        system=COMPANY_SYSTEM,
        user_message=user_message,
        max_tokens=1024,
        timeout_seconds=settings.ENRICH_TIMEOUT_SECONDS,
        failure_prefix="Failed to enrich company context",
    )
    return EnrichedContentResult(enriched_content=reply.text, usage=reply.usage)
