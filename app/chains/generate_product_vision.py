"""Product vision suggestions from company basics.

Four category-defining vision statements drafted from the company URL,
mission, business model and principles supplied by the caller. No stored
context is read.
"""

from app.core.config import get_settings
from app.core.errors import Internal, InvalidArgument
from app.core.llm import ReplyShape, complete_text, parse_llm_json
from app.core.logging import get_logger
from app.core.schemas_enrichment import ProductVisionRequest, SuggestionsResult

logger = get_logger(__name__)

OPERATION = "generate_product_vision"

VISION_SYSTEM = """You are a strategic product vision expert who thinks like a top-tier venture capitalist. \
You help product teams craft ambitious vision statements that could define a category.

A product vision answers: "If we succeed wildly, what is different in the world 3-5 years from now?"

Great visions:
- are transformational, not incremental (10x, not 10%)
- center on human outcomes, not features or technology
- capture the emotional shift from today's pain to tomorrow's possibility
- are concise (1-3 sentences)

Avoid incremental language ("improve", "better", "easier", "faster"), feature lists and vague platitudes.

Generate exactly 4 distinct vision statements, each from a slightly different angle, true to the company's mission and principles.

Return ONLY a JSON array of 4 strings. No other text.
["Vision statement 1", "Vision statement 2", "Vision statement 3", "Vision statement 4"]"""

VISION_USER = """Based on the following company context, generate 4 compelling product vision statements.

{context}
For each vision, consider who the company serves, what pain they face today, what "better" would feel like, \
and what paradigm shift the company could enable.

Return ONLY a JSON array of 4 vision statement strings."""


def _build_context(request: ProductVisionRequest) -> str:
    context = ""
    if request.company_url:
        context += f"Company Website: {request.company_url}\n\n"
    if request.core_business_model:
        context += f"Core Business Model: {request.core_business_model}\n\n"
    if request.mission:
        context += f"Mission Statement: {request.mission}\n\n"
    if request.principles:
        context += "Product Principles:\n"
        for i, p in enumerate(request.principles, 1):
            context += f"{i}. {p.title}"
            if p.description:
                context += f": {p.description}"
            context += "\n"
    return context


async def generate_product_vision(request: ProductVisionRequest) -> SuggestionsResult:
    """Generate four product vision statements.

    Raises:
        InvalidArgument: Neither ``company_url`` nor ``mission`` was given.
        Internal: Model failure or an unusable reply.
    """
    if not (request.company_url or "").strip() and not (request.mission or "").strip():
        raise InvalidArgument("company_url", "Company URL or mission is required")

    settings = get_settings()
    reply = await complete_text(
        operation=OPERATION,
        system=VISION_SYSTEM,
        user_message=VISION_USER.format(context=_build_context(request)),
        max_tokens=1024,
        timeout_seconds=settings.ENRICH_TIMEOUT_SECONDS,
        failure_prefix="Failed to generate vision suggestions",
    )

    suggestions = parse_llm_json(
        reply.text,
        list[str],
        shape=ReplyShape.ARRAY,
        failure_message="Failed to parse vision suggestions",
        invalid_message="Invalid suggestions format",
        operation=OPERATION,
    )
    if not suggestions:
        raise Internal("Invalid suggestions format")

    logger.info(f"Generated {len(suggestions)} vision suggestions")
    return SuggestionsResult(suggestions=suggestions, usage=reply.usage)
