"""Problem statement rewrites for a focus area."""

from app.chains._workspace_context import format_vision, load_vision, require_text
from app.core.config import get_settings
from app.core.errors import Internal
from app.core.llm import ReplyShape, complete_text, parse_llm_json
from app.core.logging import get_logger
from app.core.schemas_enrichment import ProblemStatementRequest, SuggestionsResult

logger = get_logger(__name__)

OPERATION = "improve_problem_statement"

PROBLEM_SYSTEM = """You are a product strategy expert who helps teams write crisp, actionable problem statements.

A great problem statement follows the form "[WHO] struggles with [WHAT] because [WHY], which results in [IMPACT]" and is:
- Specific: names a concrete user segment
- Observable: describes behaviour or symptoms you can see or measure
- Root-cause aware: goes beyond surface symptoms
- Impact-focused: connects to outcomes that matter
- Non-solutioned: does not prescribe a solution

WEAK: "Users have trouble with onboarding"
STRONG: "New small business owners abandon our setup flow at the bank connection step because they're worried \
about security, leaving 34% of signups unable to use core features."

Generate 3 improved versions of the user's draft, each from a slightly different angle, staying true to the core issue.

Return ONLY a JSON array of 3 strings. No other text."""

PROBLEM_USER = """Please improve this problem statement for a focus area{title_clause}:

"{problem_statement}"

{vision_block}Generate 3 improved versions that are more specific, observable, root-cause aware and impact-focused.

Return ONLY a JSON array of 3 improved problem statement strings."""


async def improve_problem_statement(request: ProblemStatementRequest) -> SuggestionsResult:
    problem_statement = require_text(
        request.problem_statement, "problem_statement", "Problem statement is required"
    )

    vision_text = format_vision(load_vision(OPERATION), include_principles=False)
    vision_block = f"Context about our product:\n{vision_text}\n\n" if vision_text else ""
    title_clause = f' titled "{request.title}"' if request.title else ""

    settings = get_settings()
    reply = await complete_text(
        operation=OPERATION,
        system=PROBLEM_SYSTEM,
        user_message=PROBLEM_USER.format(
            title_clause=title_clause,
            problem_statement=problem_statement,
            vision_block=vision_block,
        ),
        max_tokens=1024,
        timeout_seconds=settings.ENRICH_TIMEOUT_SECONDS,
        failure_prefix="Failed to improve problem statement",
    )

    suggestions = parse_llm_json(
        reply.text,
        list[str],
        shape=ReplyShape.ARRAY,
        failure_message="Failed to parse problem statement suggestions",
        invalid_message="Invalid suggestions format",
        operation=OPERATION,
    )
    if not suggestions:
        raise Internal("Invalid suggestions format")

    return SuggestionsResult(suggestions=suggestions, usage=reply.usage)
