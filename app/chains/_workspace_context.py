"""Shared payload checks and context builders for enrichment chains.

Optional context is best-effort: a failed read is logged and that section is
left out of the prompt. Required context (the archetype an operation is
about) goes through ``require_archetype``, which tells "does not exist"
(``InvalidArgument``) apart from "could not be read" (``Internal``).
"""

import logging
from collections.abc import Callable, Iterable
from typing import TypeVar

from app.core.errors import Internal, InvalidArgument
from app.core.schemas_workspace import (
    CustomerArchetype,
    FocusArea,
    Hypothesis,
    Idea,
    Vision,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


# =============================================================================
# Payload checks
# =============================================================================


def require_text(value: str | None, field: str, message: str | None = None) -> str:
    """Return the stripped value, or raise InvalidArgument naming the field."""
    if value is None or not value.strip():
        raise InvalidArgument(field, message)
    return value.strip()


def require_choice(value: str | None, field: str, choices: Iterable[str]) -> str:
    """Check an enum-restricted field before any external call is made."""
    if value is None or not value.strip():
        raise InvalidArgument(field)
    if value not in choices:
        raise InvalidArgument(field, f"Invalid {field.replace('_', ' ')}: {value}")
    return value


# =============================================================================
# Context reads
# =============================================================================


def best_effort(loader: Callable[[], T], label: str, operation: str) -> T | None:
    """Run an optional context read, logging and returning None on failure."""
    try:
        return loader()
    except Exception as e:
        logger.warning(f"{operation}: optional {label} context unavailable: {e}")
        return None


def require_archetype(archetype_id: str | None, operation: str) -> CustomerArchetype:
    from app.db.archetypes import get_archetype

    archetype_id = require_text(archetype_id, "archetype_id")
    try:
        archetype = get_archetype(archetype_id)
    except Exception as e:
        logger.error(f"{operation}: failed to load archetype {archetype_id}: {e}")
        raise Internal(f"Failed to load archetype: {e}") from e
    if archetype is None:
        raise InvalidArgument("archetype_id", "Archetype not found")
    return archetype


def load_vision(operation: str) -> Vision | None:
    from app.db.vision import get_vision

    return best_effort(get_vision, "vision", operation)


def load_archetype(archetype_id: str | None, operation: str) -> CustomerArchetype | None:
    if not archetype_id:
        return None
    from app.db.archetypes import get_archetype

    return best_effort(lambda: get_archetype(archetype_id), "archetype", operation)


def load_idea(idea_id: str | None, operation: str) -> Idea | None:
    if not idea_id:
        return None
    from app.db.ideas import get_idea

    return best_effort(lambda: get_idea(idea_id), "idea", operation)


# =============================================================================
# Formatting
# =============================================================================


def section(title: str, body: str) -> str:
    """A titled prompt section, or "" when there is nothing to show."""
    if not body or not body.strip():
        return ""
    return f"=== {title} ===\n{body.strip()}\n\n"


def format_vision(
    vision: Vision | None,
    *,
    include_principles: bool = True,
    include_business_model: bool = False,
) -> str:
    if vision is None:
        return ""
    lines: list[str] = []
    if vision.vision:
        lines.append(f"Product Vision: {vision.vision}")
    if vision.mission:
        lines.append(f"Mission: {vision.mission}")
    if include_business_model and vision.core_business_model:
        lines.append(f"Business Model: {vision.core_business_model}")
    if vision.target_user:
        lines.append(f"Target User: {vision.target_user}")
    if vision.problem_statement:
        lines.append(f"Problem Statement: {vision.problem_statement}")
    if include_principles and vision.principles:
        lines.append("Guiding Principles:")
        for i, p in enumerate(sorted(vision.principles, key=lambda p: p.order), 1):
            lines.append(f"{i}. {p.title}: {p.description}" if p.description else f"{i}. {p.title}")
    return "\n".join(lines)


def format_focus_areas(focus_areas: list[FocusArea]) -> str:
    return "\n".join(
        f"- [{fa.id}] {fa.title} ({fa.confidence_level.value} confidence): {fa.problem_statement or fa.confidence_rationale}"
        for fa in focus_areas
    )


def format_archetype(archetype: CustomerArchetype, *, with_ids: bool = False) -> str:
    """Describe an archetype and its hypothesis lists for a prompt."""
    role = archetype.custom_role_name or archetype.stakeholder_role.value
    lines = [f"Name: {archetype.name}", f"Stakeholder role: {role}"]
    if archetype.job_title:
        lines.append(f"Job title: {archetype.job_title}")
    if archetype.daily_reality:
        lines.append(f"Daily reality: {archetype.daily_reality}")
    if archetype.problem_statement:
        lines.append(f"Problem statement: {archetype.problem_statement}")
    if archetype.decision_process:
        lines.append(f"Decision process: {archetype.decision_process}")

    for label, items in (
        ("Pain points", archetype.specific_pain_points),
        ("Current solutions", archetype.current_solutions),
        ("Goals", archetype.primary_goals),
        ("Success metrics", archetype.success_metrics),
        ("Buying criteria", archetype.buying_criteria),
        ("Objections", archetype.objections),
    ):
        if not items:
            continue
        lines.append(f"{label}:")
        for h in items:
            prefix = f"[{h.id}] " if with_ids else ""
            lines.append(f"- {prefix}{h.content} ({h.status.value})")
    return "\n".join(lines)


def format_hypotheses(hypotheses: list[Hypothesis]) -> str:
    return "\n".join(f"- ({h.status.value}) {h.belief}" for h in hypotheses)


def clip(text: str, limit: int) -> str:
    """Bound caller-supplied text sent to the model."""
    if len(text) <= limit:
        return text
    logger.info(f"Clipping text from {len(text)} to {limit} characters")
    return text[:limit]
