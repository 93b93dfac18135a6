"""Derived scores for customer archetypes.

``confidence_score``, ``readiness_score`` and ``bs_flags`` are stored on the
archetype row only as a cache. They are always recomputed in full from the
archetype's own hypothesis lists and interview notes, never patched
incrementally, so recomputation is idempotent.
"""

from typing import Any

from pydantic import ValidationError

from app.core.errors import InvalidArgument
from app.core.math_utils import percentage
from app.core.schemas_workspace import CustomerArchetype, ValidationStatus

DEFAULT_INTERVIEW_TARGET = 8

# Marketing speak that needs validation before it belongs on an archetype
BS_WORDS = (
    "innovative",
    "seamless",
    "revolutionize",
    "cutting-edge",
    "best-in-class",
    "world-class",
    "game-changing",
    "disruptive",
    "synergy",
    "leverage",
    "paradigm",
    "holistic",
    "scalable",
    "robust",
    "next-generation",
    "transformative",
    "empower",
    "streamline",
)

DERIVED_FIELDS = ("confidence_score", "readiness_score", "bs_flags")
_IMMUTABLE_FIELDS = {"id", "created_at", "created_by"}


def calculate_confidence_score(archetype: CustomerArchetype) -> int:
    """Share of validated hypotheses across all six categories, 0-100.

    Partially validated hypotheses count half. An archetype with no
    hypotheses scores 0.
    """
    hypotheses = archetype.all_hypotheses()
    validated = sum(1 for h in hypotheses if h.status == ValidationStatus.VALIDATED)
    partial = sum(1 for h in hypotheses if h.status == ValidationStatus.PARTIALLY_VALIDATED)
    return percentage(validated + 0.5 * partial, len(hypotheses))


def interview_target(archetype: CustomerArchetype) -> int:
    return archetype.interview_target or DEFAULT_INTERVIEW_TARGET


def calculate_readiness_score(archetype: CustomerArchetype) -> int:
    """Interview progress towards the target, capped at 100."""
    return min(100, percentage(len(archetype.interview_notes), interview_target(archetype)))


def detect_bs_flags(archetype: CustomerArchetype) -> list[str]:
    text = " ".join(
        [
            archetype.problem_statement,
            archetype.daily_reality,
            archetype.decision_process,
            *(h.content for h in archetype.specific_pain_points),
            *(h.content for h in archetype.primary_goals),
            *(v.proposition for v in archetype.value_propositions),
        ]
    ).lower()
    return [word for word in BS_WORDS if word in text]


def recompute_archetype_scores(archetype: CustomerArchetype) -> dict[str, Any]:
    return {
        "confidence_score": calculate_confidence_score(archetype),
        "readiness_score": calculate_readiness_score(archetype),
        "bs_flags": detect_bs_flags(archetype),
    }


def apply_archetype_update(
    archetype: CustomerArchetype,
    changes: dict[str, Any],
) -> tuple[CustomerArchetype, dict[str, Any]]:
    """Merge a partial update into an archetype.

    Returns the merged archetype and the row payload to persist: the changed
    fields (JSON-normalised) plus freshly recomputed derived fields. Derived
    fields supplied by the caller are ignored. Unknown fields are dropped.
    """
    for field in _IMMUTABLE_FIELDS:
        if field in changes:
            raise InvalidArgument(field, f"{field} cannot be changed")

    editable = {
        key: value
        for key, value in changes.items()
        if key not in DERIVED_FIELDS and key in CustomerArchetype.model_fields
    }

    try:
        merged = CustomerArchetype.model_validate({**archetype.model_dump(), **editable})
    except ValidationError as e:
        field = _first_error_field(e) or "archetype"
        raise InvalidArgument(field, f"Invalid value for {field}") from e

    derived = recompute_archetype_scores(merged)
    merged = merged.model_copy(update=derived)

    payload = merged.model_dump(mode="json", include=set(editable))
    payload.update(derived)
    return merged, payload


def _first_error_field(error: ValidationError) -> str | None:
    for item in error.errors():
        loc = item.get("loc") or ()
        if loc:
            return str(loc[0])
    return None
