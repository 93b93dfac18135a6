"""Hypothesis engine: tracks the lifecycle of discovery hypotheses.

A hypothesis moves between active, validated, invalidated and parked through
the dedicated status transition. Validating or invalidating one records the
learning in the decision log as an auto-generated, proposed Decision.

Evidence strength is deterministic (no LLM).
"""

import logging
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from app.core.errors import Internal, InvalidArgument
from app.core.logging import get_logger, log_with_context
from app.core.schemas_discovery import EvidenceCreate, HypothesisStatusResponse
from app.core.schemas_workspace import (
    DecisionCategory,
    DecisionStatus,
    EvidenceStrength,
    Hypothesis,
    HypothesisEvidence,
    HypothesisStatus,
    UserProfile,
)
from app.db.decisions import insert_decision
from app.db.focus_areas import get_focus_area
from app.db.hypotheses import get_hypothesis, update_hypothesis

logger = get_logger(__name__)

_STRENGTH_SCORES = {EvidenceStrength.WEAK: 1, EvidenceStrength.MODERATE: 2, EvidenceStrength.STRONG: 3}
STRONG_THRESHOLD = 2.5
MODERATE_THRESHOLD = 1.5
MAX_QUANTITY_BONUS = 0.5

AUTO_DECISION_FOOTER = (
    "*This decision was auto-generated when a hypothesis was validated/invalidated in Discovery Hub.*"
)

_RESOLVED_STATUSES = (HypothesisStatus.VALIDATED, HypothesisStatus.INVALIDATED)

_DECISION_TEMPLATES: dict[HypothesisStatus, list[dict[str, Any]]] = {
    HypothesisStatus.VALIDATED: [
        {
            "title": "Proceed with implementation",
            "description": "The hypothesis was validated - consider moving forward with related features or changes.",
            "pros": ["Evidence supports the approach", "Reduces risk of building wrong thing"],
            "cons": [],
        },
        {
            "title": "Gather more evidence",
            "description": "While validated, more data might strengthen the case before major investment.",
            "pros": ["Higher confidence before investment"],
            "cons": ["Delays potential value delivery"],
        },
    ],
    HypothesisStatus.INVALIDATED: [
        {
            "title": "Pivot approach",
            "description": "The hypothesis was invalidated - consider alternative approaches to solve the problem.",
            "pros": ["Avoids investing in wrong direction", "Opens up exploration of new ideas"],
            "cons": ["Requires new hypothesis development"],
        },
        {
            "title": "Archive and move on",
            "description": "Document the learning and focus resources elsewhere.",
            "pros": ["Frees up resources", "Creates documented learning"],
            "cons": ["Problem may remain unsolved"],
        },
    ],
}


def calculate_overall_evidence_strength(evidence: list[HypothesisEvidence]) -> EvidenceStrength:
    """Average strength of the evidence, nudged up by how much there is.

    Each item adds 0.1 to the average, capped at 0.5.
    """
    if not evidence:
        return EvidenceStrength.WEAK

    average = sum(_STRENGTH_SCORES[e.strength] for e in evidence) / len(evidence)
    adjusted = average + min(len(evidence) * 0.1, MAX_QUANTITY_BONUS)

    if adjusted >= STRONG_THRESHOLD:
        return EvidenceStrength.STRONG
    if adjusted >= MODERATE_THRESHOLD:
        return EvidenceStrength.MODERATE
    return EvidenceStrength.WEAK


def build_auto_decision(
    hypothesis: Hypothesis,
    new_status: HypothesisStatus,
    *,
    result: str | None = None,
    focus_area_title: str = "",
    owner: str = "System",
) -> dict[str, Any]:
    """Build the decision row recorded when a hypothesis is resolved."""
    if new_status not in _RESOLVED_STATUSES:
        raise ValueError(f"No decision template for status {new_status.value}")

    status_text = "Validated" if new_status == HypothesisStatus.VALIDATED else "Invalidated"
    belief = hypothesis.belief
    title = f"[Auto] Hypothesis {status_text}: {belief[:60]}{'...' if len(belief) > 60 else ''}"

    context_parts = [
        f"**Status:** {status_text}",
        "",
        f"**Original Belief:** {belief}",
        "",
        f"**Test Method:** {hypothesis.test}",
    ]
    effective_result = result or hypothesis.result
    if effective_result:
        context_parts += ["", f"**Result:** {effective_result}"]
    if focus_area_title:
        context_parts += ["", f"**Related Focus Area:** {focus_area_title}"]
    if hypothesis.risks:
        context_parts += ["", f"**Risks Tested:** {', '.join(r.value for r in hypothesis.risks)}"]
    context_parts += ["", "---", AUTO_DECISION_FOOTER]

    options = [
        {"id": uuid4().hex, **template, "selected": False}
        for template in _DECISION_TEMPLATES[new_status]
    ]

    return {
        "title": title,
        "context": "\n".join(context_parts),
        "category": DecisionCategory.PRODUCT.value,
        "status": DecisionStatus.PROPOSED.value,
        "owner": owner,
        "rationale": "",
        "options": options,
        "related_hypothesis_ids": [hypothesis.id],
        "focus_area_id": hypothesis.focus_area_id,
        "auto_generated": True,
        "source_hypothesis_id": hypothesis.id,
    }


def _load_hypothesis(hypothesis_id: str) -> Hypothesis:
    try:
        hypothesis = get_hypothesis(hypothesis_id)
    except Exception as e:
        logger.error(f"Failed to load hypothesis {hypothesis_id}: {e}")
        raise Internal(f"Failed to load hypothesis: {e}") from e
    if hypothesis is None:
        raise InvalidArgument("hypothesis_id", "Hypothesis not found")
    return hypothesis


def _focus_area_title(focus_area_id: str | None) -> str:
    if not focus_area_id:
        return ""
    focus_area = get_focus_area(focus_area_id)
    return focus_area.title if focus_area else ""


def update_hypothesis_status(
    hypothesis_id: str,
    new_status: HypothesisStatus,
    *,
    result: str | None = None,
    auto_generate_decision: bool = True,
    actor: UserProfile | None = None,
) -> HypothesisStatusResponse:
    """Transition a hypothesis and, when it is resolved, log a Decision.

    The status write happens first. If the decision cannot be created
    afterwards the status change stays committed and the failure is raised
    as ``Internal``; it is never swallowed.
    """
    hypothesis = _load_hypothesis(hypothesis_id)

    now = datetime.now(timezone.utc).isoformat()
    update_data: dict[str, Any] = {"status": new_status.value, "updated_at": now}
    if result is not None:
        update_data["result"] = result
    if new_status == HypothesisStatus.VALIDATED:
        update_data["validated_at"] = now
    elif new_status == HypothesisStatus.INVALIDATED:
        update_data["invalidated_at"] = now

    try:
        update_hypothesis(hypothesis_id, update_data)
    except Exception as e:
        logger.error(f"Failed to update hypothesis {hypothesis_id} status: {e}")
        raise Internal(f"Failed to update hypothesis status: {e}") from e

    log_with_context(
        logger,
        logging.INFO,
        "Hypothesis status updated",
        operation="update_hypothesis_status",
        hypothesis_id=hypothesis_id,
        status=new_status.value,
    )

    response = HypothesisStatusResponse(hypothesis_id=hypothesis_id, status=new_status)
    if not auto_generate_decision or new_status not in _RESOLVED_STATUSES:
        return response

    try:
        decision_row = build_auto_decision(
            hypothesis,
            new_status,
            result=result,
            focus_area_title=_focus_area_title(hypothesis.focus_area_id),
            owner=(actor.display_name if actor and actor.display_name else "System"),
        )
        if actor:
            decision_row["created_by"] = actor.id
        decision = insert_decision(decision_row)
    except Exception as e:
        logger.error(
            f"Hypothesis {hypothesis_id} set to {new_status.value} but decision generation failed: {e}"
        )
        raise Internal(f"Hypothesis status updated but decision generation failed: {e}") from e

    logger.info(f"Auto-generated decision {decision.id} for hypothesis {hypothesis_id}")
    response.decision_id = decision.id
    return response


def _write_evidence(hypothesis_id: str, evidence: list[HypothesisEvidence]) -> EvidenceStrength:
    strength = calculate_overall_evidence_strength(evidence)
    try:
        update_hypothesis(
            hypothesis_id,
            {
                "evidence": [e.model_dump(mode="json") for e in evidence],
                "overall_evidence_strength": strength.value,
                "updated_at": datetime.now(timezone.utc).isoformat(),
            },
        )
    except Exception as e:
        logger.error(f"Failed to write evidence for hypothesis {hypothesis_id}: {e}")
        raise Internal(f"Failed to update evidence: {e}") from e
    return strength


def add_evidence(
    hypothesis_id: str,
    data: EvidenceCreate,
    actor: UserProfile | None = None,
) -> tuple[list[HypothesisEvidence], EvidenceStrength]:
    """Append an evidence item and recompute the overall strength."""
    hypothesis = _load_hypothesis(hypothesis_id)
    item = HypothesisEvidence(
        id=uuid4().hex,
        created_at=datetime.now(timezone.utc),
        created_by=actor.id if actor else None,
        **data.model_dump(),
    )
    evidence = [*hypothesis.evidence, item]
    return evidence, _write_evidence(hypothesis_id, evidence)


def remove_evidence(
    hypothesis_id: str,
    evidence_id: str,
) -> tuple[list[HypothesisEvidence], EvidenceStrength]:
    hypothesis = _load_hypothesis(hypothesis_id)
    evidence = [e for e in hypothesis.evidence if e.id != evidence_id]
    if len(evidence) == len(hypothesis.evidence):
        raise InvalidArgument("evidence_id", "Evidence not found")
    return evidence, _write_evidence(hypothesis_id, evidence)
