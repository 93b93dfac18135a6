"""Hypothesis lifecycle endpoints: status transitions and evidence."""

from fastapi import APIRouter, Depends

from app.core.auth_middleware import AuthContext, require_editor
from app.core.hypothesis_engine import add_evidence, remove_evidence, update_hypothesis_status
from app.core.schemas_discovery import (
    EvidenceCreate,
    EvidenceResponse,
    HypothesisStatusRequest,
    HypothesisStatusResponse,
)

router = APIRouter(prefix="/hypotheses")


@router.post("/{hypothesis_id}/status", response_model=HypothesisStatusResponse)
async def set_hypothesis_status(
    hypothesis_id: str,
    request: HypothesisStatusRequest,
    auth: AuthContext = Depends(require_editor),
) -> HypothesisStatusResponse:
    """
    Transition a hypothesis.

    Moving to validated or invalidated also creates a proposed Decision
    unless ``auto_generate_decision`` is false. If that second write fails
    the status change is kept and a 500 is returned.
    """
    return update_hypothesis_status(
        hypothesis_id,
        request.status,
        result=request.result,
        auto_generate_decision=request.auto_generate_decision,
        actor=auth.profile,
    )


@router.post("/{hypothesis_id}/evidence", response_model=EvidenceResponse)
async def create_evidence(
    hypothesis_id: str,
    request: EvidenceCreate,
    auth: AuthContext = Depends(require_editor),
) -> EvidenceResponse:
    evidence, strength = add_evidence(hypothesis_id, request, actor=auth.profile)
    return EvidenceResponse(
        hypothesis_id=hypothesis_id,
        evidence_count=len(evidence),
        overall_evidence_strength=strength,
    )


@router.delete("/{hypothesis_id}/evidence/{evidence_id}", response_model=EvidenceResponse)
async def delete_evidence(
    hypothesis_id: str,
    evidence_id: str,
    auth: AuthContext = Depends(require_editor),
) -> EvidenceResponse:
    evidence, strength = remove_evidence(hypothesis_id, evidence_id)
    return EvidenceResponse(
        hypothesis_id=hypothesis_id,
        evidence_count=len(evidence),
        overall_evidence_strength=strength,
    )
