"""Request/response schemas for hypothesis and archetype write endpoints."""

from typing import Any

from pydantic import BaseModel, Field

from app.core.schemas_workspace import EvidenceStrength, EvidenceType, HypothesisStatus


class HypothesisStatusRequest(BaseModel):
    status: HypothesisStatus
    result: str | None = None
    auto_generate_decision: bool = True


class HypothesisStatusResponse(BaseModel):
    hypothesis_id: str
    status: HypothesisStatus
    decision_id: str | None = None


class EvidenceCreate(BaseModel):
    type: EvidenceType
    description: str = Field(..., min_length=1)
    strength: EvidenceStrength
    sample_size: int | None = Field(default=None, ge=0)
    data_source: str | None = None
    document_ids: list[str] = Field(default_factory=list)


class EvidenceResponse(BaseModel):
    hypothesis_id: str
    evidence_count: int
    overall_evidence_strength: EvidenceStrength


class ArchetypeUpdateResponse(BaseModel):
    archetype_id: str
    updated_fields: list[str]
    confidence_score: int
    readiness_score: int
    bs_flags: list[str]

    @classmethod
    def from_payload(cls, archetype_id: str, payload: dict[str, Any]) -> "ArchetypeUpdateResponse":
        return cls(
            archetype_id=archetype_id,
            updated_fields=sorted(payload),
            confidence_score=payload["confidence_score"],
            readiness_score=payload["readiness_score"],
            bs_flags=payload["bs_flags"],
        )
