"""Pydantic schemas for derived workspace views (relationships, alignment, metrics)."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel

from app.core.schemas_workspace import (
    ConfidenceLevel,
    ConfidenceTrend,
    FocusAreaStatus,
)


class EntityKind(str, Enum):
    """Kinds of entity that can appear in a relationship query."""

    FOCUS_AREA = "focus-area"
    ARCHETYPE = "archetype"
    HYPOTHESIS = "hypothesis"
    IDEA = "idea"
    DECISION = "decision"
    OBJECTIVE = "objective"
    JOURNEY_MAP = "journey-map"
    DOCUMENT = "document"
    CHANGELOG = "changelog"
    BLOCKER = "blocker"


# Route of the dashboard view listing each kind
KIND_PATHS: dict[EntityKind, str] = {
    EntityKind.FOCUS_AREA: "/focus-areas",
    EntityKind.ARCHETYPE: "/customer-archetypes",
    EntityKind.HYPOTHESIS: "/discovery",
    EntityKind.IDEA: "/idea-hopper",
    EntityKind.DECISION: "/decisions",
    EntityKind.OBJECTIVE: "/objectives",
    EntityKind.JOURNEY_MAP: "/journey-maps",
    EntityKind.DOCUMENT: "/documents",
    EntityKind.CHANGELOG: "/delivery",
    EntityKind.BLOCKER: "/delivery",
}


class RelatedItem(BaseModel):
    id: str
    kind: EntityKind
    title: str
    status: str | None = None
    path: str


class Severity(str, Enum):
    WARNING = "warning"
    INFO = "info"


class AlignmentWarning(BaseModel):
    severity: Severity
    message: str
    target_path: str


class ConnectionCounts(BaseModel):
    archetypes_with_focus_areas: int
    focus_areas_with_archetypes: int
    hypotheses_with_archetypes: int
    ideas_with_archetypes: int
    objectives_with_focus_areas: int
    decisions_with_evidence: int
    journey_maps_with_archetypes: int


class HypothesisCounts(BaseModel):
    total: int = 0
    validated: int = 0
    invalidated: int = 0
    active: int = 0
    validation_rate: int = 0


class FocusAreaMetrics(BaseModel):
    id: str
    title: str
    status: FocusAreaStatus
    confidence_level: ConfidenceLevel
    confidence_trend: ConfidenceTrend
    total_hypotheses: int
    validated_hypotheses: int
    invalidated_hypotheses: int
    active_hypotheses: int
    validation_rate: int
    customer_interview_count: int
    delivered_features: int
    open_blockers: int
    days_active: int
    last_activity_date: datetime | None = None
    progress_percentage: int


class ArchetypeMetrics(BaseModel):
    id: str
    name: str
    total_hypotheses: int
    validated_hypotheses: int
    invalidated_hypotheses: int
    active_hypotheses: int
    validation_rate: int
    interview_count: int
    interview_target: int
    confidence_score: int
    readiness_score: int


class DiscoveryMetrics(BaseModel):
    hypotheses_created_this_week: int
    hypotheses_resolved_this_week: int
    validated_this_week: int
    invalidated_this_week: int
    avg_time_to_validation: int
    validation_rate: int
    evidence_quality_score: int
    week_over_week_change: int


class CustomerDiscoveryHealth(BaseModel):
    total_archetypes: int
    archetypes_with_sufficient_interviews: int
    avg_interviews_per_archetype: float
    interview_velocity: float
    hypothesis_validation_rate: int
    avg_confidence_score: int
    archetypes_at_risk: int


class StrategicAlignmentScore(BaseModel):
    objectives_with_focus_areas: int
    decisions_with_evidence: int
    focus_areas_with_archetypes: int
    hypotheses_with_archetypes: int
    delivery_with_hypotheses: int
    overall_score: int


class RiskType(str, Enum):
    BLOCKER = "blocker"
    STALLED_FOCUS_AREA = "stalled-focus-area"
    LOW_EVIDENCE = "low-evidence"
    ORPHANED_OKR = "orphaned-okr"


class RiskSeverity(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class RiskIndicator(BaseModel):
    type: RiskType
    message: str
    severity: RiskSeverity
    path: str | None = None


class ExecutiveMetrics(BaseModel):
    focus_area_metrics: list[FocusAreaMetrics]
    discovery_metrics: DiscoveryMetrics
    customer_discovery_health: CustomerDiscoveryHealth
    strategic_alignment_score: StrategicAlignmentScore
    top_insights: list[str]
    risk_indicators: list[RiskIndicator]
