"""Pydantic schemas for workspace entities.

Every entity is an independent record keyed by an opaque string id. Links
between entities are soft foreign keys: a stored id that may no longer
resolve. Consumers treat a dangling id as "not found", never as an error.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Enums
# =============================================================================


class UserRole(str, Enum):
    CPO = "cpo"
    TEAM = "team"
    LEADERSHIP = "leadership"


class ValidationStatus(str, Enum):
    """Validation state of an archetype hypothesis."""

    HYPOTHESIS = "hypothesis"
    PARTIALLY_VALIDATED = "partially_validated"
    VALIDATED = "validated"
    INVALIDATED = "invalidated"


class ConfidenceLevel(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class ConfidenceTrend(str, Enum):
    IMPROVING = "improving"
    STABLE = "stable"
    DECLINING = "declining"


class FocusAreaStatus(str, Enum):
    ACTIVE = "active"
    VALIDATING = "validating"
    SCALING = "scaling"
    ACHIEVED = "achieved"
    PIVOTED = "pivoted"
    PAUSED = "paused"
    ARCHIVED = "archived"


class ArchetypeStatus(str, Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    VALIDATED = "validated"
    ARCHIVED = "archived"


class StakeholderRole(str, Enum):
    USER = "user"
    PAYER = "payer"
    ECONOMIC_BUYER = "economic_buyer"
    DECISION_MAKER = "decision_maker"
    INFLUENCER = "influencer"
    RECOMMENDER = "recommender"
    SABOTEUR = "saboteur"


class ArchetypePhase(str, Enum):
    SETUP = "setup"
    HYPOTHESIS = "hypothesis"
    INTERVIEW_PREP = "interview_prep"
    SYNTHESIS = "synthesis"
    VALIDATED = "validated"


class HypothesisStatus(str, Enum):
    ACTIVE = "active"
    VALIDATED = "validated"
    INVALIDATED = "invalidated"
    PARKED = "parked"


class RiskType(str, Enum):
    DESIRABLE = "desirable"
    FEASIBLE = "feasible"
    VIABLE = "viable"


class EvidenceStrength(str, Enum):
    WEAK = "weak"
    MODERATE = "moderate"
    STRONG = "strong"


class EvidenceType(str, Enum):
    INTERVIEW = "interview"
    USAGE_DATA = "usage-data"
    AB_TEST = "ab-test"
    PROTOTYPE = "prototype"
    SURVEY = "survey"
    EXPERT_REVIEW = "expert-review"
    DESIGN_PARTNER = "design-partner"


class Priority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class JobType(str, Enum):
    FUNCTIONAL = "functional"
    SOCIAL = "social"
    EMOTIONAL = "emotional"


class IdeaStatus(str, Enum):
    NEW = "new"
    EXPLORING = "exploring"
    VALIDATED = "validated"
    PARKED = "parked"
    PROMOTED = "promoted"


class DecisionStatus(str, Enum):
    PROPOSED = "proposed"
    DECIDED = "decided"
    REVISITED = "revisited"


class DecisionCategory(str, Enum):
    PRODUCT = "product"
    TECHNICAL = "technical"
    PROCESS = "process"
    STRATEGY = "strategy"


class ObjectiveStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    ARCHIVED = "archived"


class KeyResultStatus(str, Enum):
    ON_TRACK = "on_track"
    AT_RISK = "at_risk"
    BEHIND = "behind"
    COMPLETED = "completed"


class ChangelogType(str, Enum):
    FEATURE = "feature"
    FIX = "fix"
    IMPROVEMENT = "improvement"
    TECHNICAL = "technical"


class BlockerStatus(str, Enum):
    OPEN = "open"
    RESOLVED = "resolved"


# =============================================================================
# Base
# =============================================================================


class WorkspaceEntity(BaseModel):
    """Fields shared by every stored entity."""

    model_config = ConfigDict(extra="ignore", use_enum_values=False)

    id: str
    created_at: datetime | None = None
    updated_at: datetime | None = None
    created_by: str | None = None


# =============================================================================
# Users & vision
# =============================================================================


class UserProfile(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    email: str = ""
    display_name: str = ""
    role: UserRole


class Principle(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title: str = ""
    description: str = ""
    order: int = 0
    focus_area_ids: list[str] = Field(default_factory=list)


class Vision(BaseModel):
    model_config = ConfigDict(extra="ignore")

    mission: str = ""
    vision: str = ""
    company_url: str | None = None
    core_business_model: str | None = None
    target_user: str | None = None
    problem_statement: str | None = None
    principles: list[Principle] = Field(default_factory=list)


# =============================================================================
# Focus areas
# =============================================================================


class ConfidenceSnapshot(BaseModel):
    model_config = ConfigDict(extra="ignore")

    level: ConfidenceLevel
    rationale: str = ""
    changed_at: datetime | None = None
    changed_by: str | None = None


class FocusArea(WorkspaceEntity):
    title: str = ""
    problem_statement: str = ""
    confidence_level: ConfidenceLevel = ConfidenceLevel.MEDIUM
    confidence_rationale: str = ""
    confidence_trend: ConfidenceTrend | None = None
    confidence_history: list[ConfidenceSnapshot] = Field(default_factory=list)
    success_criteria: list[str] = Field(default_factory=list)
    progress_percentage: int | None = None
    status: FocusAreaStatus = FocusAreaStatus.ACTIVE
    target_archetype_ids: list[str] = Field(default_factory=list)


# =============================================================================
# Customer archetypes
# =============================================================================


class ArchetypeHypothesis(BaseModel):
    """A single attribute of an archetype awaiting interview validation."""

    model_config = ConfigDict(extra="ignore")

    id: str
    content: str = ""
    status: ValidationStatus = ValidationStatus.HYPOTHESIS
    evidence: str | None = None


class ValuePropositionMap(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    proposition: str = ""
    relevance_score: int = Field(default=3, ge=1, le=5)
    pain_addressed: str = ""
    status: ValidationStatus = ValidationStatus.HYPOTHESIS


class InterviewQuestion(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    question: str
    purpose: str = ""
    hypothesis_id: str | None = None


class InterviewNote(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    date: datetime | None = None
    interviewee: str = ""
    role: str = ""
    raw_notes: str = ""
    key_insights: list[str] = Field(default_factory=list)
    surprises: list[str] = Field(default_factory=list)
    contradictions: list[str] = Field(default_factory=list)
    validated_hypotheses: list[str] = Field(default_factory=list)
    invalidated_hypotheses: list[str] = Field(default_factory=list)
    created_at: datetime | None = None


# The six hypothesis lists that feed the confidence score
ARCHETYPE_HYPOTHESIS_FIELDS = (
    "specific_pain_points",
    "current_solutions",
    "primary_goals",
    "success_metrics",
    "buying_criteria",
    "objections",
)


class CustomerArchetype(WorkspaceEntity):
    name: str = ""
    stakeholder_role: StakeholderRole = StakeholderRole.USER
    custom_role_name: str | None = None
    phase: ArchetypePhase = ArchetypePhase.SETUP

    job_title: str = ""
    daily_reality: str = ""
    background: str = ""
    demographics: str | None = None

    problem_statement: str = ""
    specific_pain_points: list[ArchetypeHypothesis] = Field(default_factory=list)
    current_solutions: list[ArchetypeHypothesis] = Field(default_factory=list)
    primary_goals: list[ArchetypeHypothesis] = Field(default_factory=list)
    success_metrics: list[ArchetypeHypothesis] = Field(default_factory=list)

    budget_authority: ValidationStatus = ValidationStatus.HYPOTHESIS
    decision_process: str = ""
    buying_criteria: list[ArchetypeHypothesis] = Field(default_factory=list)
    objections: list[ArchetypeHypothesis] = Field(default_factory=list)

    value_propositions: list[ValuePropositionMap] = Field(default_factory=list)

    interview_questions: list[InterviewQuestion] = Field(default_factory=list)
    interview_notes: list[InterviewNote] = Field(default_factory=list)
    interview_target: int | None = 8

    # Derived caches, recomputed by app.core.archetype_scoring
    confidence_score: int = 0
    readiness_score: int = 0
    bs_flags: list[str] = Field(default_factory=list)

    status: ArchetypeStatus = ArchetypeStatus.DRAFT
    related_focus_area_ids: list[str] = Field(default_factory=list)

    def all_hypotheses(self) -> list[ArchetypeHypothesis]:
        """All hypotheses across the six categories, in category order."""
        items: list[ArchetypeHypothesis] = []
        for field_name in ARCHETYPE_HYPOTHESIS_FIELDS:
            items.extend(getattr(self, field_name))
        return items


# =============================================================================
# Discovery
# =============================================================================


class HypothesisEvidence(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    type: EvidenceType
    description: str = ""
    sample_size: int | None = None
    data_source: str | None = None
    strength: EvidenceStrength = EvidenceStrength.WEAK
    document_ids: list[str] = Field(default_factory=list)
    created_at: datetime | None = None
    created_by: str | None = None


class Hypothesis(WorkspaceEntity):
    belief: str = ""
    test: str = ""
    result: str = ""
    status: HypothesisStatus = HypothesisStatus.ACTIVE
    risks: list[RiskType] = Field(default_factory=list)
    evidence: list[HypothesisEvidence] = Field(default_factory=list)
    overall_evidence_strength: EvidenceStrength | None = None
    validated_at: datetime | None = None
    invalidated_at: datetime | None = None
    expected_impact: str | None = None
    priority: Priority | None = None
    focus_area_id: str | None = None
    archetype_id: str | None = None


# =============================================================================
# Ideas & journey maps
# =============================================================================


class JobToBeDone(BaseModel):
    model_config = ConfigDict(extra="ignore")

    customer: str = ""
    progress: str = ""
    circumstance: str = ""
    type: JobType = JobType.FUNCTIONAL


class Idea(WorkspaceEntity):
    title: str = ""
    description: str = ""
    job: JobToBeDone = Field(default_factory=JobToBeDone)
    status: IdeaStatus = IdeaStatus.NEW
    notes: str | None = None
    focus_area_id: str | None = None
    target_archetype_id: str | None = None


class JourneyStep(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str | None = None
    order: int
    title: str
    description: str = ""
    outcome: str = ""
    timeline_day: int = 0
    negative_experience: int = Field(default=3, ge=1, le=5)
    positive_experience: int = Field(default=3, ge=1, le=5)
    pain_point_note: str | None = None


class JourneyMap(WorkspaceEntity):
    title: str = ""
    subtitle: str | None = None
    steps: list[JourneyStep] = Field(default_factory=list)
    idea_id: str | None = None
    archetype_id: str | None = None


# =============================================================================
# Decisions & objectives
# =============================================================================


class DecisionOption(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    title: str
    description: str = ""
    pros: list[str] = Field(default_factory=list)
    cons: list[str] = Field(default_factory=list)
    selected: bool = False


class Decision(WorkspaceEntity):
    title: str = ""
    context: str = ""
    category: DecisionCategory = DecisionCategory.PRODUCT
    status: DecisionStatus = DecisionStatus.PROPOSED
    options: list[DecisionOption] = Field(default_factory=list)
    rationale: str = ""
    outcome: str | None = None
    owner: str = ""
    decided_at: datetime | None = None
    focus_area_id: str | None = None
    related_hypothesis_ids: list[str] = Field(default_factory=list)
    auto_generated: bool = False
    source_hypothesis_id: str | None = None


class KeyResult(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    title: str = ""
    target: float = 0
    current: float = 0
    unit: str = ""
    status: KeyResultStatus = KeyResultStatus.ON_TRACK


class Objective(WorkspaceEntity):
    title: str = ""
    description: str = ""
    owner: str = ""
    quarter: str = ""
    status: ObjectiveStatus = ObjectiveStatus.ACTIVE
    key_results: list[KeyResult] = Field(default_factory=list)
    focus_area_ids: list[str] = Field(default_factory=list)


# =============================================================================
# Documents & delivery
# =============================================================================


class Document(WorkspaceEntity):
    name: str = ""
    description: str = ""
    document_type: str = "knowledge"
    category: str = "reference"
    tags: list[str] = Field(default_factory=list)
    priority: int = 2
    archetype_ids: list[str] = Field(default_factory=list)
    focus_area_ids: list[str] = Field(default_factory=list)


class ChangelogEntry(WorkspaceEntity):
    title: str = ""
    description: str = ""
    type: ChangelogType = ChangelogType.FEATURE
    shipped_at: datetime | None = None
    focus_area_id: str | None = None
    validated_hypothesis_ids: list[str] = Field(default_factory=list)


class Blocker(WorkspaceEntity):
    title: str = ""
    description: str = ""
    owner: str = ""
    status: BlockerStatus = BlockerStatus.OPEN
    resolved_at: datetime | None = None
    focus_area_id: str | None = None


# =============================================================================
# Snapshot
# =============================================================================


class WorkspaceSnapshot(BaseModel):
    """All loaded entity collections. Input to every Engine computation."""

    focus_areas: list[FocusArea] = Field(default_factory=list)
    archetypes: list[CustomerArchetype] = Field(default_factory=list)
    hypotheses: list[Hypothesis] = Field(default_factory=list)
    ideas: list[Idea] = Field(default_factory=list)
    decisions: list[Decision] = Field(default_factory=list)
    objectives: list[Objective] = Field(default_factory=list)
    journey_maps: list[JourneyMap] = Field(default_factory=list)
    documents: list[Document] = Field(default_factory=list)
    changelog: list[ChangelogEntry] = Field(default_factory=list)
    blockers: list[Blocker] = Field(default_factory=list)

    @property
    def active_focus_areas(self) -> list[FocusArea]:
        return [
            fa
            for fa in self.focus_areas
            if fa.status not in (FocusAreaStatus.ARCHIVED, FocusAreaStatus.ACHIEVED)
        ]

    @property
    def active_archetypes(self) -> list[CustomerArchetype]:
        return [a for a in self.archetypes if a.status == ArchetypeStatus.ACTIVE]

    @property
    def active_hypotheses(self) -> list[Hypothesis]:
        return [h for h in self.hypotheses if h.status == HypothesisStatus.ACTIVE]

    @property
    def active_objectives(self) -> list[Objective]:
        return [o for o in self.objectives if o.status == ObjectiveStatus.ACTIVE]

    @property
    def proposed_decisions(self) -> list[Decision]:
        return [d for d in self.decisions if d.status == DecisionStatus.PROPOSED]
