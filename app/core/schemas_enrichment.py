"""Pydantic schemas for the AI enrichment operations.

Request models accept every field as optional: the operations themselves
validate required fields so that a missing field is reported as
``invalid_argument`` naming that field, after the caller's role has been
checked. Reply models describe the structured data extracted from the model.
"""

from pydantic import BaseModel, ConfigDict, Field

from app.core.schemas_workspace import JobType, Principle, RiskType


class TokenUsage(BaseModel):
    """Token counts copied verbatim from the model response."""

    input_tokens: int = 0
    output_tokens: int = 0


class _Reply(BaseModel):
    model_config = ConfigDict(extra="ignore")


# =============================================================================
# Requests
# =============================================================================


class ProductVisionRequest(BaseModel):
    company_url: str | None = None
    core_business_model: str | None = None
    mission: str | None = None
    principles: list[Principle] = Field(default_factory=list)


class ProblemStatementRequest(BaseModel):
    problem_statement: str | None = None
    title: str | None = None


class StrategicContextRequest(BaseModel):
    section: str | None = None
    current_content: str | None = None
    company_context: str | None = None


class CompanyContextRequest(BaseModel):
    current_context: str | None = None
    derived_context: str | None = None


class JobInput(BaseModel):
    customer: str | None = None
    progress: str | None = None
    circumstance: str | None = None
    type: JobType = JobType.FUNCTIONAL


class JourneyMapRequest(BaseModel):
    job: JobInput | None = None
    idea_title: str | None = None
    idea_description: str | None = None


class DetectJourneyMapRequest(BaseModel):
    transcript: str | None = None
    archetype_id: str | None = None
    idea_id: str | None = None


class ArchetypeCritiqueRequest(BaseModel):
    field: str | None = None
    content: str | None = None
    archetype_name: str | None = None
    stakeholder_role: str | None = None


class ArchetypeAssumptionsRequest(BaseModel):
    description: str | None = None
    archetype_name: str | None = None
    stakeholder_role: str | None = None


class InterviewQuestionsRequest(BaseModel):
    archetype_id: str | None = None
    count: int | None = Field(default=None, ge=1, le=25)


class InterviewSynthesisRequest(BaseModel):
    archetype_id: str | None = None
    raw_notes: str | None = None
    interviewee: str | None = None
    role: str | None = None


class TranscriptAnalysisRequest(BaseModel):
    transcript: str | None = None
    source_type: str | None = None


class HypothesisSuggestionRequest(BaseModel):
    focus_area_id: str | None = None
    archetype_id: str | None = None
    count: int | None = Field(default=None, ge=1, le=10)
    enable_web_search: bool = False


class TranscriptionRequest(BaseModel):
    audio_base64: str | None = None
    mime_type: str | None = None
    language: str | None = None


# =============================================================================
# Extracted replies
# =============================================================================


class DraftJourneyStep(_Reply):
    order: int
    title: str
    description: str = ""
    outcome: str = ""
    timeline_day: int = 0
    negative_experience: int = Field(default=3, ge=1, le=5)
    positive_experience: int = Field(default=3, ge=1, le=5)
    pain_point_note: str | None = None


class DraftJourneyMap(_Reply):
    title: str = Field(..., min_length=1)
    subtitle: str | None = None
    steps: list[DraftJourneyStep] = Field(..., min_length=1)


class DetectedJourneyMap(_Reply):
    journey_map: DraftJourneyMap
    summary: str = ""


class ArchetypeCritique(_Reply):
    specificity_score: int = Field(..., ge=1, le=5)
    assessment: str
    issues: list[str] = Field(default_factory=list)
    questions_to_validate: list[str] = Field(default_factory=list)
    suggested_rewrite: str | None = None


class ArchetypeAssumptions(_Reply):
    problem_statement: str = ""
    specific_pain_points: list[str] = Field(default_factory=list)
    current_solutions: list[str] = Field(default_factory=list)
    primary_goals: list[str] = Field(default_factory=list)
    success_metrics: list[str] = Field(default_factory=list)
    buying_criteria: list[str] = Field(default_factory=list)
    objections: list[str] = Field(default_factory=list)


class GeneratedQuestion(_Reply):
    question: str = Field(..., min_length=1)
    purpose: str = ""
    hypothesis_id: str | None = None


class InterviewSynthesis(_Reply):
    summary: str = ""
    key_insights: list[str] = Field(default_factory=list)
    surprises: list[str] = Field(default_factory=list)
    contradictions: list[str] = Field(default_factory=list)
    validated_hypotheses: list[str] = Field(default_factory=list)
    invalidated_hypotheses: list[str] = Field(default_factory=list)
    follow_up_questions: list[str] = Field(default_factory=list)


class TranscriptAnalysis(_Reply):
    summary: str
    key_insights: list[str] = Field(default_factory=list)
    pain_points: list[str] = Field(default_factory=list)
    notable_quotes: list[str] = Field(default_factory=list)
    hypothesis_candidates: list[str] = Field(default_factory=list)
    open_questions: list[str] = Field(default_factory=list)


class HypothesisSuggestion(_Reply):
    belief: str = Field(..., min_length=1)
    test: str = ""
    rationale: str = ""
    risks: list[RiskType] = Field(default_factory=list)
    focus_area_id: str | None = None
    archetype_id: str | None = None


class TranscriptSegment(_Reply):
    id: int | None = None
    start: float
    end: float
    text: str


class TranscriptWord(_Reply):
    word: str
    start: float
    end: float


# =============================================================================
# Results
# =============================================================================


class SuggestionsResult(BaseModel):
    suggestions: list[str]
    usage: TokenUsage


class EnrichedContentResult(BaseModel):
    enriched_content: str
    usage: TokenUsage


class JourneyMapResult(BaseModel):
    journey_map: DraftJourneyMap
    usage: TokenUsage


class DetectedJourneyMapResult(BaseModel):
    journey_map: DraftJourneyMap
    summary: str
    usage: TokenUsage


class ArchetypeCritiqueResult(BaseModel):
    critique: ArchetypeCritique
    usage: TokenUsage


class ArchetypeAssumptionsResult(BaseModel):
    assumptions: ArchetypeAssumptions
    usage: TokenUsage


class InterviewQuestionsResult(BaseModel):
    questions: list[GeneratedQuestion]
    usage: TokenUsage


class InterviewSynthesisResult(BaseModel):
    synthesis: InterviewSynthesis
    usage: TokenUsage


class TranscriptAnalysisResult(BaseModel):
    analysis: TranscriptAnalysis
    usage: TokenUsage


class HypothesisSuggestionsResult(BaseModel):
    suggestions: list[HypothesisSuggestion]
    research_used: bool = False
    usage: TokenUsage


class TranscriptionResult(BaseModel):
    text: str
    segments: list[TranscriptSegment] = Field(default_factory=list)
    words: list[TranscriptWord] = Field(default_factory=list)
    language: str | None = None
    duration: float | None = None
    usage: TokenUsage = Field(default_factory=TokenUsage)
