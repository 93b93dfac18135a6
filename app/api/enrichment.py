"""API endpoints for AI enrichment.

Every route requires an editor (cpo or team). Handlers do not write to the
database; errors surface as ``{kind, message}`` through the app's
SignalError handler.
"""

from fastapi import APIRouter, Depends

from app.chains.analyze_transcript import analyze_transcript
from app.chains.critique_archetype_input import critique_archetype_input
from app.chains.detect_journey_map import detect_journey_map
from app.chains.enrich_company_context import enrich_company_context
from app.chains.enrich_strategic_context import enrich_strategic_context
from app.chains.extract_archetype_assumptions import extract_archetype_assumptions
from app.chains.generate_interview_questions import generate_interview_questions
from app.chains.generate_journey_map import generate_journey_map
from app.chains.generate_product_vision import generate_product_vision
from app.chains.improve_problem_statement import improve_problem_statement
from app.chains.suggest_hypotheses import suggest_hypotheses
from app.chains.synthesize_interview import synthesize_interview
from app.chains.transcribe_audio import transcribe_audio
from app.core.auth_middleware import AuthContext, require_editor
from app.core.logging import get_logger
from app.core.schemas_enrichment import (
    ArchetypeAssumptionsRequest,
    ArchetypeAssumptionsResult,
    ArchetypeCritiqueRequest,
    ArchetypeCritiqueResult,
    CompanyContextRequest,
    DetectedJourneyMapResult,
    DetectJourneyMapRequest,
    EnrichedContentResult,
    HypothesisSuggestionRequest,
    HypothesisSuggestionsResult,
    InterviewQuestionsRequest,
    InterviewQuestionsResult,
    InterviewSynthesisRequest,
    InterviewSynthesisResult,
    JourneyMapRequest,
    JourneyMapResult,
    ProblemStatementRequest,
    ProductVisionRequest,
    StrategicContextRequest,
    SuggestionsResult,
    TranscriptAnalysisRequest,
    TranscriptAnalysisResult,
    TranscriptionRequest,
    TranscriptionResult,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/enrichment")


@router.post("/product-vision", response_model=SuggestionsResult)
async def product_vision(
    request: ProductVisionRequest,
    auth: AuthContext = Depends(require_editor),
) -> SuggestionsResult:
    """Suggest four vision statements from company details."""
    return await generate_product_vision(request)


@router.post("/problem-statement", response_model=SuggestionsResult)
async def problem_statement(
    request: ProblemStatementRequest,
    auth: AuthContext = Depends(require_editor),
) -> SuggestionsResult:
    """Suggest sharper rewrites of a problem statement."""
    return await improve_problem_statement(request)


@router.post("/strategic-context", response_model=EnrichedContentResult)
async def strategic_context(
    request: StrategicContextRequest,
    auth: AuthContext = Depends(require_editor),
) -> EnrichedContentResult:
    """Draft or improve one section of the strategic context."""
    return await enrich_strategic_context(request)


@router.post("/company-context", response_model=EnrichedContentResult)
async def company_context(
    request: CompanyContextRequest,
    auth: AuthContext = Depends(require_editor),
) -> EnrichedContentResult:
    return await enrich_company_context(request)


@router.post("/journey-map", response_model=JourneyMapResult)
async def journey_map(
    request: JourneyMapRequest,
    auth: AuthContext = Depends(require_editor),
) -> JourneyMapResult:
    """Draft a journey map from a Job to be Done."""
    return await generate_journey_map(request)


@router.post("/detect-journey-map", response_model=DetectedJourneyMapResult)
async def detect_journey(
    request: DetectJourneyMapRequest,
    auth: AuthContext = Depends(require_editor),
) -> DetectedJourneyMapResult:
    """Recover a journey map from a transcript."""
    return await detect_journey_map(request)


@router.post("/archetype-critique", response_model=ArchetypeCritiqueResult)
async def archetype_critique(
    request: ArchetypeCritiqueRequest,
    auth: AuthContext = Depends(require_editor),
) -> ArchetypeCritiqueResult:
    return await critique_archetype_input(request)


@router.post("/archetype-assumptions", response_model=ArchetypeAssumptionsResult)
async def archetype_assumptions(
    request: ArchetypeAssumptionsRequest,
    auth: AuthContext = Depends(require_editor),
) -> ArchetypeAssumptionsResult:
    return await extract_archetype_assumptions(request)


@router.post("/interview-questions", response_model=InterviewQuestionsResult)
async def interview_questions(
    request: InterviewQuestionsRequest,
    auth: AuthContext = Depends(require_editor),
) -> InterviewQuestionsResult:
    return await generate_interview_questions(request)


@router.post("/interview-synthesis", response_model=InterviewSynthesisResult)
async def interview_synthesis(
    request: InterviewSynthesisRequest,
    auth: AuthContext = Depends(require_editor),
) -> InterviewSynthesisResult:
    return await synthesize_interview(request)


@router.post("/transcript-analysis", response_model=TranscriptAnalysisResult)
async def transcript_analysis(
    request: TranscriptAnalysisRequest,
    auth: AuthContext = Depends(require_editor),
) -> TranscriptAnalysisResult:
    return await analyze_transcript(request)


@router.post("/hypothesis-suggestions", response_model=HypothesisSuggestionsResult)
async def hypothesis_suggestions(
    request: HypothesisSuggestionRequest,
    auth: AuthContext = Depends(require_editor),
) -> HypothesisSuggestionsResult:
    """Suggest new hypotheses, optionally backed by web research."""
    return await suggest_hypotheses(request)


@router.post("/transcription", response_model=TranscriptionResult)
async def transcription(
    request: TranscriptionRequest,
    auth: AuthContext = Depends(require_editor),
) -> TranscriptionResult:
    """Transcribe base64-encoded audio."""
    logger.info(f"Transcription requested by user {auth.user_id}")
    return await transcribe_audio(request)
