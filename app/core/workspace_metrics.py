"""Aggregate metrics over a workspace snapshot.

Pure functions of the snapshot. Every time-dependent metric takes ``now``
explicitly. All percentages are integers rounded half-up.
"""

import math
from datetime import datetime, timedelta, timezone

from app.core.archetype_scoring import (
    calculate_confidence_score,
    calculate_readiness_score,
    interview_target,
)
from app.core.math_utils import percentage, round_half_up, round_one_decimal
from app.core.schemas_metrics import (
    ArchetypeMetrics,
    CustomerDiscoveryHealth,
    DiscoveryMetrics,
    ExecutiveMetrics,
    FocusAreaMetrics,
    HypothesisCounts,
    RiskIndicator,
    RiskSeverity,
    RiskType,
    StrategicAlignmentScore,
)
from app.core.schemas_workspace import (
    BlockerStatus,
    ChangelogType,
    ConfidenceLevel,
    ConfidenceTrend,
    CustomerArchetype,
    DecisionStatus,
    EvidenceStrength,
    FocusArea,
    Hypothesis,
    HypothesisStatus,
    InterviewNote,
    ValidationStatus,
    WorkspaceSnapshot,
)

_CONFIDENCE_RANK = {ConfidenceLevel.LOW: 1, ConfidenceLevel.MEDIUM: 2, ConfidenceLevel.HIGH: 3}
_EVIDENCE_QUALITY = {EvidenceStrength.WEAK: 25, EvidenceStrength.MODERATE: 60, EvidenceStrength.STRONG: 100}
_SEVERITY_ORDER = {RiskSeverity.HIGH: 0, RiskSeverity.MEDIUM: 1, RiskSeverity.LOW: 2}

STALE_AFTER_DAYS = 14
RECENT_WINDOW_DAYS = 30
LOW_CONFIDENCE_THRESHOLD = 40
INSIGHT_LIMIT = 5


def _aware(value: datetime | None) -> datetime | None:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def days_between(start: datetime, end: datetime) -> int:
    """Whole days between two instants, rounded up."""
    seconds = abs((_aware(end) - _aware(start)).total_seconds())
    return math.ceil(seconds / 86400)


def _plural(count: int, singular: str, plural: str | None = None) -> str:
    return singular if count == 1 else (plural or f"{singular}s")


def _truncate(text: str, limit: int = 80) -> str:
    return text[:limit] + ("..." if len(text) > limit else "")


def validation_rate(validated: int, invalidated: int) -> int:
    """Validated share of resolved hypotheses; 0 when nothing is resolved yet."""
    return percentage(validated, validated + invalidated)


def count_hypotheses(hypotheses: list[Hypothesis]) -> HypothesisCounts:
    validated = sum(1 for h in hypotheses if h.status == HypothesisStatus.VALIDATED)
    invalidated = sum(1 for h in hypotheses if h.status == HypothesisStatus.INVALIDATED)
    return HypothesisCounts(
        total=len(hypotheses),
        validated=validated,
        invalidated=invalidated,
        active=sum(1 for h in hypotheses if h.status == HypothesisStatus.ACTIVE),
        validation_rate=validation_rate(validated, invalidated),
    )


def confidence_trend(focus_area: FocusArea) -> ConfidenceTrend:
    """Explicit trend if set, else derived from the last two history entries."""
    if focus_area.confidence_trend is not None:
        return focus_area.confidence_trend
    history = focus_area.confidence_history
    if len(history) < 2:
        return ConfidenceTrend.STABLE
    latest = _CONFIDENCE_RANK[history[-1].level]
    previous = _CONFIDENCE_RANK[history[-2].level]
    if latest > previous:
        return ConfidenceTrend.IMPROVING
    if latest < previous:
        return ConfidenceTrend.DECLINING
    return ConfidenceTrend.STABLE


def _note_date(note: InterviewNote) -> datetime | None:
    return _aware(note.date or note.created_at)


def _recent_notes(archetype: CustomerArchetype, since: datetime) -> list[InterviewNote]:
    return [n for n in archetype.interview_notes if (d := _note_date(n)) is not None and d >= since]


def _resolved_at(hypothesis: Hypothesis) -> datetime | None:
    if hypothesis.status == HypothesisStatus.VALIDATED:
        return _aware(hypothesis.validated_at or hypothesis.updated_at)
    if hypothesis.status == HypothesisStatus.INVALIDATED:
        return _aware(hypothesis.invalidated_at or hypothesis.updated_at)
    return None


# =============================================================================
# Per-entity metrics
# =============================================================================


def focus_area_metrics(snapshot: WorkspaceSnapshot, now: datetime) -> list[FocusAreaMetrics]:
    now = _aware(now)
    archetypes = {a.id: a for a in snapshot.archetypes}
    metrics: list[FocusAreaMetrics] = []

    for fa in snapshot.active_focus_areas:
        counts = count_hypotheses([h for h in snapshot.hypotheses if h.focus_area_id == fa.id])

        # Interviews are counted through linked archetypes; dangling ids contribute nothing
        interview_count = sum(
            len(archetypes[archetype_id].interview_notes)
            for archetype_id in dict.fromkeys(fa.target_archetype_ids)
            if archetype_id in archetypes
        )

        metrics.append(
            FocusAreaMetrics(
                id=fa.id,
                title=fa.title,
                status=fa.status,
                confidence_level=fa.confidence_level,
                confidence_trend=confidence_trend(fa),
                total_hypotheses=counts.total,
                validated_hypotheses=counts.validated,
                invalidated_hypotheses=counts.invalidated,
                active_hypotheses=counts.active,
                validation_rate=counts.validation_rate,
                customer_interview_count=interview_count,
                delivered_features=sum(1 for c in snapshot.changelog if c.focus_area_id == fa.id),
                open_blockers=sum(
                    1
                    for b in snapshot.blockers
                    if b.focus_area_id == fa.id and b.status == BlockerStatus.OPEN
                ),
                days_active=days_between(fa.created_at or now, now),
                last_activity_date=fa.updated_at,
                progress_percentage=fa.progress_percentage or 0,
            )
        )
    return metrics


def archetype_metrics(snapshot: WorkspaceSnapshot) -> list[ArchetypeMetrics]:
    metrics: list[ArchetypeMetrics] = []
    for archetype in snapshot.archetypes:
        counts = count_hypotheses([h for h in snapshot.hypotheses if h.archetype_id == archetype.id])
        metrics.append(
            ArchetypeMetrics(
                id=archetype.id,
                name=archetype.name,
                total_hypotheses=counts.total,
                validated_hypotheses=counts.validated,
                invalidated_hypotheses=counts.invalidated,
                active_hypotheses=counts.active,
                validation_rate=counts.validation_rate,
                interview_count=len(archetype.interview_notes),
                interview_target=interview_target(archetype),
                confidence_score=calculate_confidence_score(archetype),
                readiness_score=calculate_readiness_score(archetype),
            )
        )
    return metrics


# =============================================================================
# Dashboard aggregates
# =============================================================================


def discovery_metrics(snapshot: WorkspaceSnapshot, now: datetime) -> DiscoveryMetrics:
    now = _aware(now)
    one_week_ago = now - timedelta(days=7)
    two_weeks_ago = now - timedelta(days=14)
    hypotheses = snapshot.hypotheses

    created_this_week = sum(
        1 for h in hypotheses if (c := _aware(h.created_at)) is not None and c >= one_week_ago
    )

    def resolved_between(status: HypothesisStatus, start: datetime, end: datetime | None) -> int:
        total = 0
        for h in hypotheses:
            if h.status != status:
                continue
            resolved = _resolved_at(h)
            if resolved is None or resolved < start:
                continue
            if end is not None and resolved >= end:
                continue
            total += 1
        return total

    validated_this_week = resolved_between(HypothesisStatus.VALIDATED, one_week_ago, None)
    invalidated_this_week = resolved_between(HypothesisStatus.INVALIDATED, one_week_ago, None)
    resolved_this_week = validated_this_week + invalidated_this_week
    resolved_last_week = resolved_between(
        HypothesisStatus.VALIDATED, two_weeks_ago, one_week_ago
    ) + resolved_between(HypothesisStatus.INVALIDATED, two_weeks_ago, one_week_ago)

    if resolved_last_week > 0:
        week_over_week = round_half_up(
            (resolved_this_week - resolved_last_week) / resolved_last_week * 100
        )
    else:
        week_over_week = 100 if resolved_this_week > 0 else 0

    counts = count_hypotheses(hypotheses)

    with_evidence = [h for h in hypotheses if h.evidence]
    evidence_quality = 50
    if with_evidence:
        evidence_quality = round_half_up(
            sum(_EVIDENCE_QUALITY[h.overall_evidence_strength or EvidenceStrength.WEAK] for h in with_evidence)
            / len(with_evidence)
        )

    validated_with_dates = [
        h
        for h in hypotheses
        if h.status == HypothesisStatus.VALIDATED and h.created_at and (h.validated_at or h.updated_at)
    ]
    avg_time_to_validation = 0
    if validated_with_dates:
        total_days = sum(
            days_between(h.created_at, h.validated_at or h.updated_at) for h in validated_with_dates
        )
        avg_time_to_validation = round_half_up(total_days / len(validated_with_dates))

    return DiscoveryMetrics(
        hypotheses_created_this_week=created_this_week,
        hypotheses_resolved_this_week=resolved_this_week,
        validated_this_week=validated_this_week,
        invalidated_this_week=invalidated_this_week,
        avg_time_to_validation=avg_time_to_validation,
        validation_rate=counts.validation_rate,
        evidence_quality_score=evidence_quality,
        week_over_week_change=week_over_week,
    )


def customer_discovery_health(snapshot: WorkspaceSnapshot, now: datetime) -> CustomerDiscoveryHealth:
    now = _aware(now)
    archetypes = snapshot.active_archetypes
    thirty_days_ago = now - timedelta(days=RECENT_WINDOW_DAYS)

    total_interviews = sum(len(a.interview_notes) for a in archetypes)
    recent_interviews = sum(len(_recent_notes(a, thirty_days_ago)) for a in archetypes)

    all_hypotheses = [h for a in archetypes for h in a.all_hypotheses()]
    validated = sum(1 for h in all_hypotheses if h.status == ValidationStatus.VALIDATED)

    scores = {a.id: calculate_confidence_score(a) for a in archetypes}

    return CustomerDiscoveryHealth(
        total_archetypes=len(archetypes),
        archetypes_with_sufficient_interviews=sum(
            1 for a in archetypes if len(a.interview_notes) >= interview_target(a)
        ),
        avg_interviews_per_archetype=(
            round_one_decimal(total_interviews / len(archetypes)) if archetypes else 0.0
        ),
        # Interviews per week over the last 30 days
        interview_velocity=round_one_decimal(recent_interviews / 4),
        hypothesis_validation_rate=percentage(validated, len(all_hypotheses)),
        avg_confidence_score=(
            round_half_up(sum(scores.values()) / len(archetypes)) if archetypes else 0
        ),
        archetypes_at_risk=sum(
            1
            for a in archetypes
            if scores[a.id] < LOW_CONFIDENCE_THRESHOLD and not _recent_notes(a, thirty_days_ago)
        ),
    )


def strategic_alignment_score(snapshot: WorkspaceSnapshot) -> StrategicAlignmentScore:
    """Share of each population carrying its expected link.

    An empty population counts as fully aligned (100).
    """
    objectives = snapshot.active_objectives
    decided = [d for d in snapshot.decisions if d.status == DecisionStatus.DECIDED]
    focus_areas = snapshot.active_focus_areas
    hypotheses = snapshot.active_hypotheses
    features = [c for c in snapshot.changelog if c.type == ChangelogType.FEATURE]

    objectives_score = percentage(sum(1 for o in objectives if o.focus_area_ids), len(objectives), empty=100)
    decisions_score = percentage(sum(1 for d in decided if d.related_hypothesis_ids), len(decided), empty=100)
    focus_areas_score = percentage(
        sum(1 for fa in focus_areas if fa.target_archetype_ids), len(focus_areas), empty=100
    )
    hypotheses_score = percentage(sum(1 for h in hypotheses if h.archetype_id), len(hypotheses), empty=100)
    delivery_score = percentage(
        sum(1 for f in features if f.validated_hypothesis_ids), len(features), empty=100
    )

    overall = round_half_up(
        objectives_score * 0.25
        + decisions_score * 0.25
        + focus_areas_score * 0.2
        + hypotheses_score * 0.15
        + delivery_score * 0.15
    )

    return StrategicAlignmentScore(
        objectives_with_focus_areas=objectives_score,
        decisions_with_evidence=decisions_score,
        focus_areas_with_archetypes=focus_areas_score,
        hypotheses_with_archetypes=hypotheses_score,
        delivery_with_hypotheses=delivery_score,
        overall_score=overall,
    )


def risk_indicators(snapshot: WorkspaceSnapshot, now: datetime) -> list[RiskIndicator]:
    now = _aware(now)
    risks: list[RiskIndicator] = []

    open_blockers = [b for b in snapshot.blockers if b.status == BlockerStatus.OPEN]
    if open_blockers:
        n = len(open_blockers)
        risks.append(
            RiskIndicator(
                type=RiskType.BLOCKER,
                message=f"{n} open {_plural(n, 'blocker')} requiring attention",
                severity=RiskSeverity.HIGH if n >= 3 else RiskSeverity.MEDIUM,
                path="/delivery",
            )
        )

    stale_before = now - timedelta(days=STALE_AFTER_DAYS)
    stalled = [
        fa
        for fa in snapshot.active_focus_areas
        if (fa.updated_at is None or _aware(fa.updated_at) < stale_before)
        and (fa.progress_percentage or 0) < 25
    ]
    if stalled:
        n = len(stalled)
        risks.append(
            RiskIndicator(
                type=RiskType.STALLED_FOCUS_AREA,
                message=f"{n} {_plural(n, 'focus area')} with no recent progress",
                severity=RiskSeverity.MEDIUM,
                path="/focus-areas",
            )
        )

    low_evidence = [
        h
        for h in snapshot.hypotheses
        if h.status == HypothesisStatus.VALIDATED
        and (h.overall_evidence_strength == EvidenceStrength.WEAK or not h.evidence)
    ]
    if len(low_evidence) >= 3:
        risks.append(
            RiskIndicator(
                type=RiskType.LOW_EVIDENCE,
                message=f"{len(low_evidence)} validated hypotheses lack strong evidence",
                severity=RiskSeverity.MEDIUM,
                path="/discovery",
            )
        )

    orphaned = [o for o in snapshot.active_objectives if not o.focus_area_ids]
    if orphaned:
        n = len(orphaned)
        risks.append(
            RiskIndicator(
                type=RiskType.ORPHANED_OKR,
                message=f"{n} {_plural(n, 'objective')} not aligned to focus areas",
                severity=RiskSeverity.LOW,
                path="/objectives",
            )
        )

    # sorted() is stable, so equal severities keep rule order
    return sorted(risks, key=lambda r: _SEVERITY_ORDER[r.severity])


def top_insights(snapshot: WorkspaceSnapshot, now: datetime) -> list[str]:
    """Recent learnings: invalidated beliefs first, then interview surprises."""
    now = _aware(now)
    since = now - timedelta(days=RECENT_WINDOW_DAYS)
    insights: list[str] = []

    recent_invalidated = [
        h
        for h in snapshot.hypotheses
        if h.status == HypothesisStatus.INVALIDATED
        and (resolved := _resolved_at(h)) is not None
        and resolved >= since
    ]
    for h in recent_invalidated[:3]:
        insights.append(f'Invalidated: "{_truncate(h.belief)}"')

    for archetype in snapshot.active_archetypes:
        for note in _recent_notes(archetype, since):
            for surprise in note.surprises[:1]:
                insights.append(f"From {archetype.name}: {_truncate(surprise)}")

    return insights[:INSIGHT_LIMIT]


def executive_metrics(snapshot: WorkspaceSnapshot, now: datetime) -> ExecutiveMetrics:
    return ExecutiveMetrics(
        focus_area_metrics=focus_area_metrics(snapshot, now),
        discovery_metrics=discovery_metrics(snapshot, now),
        customer_discovery_health=customer_discovery_health(snapshot, now),
        strategic_alignment_score=strategic_alignment_score(snapshot),
        top_insights=top_insights(snapshot, now),
        risk_indicators=risk_indicators(snapshot, now),
    )
