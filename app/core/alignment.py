"""Alignment warnings for the workspace dashboard.

Five independent rules, evaluated in a fixed order. Each yields at most one
warning with a fixed severity, so the output is a deterministic function of
the snapshot.
"""

from app.core.schemas_metrics import AlignmentWarning, Severity
from app.core.schemas_workspace import WorkspaceSnapshot


def _noun(count: int, singular: str, plural: str) -> str:
    return singular if count == 1 else plural


def alignment_warnings(snapshot: WorkspaceSnapshot) -> list[AlignmentWarning]:
    warnings: list[AlignmentWarning] = []

    n = sum(1 for fa in snapshot.active_focus_areas if not fa.target_archetype_ids)
    if n:
        warnings.append(
            AlignmentWarning(
                severity=Severity.WARNING,
                message=f"{n} {_noun(n, 'focus area', 'focus areas')} without target customers",
                target_path="/focus-areas",
            )
        )

    n = sum(1 for a in snapshot.active_archetypes if not a.related_focus_area_ids)
    if n:
        warnings.append(
            AlignmentWarning(
                severity=Severity.WARNING,
                message=f"{n} {_noun(n, 'archetype', 'archetypes')} not linked to problems",
                target_path="/customer-archetypes",
            )
        )

    n = sum(1 for h in snapshot.active_hypotheses if not h.archetype_id)
    if n:
        warnings.append(
            AlignmentWarning(
                severity=Severity.INFO,
                message=f"{n} {_noun(n, 'hypothesis', 'hypotheses')} not linked to customers",
                target_path="/discovery",
            )
        )

    n = sum(1 for o in snapshot.active_objectives if not o.focus_area_ids)
    if n:
        warnings.append(
            AlignmentWarning(
                severity=Severity.WARNING,
                message=f"{n} {_noun(n, 'objective', 'objectives')} not aligned to focus areas",
                target_path="/objectives",
            )
        )

    n = sum(1 for d in snapshot.proposed_decisions if not d.related_hypothesis_ids)
    if n:
        warnings.append(
            AlignmentWarning(
                severity=Severity.INFO,
                message=f"{n} proposed {_noun(n, 'decision', 'decisions')} without linked evidence",
                target_path="/decisions",
            )
        )

    return warnings
