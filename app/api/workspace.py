"""Workspace API endpoints: cross-links, alignment warnings and dashboard metrics.

All of these are read-only computations over a freshly loaded workspace
snapshot. Viewers (including leadership) may call them.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from app.core.alignment import alignment_warnings
from app.core.auth_middleware import AuthContext, require_viewer
from app.core.errors import Internal
from app.core.logging import get_logger
from app.core.relationships import connection_counts, get_related_items
from app.core.schemas_metrics import (
    AlignmentWarning,
    ArchetypeMetrics,
    ConnectionCounts,
    ExecutiveMetrics,
    FocusAreaMetrics,
    RelatedItem,
)
from app.core.schemas_workspace import WorkspaceSnapshot
from app.core.workspace_metrics import archetype_metrics, executive_metrics, focus_area_metrics
from app.db.workspace import load_workspace_snapshot

logger = get_logger(__name__)

router = APIRouter(prefix="/workspace")


def _snapshot() -> WorkspaceSnapshot:
    try:
        return load_workspace_snapshot()
    except Exception as e:
        logger.error(f"Failed to load workspace snapshot: {e}", exc_info=True)
        raise Internal(f"Failed to load workspace: {e}") from e


@router.get("/related/{kind}/{entity_id}", response_model=list[RelatedItem])
async def related_items(
    kind: str,
    entity_id: str,
    auth: AuthContext = Depends(require_viewer),
) -> list[RelatedItem]:
    """Entities linked to the given one, forward links first."""
    return get_related_items(_snapshot(), kind, entity_id)


@router.get("/alignment-warnings", response_model=list[AlignmentWarning])
async def get_alignment_warnings(auth: AuthContext = Depends(require_viewer)) -> list[AlignmentWarning]:
    return alignment_warnings(_snapshot())


@router.get("/connection-counts", response_model=ConnectionCounts)
async def get_connection_counts(auth: AuthContext = Depends(require_viewer)) -> ConnectionCounts:
    return connection_counts(_snapshot())


@router.get("/metrics", response_model=ExecutiveMetrics)
async def get_executive_metrics(auth: AuthContext = Depends(require_viewer)) -> ExecutiveMetrics:
    """Discovery, alignment and risk summary for the executive dashboard."""
    return executive_metrics(_snapshot(), datetime.now(timezone.utc))


@router.get("/focus-areas/metrics", response_model=list[FocusAreaMetrics])
async def get_focus_area_metrics(auth: AuthContext = Depends(require_viewer)) -> list[FocusAreaMetrics]:
    return focus_area_metrics(_snapshot(), datetime.now(timezone.utc))


@router.get("/archetypes/metrics", response_model=list[ArchetypeMetrics])
async def get_archetype_metrics(auth: AuthContext = Depends(require_viewer)) -> list[ArchetypeMetrics]:
    return archetype_metrics(_snapshot())
