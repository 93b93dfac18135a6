"""Customer archetype write endpoints.

Every write recomputes confidence, readiness and BS flags from the merged
record; stored scores are a cache and never taken from the caller.
"""

import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Body, Depends

from app.core.archetype_scoring import apply_archetype_update, recompute_archetype_scores
from app.core.auth_middleware import AuthContext, require_editor
from app.core.errors import Internal, InvalidArgument
from app.core.logging import get_logger, log_with_context
from app.core.schemas_discovery import ArchetypeUpdateResponse
from app.core.schemas_workspace import CustomerArchetype
from app.db.archetypes import get_archetype, update_archetype

logger = get_logger(__name__)

router = APIRouter(prefix="/archetypes")


def _load(archetype_id: str) -> CustomerArchetype:
    try:
        archetype = get_archetype(archetype_id)
    except Exception as e:
        logger.error(f"Failed to load archetype {archetype_id}: {e}")
        raise Internal(f"Failed to load archetype: {e}") from e
    if archetype is None:
        raise InvalidArgument("archetype_id", "Archetype not found")
    return archetype


def _save(archetype_id: str, payload: dict[str, Any]) -> None:
    row = {**payload, "updated_at": datetime.now(timezone.utc).isoformat()}
    try:
        update_archetype(archetype_id, row)
    except Exception as e:
        logger.error(f"Failed to update archetype {archetype_id}: {e}")
        raise Internal(f"Failed to update archetype: {e}") from e


@router.patch("/{archetype_id}", response_model=ArchetypeUpdateResponse)
async def patch_archetype(
    archetype_id: str,
    changes: dict[str, Any] = Body(...),
    auth: AuthContext = Depends(require_editor),
) -> ArchetypeUpdateResponse:
    """Apply a partial update and persist it with recomputed scores."""
    archetype = _load(archetype_id)
    _, payload = apply_archetype_update(archetype, changes)
    _save(archetype_id, payload)

    log_with_context(
        logger,
        logging.INFO,
        f"Updated archetype {archetype_id}",
        operation="patch_archetype",
        fields=",".join(sorted(payload)),
        confidence_score=payload["confidence_score"],
    )
    return ArchetypeUpdateResponse.from_payload(archetype_id, payload)


@router.post("/{archetype_id}/recompute-scores", response_model=ArchetypeUpdateResponse)
async def recompute_scores(
    archetype_id: str,
    auth: AuthContext = Depends(require_editor),
) -> ArchetypeUpdateResponse:
    """Refresh the cached scores without changing anything else."""
    archetype = _load(archetype_id)
    payload = recompute_archetype_scores(archetype)
    _save(archetype_id, payload)
    return ArchetypeUpdateResponse.from_payload(archetype_id, payload)
