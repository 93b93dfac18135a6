"""Materialize the whole workspace for Engine computations."""

from app.core.logging import get_logger
from app.core.schemas_workspace import WorkspaceSnapshot
from app.db.supabase_client import get_supabase

logger = get_logger(__name__)

# Snapshot field -> table
SNAPSHOT_TABLES: dict[str, str] = {
    "focus_areas": "focus_areas",
    "archetypes": "customer_archetypes",
    "hypotheses": "hypotheses",
    "ideas": "ideas",
    "decisions": "decisions",
    "objectives": "objectives",
    "journey_maps": "journey_maps",
    "documents": "documents",
    "changelog": "changelog",
    "blockers": "blockers",
}


def load_workspace_snapshot() -> WorkspaceSnapshot:
    """Load every entity collection.

    Rows are ordered by creation time so that derived views are stable across
    calls.
    """
    supabase = get_supabase()
    collections: dict[str, list[dict]] = {}
    for field, table in SNAPSHOT_TABLES.items():
        response = supabase.table(table).select("*").order("created_at").execute()
        collections[field] = response.data or []

    logger.debug(
        "Loaded workspace snapshot: "
        + ", ".join(f"{field}={len(rows)}" for field, rows in collections.items())
    )
    return WorkspaceSnapshot(**collections)
