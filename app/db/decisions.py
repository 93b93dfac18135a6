"""Database operations for decisions table."""

from typing import Any

from app.core.schemas_workspace import Decision
from app.db.supabase_client import get_supabase


def insert_decision(data: dict[str, Any]) -> Decision:
    """Insert a decision row and return the stored record."""
    supabase = get_supabase()
    response = supabase.table("decisions").insert(data).execute()
    if not response.data:
        raise RuntimeError("Decision insert returned no row")
    return Decision(**response.data[0])
