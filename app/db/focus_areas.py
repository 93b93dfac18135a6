"""Database operations for focus_areas table."""

from app.core.schemas_workspace import FocusArea, FocusAreaStatus
from app.db.supabase_client import get_supabase


def get_focus_area(focus_area_id: str) -> FocusArea | None:
    supabase = get_supabase()
    response = supabase.table("focus_areas").select("*").eq("id", focus_area_id).limit(1).execute()
    if not response.data:
        return None
    return FocusArea(**response.data[0])


def list_focus_areas(status: FocusAreaStatus | None = None) -> list[FocusArea]:
    """List focus areas, optionally filtered by status."""
    supabase = get_supabase()
    query = supabase.table("focus_areas").select("*")
    if status:
        query = query.eq("status", status.value)
    response = query.order("created_at").execute()
    return [FocusArea(**row) for row in response.data or []]
