"""Database operations for the vision table.

The workspace has a single vision row; the most recently updated one wins if
more than one exists.
"""

from app.core.schemas_workspace import Vision
from app.db.supabase_client import get_supabase


def get_vision() -> Vision | None:
    supabase = get_supabase()
    response = (
        supabase.table("vision")
        .select("*")
        .order("updated_at", desc=True)
        .limit(1)
        .execute()
    )
    if not response.data:
        return None
    return Vision(**response.data[0])
