"""Database operations for ideas table."""

from app.core.schemas_workspace import Idea
from app.db.supabase_client import get_supabase


def get_idea(idea_id: str) -> Idea | None:
    supabase = get_supabase()
    response = supabase.table("ideas").select("*").eq("id", idea_id).limit(1).execute()
    if not response.data:
        return None
    return Idea(**response.data[0])
