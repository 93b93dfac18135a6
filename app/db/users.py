"""Database operations for user profiles."""

from app.core.schemas_workspace import UserProfile
from app.db.supabase_client import get_supabase


def get_user_profile(user_id: str) -> UserProfile | None:
    """Get the profile row for an authenticated user, or None if absent."""
    supabase = get_supabase()
    response = supabase.table("users").select("*").eq("id", user_id).limit(1).execute()
    if not response.data:
        return None
    return UserProfile(**response.data[0])
