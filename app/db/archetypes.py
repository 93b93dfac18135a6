"""Database operations for customer_archetypes table."""

from typing import Any

from app.core.schemas_workspace import ArchetypeStatus, CustomerArchetype
from app.db.supabase_client import get_supabase

TABLE = "customer_archetypes"


def get_archetype(archetype_id: str) -> CustomerArchetype | None:
    supabase = get_supabase()
    response = supabase.table(TABLE).select("*").eq("id", archetype_id).limit(1).execute()
    if not response.data:
        return None
    return CustomerArchetype(**response.data[0])


def list_archetypes(status: ArchetypeStatus | None = None) -> list[CustomerArchetype]:
    supabase = get_supabase()
    query = supabase.table(TABLE).select("*")
    if status:
        query = query.eq("status", status.value)
    response = query.order("created_at").execute()
    return [CustomerArchetype(**row) for row in response.data or []]


def update_archetype(archetype_id: str, data: dict[str, Any]) -> CustomerArchetype | None:
    """Write changed fields (whole-value replacement, last writer wins)."""
    supabase = get_supabase()
    response = supabase.table(TABLE).update(data).eq("id", archetype_id).execute()
    if not response.data:
        return None
    return CustomerArchetype(**response.data[0])
