"""Database operations for hypotheses table."""

from typing import Any

from app.core.schemas_workspace import Hypothesis, HypothesisStatus
from app.db.supabase_client import get_supabase


def get_hypothesis(hypothesis_id: str) -> Hypothesis | None:
    supabase = get_supabase()
    response = supabase.table("hypotheses").select("*").eq("id", hypothesis_id).limit(1).execute()
    if not response.data:
        return None
    return Hypothesis(**response.data[0])


def list_hypotheses(
    focus_area_id: str | None = None,
    archetype_id: str | None = None,
    status: HypothesisStatus | None = None,
) -> list[Hypothesis]:
    """List hypotheses with optional filtering."""
    supabase = get_supabase()
    query = supabase.table("hypotheses").select("*")
    if focus_area_id:
        query = query.eq("focus_area_id", focus_area_id)
    if archetype_id:
        query = query.eq("archetype_id", archetype_id)
    if status:
        query = query.eq("status", status.value)
    response = query.order("created_at").execute()
    return [Hypothesis(**row) for row in response.data or []]


def update_hypothesis(hypothesis_id: str, data: dict[str, Any]) -> Hypothesis | None:
    supabase = get_supabase()
    response = supabase.table("hypotheses").update(data).eq("id", hypothesis_id).execute()
    if not response.data:
        return None
    return Hypothesis(**response.data[0])
