# app/database.py

from functools import lru_cache
from typing import Any, Optional

from supabase import create_client, Client
from app.config import get_settings


# ============================================
# Clients
# ============================================

@lru_cache()
def get_supabase_admin() -> Client:
    """Admin client (bypasses RLS - use carefully)."""
    settings = get_settings()
    if not settings.supabase_url or not settings.supabase_service_role_key:
        raise RuntimeError("Supabase is not configured")
    return create_client(settings.supabase_url, settings.supabase_service_role_key)


# ============================================
# Matching rules
# ============================================

def get_matching_rules(user_id: str) -> Optional[Any]:
    """Get the stored rule document for a user, or None if there is none."""
    response = (
        get_supabase_admin()
        .table("matching_rules")
        .select("rules")
        .eq("user_id", user_id)
        .execute()
    )
    return response.data[0]["rules"] if response.data else None


def save_matching_rules(user_id: str, rules: list[dict]) -> None:
    """Save or replace the rule document for a user."""
    get_supabase_admin().table("matching_rules").upsert(
        {"user_id": user_id, "rules": rules},
        on_conflict="user_id",
    ).execute()


def delete_matching_rules(user_id: str) -> None:
    """Remove a user's rule document so defaults apply again."""
    get_supabase_admin().table("matching_rules").delete().eq("user_id", user_id).execute()
