"""Supabase database connection management."""

from functools import lru_cache

from supabase import Client, create_client

from src.roftx.config import settings


@lru_cache(maxsize=1)
def get_supabase_admin_client() -> Client:
    """
    Get Supabase admin client with service role key (singleton pattern).

    The users table is written only by this server after it has verified the
    caller's identity, so the service role client (which bypasses RLS) is used.

    Returns:
        Configured Supabase client with service role key

    Example:
        >>> client = get_supabase_admin_client()
        >>> response = client.table("users").select("*").eq("google_id", sub).execute()
    """
    return create_client(settings.supabase_url, settings.supabase_service_role_key)
