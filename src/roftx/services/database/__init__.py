"""Database connection, models, and the user store."""

from src.roftx.services.database.connection import get_supabase_admin_client
from src.roftx.services.database.exceptions import PersistenceFailure
from src.roftx.services.database.models import UserProfile
from src.roftx.services.database.user_store import UserStore, get_user_store

__all__ = [
    "get_supabase_admin_client",
    "PersistenceFailure",
    "UserProfile",
    "UserStore",
    "get_user_store",
]
