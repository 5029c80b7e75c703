"""FastAPI dependency for the user store."""

from src.roftx.services.database.user_store import UserStore

# Global store instance (initialized in main.py startup)
_user_store: UserStore | None = None


def set_user_store(store: UserStore | None) -> None:
    """Set the global UserStore. Called during application startup."""
    global _user_store
    _user_store = store


def get_active_user_store() -> UserStore:
    """
    Get the global UserStore.

    Raises:
        RuntimeError: If the store was not initialized
    """
    if _user_store is None:
        raise RuntimeError(
            "User store not initialized. Ensure application startup calls set_user_store()."
        )
    return _user_store
