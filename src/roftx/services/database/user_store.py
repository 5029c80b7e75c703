"""Supabase-backed store for user profiles keyed by Google subject."""

import logging
from datetime import datetime
from typing import Any

from supabase import Client

from src.roftx.config import settings
from src.roftx.services.auth.models import VerifiedClaims
from src.roftx.services.database.connection import get_supabase_admin_client
from src.roftx.services.database.exceptions import PersistenceFailure
from src.roftx.services.database.models import UserProfile

logger = logging.getLogger(__name__)

# Postgres function defined in migrations/001_users.sql
RECONCILE_FUNCTION = "reconcile_user_login"


class UserStore:
    """
    Reads and writes user profiles.

    ``upsert`` is a single round trip to a Postgres function that performs
    ``INSERT ... ON CONFLICT (google_id) DO UPDATE``, so concurrent logins for
    the same subject converge on one row without any in-process locking.
    A plain PostgREST upsert would overwrite every supplied column, which is
    why the conflict branch lives in SQL.
    """

    def __init__(self, client: Client | None = None, table: str | None = None) -> None:
        """
        Initialize the store.

        Args:
            client: Supabase client instance (uses the admin client if None)
            table: Users table name (defaults to settings.users_table)
        """
        self.client = client or get_supabase_admin_client()
        self.table = table or settings.users_table

    def find_by_subject(self, subject: str) -> UserProfile | None:
        """
        Fetch a profile by Google subject.

        Args:
            subject: Google 'sub' claim

        Returns:
            UserProfile or None if the subject has never signed in

        Raises:
            PersistenceFailure: If the query fails
        """
        try:
            response = (
                self.client.table(self.table).select("*").eq("google_id", subject).limit(1).execute()
            )
        except Exception as e:
            logger.error(
                f"Failed to fetch user {subject}: {e}",
                extra={"error_type": "user_lookup_failed"},
            )
            raise PersistenceFailure(f"User lookup failed: {e}") from e

        return UserProfile.model_validate(response.data[0]) if response.data else None

    def upsert(self, claims: VerifiedClaims, now: datetime) -> UserProfile:
        """
        Create the profile or refresh its login fields atomically.

        New subjects get every claim field plus ``created_at = last_login = now``.
        Existing subjects only get ``last_login``, ``full_name`` and
        ``picture_url`` updated.

        Args:
            claims: Verified identity claims
            now: Login timestamp to record

        Returns:
            The resulting row as stored

        Raises:
            PersistenceFailure: If the statement fails or returns no row
        """
        params = self._reconcile_params(claims, now)
        try:
            response = self.client.rpc(RECONCILE_FUNCTION, params).execute()
        except Exception as e:
            logger.error(
                f"Failed to reconcile user {claims.subject}: {e}",
                extra={"error_type": "user_upsert_failed"},
            )
            raise PersistenceFailure(f"User upsert failed: {e}") from e

        row = self._first_row(response.data)
        if row is None:
            raise PersistenceFailure(f"User upsert returned no row for {claims.subject}")

        return UserProfile.model_validate(row)

    @staticmethod
    def _reconcile_params(claims: VerifiedClaims, now: datetime) -> dict[str, Any]:
        return {
            "p_google_id": claims.subject,
            "p_email": claims.email,
            "p_full_name": claims.full_name,
            "p_given_name": claims.given_name,
            "p_family_name": claims.family_name,
            "p_picture_url": claims.picture_url,
            "p_locale": claims.locale,
            "p_login_at": now.isoformat(),
        }

    @staticmethod
    def _first_row(data: Any) -> dict[str, Any] | None:
        # RPC returning SETOF gives a list, a composite return gives a dict
        if isinstance(data, list):
            return data[0] if data else None
        if isinstance(data, dict):
            return data
        return None


def get_user_store(client: Client | None = None) -> UserStore:
    """Get a UserStore bound to the admin client (or the given client)."""
    return UserStore(client)
