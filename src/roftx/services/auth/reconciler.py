"""Verify a Google ID token and reconcile the matching user row."""

import logging
from collections.abc import Callable
from datetime import datetime, timezone

from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from src.roftx.services.auth.models import VerifiedClaims
from src.roftx.services.auth.token_verifier import TokenVerifier
from src.roftx.services.database.exceptions import PersistenceFailure
from src.roftx.services.database.models import UserProfile
from src.roftx.services.database.user_store import UserStore

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class IdentityReconciler:
    """
    Find-or-create, else refresh, the user behind an identity assertion.

    Composes TokenVerifier with UserStore. The store write is one atomic
    upsert keyed on the subject, retried once on PersistenceFailure.
    Verification failures propagate unchanged and never touch the store.

    Example:
        >>> reconciler = IdentityReconciler(verifier, UserStore())
        >>> profile = await reconciler.reconcile(id_token)
        >>> profile.subject
    """

    def __init__(
        self,
        verifier: TokenVerifier,
        store: UserStore,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.verifier = verifier
        self.store = store
        self.clock = clock

    async def reconcile(self, assertion: str) -> UserProfile:
        """
        Verify the assertion and upsert the user row.

        Args:
            assertion: Raw Google ID token

        Returns:
            The stored profile after the create or refresh

        Raises:
            AuthenticationError: Any verification failure (see TokenVerifier.verify)
            PersistenceFailure: If the store failed on both attempts
        """
        claims = await self.verifier.verify(assertion)
        login_at = self.clock()

        profile = await self._upsert(claims, login_at)

        logger.info(
            f"User {'created' if profile.created else 'refreshed'}: {profile.subject}",
            extra={"subject": profile.subject, "created": profile.created},
        )
        return profile

    @retry(
        stop=stop_after_attempt(2),
        wait=wait_fixed(0.2),
        retry=retry_if_exception_type(PersistenceFailure),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    async def _upsert(self, claims: VerifiedClaims, login_at: datetime) -> UserProfile:
        return self.store.upsert(claims, login_at)
