"""API handlers for Google sign-in."""

import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from src.roftx.features.auth.models import GoogleLoginRequest, LoginResponse
from src.roftx.services import PostHogService
from src.roftx.services.auth.dependencies import get_identity_reconciler, get_verified_claims
from src.roftx.services.auth.exceptions import AuthenticationError
from src.roftx.services.auth.models import VerifiedClaims
from src.roftx.services.auth.reconciler import IdentityReconciler
from src.roftx.services.database.dependencies import get_active_user_store
from src.roftx.services.database.user_store import UserStore
from src.roftx.services.rate_limiter import auth_rate_limit, public_rate_limit

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/google", response_model=LoginResponse)
@auth_rate_limit
async def google_login(
    request: Request,
    payload: GoogleLoginRequest | None = None,
    reconciler: IdentityReconciler = Depends(get_identity_reconciler),
) -> LoginResponse | JSONResponse:
    """
    Sign in with a Google ID token.

    Verifies the token, then creates the user on first sign-in or refreshes
    ``last_login``, ``full_name`` and ``picture_url`` on later ones.

    Returns:
        Login message and the stored user row

    Raises:
        AuthenticationError: 401 (504 on verification timeout)
        PersistenceFailure: 503 if the user row could not be written
    """
    token = payload.token if payload else None
    if not token:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "No token provided.", "code": "invalid_request"},
        )

    posthog_service = PostHogService()
    try:
        profile = await reconciler.reconcile(token)
    except AuthenticationError as e:
        posthog_service.capture(
            distinct_id="anonymous",
            event="authentication_failed",
            properties={"error": e.code},
        )
        raise

    posthog_service.capture(
        distinct_id=profile.subject,
        event="user_created" if profile.created else "user_login",
        properties={"locale": profile.locale},
    )
    posthog_service.identify(
        profile.subject, {"email": profile.email, "name": profile.full_name}
    )

    return LoginResponse(
        message="Login successful!",
        user=profile.model_dump(mode="json", by_alias=True),
    )


@router.get("/me", response_model=LoginResponse)
@public_rate_limit
async def get_me(
    request: Request,
    claims: VerifiedClaims = Depends(get_verified_claims),
    store: UserStore = Depends(get_active_user_store),
) -> LoginResponse | JSONResponse:
    """
    Return the stored profile for the Bearer ID token without updating it.

    Returns:
        The stored user row, or 404 if the subject never signed in
    """
    profile = store.find_by_subject(claims.subject)
    if profile is None:
        logger.warning(f"Profile not found for subject {claims.subject}")
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"error": "User not found. Please sign in.", "code": "user_not_found"},
        )

    return LoginResponse(message="OK", user=profile.model_dump(mode="json", by_alias=True))
