"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import BaseModel
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from src.roftx.config import settings
from src.roftx.features.auth import router as auth_router
from src.roftx.features.generation import router as generation_router
from src.roftx.services.auth import IdentityReconciler, JWKSCache, TokenVerifier
from src.roftx.services.auth.dependencies import set_identity_reconciler, set_token_verifier
from src.roftx.services.auth.exceptions import AuthenticationError
from src.roftx.services.database import PersistenceFailure, get_user_store
from src.roftx.services.database.dependencies import set_user_store
from src.roftx.services.llm import GenerationError, RateLimitedError, get_generation_proxy
from src.roftx.services.llm.dependencies import set_generation_proxy
from src.roftx.services.rate_limiter import limiter

logger = logging.getLogger(__name__)

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "no-referrer",
    "Strict-Transport-Security": "max-age=63072000; includeSubDomains",
    "Cross-Origin-Opener-Policy": "same-origin-allow-popups",
}


def validate_startup_settings() -> None:
    """
    Refuse to start without the credentials every request depends on.

    Raises:
        RuntimeError: If the Google client id or provider API key is missing
    """
    missing = []
    if not settings.google_client_id:
        missing.append("GOOGLE_CLIENT_ID")
    if not settings.provider_api_key:
        missing.append("LLM_API_KEY (or GEMINI_API_KEY)")
    if missing:
        raise RuntimeError(f"Missing required configuration: {', '.join(missing)}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle (startup and shutdown)."""
    validate_startup_settings()

    logger.info("Initializing identity verification")
    jwks_cache = JWKSCache(jwks_url=settings.google_jwks_url, cache_ttl=settings.jwks_cache_ttl_seconds)
    try:
        await jwks_cache.refresh_keys()
    except Exception as e:
        logger.error(
            f"Failed to initialize JWKS cache: {e}",
            exc_info=True,
            extra={"error_type": "jwks_init_failed"},
        )
        await jwks_cache.close()
        raise

    verifier = TokenVerifier(
        jwks_cache=jwks_cache,
        audience=settings.google_client_id,
        issuers=settings.issuer_list,
        leeway=settings.jwt_leeway_seconds,
        timeout=settings.verification_timeout_seconds,
    )
    user_store = get_user_store()
    set_token_verifier(verifier)
    set_user_store(user_store)
    set_identity_reconciler(IdentityReconciler(verifier, user_store))

    proxy = get_generation_proxy(settings)
    set_generation_proxy(proxy)

    logger.info(
        "Gateway initialized",
        extra={
            "jwks_url": settings.google_jwks_url,
            "llm_provider": settings.llm_provider,
            "default_tier": settings.llm_default_tier,
        },
    )

    yield

    set_identity_reconciler(None)
    set_token_verifier(None)
    set_user_store(None)
    set_generation_proxy(None)
    for resource in (jwks_cache, proxy):
        try:
            await resource.close()
        except Exception as e:
            logger.error(f"Error during shutdown cleanup: {e}", exc_info=True)


app = FastAPI(
    title="RoftX Gateway",
    description="Google sign-in and LLM generation proxy for the RoftX frontend",
    version="0.1.0",
    debug=settings.debug,
    lifespan=lifespan,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

origins = [origin.strip() for origin in settings.cors_origins.split(",") if origin.strip()]
logger.info(f"Origins : {origins}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type", "Authorization"],
)


@app.middleware("http")
async def limit_body_and_add_security_headers(request: Request, call_next):
    """Reject oversized bodies by Content-Length and add security headers."""
    content_length = request.headers.get("content-length")
    if content_length is not None:
        try:
            too_large = int(content_length) > settings.max_body_bytes
        except ValueError:
            return JSONResponse(
                status_code=400,
                content={"error": "Invalid Content-Length header.", "code": "invalid_request"},
            )
        if too_large:
            return JSONResponse(
                status_code=413,
                content={"error": "Request body too large.", "code": "payload_too_large"},
            )

    response = await call_next(request)
    for header, value in SECURITY_HEADERS.items():
        response.headers.setdefault(header, value)
    return response


@app.exception_handler(AuthenticationError)
async def authentication_error_handler(request: Request, exc: AuthenticationError) -> JSONResponse:
    logger.warning(
        f"Authentication failed: {exc}",
        extra={"error_type": exc.code, "path": request.url.path},
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.public_message, "code": exc.code},
    )


@app.exception_handler(PersistenceFailure)
async def persistence_failure_handler(request: Request, exc: PersistenceFailure) -> JSONResponse:
    logger.error(f"Persistence failure: {exc}", extra={"error_type": exc.code})
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.public_message, "code": exc.code},
    )


@app.exception_handler(GenerationError)
async def generation_error_handler(request: Request, exc: GenerationError) -> JSONResponse:
    logger.warning(f"Generation failed: {exc}", extra={"error_type": exc.code})
    headers = {}
    if isinstance(exc, RateLimitedError) and exc.retry_after:
        headers["Retry-After"] = exc.retry_after
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.public_message, "code": exc.code},
        headers=headers,
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled error on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"error": "An internal server error occurred.", "code": "internal_error"},
    )


app.include_router(auth_router, prefix=settings.api_prefix)
app.include_router(generation_router, prefix=settings.api_prefix)


class HealthCheckResponse(BaseModel):
    """Health check response."""

    status: str


@app.get("/", response_class=PlainTextResponse)
async def root() -> str:
    """Confirm the server is running."""
    return "Welcome to the RoftX backend API! The server is running correctly."


@app.get("/health", response_model=HealthCheckResponse)
async def health_check() -> HealthCheckResponse:
    """Health check endpoint."""
    return HealthCheckResponse(status="healthy")
