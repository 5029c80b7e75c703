"""API handlers for text generation."""

import logging
from typing import Any

from fastapi import APIRouter, Depends, Request

from src.roftx.features.generation.models import LegacyGeminiRequest, to_legacy_envelope
from src.roftx.services.llm.dependencies import get_active_generation_proxy
from src.roftx.services.llm.proxy import GenerationProxy
from src.roftx.services.llm.schemas import GenerationRequest, GenerationResult
from src.roftx.services.rate_limiter import llm_heavy_rate_limit

logger = logging.getLogger(__name__)

router = APIRouter(tags=["generation"])


@router.post("/generate", response_model=GenerationResult)
@llm_heavy_rate_limit
async def generate(
    request: Request,
    payload: GenerationRequest,
    proxy: GenerationProxy = Depends(get_active_generation_proxy),
) -> GenerationResult:
    """
    Generate text for one prompt.

    Unknown tiers are served by the default tier. An empty ``text`` means the
    provider answered but returned no usable content.

    Raises:
        GenerationError: Mapped to 400/429/502/503 by the app
    """
    return await proxy.generate(payload)


@router.post("/gemini", include_in_schema=False)
@llm_heavy_rate_limit
async def generate_legacy(
    request: Request,
    payload: LegacyGeminiRequest,
    proxy: GenerationProxy = Depends(get_active_generation_proxy),
) -> dict[str, Any]:
    """
    Gemini-native alias for clients released before ``/generate`` existed.

    Takes a ``generateContent`` body and answers in the Gemini response shape,
    whichever provider actually served the request.
    """
    logger.info("Legacy /gemini request", extra={"contents": len(payload.contents)})
    result = await proxy.generate(payload.to_generation_request())
    return to_legacy_envelope(result)
