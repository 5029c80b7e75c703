"""Request and result schemas for the generation proxy."""

from typing import Any

from pydantic import BaseModel, Field


class GenerationRequest(BaseModel):
    """Normalized one-shot generation request.

    Length bounds are enforced by GenerationProxy so that violations map to
    InvalidRequestError rather than a schema error.
    """

    prompt: str = Field(description="User prompt text")
    tier: str | None = Field(
        default=None,
        description="Model/parameter profile name. Unknown or missing values use the default tier.",
    )


class GenerationResult(BaseModel):
    """Stable output contract regardless of provider response shape.

    ``text`` is empty when no known response shape matched; callers treat
    that as "no usable content", not as an error.
    """

    text: str = ""
    usage: dict[str, Any] | None = None
    model: str | None = None
    tier: str | None = None
