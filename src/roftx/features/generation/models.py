"""Request and response models for the legacy Gemini-native endpoint."""

from typing import Any

from pydantic import BaseModel, Field

from src.roftx.services.llm.schemas import GenerationRequest, GenerationResult


class LegacyPart(BaseModel):
    text: str | None = None


class LegacyContent(BaseModel):
    role: str | None = None
    parts: list[LegacyPart] = Field(default_factory=list)


class LegacyGeminiRequest(BaseModel):
    """Gemini ``generateContent`` body as sent by clients of ``/api/gemini``.

    Only the user text is read. ``generationConfig`` and other fields are
    ignored; the default tier decides model and limits.
    """

    contents: list[LegacyContent] = Field(default_factory=list)

    def to_generation_request(self) -> GenerationRequest:
        texts = [
            part.text
            for content in self.contents
            if content.role in (None, "user")
            for part in content.parts
            if part.text
        ]
        return GenerationRequest(prompt="\n".join(texts))


def to_legacy_envelope(result: GenerationResult) -> dict[str, Any]:
    """Wrap a result in the Gemini response shape legacy clients parse."""
    envelope: dict[str, Any] = {
        "candidates": [{"content": {"role": "model", "parts": [{"text": result.text}]}}],
        "modelVersion": result.model,
    }
    if result.usage is not None:
        envelope["usageMetadata"] = result.usage
    return envelope
