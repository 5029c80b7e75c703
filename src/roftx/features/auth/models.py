"""Pydantic models for the sign-in feature."""

from typing import Any

from pydantic import BaseModel, Field


class GoogleLoginRequest(BaseModel):
    """Request body for Google sign-in."""

    token: str | None = Field(None, description="Google ID token from the client sign-in flow")


class LoginResponse(BaseModel):
    """Response model for a successful sign-in."""

    message: str = Field(description="Human readable status")
    user: dict[str, Any] = Field(description="Stored user row")

    class Config:
        """Pydantic config."""

        json_schema_extra = {
            "example": {
                "message": "Login successful!",
                "user": {
                    "id": 42,
                    "google_id": "108123456789012345678",
                    "email": "ada@example.com",
                    "full_name": "Ada Lovelace",
                    "given_name": "Ada",
                    "family_name": "Lovelace",
                    "picture_url": "https://lh3.googleusercontent.com/a/photo",
                    "locale": "en",
                    "last_login": "2025-01-01T12:00:00+00:00",
                    "created_at": "2024-06-01T09:30:00+00:00",
                },
            }
        }
