"""Pydantic models for database entities."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class UserProfile(BaseModel):
    """
    Persisted user record keyed by the Google subject.

    ``subject`` maps to the ``google_id`` column. Only ``last_login``,
    ``full_name`` and ``picture_url`` change after creation.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: int | str | None = None
    subject: str = Field(alias="google_id")
    email: str | None = None
    full_name: str | None = None
    given_name: str | None = None
    family_name: str | None = None
    picture_url: str | None = None
    locale: str | None = None
    last_login: datetime
    created_at: datetime | None = None
    created: bool = Field(
        default=False,
        exclude=True,
        description="True when the upsert that returned this row inserted it",
    )
