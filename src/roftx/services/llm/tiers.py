"""Tier table mapping request tiers to provider models and limits."""

import logging

from pydantic import BaseModel, ConfigDict, Field, model_validator

from src.roftx.config import Settings

logger = logging.getLogger(__name__)


class TierProfile(BaseModel):
    """Model and sampling limits used for one tier."""

    model_config = ConfigDict(frozen=True)

    name: str
    model: str
    max_output_tokens: int = Field(gt=0)
    temperature: float = Field(ge=0.0, le=2.0)


class GenerationConfig(BaseModel):
    """
    Immutable generation configuration, built once at startup.

    Attributes:
        provider: Wire format / endpoint family ('gemini', 'anthropic', 'openai')
        api_key: Provider credential (never logged)
        base_url: Provider base URL, empty for the public default
        timeout_seconds: Bound on a single provider call
        max_prompt_chars: Longest prompt accepted
        default_tier: Tier used when the request names none or an unknown one
        tiers: Available tier profiles
    """

    model_config = ConfigDict(frozen=True)

    provider: str = "gemini"
    api_key: str = Field(repr=False)
    base_url: str = ""
    timeout_seconds: float = Field(default=30.0, gt=0)
    max_prompt_chars: int = Field(default=8000, gt=0)
    default_tier: str
    tiers: tuple[TierProfile, ...]

    @model_validator(mode="after")
    def _default_tier_exists(self) -> "GenerationConfig":
        if self.default_tier not in {tier.name for tier in self.tiers}:
            raise ValueError(f"default_tier '{self.default_tier}' is not a configured tier")
        return self

    def resolve_tier(self, name: str | None) -> TierProfile:
        """
        Look up a tier by name, falling back to the default tier.

        Older clients send no tier or names that have since been retired, so an
        unknown tier is never an error.

        Args:
            name: Requested tier name (case-insensitive), or None

        Returns:
            The matching TierProfile, or the default tier's profile
        """
        by_name = {tier.name: tier for tier in self.tiers}
        if name:
            profile = by_name.get(name.strip().lower())
            if profile is not None:
                return profile
            logger.info(
                f"Unknown tier '{name}', using default tier '{self.default_tier}'",
                extra={"requested_tier": name, "default_tier": self.default_tier},
            )
        return by_name[self.default_tier]


def build_generation_config(settings: Settings) -> GenerationConfig:
    """Build the generation config from application settings."""
    return GenerationConfig(
        provider=settings.llm_provider.strip().lower(),
        api_key=settings.provider_api_key,
        base_url=settings.llm_base_url,
        timeout_seconds=settings.llm_timeout_seconds,
        max_prompt_chars=settings.max_prompt_chars,
        default_tier=settings.llm_default_tier.strip().lower(),
        tiers=(
            TierProfile(
                name="flash",
                model=settings.llm_flash_model,
                max_output_tokens=settings.llm_flash_max_tokens,
                temperature=settings.llm_flash_temperature,
            ),
            TierProfile(
                name="standard",
                model=settings.llm_standard_model,
                max_output_tokens=settings.llm_standard_max_tokens,
                temperature=settings.llm_standard_temperature,
            ),
            TierProfile(
                name="pro",
                model=settings.llm_pro_model,
                max_output_tokens=settings.llm_pro_max_tokens,
                temperature=settings.llm_pro_temperature,
            ),
        ),
    )
