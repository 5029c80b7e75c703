"""Application configuration using Pydantic Settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # System Configuration
    api_prefix: str = "/api"
    debug: bool = False
    cors_origins: str = "http://localhost:3000,http://localhost:5173"
    rate_limit_enabled: bool = True
    max_body_bytes: int = 64 * 1024

    # Supabase Configuration
    supabase_url: str = "https://test.supabase.co"
    supabase_service_role_key: str = "test-service-role-key"
    users_table: str = "users"

    # Google Identity Configuration
    google_client_id: str = ""
    google_jwks_url: str = "https://www.googleapis.com/oauth2/v3/certs"
    google_issuers: str = "accounts.google.com,https://accounts.google.com"
    jwks_cache_ttl_seconds: int = 3600  # 1 hour
    jwt_leeway_seconds: int = 10  # Clock skew tolerance
    verification_timeout_seconds: float = 10.0

    # PostHog Configuration
    posthog_api_key: str | None = None
    posthog_host: str = "https://app.posthog.com"

    # LLM Provider Configuration
    llm_provider: str = "gemini"  # gemini | anthropic | openai
    llm_base_url: str = ""  # Empty means the provider's public endpoint
    llm_api_key: str = ""
    gemini_api_key: str = ""
    llm_timeout_seconds: float = 30.0
    max_prompt_chars: int = 8000

    # Tier Configuration
    llm_default_tier: str = "flash"
    llm_flash_model: str = "gemini-2.5-flash"
    llm_flash_max_tokens: int = 1024
    llm_flash_temperature: float = 0.7
    llm_standard_model: str = "gemini-2.5-flash"
    llm_standard_max_tokens: int = 4096
    llm_standard_temperature: float = 0.7
    llm_pro_model: str = "gemini-2.5-pro"
    llm_pro_max_tokens: int = 8192
    llm_pro_temperature: float = 0.5

    @property
    def issuer_list(self) -> list[str]:
        return [issuer.strip() for issuer in self.google_issuers.split(",") if issuer.strip()]

    @property
    def provider_api_key(self) -> str:
        """Provider API key, falling back to GEMINI_API_KEY for the legacy deployment."""
        return (self.llm_api_key or self.gemini_api_key).strip()


settings = Settings()
