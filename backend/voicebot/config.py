"""Application configuration using pydantic-settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_ALLOWED_ORIGINS = (
    "https://ojpb2000.github.io",
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:5500",
    "http://127.0.0.1:5500",
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Voice Chatbot"
    log_level: str = "info"
    port: int = 3000

    # OpenAI
    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"
    openai_realtime_model: str = "gpt-4o-realtime-preview-2024-10-01"
    openai_base_url: str = "https://api.openai.com/v1"
    openai_realtime_url: str = "wss://api.openai.com/v1/realtime"
    openai_timeout_sec: float = 20.0

    # Sampling (fixed per deployment)
    chat_temperature: float = 0.7
    chat_max_tokens: int = 300
    realtime_voice: str = "alloy"

    # Streaming
    sse_heartbeat_seconds: float = 15.0

    # Demo login
    demo_username: str = "gato"
    demo_password: str = "gato123"
    session_max_age: int = 3600

    # CORS (comma-separated, merged with the defaults)
    allowed_origins: str = ""

    @property
    def provider_configured(self) -> bool:
        return bool(self.openai_api_key.strip())

    @property
    def cors_origins(self) -> list[str]:
        """Default origins followed by any extra ones, without duplicates."""
        extra = [o.strip() for o in self.allowed_origins.split(",") if o.strip()]
        return list(dict.fromkeys([*DEFAULT_ALLOWED_ORIGINS, *extra]))


settings = Settings()


def get_settings() -> Settings:
    """FastAPI dependency for injecting settings."""
    return settings
