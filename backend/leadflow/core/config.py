"""Application configuration."""
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    # Application
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    APP_URL: str = "http://localhost:3000"
    CORS_ORIGINS: List[str] = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    # Database
    DATABASE_URL: str = "sqlite:///./leadflow.db"

    # LLM
    LLM_PROVIDER: str = "mock"
    OPENAI_API_KEY: Optional[str] = None
    LLM_API_KEY: Optional[str] = None
    LLM_MODEL: str = "gpt-4o"
    LLM_TIMEOUT_SECONDS: int = 120
    LLM_FALLBACK_TO_MOCK: bool = True  # serve placeholders when the provider fails

    # Email (Resend)
    RESEND_API_KEY: Optional[str] = None
    EMAIL_FROM_NAME: str = "CEO Scaling Roadmap"
    EMAIL_FROM_ADDRESS: str = "noreply@updates.doctorleadflow.com"
    EMAIL_REPLY_TO: str = "support@doctorleadflow.com"
    SEND_ROADMAP_EMAIL: bool = False

    # CRM (GoHighLevel inbound webhook)
    GHL_WEBHOOK_URL: Optional[str] = None
    GHL_TIMEOUT_SECONDS: float = 10.0

    # Payments (Stripe)
    STRIPE_SECRET_KEY: Optional[str] = None
    STRIPE_WEBHOOK_SECRET: Optional[str] = None

    # Admin
    ADMIN_API_KEY: Optional[str] = None

    # Quiz submission rate limit
    RATE_LIMIT_MAX_REQUESTS: int = 5
    RATE_LIMIT_WINDOW_SECONDS: int = 60 * 60

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

    @property
    def llm_api_key(self) -> str:
        return (self.LLM_API_KEY or self.OPENAI_API_KEY or "").strip()

    def missing_production_settings(self) -> List[str]:
        """Names of settings that must be present before serving production traffic."""
        missing = []
        if not self.DATABASE_URL or self.DATABASE_URL.startswith("sqlite"):
            missing.append("DATABASE_URL")
        if not self.ADMIN_API_KEY:
            missing.append("ADMIN_API_KEY")
        if not self.llm_api_key:
            missing.append("OPENAI_API_KEY or LLM_API_KEY")
        return missing


settings = Settings()
