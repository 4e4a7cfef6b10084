"""Configuration and environment settings for the Gastonauta ingestion API."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Lower rank is checked first. Generic categories sit after the specific ones.
DEFAULT_CATEGORY_PRIORITY: dict[str, int] = {
    "supermercado": 1,
    "combustible": 2,
    "restaurante": 3,
    "transporte": 4,
    "salud": 5,
    "educación": 6,
    "entretenimiento": 7,
    "servicios": 20,
}


class Settings(BaseSettings):
    """Application settings for the Gastonauta ingestion API."""

    database_url: str = "sqlite:///gastonauta.db"

    groq_api_key: str | None = None
    categorization_model: str = "llama-3.1-8b-instant"
    categorization_temperature: float = 0.3
    categorization_max_tokens: int = 50
    categorization_body_limit: int = 2000
    categorize_batch_limit: int = 10

    category_priority: dict[str, int] = Field(default_factory=lambda: dict(DEFAULT_CATEGORY_PRIORITY))
    unlisted_category_rank: int = 10
    fallback_category: str = "Otros"
    seed_default_categories: bool = True

    webhook_bearer_token: str | None = None

    resend_api_key: str | None = None
    resend_api_url: str = "https://api.resend.com/emails"
    notification_email_from: str = "Gastonauta <notificaciones@gastonauta.cl>"
    notification_email_to: str | None = None

    log_dir: str = "logs"
    server_host: str = "127.0.0.1"
    server_port: int = 8000

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


def get_settings() -> "Settings":
    """Return an instance of the application settings."""
    return Settings()
