"""FastAPI dependencies for DI (settings, DB, categorizer, notifier, auth).

This module provides dependency injection helpers for settings, database sessions, the categorization pipeline and the
notification service, plus the bearer-token check shared by the webhook and categorize endpoints.
"""

from collections.abc import Generator

from fastapi import Depends, Header, HTTPException
from groq import Groq

from app.categorization.pipeline import TransactionCategorizer
from app.core.db import DBHelper, get_db
from app.core.settings import Settings, get_settings
from app.core.utils import get_logger
from app.services.notification_service import NotificationService

logger = get_logger("gastonauta.api")

JWT_PREFIX = "eyJ"


def get_db_conn() -> Generator[DBHelper, None, None]:
    """Provide a database helper for the duration of a request."""
    db = get_db()
    try:
        yield db
    finally:
        db.close()


def get_categorizer(settings: Settings = Depends(get_settings)) -> TransactionCategorizer:
    """Provide the keyword-then-AI categorization pipeline."""
    client = Groq(api_key=settings.groq_api_key) if settings.groq_api_key else None
    return TransactionCategorizer.from_settings(settings, client)


def get_notifier(settings: Settings = Depends(get_settings)) -> NotificationService:
    """Provide the notification service."""
    return NotificationService(settings)


def verify_bearer_token(
    authorization: str | None = Header(default=None),
    settings: Settings = Depends(get_settings),
) -> str:
    """Accept the configured shared secret or a JWT-shaped token; reject everything else with 401."""
    token = authorization.removeprefix("Bearer ").strip() if authorization else ""
    if settings.webhook_bearer_token and token == settings.webhook_bearer_token:
        return token
    if token.startswith(JWT_PREFIX):
        return token
    logger.warning("Rejected request with missing or invalid authorization token")
    raise HTTPException(status_code=401, detail="Invalid authorization token")
