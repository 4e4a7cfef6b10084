"""API package: provides FastAPI dependencies and route definitions for the application."""

from .dependencies import get_categorizer, get_db_conn, get_notifier, verify_bearer_token  # noqa: F401
from .routes import router  # noqa: F401
