"""Main entrypoint and application factory for the Gastonauta ingestion API.

This module initializes the FastAPI application, configures logging, creates the database tables and seeds the default
categories, and exposes the Scalar API reference endpoint for interactive OpenAPI documentation. It also includes the
main entrypoint for running the app with Uvicorn.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.responses import HTMLResponse
from scalar_fastapi import get_scalar_api_reference
from sqlalchemy.exc import SQLAlchemyError

from app.api.routes import router
from app.core.db import Base, engine, get_db
from app.core.seed import seed_default_categories
from app.core.settings import get_settings
from app.core.utils import ensure_dir, get_logger

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


# --- Logging Setup ---
def setup_logging() -> None:
    """Configure the gastonauta loggers to also write to a plain-text log file."""
    log_dir = get_settings().log_dir
    ensure_dir(log_dir)
    file_handler = logging.FileHandler(Path(log_dir) / "ingestion.log")
    file_handler.setLevel(logging.INFO)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    for name in (
        "gastonauta.api",
        "gastonauta.ingestion",
        "gastonauta.parsers",
        "gastonauta.categorization",
        "gastonauta.categorization.keywords",
        "gastonauta.categorization.ai",
        "gastonauta.notifications",
        "gastonauta.worker",
        "gastonauta.seed",
    ):
        logger = get_logger(name)
        logger.setLevel(logging.INFO)
        # Add file handler for persistent logs (not colorized)
        if not any(isinstance(h, logging.FileHandler) for h in logger.handlers):
            logger.addHandler(file_handler)


setup_logging()
logger = get_logger("gastonauta.api")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Create the transactions and categories tables and seed default categories into an empty store."""
    _ = app  # Silence unused argument warning
    settings = get_settings()
    try:
        Base.metadata.create_all(engine)
    except SQLAlchemyError:
        logger.exception("Failed to create transactions or categories table")
        raise
    if settings.seed_default_categories:
        db = get_db()
        try:
            seed_default_categories(db)
        finally:
            db.close()
    yield


app = FastAPI(
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    title="Gastonauta Ingestion API",
    description="""
    The Gastonauta Ingestion API turns Chilean bank notification emails (Banco de Chile, Banco Estado, Santander)
    into categorized transactions.

    **Endpoints:**
    - `POST /webhook-email`: Ingest a forwarded email: parse, store, categorize and notify.
    - `POST /parse-email`: Parse an email body without storing it.
    - `POST /categorize-transaction`: Categorize one stored transaction or a batch of uncategorized ones.
    - `GET /health`: Health check endpoint.
    - `GET /scalar`: Interactive Scalar OpenAPI documentation.
    """,
    version="1.0.0",
)
app.include_router(router)


@app.get("/scalar", include_in_schema=False)
async def scalar_docs() -> HTMLResponse:
    """Return Scalar API reference."""
    return get_scalar_api_reference(openapi_url=app.openapi_url, title=app.title)


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run("main:app", host=settings.server_host, port=settings.server_port, reload=True)
