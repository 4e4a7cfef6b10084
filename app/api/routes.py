"""FastAPI endpoints for the Gastonauta ingestion API.

This module defines the webhook that ingests bank notification emails, the standalone parse endpoint, the categorize
endpoint for single or batch categorization, and the health check. It wires together the parser router, the
categorization pipeline, the ingestion service and the categorization runner.
"""

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from app.api.dependencies import get_categorizer, get_db_conn, get_notifier, verify_bearer_token
from app.categorization.pipeline import TransactionCategorizer
from app.core.db import DBHelper
from app.core.errors import EmailValidationError
from app.core.models import (
    CategorizeRequest,
    CategorizeResponse,
    EmailPayload,
    IngestionOutcome,
    ParseEmailRequest,
    ParseEmailResponse,
)
from app.core.settings import Settings, get_settings
from app.core.utils import get_logger
from app.parsers.router import parse_email
from app.services.ingestion_service import IngestionService
from app.services.notification_service import NotificationService
from app.workers.categorization_runner import CategorizationRunner

router = APIRouter()
logger = get_logger("gastonauta.api")


@router.post(
    "/webhook-email",
    response_model=IngestionOutcome,
    summary="Ingest a bank notification email",
    description=(
        "Receive a forwarded bank notification email, parse it into a transaction, store it keyed by `message_id`, "
        "categorize it (keywords first, AI fallback) and send a notification.\n\n"
        "**Response:**\n"
        "- 200 OK: Transaction stored (or already stored for this `message_id`).\n"
        "- 400 Bad Request: Missing `message_id`, or both `body_plain` and `body_raw` missing.\n"
        "- 401 Unauthorized: Missing or invalid bearer token.\n"
        "- 500 Internal Server Error: The transaction could not be stored."
    ),
    responses={
        400: {
            "description": "Invalid payload.",
            "content": {"application/json": {"example": {"detail": "Missing message_id"}}},
        },
        401: {
            "description": "Invalid token.",
            "content": {"application/json": {"example": {"detail": "Invalid authorization token"}}},
        },
        500: {"description": "Storage failure.", "model": IngestionOutcome},
    },
)
def webhook_email(
    payload: EmailPayload,
    _token: str = Depends(verify_bearer_token),
    db: DBHelper = Depends(get_db_conn),
    categorizer: TransactionCategorizer = Depends(get_categorizer),
    notifier: NotificationService = Depends(get_notifier),
) -> JSONResponse:
    """Ingest one email."""
    service = IngestionService(db, categorizer, notifier)
    try:
        outcome = service.ingest(payload)
    except EmailValidationError as exc:
        logger.warning(f"Rejected email: {exc}")
        raise HTTPException(400, str(exc)) from exc
    status_code = 200 if outcome.success else 500
    return JSONResponse(outcome.model_dump(), status_code=status_code)


@router.post(
    "/parse-email",
    response_model=ParseEmailResponse,
    summary="Parse a bank notification email without storing it",
    description=(
        "Route the email to its bank-format parser and return the extracted transaction draft.\n\n"
        "**Response:**\n"
        "- 200 OK: `{ 'success': true, 'parsed': {...} }`.\n"
        "- 400 Bad Request: Both `body_plain` and `body_raw` missing."
    ),
)
async def parse_email_endpoint(request: ParseEmailRequest) -> ParseEmailResponse:
    """Parse an email body into a TransactionDraft."""
    if not request.body_plain and not request.body_raw:
        raise HTTPException(400, "Missing body_plain or body_raw")
    parsed = parse_email(request.from_email, request.subject, request.body_plain or request.body_raw or "")
    return ParseEmailResponse(parsed=parsed)


@router.post(
    "/categorize-transaction",
    response_model=CategorizeResponse,
    summary="Categorize one stored transaction or a batch of uncategorized ones",
    description=(
        "With `transaction_id`, (re)categorize that transaction. Without it, categorize up to `limit` "
        "(default 10) uncategorized transactions, one after the other.\n\n"
        "**Response:**\n"
        "- 200 OK: One result per selected transaction. A failing row is reported in its own result.\n"
        "- 401 Unauthorized: Missing or invalid bearer token.\n"
        "- 500 Internal Server Error: The transactions or categories could not be read."
    ),
    responses={500: {"description": "Storage failure.", "model": CategorizeResponse}},
)
def categorize_transaction(
    request: CategorizeRequest,
    _token: str = Depends(verify_bearer_token),
    db: DBHelper = Depends(get_db_conn),
    categorizer: TransactionCategorizer = Depends(get_categorizer),
    settings: Settings = Depends(get_settings),
) -> CategorizeResponse | JSONResponse:
    """Categorize stored transactions."""
    runner = CategorizationRunner(db, categorizer)
    try:
        results = runner.run(request.transaction_id, request.limit or settings.categorize_batch_limit)
    except SQLAlchemyError as exc:
        logger.exception("Could not load transactions to categorize")
        error = str(exc.orig) if getattr(exc, "orig", None) is not None else str(exc)
        failure = CategorizeResponse(success=False, processed=0, results=[], error=error)
        return JSONResponse(failure.model_dump(), status_code=500)
    return CategorizeResponse(processed=len(results), results=results)


@router.get(
    "/health",
    summary="Health check",
    description="Simple health check endpoint. Returns status ok.",
    response_description="Status ok.",
    responses={200: {"description": "API is healthy.", "content": {"application/json": {"example": {"status": "ok"}}}}},
)
async def health() -> dict:
    """Health check endpoint."""
    return {"status": "ok"}
