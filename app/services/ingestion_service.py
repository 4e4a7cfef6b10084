"""Ingestion orchestration for bank notification emails.

One email goes through validation, parser routing, storage keyed by message_id, keyword-then-AI categorization and a
notification. Store failures before categorization abort the ingestion and produce a failure outcome; categorization
failures leave the transaction stored but uncategorized and the outcome stays successful.
"""

from sqlalchemy.exc import SQLAlchemyError

from app.categorization.pipeline import TransactionCategorizer
from app.core.db import DBHelper
from app.core.errors import (
    CategorizationUnavailableError,
    CategoryConfigurationError,
    DuplicateTransactionError,
    EmailValidationError,
)
from app.core.models import CategorizationResult, EmailPayload, IngestionOutcome, TransactionDraft
from app.core.utils import get_logger, parse_email_date
from app.parsers.router import parse_email
from app.services.notification_service import NotificationService

logger = get_logger("gastonauta.ingestion")

DUPLICATE_MESSAGE = "Duplicate transaction already exists"


def validate_payload(payload: EmailPayload) -> None:
    """Reject payloads without a message_id or without any body."""
    if not payload.message_id:
        msg = "Missing message_id"
        raise EmailValidationError(msg)
    if not payload.body_plain and not payload.body_raw:
        msg = "Missing body_plain or body_raw"
        raise EmailValidationError(msg)


def build_transaction_record(payload: EmailPayload, draft: TransactionDraft) -> dict:
    """Columns of the new transaction row: raw email fields plus the parsed draft."""
    return {
        "message_id": payload.message_id,
        "email_date": parse_email_date(payload.date),
        "from_name": payload.from_name,
        "from_email": payload.from_email,
        "subject": payload.subject,
        "body_raw": payload.body_raw,
        "body_plain": payload.body_plain,
        "body_html": payload.body_html,
        **draft.model_dump(),
    }


class IngestionService:
    """Ingest one email end to end."""

    def __init__(self, db: DBHelper, categorizer: TransactionCategorizer, notifier: NotificationService) -> None:
        """Initialize the service with its store, categorizer and notifier."""
        self.db = db
        self.categorizer = categorizer
        self.notifier = notifier

    def ingest(self, payload: EmailPayload) -> IngestionOutcome:
        """Process one email. Raises EmailValidationError for invalid payloads; other failures become outcomes."""
        validate_payload(payload)
        message_id = payload.message_id
        logger.info(f"Ingesting email message_id={message_id} from={payload.from_email}")

        draft = parse_email(payload.from_email, payload.subject, payload.body)
        logger.info(f"Parsed draft for {message_id}: {draft.model_dump()}")

        try:
            txn = self.db.insert_transaction(build_transaction_record(payload, draft))
        except DuplicateTransactionError:
            logger.info(f"Duplicate message_id={message_id}; nothing to do")
            return IngestionOutcome(success=True, message=DUPLICATE_MESSAGE, message_id=message_id, parsed=draft)
        except SQLAlchemyError as exc:
            error = str(exc.orig) if getattr(exc, "orig", None) is not None else str(exc)
            logger.exception(f"Database error storing message_id={message_id}")
            self.notifier.notify_failure(message_id, error)
            return IngestionOutcome(success=False, message_id=message_id, parsed=draft, error=error)

        outcome = IngestionOutcome(
            success=True, message="Transaction stored", message_id=message_id, transaction_id=txn.id, parsed=draft
        )
        try:
            outcome.categorization = self.categorize_transaction(txn.id, payload.body, draft)
            outcome.message = "Transaction stored and categorized"
        except (CategorizationUnavailableError, CategoryConfigurationError, SQLAlchemyError, LookupError) as exc:
            logger.warning(f"Categorization unavailable for transaction {txn.id}: {exc}")
            outcome.categorization_error = str(exc)

        self.notifier.notify_success(message_id, draft, outcome.categorization)
        return outcome

    def categorize_transaction(self, transaction_id: str, body: str, draft: TransactionDraft) -> CategorizationResult:
        """Categorize a stored transaction and persist the result."""
        categories = self.db.get_active_categories()
        result = self.categorizer.categorize(body, draft.merchant, draft.amount, categories)
        category_id = next((c.id for c in categories if c.name == result.category), None)
        self.db.update_categorization(transaction_id, result, category_id)
        logger.info(
            f"Transaction {transaction_id} categorized as '{result.category}' "
            f"by {result.model} ({result.confidence:.2f})"
        )
        return result
