"""Background categorization of stored transactions.

Categorizes one transaction by id, or a bounded batch of uncategorized transactions. Rows are processed one after the
other, each AI call awaited before the next, and a failing row never stops the batch.
"""

from sqlalchemy.exc import SQLAlchemyError

from app.categorization.pipeline import TransactionCategorizer
from app.core.db import DBHelper, TransactionRecord
from app.core.errors import CategorizationUnavailableError, CategoryConfigurationError
from app.core.models import CategorizationItemOutcome
from app.core.utils import get_logger

logger = get_logger("gastonauta.worker")

DEFAULT_BATCH_LIMIT = 10
NOTHING_TO_ANALYZE = "No body_plain or merchant to analyze"


class CategorizationRunner:
    """Run the categorization pipeline over stored transactions."""

    def __init__(self, db: DBHelper, categorizer: TransactionCategorizer) -> None:
        """Initialize the runner with a store and a categorizer."""
        self.db = db
        self.categorizer = categorizer

    def select_transactions(self, transaction_id: str | None, limit: int) -> list[TransactionRecord]:
        """The single requested transaction, or up to `limit` uncategorized ones."""
        if transaction_id:
            txn = self.db.get_transaction(transaction_id)
            return [txn] if txn else []
        return self.db.get_uncategorized_transactions(limit)

    def run(
        self, transaction_id: str | None = None, limit: int = DEFAULT_BATCH_LIMIT
    ) -> list[CategorizationItemOutcome]:
        """Categorize the selected transactions and return one outcome per row."""
        transactions = self.select_transactions(transaction_id, limit)
        logger.info(f"Categorizing {len(transactions)} transaction(s)")
        if not transactions:
            return []
        categories = self.db.get_active_categories()
        results = []
        for idx, txn in enumerate(transactions, start=1):
            row_info = f"[ROW {idx}/{len(transactions)}]"
            if not txn.body_plain and not txn.merchant:
                logger.warning(f"{row_info} Transaction {txn.id}: {NOTHING_TO_ANALYZE}")
                outcome = CategorizationItemOutcome(transaction_id=txn.id, success=False, error=NOTHING_TO_ANALYZE)
                results.append(outcome)
                continue
            try:
                result = self.categorizer.categorize(txn.body_plain or "", txn.merchant, txn.amount, categories)
                category_id = next((c.id for c in categories if c.name == result.category), None)
                self.db.update_categorization(txn.id, result, category_id)
            except (CategorizationUnavailableError, CategoryConfigurationError, SQLAlchemyError, LookupError) as exc:
                logger.exception(f"{row_info} Error categorizing transaction {txn.id}")
                results.append(CategorizationItemOutcome(transaction_id=txn.id, success=False, error=str(exc)))
                continue
            logger.info(f"{row_info} Transaction {txn.id} -> '{result.category}' ({result.model})")
            results.append(
                CategorizationItemOutcome(
                    transaction_id=txn.id,
                    success=True,
                    category=result.category,
                    confidence=result.confidence,
                    model=result.model,
                )
            )
        return results
