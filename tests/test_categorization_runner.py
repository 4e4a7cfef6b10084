"""Tests for single and batch categorization of stored transactions."""

from app.categorization.pipeline import TransactionCategorizer
from app.core.db import DBHelper
from app.core.settings import Settings
from app.workers.categorization_runner import NOTHING_TO_ANALYZE, CategorizationRunner


def store(db: DBHelper, message_id: str, body_plain: str | None, merchant: str | None = None) -> str:
    record = {"message_id": message_id, "body_plain": body_plain, "merchant": merchant, "amount": 1000.0}
    return db.insert_transaction(record).id


def make_runner(db: DBHelper, settings: Settings, llm_client: object | None = None) -> CategorizationRunner:
    return CategorizationRunner(db, TransactionCategorizer.from_settings(settings, llm_client))


def test_batch_categorizes_uncategorized_rows(seeded_db: DBHelper, settings: Settings) -> None:
    ids = [
        store(seeded_db, "m1", "compra en JUMBO BILBAO", "JUMBO BILBAO"),
        store(seeded_db, "m2", "compra en COPEC RUTA 5", "COPEC RUTA 5"),
    ]
    results = make_runner(seeded_db, settings).run()

    categories = {r.transaction_id: r.category for r in results}
    if categories != {ids[0]: "Supermercado", ids[1]: "Combustible"}:
        msg = f"Unexpected categories: {categories}"
        raise AssertionError(msg)
    if seeded_db.get_uncategorized_transactions(10):
        msg = "No uncategorized transactions should remain"
        raise AssertionError(msg)


def test_batch_respects_limit_and_skips_rows_without_body(seeded_db: DBHelper, settings: Settings) -> None:
    for idx in range(3):
        store(seeded_db, f"m{idx}", "compra en JUMBO", "JUMBO")
    store(seeded_db, "no-body", None, "JUMBO")

    results = make_runner(seeded_db, settings).run(limit=2)
    if len(results) != 2:  # noqa: PLR2004
        msg = f"Expected 2 results, got {len(results)}"
        raise AssertionError(msg)
    remaining = seeded_db.get_uncategorized_transactions(10)
    if len(remaining) != 1:
        msg = f"Expected one row left to categorize, got {len(remaining)}"
        raise AssertionError(msg)


def test_failing_row_does_not_stop_the_batch(seeded_db: DBHelper, settings: Settings) -> None:
    """Without an AI key the unmatched row fails, and the next row is still categorized."""
    failing = store(seeded_db, "m1", "compra en BOLERA NORTE", "BOLERA NORTE")
    passing = store(seeded_db, "m2", "compra en JUMBO", "JUMBO")

    results = {r.transaction_id: r for r in make_runner(seeded_db, settings, llm_client=None).run()}
    if results[failing].success or "AI categorization unavailable" not in results[failing].error:
        msg = f"Unexpected failing outcome: {results[failing]}"
        raise AssertionError(msg)
    if not results[passing].success or results[passing].category != "Supermercado":
        msg = f"Unexpected passing outcome: {results[passing]}"
        raise AssertionError(msg)


def test_single_transaction_is_recategorized(
    seeded_db: DBHelper, settings: Settings, make_llm_client: type
) -> None:
    txn_id = store(seeded_db, "m1", "compra en BOLERA NORTE", "BOLERA NORTE")
    runner = make_runner(seeded_db, settings, llm_client=make_llm_client(content="Entretenimiento"))
    runner.run(transaction_id=txn_id)

    runner = make_runner(seeded_db, settings, llm_client=make_llm_client(content="Otros"))
    results = runner.run(transaction_id=txn_id)
    txn = seeded_db.get_transaction(txn_id)
    otros = next(c for c in seeded_db.get_active_categories() if c.name == "Otros")
    if len(results) != 1 or results[0].category != "Otros" or txn.category_id != otros.id:
        msg = f"Expected recategorization to Otros, got {results}"
        raise AssertionError(msg)


def test_single_transaction_without_content(seeded_db: DBHelper, settings: Settings) -> None:
    txn_id = store(seeded_db, "m1", None, None)
    results = make_runner(seeded_db, settings).run(transaction_id=txn_id)
    if len(results) != 1 or results[0].success or results[0].error != NOTHING_TO_ANALYZE:
        msg = f"Unexpected outcome: {results}"
        raise AssertionError(msg)


def test_unknown_transaction_id_yields_nothing(seeded_db: DBHelper, settings: Settings) -> None:
    if make_runner(seeded_db, settings).run(transaction_id="does-not-exist") != []:
        msg = "Unknown ids should produce no results"
        raise AssertionError(msg)
