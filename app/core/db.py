"""DB models and helpers for the Gastonauta ingestion API."""

import uuid
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    create_engine,
    func,
    select,
)
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from app.core.errors import DuplicateTransactionError
from app.core.models import CategorizationResult, CategoryInfo
from app.core.utils import utcnow_iso

Base = declarative_base()


class Category(Base):
    """A spending category with the keywords used to recognize it."""

    __tablename__ = "categories"
    id = Column(Integer, primary_key=True)
    name = Column(String, unique=True, nullable=False, index=True)
    description = Column(Text, nullable=True)
    keywords = Column(JSON, nullable=False, default=list)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(String, nullable=False, default=utcnow_iso)

    def to_info(self) -> CategoryInfo:
        """Return the read-only view handed to the categorizers."""
        return CategoryInfo(
            id=self.id,
            name=self.name,
            description=self.description,
            keywords=list(self.keywords or []),
            is_active=bool(self.is_active),
        )


class TransactionRecord(Base):
    """A bank transaction ingested from a notification email."""

    __tablename__ = "transactions"
    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    message_id = Column(String, unique=True, nullable=False, index=True)
    email_date = Column(String, nullable=True)
    from_name = Column(String, nullable=True)
    from_email = Column(String, nullable=True)
    subject = Column(String, nullable=True)
    body_raw = Column(Text, nullable=True)
    body_plain = Column(Text, nullable=True)
    body_html = Column(Text, nullable=True)
    customer_name = Column(String, nullable=True)
    amount = Column(Float, nullable=True)
    account_last4 = Column(String, nullable=True)
    merchant = Column(String, nullable=True)
    transaction_date = Column(String, nullable=True)
    sender_bank = Column(String, nullable=True)
    email_type = Column(String, nullable=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True)
    is_categorized = Column(Boolean, nullable=False, default=False)
    categorized_at = Column(String, nullable=True)
    categorization_model = Column(String, nullable=True)
    categorization_confidence = Column(Float, nullable=True)
    created_at = Column(String, nullable=False, default=utcnow_iso)


def get_engine(url: str | None = None) -> Engine:
    """Create a SQLAlchemy engine using the configured database URL."""
    if url is None:
        from app.core.settings import get_settings

        url = get_settings().database_url
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, connect_args=connect_args)


engine = get_engine()
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> "DBHelper":
    """Get a DBHelper instance using a SQLAlchemy session."""
    session = SessionLocal()
    return DBHelper(session)


class DBHelper:
    """Helper class for transaction and category storage using SQLAlchemy."""

    def __init__(self, session: Session) -> None:
        """Initialize the DBHelper with a SQLAlchemy session."""
        self.session = session

    def insert_transaction(self, record: dict[str, Any]) -> TransactionRecord:
        """Insert a new transaction keyed by message_id.

        Raises DuplicateTransactionError when the message_id is already stored, including the case where a
        concurrent insert wins the race and the unique constraint fires on commit.
        """
        message_id = record["message_id"]
        existing = self.session.execute(
            select(TransactionRecord.id).where(TransactionRecord.message_id == message_id)
        ).first()
        if existing:
            raise DuplicateTransactionError(message_id)
        txn = TransactionRecord(**record)
        self.session.add(txn)
        try:
            self.session.commit()
        except IntegrityError as exc:
            self.session.rollback()
            duplicate = self.session.execute(
                select(TransactionRecord.id).where(TransactionRecord.message_id == message_id)
            ).first()
            if duplicate:
                raise DuplicateTransactionError(message_id) from exc
            raise
        except SQLAlchemyError:
            self.session.rollback()
            raise
        self.session.refresh(txn)
        return txn

    def get_transaction(self, transaction_id: str) -> TransactionRecord | None:
        """Retrieve a transaction by its generated id."""
        return self.session.get(TransactionRecord, transaction_id)

    def get_transaction_by_message_id(self, message_id: str) -> TransactionRecord | None:
        """Retrieve a transaction by its email message_id."""
        stmt = select(TransactionRecord).where(TransactionRecord.message_id == message_id)
        return self.session.execute(stmt).scalars().first()

    def get_uncategorized_transactions(self, limit: int) -> list[TransactionRecord]:
        """Uncategorized transactions that still carry a body to analyze, oldest first."""
        stmt = (
            select(TransactionRecord)
            .where(
                TransactionRecord.is_categorized.is_(False),
                TransactionRecord.category_id.is_(None),
                TransactionRecord.body_plain.is_not(None),
            )
            .order_by(TransactionRecord.created_at)
            .limit(limit)
        )
        return list(self.session.execute(stmt).scalars().all())

    def get_active_categories(self) -> list[CategoryInfo]:
        """Return every active category, in insertion order."""
        stmt = select(Category).where(Category.is_active.is_(True)).order_by(Category.id)
        return [row.to_info() for row in self.session.execute(stmt).scalars().all()]

    def add_category(
        self, name: str, description: str | None = None, keywords: list[str] | None = None, *, is_active: bool = True
    ) -> Category:
        """Add a category and return it."""
        obj = Category(name=name, description=description, keywords=keywords or [], is_active=is_active)
        self.session.add(obj)
        self.session.commit()
        self.session.refresh(obj)
        return obj

    def count_categories(self) -> int:
        """Number of stored categories, active or not."""
        return self.session.execute(select(func.count(Category.id))).scalar_one()

    def update_categorization(
        self, transaction_id: str, result: CategorizationResult, category_id: int | None
    ) -> None:
        """Store a categorization result on a transaction, overwriting any previous one."""
        txn = self.session.get(TransactionRecord, transaction_id)
        if txn is None:
            msg = f"Transaction '{transaction_id}' not found"
            raise LookupError(msg)
        txn.category_id = category_id
        txn.is_categorized = True
        txn.categorized_at = utcnow_iso()
        txn.categorization_model = result.model
        txn.categorization_confidence = result.confidence
        try:
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            raise

    def close(self) -> None:
        """Close the SQLAlchemy session."""
        self.session.close()
