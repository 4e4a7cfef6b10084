"""Pydantic models for the Gastonauta ingestion API.

This module defines the data exchanged between the parsers, the categorizers and the HTTP layer: the parser-produced
TransactionDraft, the read-only CategoryInfo view of a stored category, the CategorizationResult, and the request and
outcome payloads of the webhook, parse and categorize endpoints.
"""

from pydantic import BaseModel, Field


class TransactionDraft(BaseModel):
    """A transaction extracted from a bank email, before it is stored."""

    customer_name: str | None = None
    amount: float | None = None
    account_last4: str | None = None
    merchant: str | None = None
    transaction_date: str | None = None
    sender_bank: str | None = None
    email_type: str | None = None


class CategoryInfo(BaseModel):
    """Read-only view of a spending category."""

    id: int | None = None
    name: str
    description: str | None = None
    keywords: list[str] = Field(default_factory=list)
    is_active: bool = True


class CategorizationResult(BaseModel):
    """Category assigned to a transaction and how it was resolved."""

    category: str
    confidence: float = Field(ge=0.0, le=1.0)
    model: str


class EmailPayload(BaseModel):
    """Inbound email as delivered by the forwarding webhook."""

    from_email: str | None = None
    from_name: str | None = None
    subject: str | None = None
    date: str | None = None
    message_id: str | None = None
    body_plain: str | None = None
    body_raw: str | None = None
    body_html: str | None = None

    @property
    def body(self) -> str:
        """Plain body, falling back to the raw body."""
        return self.body_plain or self.body_raw or ""


class ParseEmailRequest(BaseModel):
    """Request body of the standalone parse endpoint."""

    from_email: str | None = None
    subject: str | None = None
    body_plain: str | None = None
    body_raw: str | None = None


class ParseEmailResponse(BaseModel):
    """Response body of the standalone parse endpoint."""

    success: bool = True
    parsed: TransactionDraft


class IngestionOutcome(BaseModel):
    """Structured result of ingesting one email."""

    success: bool
    message: str | None = None
    message_id: str | None = None
    transaction_id: str | None = None
    parsed: TransactionDraft | None = None
    categorization: CategorizationResult | None = None
    categorization_error: str | None = None
    error: str | None = None


class CategorizeRequest(BaseModel):
    """Request body of the categorize endpoint: one transaction, or a batch of uncategorized ones."""

    transaction_id: str | None = None
    limit: int | None = Field(default=None, ge=1)


class CategorizationItemOutcome(BaseModel):
    """Result of categorizing one stored transaction."""

    transaction_id: str
    success: bool
    category: str | None = None
    confidence: float | None = None
    model: str | None = None
    error: str | None = None


class CategorizeResponse(BaseModel):
    """Response body of the categorize endpoint."""

    success: bool = True
    processed: int
    results: list[CategorizationItemOutcome]
    error: str | None = None
