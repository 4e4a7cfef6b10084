"""Domain exceptions shared across the ingestion pipeline."""


class EmailValidationError(ValueError):
    """An inbound email payload is missing a required field."""


class DuplicateTransactionError(Exception):
    """A transaction with the same message_id is already stored."""

    def __init__(self, message_id: str) -> None:
        """Keep the conflicting message_id for the idempotent outcome."""
        super().__init__(f"Transaction with message_id '{message_id}' already exists")
        self.message_id = message_id


class CategorizationUnavailableError(RuntimeError):
    """The AI categorizer could not produce a result."""

    def __init__(self, reason: str) -> None:
        """Prefix the reason so the condition is recognizable in logs and outcomes."""
        super().__init__(f"AI categorization unavailable: {reason}")
        self.reason = reason


class CategoryConfigurationError(RuntimeError):
    """No active categories are configured, so nothing can be categorized."""
