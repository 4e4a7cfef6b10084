"""Base abstraction for transaction categorizers."""

from abc import ABC, abstractmethod

from app.core.models import CategorizationResult, CategoryInfo


class BaseCategorizer(ABC):
    """Abstract base class for all categorizers."""

    @abstractmethod
    def categorize(
        self,
        body_plain: str | None,
        merchant: str | None,
        amount: float | None,
        categories: list[CategoryInfo],
    ) -> CategorizationResult | None:
        """Assign a category to a transaction, or return None when this categorizer cannot decide."""
