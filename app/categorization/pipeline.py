"""Two-stage categorization: keyword matcher first, AI fallback on a miss."""

from app.categorization.ai_agent import AICategorizer
from app.categorization.base import BaseCategorizer
from app.categorization.keywords import KeywordCategorizer
from app.core.errors import CategoryConfigurationError
from app.core.models import CategorizationResult, CategoryInfo
from app.core.settings import Settings
from app.core.utils import get_logger

logger = get_logger("gastonauta.categorization")


class TransactionCategorizer(BaseCategorizer):
    """Run the keyword categorizer and fall back to the AI categorizer when no keyword matches."""

    def __init__(self, keyword_categorizer: KeywordCategorizer, ai_categorizer: AICategorizer) -> None:
        """Initialize the pipeline with its two stages."""
        self.keyword_categorizer = keyword_categorizer
        self.ai_categorizer = ai_categorizer

    @classmethod
    def from_settings(cls, settings: Settings, llm_client: object | None) -> "TransactionCategorizer":
        """Build the pipeline from application settings."""
        keyword_categorizer = KeywordCategorizer(
            priority=settings.category_priority,
            unlisted_rank=settings.unlisted_category_rank,
            catch_all=settings.fallback_category,
        )
        return cls(keyword_categorizer, AICategorizer(llm_client, settings))

    def categorize(
        self,
        body_plain: str | None,
        merchant: str | None,
        amount: float | None,
        categories: list[CategoryInfo],
    ) -> CategorizationResult:
        """Categorize a transaction. Raises CategoryConfigurationError when there are no active categories."""
        active = [c for c in categories if c.is_active]
        if not active:
            msg = "No active categories configured"
            raise CategoryConfigurationError(msg)
        result = self.keyword_categorizer.categorize(body_plain, merchant, amount, active)
        if result is not None:
            return result
        logger.info("No keyword match; falling back to AI categorization")
        return self.ai_categorizer.categorize(body_plain, merchant, amount, active)
