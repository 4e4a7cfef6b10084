"""Keyword categorizer: deterministic first pass over the user's category keywords.

Categories are checked in priority order so that specific commerce categories win over generic ones whose keywords
(e.g. "servicios") also show up in unrelated emails. Within a category, each keyword is tried as a whole word first
(confidence 1.0) and then as a plain substring (confidence 0.9). Substring matching stays enabled for short keywords,
so "gas" also matches inside "Vegas".
"""

import re

from app.categorization.base import BaseCategorizer
from app.core.models import CategorizationResult, CategoryInfo
from app.core.utils import get_logger

KEYWORD_MODEL = "keyword"
WORD_MATCH_CONFIDENCE = 1.0
SUBSTRING_MATCH_CONFIDENCE = 0.9
CATCH_ALL_RANK = 10_000

logger = get_logger("gastonauta.categorization.keywords")


class KeywordCategorizer(BaseCategorizer):
    """Match the email body and merchant against per-category keywords."""

    def __init__(
        self, priority: dict[str, int] | None = None, unlisted_rank: int = 10, catch_all: str | None = "Otros"
    ) -> None:
        """Initialize with a name -> rank table (lower is checked first) and the catch-all category name."""
        self.priority = {name.strip().lower(): rank for name, rank in (priority or {}).items()}
        self.unlisted_rank = unlisted_rank
        self.catch_all = catch_all.strip().lower() if catch_all else None

    def rank(self, category: CategoryInfo) -> int:
        """Priority rank of a category; the catch-all always sorts last."""
        name = category.name.strip().lower()
        if self.catch_all and name == self.catch_all:
            return CATCH_ALL_RANK
        return self.priority.get(name, self.unlisted_rank)

    def sort_categories(self, categories: list[CategoryInfo]) -> list[CategoryInfo]:
        """Active categories in the order they are checked. Equal ranks keep their original order."""
        return sorted((c for c in categories if c.is_active), key=self.rank)

    def categorize(
        self,
        body_plain: str | None,
        merchant: str | None,
        amount: float | None = None,
        categories: list[CategoryInfo] | None = None,
    ) -> CategorizationResult | None:
        """Return the first keyword hit in priority order, or None so the caller can fall back to the AI."""
        _ = amount
        search_text = f"{body_plain or ''} {merchant or ''}".lower()
        for category in self.sort_categories(categories or []):
            for raw_keyword in category.keywords:
                keyword = (raw_keyword or "").strip().lower()
                if not keyword:
                    continue
                escaped = re.escape(keyword)
                if re.search(rf"\b{escaped}\b", search_text, re.IGNORECASE):
                    logger.info(f"Keyword '{keyword}' matched category '{category.name}' as a whole word")
                    return CategorizationResult(
                        category=category.name, confidence=WORD_MATCH_CONFIDENCE, model=KEYWORD_MODEL
                    )
                if re.search(escaped, search_text, re.IGNORECASE):
                    logger.info(f"Keyword '{keyword}' matched category '{category.name}' as a substring")
                    return CategorizationResult(
                        category=category.name, confidence=SUBSTRING_MATCH_CONFIDENCE, model=KEYWORD_MODEL
                    )
        logger.info("No keyword matched any category")
        return None
