"""Categorization package: keyword matcher, AI fallback agent and the two-stage pipeline."""

from .ai_agent import AICategorizer  # noqa: F401
from .base import BaseCategorizer  # noqa: F401
from .keywords import KeywordCategorizer  # noqa: F401
from .pipeline import TransactionCategorizer  # noqa: F401
