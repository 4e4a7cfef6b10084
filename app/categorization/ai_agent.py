"""AICategorizer: fallback categorization through an LLM chat completion.

Used only when no keyword matches. The agent lists the live categories in the system prompt, sends the merchant,
amount and the start of the email body, and maps the free-text answer back to a known category name.
"""

from colorlog.escape_codes import escape_codes
from groq import APIError

from app.categorization.base import BaseCategorizer
from app.categorization.prompts import USER_PROMPT_LOG_LABEL, build_system_prompt, build_user_prompt
from app.core.errors import CategorizationUnavailableError, CategoryConfigurationError
from app.core.models import CategorizationResult, CategoryInfo
from app.core.settings import Settings
from app.core.utils import get_logger

DEFAULT_CONFIDENCE = 0.8
CONFIDENCE_TOKEN_SCALE = 100

logger = get_logger("gastonauta.categorization.ai")


def _get_color(color: str) -> str:
    return escape_codes.get(color, "")


class AICategorizer(BaseCategorizer):
    """Agent that asks a language model for the category of a transaction."""

    def __init__(self, llm_client: object | None, settings: Settings) -> None:
        """Initialize the AICategorizer with an LLM client (None when no API key is configured) and settings."""
        self.llm_client = llm_client
        self.settings = settings

    def categorize(
        self,
        body_plain: str | None,
        merchant: str | None,
        amount: float | None,
        categories: list[CategoryInfo],
    ) -> CategorizationResult:
        """Ask the LLM for a category name and normalize it to the live category list."""
        if self.llm_client is None:
            msg = "GROQ_API_KEY not configured"
            raise CategorizationUnavailableError(msg)
        active = [c for c in categories if c.is_active]
        if not active:
            msg = "No active categories configured"
            raise CategoryConfigurationError(msg)

        cyan = _get_color("cyan")
        green = _get_color("green")
        yellow = _get_color("yellow")
        reset = _get_color("reset")
        logger.info(f"{cyan}INPUT: merchant={merchant!r} amount={amount!r}{reset}")
        logger.info(f"{yellow}PROMPT: {USER_PROMPT_LOG_LABEL}{reset}")
        system_msg = {"role": "system", "content": build_system_prompt(active)}
        user_msg = {
            "role": "user",
            "content": build_user_prompt(body_plain, merchant, amount, self.settings.categorization_body_limit),
        }
        try:
            logger.info(f"{yellow}AGENT: Calling LLM ({self.settings.categorization_model})...{reset}")
            completion = self.llm_client.chat.completions.create(
                model=self.settings.categorization_model,
                messages=[system_msg, user_msg],
                temperature=self.settings.categorization_temperature,
                max_tokens=self.settings.categorization_max_tokens,
            )
        except APIError as exc:
            msg = f"Groq API call failed: {exc}"
            logger.exception(msg)
            raise CategorizationUnavailableError(msg) from exc

        raw_output = self._collect_llm_output(completion)
        logger.info(f"{green}OUTPUT: {raw_output!r}{reset}")
        result = CategorizationResult(
            category=self.normalize_category(raw_output, active),
            confidence=self._confidence(getattr(completion, "usage", None)),
            model=getattr(completion, "model", None) or self.settings.categorization_model,
        )
        logger.info(f"{green}AGENT: Categorized as '{result.category}' ({result.confidence:.2f}){reset}")
        return result

    def normalize_category(self, raw_output: str, categories: list[CategoryInfo]) -> str:
        """Case-insensitive exact match against the category names, else the fallback category."""
        answer = raw_output.strip().strip("\"'. ").lower()
        for category in categories:
            if category.name.strip().lower() == answer:
                return category.name
        logger.warning(f"LLM answer {raw_output!r} is not a known category; using '{self.settings.fallback_category}'")
        return self.settings.fallback_category

    def _collect_llm_output(self, completion: object) -> str:
        """Text content of the first choice, empty when the response carries none."""
        try:
            content = completion.choices[0].message.content
        except (AttributeError, IndexError, TypeError):
            logger.warning("LLM response has no message content")
            return ""
        return content or ""

    def _confidence(self, usage: object | None) -> float:
        """Completion-token count scaled to [0, 1], or a fixed default when usage is not reported."""
        prompt_tokens = getattr(usage, "prompt_tokens", None)
        completion_tokens = getattr(usage, "completion_tokens", None)
        if prompt_tokens and completion_tokens:
            return min(1.0, completion_tokens / CONFIDENCE_TOKEN_SCALE)
        return DEFAULT_CONFIDENCE
