"""Prompts for the AI categorizer: system and user prompt builders over the live category list."""

from app.core.models import CategoryInfo
from app.core.utils import format_clp

SYSTEM_PROMPT_HEADER = """
Eres un asistente de categorización de gastos bancarios chilenos.
Analiza el siguiente mensaje de transacción bancaria y determina la categoría más apropiada.

Categorías disponibles:
""".strip()

SYSTEM_PROMPT_FOOTER = """
Responde SOLO con el nombre de la categoría, exactamente como aparece en la lista, sin puntuación adicional.
Ejemplo de respuesta válida: "{example}"
""".strip()

USER_PROMPT_TEMPLATE = """
Transaction Details:
- Merchant/Store: {merchant}
- Amount: {amount}
- Email Content:
{body}

Determine the category:
""".strip()

USER_PROMPT_LOG_LABEL = "Categorize bank transaction (merchant, amount, email body)"

MAX_KEYWORD_HINTS = 8


def describe_category(category: CategoryInfo) -> str:
    """One prompt line per category: name, description and a few keyword hints."""
    line = f"- {category.name}"
    if category.description:
        line += f": {category.description}"
    hints = [k.strip() for k in category.keywords if k and k.strip()][:MAX_KEYWORD_HINTS]
    if hints:
        line += f" (palabras clave: {', '.join(hints)})"
    return line


def build_system_prompt(categories: list[CategoryInfo]) -> str:
    """System prompt enumerating every active category."""
    active = [c for c in categories if c.is_active]
    lines = "\n".join(describe_category(c) for c in active)
    example = active[0].name if active else ""
    return f"{SYSTEM_PROMPT_HEADER}\n{lines}\n\n{SYSTEM_PROMPT_FOOTER.format(example=example)}"


def build_user_prompt(body_plain: str | None, merchant: str | None, amount: float | None, body_limit: int) -> str:
    """User prompt with the merchant, the CLP amount and the start of the email body."""
    return USER_PROMPT_TEMPLATE.format(
        merchant=merchant or "Unknown",
        amount=format_clp(amount) if amount else "Unknown",
        body=(body_plain or "")[:body_limit],
    )
