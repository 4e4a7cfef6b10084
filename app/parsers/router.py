"""Parser router: picks the bank-format parser for an email from its sender and subject.

Routes are an ordered table of (predicate, parser) pairs held by a ParserRegistry. The default table has four layers,
each more permissive than the previous one: exact sender plus subject, sender domain, subject keyword, and a final
fallback to the Banco de Chile "Cargo en Cuenta" parser, the most common format.
"""

from collections.abc import Callable
from dataclasses import dataclass

from app.core.models import TransactionDraft
from app.core.utils import get_logger
from app.parsers.banks import (
    BankParser,
    parse_banco_chile_cargo,
    parse_banco_chile_transferencia,
    parse_banco_estado,
    parse_santander,
)

logger = get_logger("gastonauta.parsers")

RouteMatcher = Callable[[str, str], bool]


@dataclass(frozen=True)
class ParserRoute:
    """A named predicate over the lowercased (sender, subject) pair and the parser it selects."""

    name: str
    matches: RouteMatcher
    parser: BankParser


def sender_and_subject(
    address: str, *, subject_equals: str | None = None, subject_contains: str | None = None
) -> RouteMatcher:
    """Match an exact sender address together with an exact or partial subject."""
    address = address.lower()
    subject_equals = subject_equals.lower() if subject_equals else None
    subject_contains = subject_contains.lower() if subject_contains else None

    def matches(sender: str, subject: str) -> bool:
        if sender != address:
            return False
        if subject_equals is not None and subject == subject_equals:
            return True
        return subject_contains is not None and subject_contains in subject

    return matches


def sender_contains(*fragments: str) -> RouteMatcher:
    """Match when the sender address contains any of the fragments."""
    lowered = tuple(f.lower() for f in fragments)
    return lambda sender, _subject: any(f in sender for f in lowered)


def subject_contains(*fragments: str) -> RouteMatcher:
    """Match when the subject contains any of the fragments."""
    lowered = tuple(f.lower() for f in fragments)
    return lambda _sender, subject: any(f in subject for f in lowered)


def always(_sender: str, _subject: str) -> bool:
    """Match every email."""
    return True


class ParserRegistry:
    """Ordered set of parser routes; the first matching route wins."""

    def __init__(self, routes: list[ParserRoute] | None = None) -> None:
        """Initialize the registry with an optional list of routes, in priority order."""
        self._routes: list[ParserRoute] = list(routes or [])

    def register(self, route: ParserRoute) -> None:
        """Append a route after the existing ones."""
        self._routes.append(route)

    def available(self) -> list[str]:
        """List route names in priority order."""
        return [route.name for route in self._routes]

    def resolve(self, from_email: str | None, subject: str | None) -> ParserRoute | None:
        """Return the first route matching the sender and subject, compared case-insensitively."""
        sender = (from_email or "").strip().lower()
        subject_text = (subject or "").strip().lower()
        for route in self._routes:
            if route.matches(sender, subject_text):
                return route
        return None


DEFAULT_ROUTES = [
    ParserRoute(
        "bancochile-cargo-en-cuenta",
        sender_and_subject("enviodigital@bancochile.cl", subject_equals="Cargo en Cuenta"),
        parse_banco_chile_cargo,
    ),
    ParserRoute(
        "bancochile-transferencia-fondos",
        sender_and_subject("enviodigital@bancochile.cl", subject_contains="Transferencia de Fondos"),
        parse_banco_chile_transferencia,
    ),
    ParserRoute(
        "bancochile-servicio-transferencias",
        sender_and_subject("serviciodetransferencias@bancochile.cl", subject_contains="Transferencia"),
        parse_banco_chile_transferencia,
    ),
    ParserRoute("bancochile-domain", sender_contains("bancochile", "banco.de.chile"), parse_banco_chile_cargo),
    ParserRoute("bancoestado-domain", sender_contains("bancoestado", "banco.estado"), parse_banco_estado),
    ParserRoute("santander-domain", sender_contains("santander"), parse_santander),
    ParserRoute("bancochile-subject", subject_contains("banco de chile", "compra por"), parse_banco_chile_cargo),
    ParserRoute("bancoestado-subject", subject_contains("banco estado", "transferencia"), parse_banco_estado),
    ParserRoute("santander-subject", subject_contains("santander"), parse_santander),
    ParserRoute("default", always, parse_banco_chile_cargo),
]

default_registry = ParserRegistry(DEFAULT_ROUTES)


def resolve_parser(
    from_email: str | None, subject: str | None, registry: ParserRegistry | None = None
) -> ParserRoute:
    """Select the route for an email, falling back to the Banco de Chile cargo parser."""
    route = (registry or default_registry).resolve(from_email, subject)
    return route or DEFAULT_ROUTES[-1]


def parse_email(
    from_email: str | None,
    subject: str | None,
    body_plain: str | None,
    registry: ParserRegistry | None = None,
) -> TransactionDraft:
    """Parse a bank notification email into a TransactionDraft using the routed parser."""
    route = resolve_parser(from_email, subject, registry)
    logger.info(f"Routing email from '{from_email}' with subject '{subject}' to parser '{route.name}'")
    return route.parser(body_plain)
