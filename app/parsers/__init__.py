"""Parsers package: field extractors, bank-format parsers and the parser router for bank notification emails."""

from .router import ParserRegistry, ParserRoute, parse_email, resolve_parser  # noqa: F401
