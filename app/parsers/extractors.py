"""Field extractors for bank notification emails.

Each extractor is a pure function of the email body and the bank-specific patterns it is given. Patterns are tried in
order and the first match wins. Extractors return None instead of raising when the body is empty or nothing matches, so
a parser can always produce a draft.

Date patterns use named groups understood by ``build_timestamp``: ``day``, ``month`` or ``month_name``, ``year`` and the
optional ``hour``, ``minute``, ``second`` and ``meridiem``.
"""

import re
from collections.abc import Iterable

CHILE_UTC_OFFSET = "-03:00"

SPANISH_MONTHS = {
    "enero": "01",
    "febrero": "02",
    "marzo": "03",
    "abril": "04",
    "mayo": "05",
    "junio": "06",
    "julio": "07",
    "agosto": "08",
    "septiembre": "09",
    "setiembre": "09",
    "octubre": "10",
    "noviembre": "11",
    "diciembre": "12",
}

KNOWN_BANKS = {
    "bancochile": "Banco de Chile",
    "banco de chile": "Banco de Chile",
    "bancoestado": "Banco Estado",
    "banco estado": "Banco Estado",
    "santander": "Santander Chile",
}

NOON = 12
ACCOUNT_SUFFIX_LEN = 4

# "$1.234.567", "$595", "$ 12.990,50"
AMOUNT_TOKEN = r"\$\s*(\d[\d.]*(?:,\d+)?)"
UPPER = "A-ZÁÉÍÓÚÑÜ"
LOWER = "a-záéíóúñü"

SLASH_DATETIME = re.compile(
    r"(?P<day>\d{2})/(?P<month>\d{2})/(?P<year>\d{4})\s+(?P<hour>\d{2}):(?P<minute>\d{2})",
)
TWELVE_HOUR_DATETIME = re.compile(
    r"(?P<day>\d{2})-(?P<month>\d{2})-(?P<year>\d{4}),?\s+"
    r"(?P<hour>\d{1,2}):(?P<minute>\d{2})(?::(?P<second>\d{2}))?\s*"
    r"(?P<meridiem>[ap])\.?\s*m\.?",
    re.IGNORECASE,
)
PROSE_DATE = re.compile(
    r"el\s+d[ií]a\s+(?P<day>\d{1,2})\s+de\s+(?P<month_name>[a-záéíóú]+)\s+de\s+(?P<year>\d{4})",
    re.IGNORECASE,
)


def _first_match(body: str | None, patterns: Iterable[re.Pattern]) -> re.Match | None:
    if not body:
        return None
    for pattern in patterns:
        match = pattern.search(body)
        if match:
            return match
    return None


def normalize_amount(raw: str | None) -> float | None:
    """Turn a CLP amount string into a number: '1.234.567' -> 1234567.0, '12,5' -> 12.5."""
    if not raw:
        return None
    cleaned = raw.strip().replace(".", "").replace(",", ".", 1)
    try:
        return float(cleaned)
    except ValueError:
        return None


def extract_amount(body: str | None, patterns: Iterable[re.Pattern]) -> float | None:
    """Extract the transaction amount captured by the first matching pattern."""
    match = _first_match(body, patterns)
    return normalize_amount(match.group(1)) if match else None


def extract_account_last4(body: str | None, patterns: Iterable[re.Pattern]) -> str | None:
    """Extract the last four digits of a masked or full account number."""
    match = _first_match(body, patterns)
    if not match:
        return None
    digits = re.sub(r"\D", "", match.group(1))
    return digits[-ACCOUNT_SUFFIX_LEN:] if len(digits) >= ACCOUNT_SUFFIX_LEN else None


def extract_merchant(body: str | None, patterns: Iterable[re.Pattern]) -> str | None:
    """Extract the merchant or transfer recipient ("who received the money")."""
    match = _first_match(body, patterns)
    if not match:
        return None
    merchant = match.group(1).strip(" \t.,")
    return merchant or None


def extract_customer_name(body: str | None, patterns: Iterable[re.Pattern]) -> str | None:
    """Extract the account holder's name from a banner or salutation line."""
    match = _first_match(body, patterns)
    if not match:
        return None
    name = match.group(1).strip()
    return name or None


def month_number(name: str | None) -> str:
    """Spanish month name to its two-digit number. Unknown names fall back to '01'."""
    return SPANISH_MONTHS.get((name or "").strip().lower(), "01")


def to_24_hour(hour: int, meridiem: str | None) -> int:
    """Convert a 12-hour clock value using a Spanish a.m./p.m. marker."""
    if not meridiem:
        return hour
    marker = meridiem.strip().lower()[:1]
    if marker == "p" and hour != NOON:
        return hour + NOON
    if marker == "a" and hour == NOON:
        return 0
    return hour


def build_timestamp(
    day: str,
    month: str,
    year: str,
    hour: str | None = None,
    minute: str | None = None,
    second: str | None = None,
    meridiem: str | None = None,
) -> str:
    """Build an ISO-8601 timestamp in Chile mainland time from date/time fragments."""
    hour_value = to_24_hour(int(hour or 0), meridiem)
    return (
        f"{int(year):04d}-{int(month):02d}-{int(day):02d}"
        f"T{hour_value:02d}:{int(minute or 0):02d}:{int(second or 0):02d}{CHILE_UTC_OFFSET}"
    )


def extract_transaction_date(body: str | None, patterns: Iterable[re.Pattern]) -> str | None:
    """Extract the transaction timestamp using date patterns with named groups."""
    match = _first_match(body, patterns)
    if not match:
        return None
    groups = match.groupdict()
    month = groups.get("month") or month_number(groups.get("month_name"))
    return build_timestamp(
        day=groups["day"],
        month=month,
        year=groups["year"],
        hour=groups.get("hour"),
        minute=groups.get("minute"),
        second=groups.get("second"),
        meridiem=groups.get("meridiem"),
    )


def normalize_bank_name(name: str | None) -> str | None:
    """Map a bank name as written in an email to its display name. Unknown banks are kept as written."""
    if not name:
        return None
    cleaned = " ".join(name.split())
    lowered = cleaned.lower()
    for fragment, display_name in KNOWN_BANKS.items():
        if fragment in lowered:
            return display_name
    return cleaned or None


def extract_sender_bank(body: str | None, patterns: Iterable[re.Pattern]) -> str | None:
    """Extract an intermediary bank named in the body, normalized to its display name."""
    match = _first_match(body, patterns)
    return normalize_bank_name(match.group(1)) if match else None
