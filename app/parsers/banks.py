"""Bank-format parsers.

One parser per bank email layout. Each parser seeds a TransactionDraft with the bank's defaults and fills the rest with
the field extractors, using patterns that keep each bank's matching quirks.
"""

import re
from collections.abc import Callable

from app.core.models import TransactionDraft
from app.parsers.extractors import (
    AMOUNT_TOKEN,
    PROSE_DATE,
    SLASH_DATETIME,
    TWELVE_HOUR_DATETIME,
    LOWER,
    UPPER,
    extract_account_last4,
    extract_amount,
    extract_customer_name,
    extract_merchant,
    extract_sender_bank,
    extract_transaction_date,
)

BankParser = Callable[[str | None], TransactionDraft]

BANCO_CHILE = "Banco de Chile"
BANCO_ESTADO = "Banco Estado"
SANTANDER = "Santander Chile"

CARGO_EN_CUENTA = "cargo_en_cuenta"
TRANSFERENCIA_FONDOS = "transferencia_fondos"
TRANSACTION_NOTIFICATION = "transaction_notification"

# "en TOTTUS LOS DOMINI el ...", "en MERPAGO*ARTICULOS, ...", "en Uber Eats el ..."
MERCHANT_EN = re.compile(rf"\ben\s+([{UPPER}][{UPPER}{LOWER}0-9 .*&'/-]*?)(?=\s+el\b|,|\r?\n|$)")

# Banco de Chile: cargo en cuenta
CHILE_BANNER_NAME = re.compile(r"^Banco de Chile[ \t]*\r?\n(?:[ \t]*\r?\n)+[ \t]*([^:\r\n]+):", re.MULTILINE)
CHILE_PURCHASE_AMOUNT = re.compile(r"compra por\s+" + AMOUNT_TOKEN, re.IGNORECASE)
MONTO_FIELD_AMOUNT = re.compile(r"\bMonto\b[ \t]*:?\s*" + AMOUNT_TOKEN, re.IGNORECASE)
CHILE_MASKED_ACCOUNT = re.compile(r"Cuenta\s*\*{4}(\d{4})", re.IGNORECASE)
CHILE_FAN_ACCOUNT = re.compile(r"Cuenta\s+FAN\s+(\d{4,})", re.IGNORECASE)
CHILE_SLASH_DATE = re.compile(r"\bel\s+" + SLASH_DATETIME.pattern, re.IGNORECASE)
# Tabular layout: "Comercio" on one line, the merchant on the next
COMERCIO_BLOCK = re.compile(rf"^Comercio[ \t]*:?[ \t]*\r?\n[ \t]*([{UPPER}0-9][^\r\n]*)", re.MULTILINE)

# Banco de Chile: transferencia de fondos
CHILE_SALUTATION_NAME = re.compile(r"Estimado\(a\)[ \t]*:?[ \t]*([^:\r\n]+)")
TRANSFER_RECIPIENT = re.compile(
    rf"(?i:transferencia de fondos)\s+a\s+([{UPPER}][^,\r\n]*?)(?=\s*(?:,|\r?\n|$)|\s+(?:el|por)\b)"
)
MONTO_DE_AMOUNT = re.compile(r"monto de\s+" + AMOUNT_TOKEN, re.IGNORECASE)
FULL_ACCOUNT_NUMBER = re.compile(
    r"Cuenta\s+(?:Corriente|Vista|FAN|RUT)?[ \t]*(?:N[°º.]?[ \t]*)?:?\s*(\d[\d-]{2,}\d)",
    re.IGNORECASE,
)
MASKED_ACCOUNT = re.compile(r"Cuenta\s*\*{3,}(\d{4})", re.IGNORECASE)
FECHA_BLOCK_DATE = re.compile(
    r"Fecha[ \t]*:?[ \t]*\r?\n\s*(?P<day>\d{2})/(?P<month>\d{2})/(?P<year>\d{4})"
    r"(?:[ \t]+(?P<hour>\d{2}):(?P<minute>\d{2}))?",
    re.IGNORECASE,
)
BANCO_BLOCK = re.compile(r"^Banco[ \t]*:?[ \t]*\r?\n[ \t]*([^\r\n]+)", re.MULTILINE)

# Banco Estado (legacy)
ESTADO_NAME = re.compile(r"^Estimado[ \t]+([A-Z][a-z]+(?:[ \t]+[A-Z][a-z]+)?)", re.MULTILINE)
ESTADO_AMOUNT = re.compile(r"(?:\bpor|\bmonto de)\s+" + AMOUNT_TOKEN, re.IGNORECASE)
ESTADO_ACCOUNT = re.compile(r"cuenta\s+(?:corriente\s*)?\*{3,}(\d{4})", re.IGNORECASE)
ESTADO_DATE = re.compile(
    r"el\s+d[ií]a\s+(?P<day>\d{2})/(?P<month>\d{2})/(?P<year>\d{4})\s+a\s+las\s+(?P<hour>\d{2}):(?P<minute>\d{2})",
    re.IGNORECASE,
)

# Santander (legacy)
SANTANDER_NAME = re.compile(rf"Estimado[ \t]+([{UPPER}][{LOWER}]+(?:[ \t]+[{UPPER}][{LOWER}]+)+)")
SANTANDER_AMOUNT = re.compile(r"(?:\bde|\bmonto)\s+" + AMOUNT_TOKEN, re.IGNORECASE)
SANTANDER_ACCOUNT = re.compile(r"(?:tarjeta|cuenta)\s+\*{2,}(\d{4})", re.IGNORECASE)
SANTANDER_DATE = re.compile(SLASH_DATETIME.pattern + r"\s*hrs", re.IGNORECASE)


def parse_banco_chile_cargo(body_plain: str | None) -> TransactionDraft:
    """Banco de Chile "Cargo en Cuenta": purchases charged to a checking account."""
    draft = TransactionDraft(sender_bank=BANCO_CHILE, email_type=CARGO_EN_CUENTA)
    if not body_plain:
        return draft
    draft.customer_name = extract_customer_name(body_plain, [CHILE_BANNER_NAME])
    draft.amount = extract_amount(body_plain, [CHILE_PURCHASE_AMOUNT, MONTO_FIELD_AMOUNT])
    draft.account_last4 = extract_account_last4(body_plain, [CHILE_MASKED_ACCOUNT, CHILE_FAN_ACCOUNT])
    draft.merchant = extract_merchant(body_plain, [MERCHANT_EN, COMERCIO_BLOCK])
    draft.transaction_date = extract_transaction_date(body_plain, [CHILE_SLASH_DATE, TWELVE_HOUR_DATETIME])
    return draft


def parse_banco_chile_transferencia(body_plain: str | None) -> TransactionDraft:
    """Banco de Chile "Transferencia de Fondos".

    The recipient is stored as the merchant. When the body names the bank involved in a "Banco" block, it replaces the
    default sender bank.
    """
    draft = TransactionDraft(sender_bank=BANCO_CHILE, email_type=TRANSFERENCIA_FONDOS)
    if not body_plain:
        return draft
    draft.customer_name = extract_customer_name(body_plain, [CHILE_SALUTATION_NAME])
    draft.merchant = extract_merchant(body_plain, [TRANSFER_RECIPIENT])
    draft.amount = extract_amount(body_plain, [MONTO_FIELD_AMOUNT, MONTO_DE_AMOUNT])
    draft.account_last4 = extract_account_last4(body_plain, [FULL_ACCOUNT_NUMBER, MASKED_ACCOUNT])
    draft.transaction_date = extract_transaction_date(body_plain, [PROSE_DATE, FECHA_BLOCK_DATE])
    draft.sender_bank = extract_sender_bank(body_plain, [BANCO_BLOCK]) or draft.sender_bank
    return draft


def parse_banco_estado(body_plain: str | None) -> TransactionDraft:
    """Banco Estado notification (legacy format)."""
    draft = TransactionDraft(sender_bank=BANCO_ESTADO, email_type=TRANSACTION_NOTIFICATION)
    if not body_plain:
        return draft
    draft.customer_name = extract_customer_name(body_plain, [ESTADO_NAME])
    draft.amount = extract_amount(body_plain, [ESTADO_AMOUNT])
    draft.account_last4 = extract_account_last4(body_plain, [ESTADO_ACCOUNT])
    draft.merchant = extract_merchant(body_plain, [MERCHANT_EN])
    draft.transaction_date = extract_transaction_date(body_plain, [ESTADO_DATE])
    return draft


def parse_santander(body_plain: str | None) -> TransactionDraft:
    """Santander Chile notification (legacy format)."""
    draft = TransactionDraft(sender_bank=SANTANDER, email_type=TRANSACTION_NOTIFICATION)
    if not body_plain:
        return draft
    draft.customer_name = extract_customer_name(body_plain, [SANTANDER_NAME])
    draft.amount = extract_amount(body_plain, [SANTANDER_AMOUNT])
    draft.account_last4 = extract_account_last4(body_plain, [SANTANDER_ACCOUNT])
    draft.merchant = extract_merchant(body_plain, [MERCHANT_EN])
    draft.transaction_date = extract_transaction_date(body_plain, [SANTANDER_DATE])
    return draft
