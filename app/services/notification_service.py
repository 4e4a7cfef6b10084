"""NotificationService sends ingestion summaries by email through the Resend HTTP API."""

import requests

from app.core.models import CategorizationResult, TransactionDraft
from app.core.settings import Settings
from app.core.utils import format_clp, get_logger

logger = get_logger("gastonauta.notifications")

REQUEST_TIMEOUT_SECONDS = 10
SUCCESS_SUBJECT = "✅ Email guardado exitosamente - {merchant}"
FAILURE_SUBJECT = "❌ Error al guardar email"

EMAIL_TYPE_LABELS = {
    "cargo_en_cuenta": "Cargo en cuenta",
    "transferencia_fondos": "Transferencia de fondos",
    "transaction_notification": "Notificación de transacción",
}


class NotificationService:
    """Fire-and-forget notifications. Disabled when the API key or recipient is not configured."""

    def __init__(self, settings: Settings, session: requests.Session | None = None) -> None:
        """Initialize the service with settings and an optional requests session."""
        self.settings = settings
        self.http = session or requests.Session()

    @property
    def enabled(self) -> bool:
        """Whether credentials and a recipient are configured."""
        return bool(self.settings.resend_api_key and self.settings.notification_email_to)

    def notify_success(
        self, message_id: str, draft: TransactionDraft, categorization: CategorizationResult | None = None
    ) -> bool:
        """Summarize a stored transaction."""
        lines = [
            f"Message ID: {message_id}",
            f"Tipo: {EMAIL_TYPE_LABELS.get(draft.email_type or '', draft.email_type or 'Desconocido')}",
            f"Comercio/Destinatario: {draft.merchant or 'Desconocido'}",
            f"Monto: {format_clp(draft.amount) or 'Desconocido'}",
            f"Banco: {draft.sender_bank or 'Desconocido'}",
            f"Fecha: {draft.transaction_date or 'Desconocida'}",
        ]
        if categorization is not None:
            lines.append(f"Categoría: {categorization.category} ({categorization.model})")
        subject = SUCCESS_SUBJECT.format(merchant=draft.merchant or "Sin comercio")
        return self.send(subject, "\n".join(lines))

    def notify_failure(self, message_id: str | None, error: str) -> bool:
        """Report an email that could not be stored."""
        text = f"Message ID: {message_id or 'desconocido'}\nError: {error}"
        return self.send(FAILURE_SUBJECT, text)

    def send(self, subject: str, text: str) -> bool:
        """Send one email. Returns False when disabled or when the request fails; never raises."""
        if not self.enabled:
            logger.debug("Notifications disabled: no Resend API key or recipient configured")
            return False
        payload = {
            "from": self.settings.notification_email_from,
            "to": [self.settings.notification_email_to],
            "subject": subject,
            "text": text,
        }
        headers = {"Authorization": f"Bearer {self.settings.resend_api_key}", "Content-Type": "application/json"}
        try:
            resp = self.http.post(
                self.settings.resend_api_url, headers=headers, json=payload, timeout=REQUEST_TIMEOUT_SECONDS
            )
            resp.raise_for_status()
        except requests.RequestException as exc:
            logger.warning(f"Failed to send notification '{subject}': {exc}")
            return False
        logger.info(f"Notification sent: {subject}")
        return True
