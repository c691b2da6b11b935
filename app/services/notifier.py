import logging
from dataclasses import dataclass
from typing import List, Optional, Union

from fastapi_mail import ConnectionConfig, FastMail, MessageSchema, MessageType
from fastapi_mail.errors import ConnectionErrors

from app.core.config import Settings

logger = logging.getLogger(__name__)


@dataclass
class SendResult:
    success: bool
    error: Optional[str] = None


def split_recipients(to: Union[str, List[str]]) -> List[str]:
    items = to if isinstance(to, (list, tuple)) else str(to or "").split(",")
    return [item.strip() for item in items if item and item.strip()]


def build_mail_config(settings: Settings) -> ConnectionConfig:
    return ConnectionConfig(
        MAIL_USERNAME=settings.mail_username,
        MAIL_PASSWORD=settings.mail_password,
        MAIL_FROM=settings.mail_from,
        MAIL_FROM_NAME=settings.mail_from_name,
        MAIL_PORT=settings.mail_port,
        MAIL_SERVER=settings.mail_server,
        MAIL_STARTTLS=settings.mail_starttls,
        MAIL_SSL_TLS=settings.mail_ssl_tls,
        USE_CREDENTIALS=settings.mail_use_credentials,
        SUPPRESS_SEND=1 if settings.mail_suppress_send else 0,
    )


class Notifier:
    """Envía correos HTML. Nunca lanza: devuelve SendResult(success, error)."""

    def __init__(self, mailer: FastMail):
        self.mailer = mailer

    async def send(self, to: Union[str, List[str]], subject: str, html_body: str) -> SendResult:
        recipients = split_recipients(to)
        if not recipients:
            return SendResult(False, "Sin destinatarios.")
        try:
            message = MessageSchema(
                subject=subject,
                recipients=recipients,
                body=html_body,
                subtype=MessageType.html,
            )
            await self.mailer.send_message(message)
        except (ConnectionErrors, ValueError, OSError) as exc:
            logger.error("Error al enviar el correo a %s: %s", ", ".join(recipients), exc)
            return SendResult(False, str(exc))
        return SendResult(True)


_notifier: Optional[Notifier] = None


def get_notifier() -> Notifier:
    global _notifier
    if _notifier is None:
        _notifier = Notifier(FastMail(build_mail_config(Settings())))
    return _notifier
