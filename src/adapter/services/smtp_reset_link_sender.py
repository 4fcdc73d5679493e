"""
Reset link email via aiosmtplib.

Returns True on success, False on any failure (never raises).
"""

import html
import logging
from email.message import EmailMessage

import aiosmtplib

from src.app.services.reset_link_sender import IResetLinkSender

logger = logging.getLogger(__name__)

SUBJECT = "Reinicio de NIP"


class SmtpResetLinkSender(IResetLinkSender):
    def __init__(
        self,
        host: str,
        port: int,
        username: str,
        password: str,
        from_email: str,
        from_name: str,
        start_tls: bool = True,
        timeout: float = 15.0,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.from_email = from_email
        self.from_name = from_name
        self.start_tls = start_tls
        self.timeout = timeout

    def is_configured(self) -> bool:
        return bool(self.host)

    def _build_message(self, to_email: str, reset_url: str, vehicle_label: str) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = f"{self.from_name} <{self.from_email}>"
        msg["To"] = to_email
        msg["Subject"] = SUBJECT
        msg.set_content(
            f"Recibimos una solicitud para reiniciar el NIP de tu vehiculo {vehicle_label}.\n\n"
            f"Abre esta liga para elegir un NIP nuevo:\n{reset_url}\n\n"
            "La liga es de un solo uso y expira en unos minutos. "
            "Si no solicitaste el cambio, ignora este correo."
        )
        # Label is customer-set, both values go into markup escaped
        safe_label = html.escape(vehicle_label)
        safe_url = html.escape(reset_url, quote=True)
        msg.add_alternative(
            f"<p>Recibimos una solicitud para reiniciar el NIP de tu vehiculo "
            f"<strong>{safe_label}</strong>.</p>"
            f"<p><a href=\"{safe_url}\">Elegir un NIP nuevo</a></p>"
            "<p style='color:#6b7280;font-size:13px'>La liga es de un solo uso y expira "
            "en unos minutos. Si no solicitaste el cambio, ignora este correo.</p>",
            subtype="html",
        )
        return msg

    async def send(self, to_email: str, reset_url: str, vehicle_label: str) -> bool:
        if not self.is_configured():
            logger.warning("SMTP not configured, reset link not sent")
            return False

        try:
            await aiosmtplib.send(
                self._build_message(to_email, reset_url, vehicle_label),
                hostname=self.host,
                port=self.port,
                username=self.username or None,
                password=self.password or None,
                start_tls=self.start_tls,
                timeout=self.timeout,
            )
            return True
        except Exception as exc:
            # Exception text may echo the message, log the type only
            logger.error("SMTP delivery failed (%s): %s", self.host, type(exc).__name__)
            return False
