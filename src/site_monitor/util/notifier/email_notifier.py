import asyncio
import logging
import smtplib
import ssl
from email.message import EmailMessage
from email.utils import formatdate, make_msgid

from site_monitor.schema.monitor_config_schema import SmtpConfig
from site_monitor.util.notifier.base import BaseNotifier

IMPLICIT_TLS_PORT = 465


class EmailNotifier(BaseNotifier):
    """
    Plain-text email over SMTP.

    Port 465 uses an implicit TLS connection. Any other port connects in
    plaintext, upgrades with STARTTLS when the server offers it and logs in
    when AUTH is offered.
    """

    def __init__(self, smtp_config: SmtpConfig, enabled: bool = True):
        super().__init__(enabled=enabled)
        self.logger = logging.getLogger("EmailNotifier")

        self.smtp_host = smtp_config.SERVER
        self.smtp_port = int(smtp_config.PORT)
        self.username = smtp_config.USER
        self.password = smtp_config.PASSWORD
        self.from_addr = smtp_config.from_addr
        self.to_addr = smtp_config.RECIPIENT
        self.timeout_sec = smtp_config.TIMEOUT_SEC

    async def send(self, subject: str, body: str) -> bool:
        if not self.enabled:
            self.logger.debug("[EMAIL] Email notifier is disabled, skipping")
            return False

        self.logger.info(f"[EMAIL] Send Email to {self.to_addr}: {subject}")

        try:
            loop: asyncio.AbstractEventLoop = asyncio.get_running_loop()
            await loop.run_in_executor(None, self._send_email_sync, subject, body)
            self.logger.info(f"[EMAIL] Successfully sent: {subject}")
            return True
        except Exception as e:
            self.logger.error(f"[EMAIL] Failed to send: {e.__class__.__name__}: {e}")
            return False

    def build_message(self, subject: str, body: str) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = self.from_addr
        msg["To"] = self.to_addr
        msg["Subject"] = subject
        msg["Date"] = formatdate(usegmt=True)
        msg["Message-ID"] = make_msgid()
        msg.set_content(body, subtype="plain", charset="utf-8")
        return msg

    def _send_email_sync(self, subject: str, body: str) -> None:
        msg = self.build_message(subject, body)
        context = ssl.create_default_context()

        if self.smtp_port == IMPLICIT_TLS_PORT:
            with smtplib.SMTP_SSL(self.smtp_host, self.smtp_port, timeout=self.timeout_sec, context=context) as server:
                server.ehlo()
                self._login_if_offered(server)
                server.send_message(msg)
            return

        with smtplib.SMTP(self.smtp_host, self.smtp_port, timeout=self.timeout_sec) as server:
            server.ehlo()
            if server.has_extn("starttls"):
                server.starttls(context=context)
                server.ehlo()
            else:
                self.logger.warning(f"[EMAIL] {self.smtp_host}:{self.smtp_port} does not offer STARTTLS")
            self._login_if_offered(server)
            server.send_message(msg)

    def _login_if_offered(self, server: smtplib.SMTP) -> None:
        if server.has_extn("auth"):
            server.login(self.username, self.password)
