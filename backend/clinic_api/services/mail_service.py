"""
Clinic Tracker Backend — Outbound Mail
=======================================

What:  Abstract mail sender plus the fastapi-mail implementation used in
       production.
How:   AuthService depends only on MailSender.send(); the concrete sender is
       the module-level `mail_sender` singleton, which tests replace with a
       mock. FastMailSender builds its ConnectionConfig on first send, so an
       unconfigured development server still imports.
Who:   AuthService.generate_code().

Delivery contract:
    One attempt, no retry, no delivery confirmation. Any delivery failure,
    including a malformed recipient address, becomes MailDeliveryError (→ 500).
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional

from aiosmtplib import SMTPException
from fastapi_mail import ConnectionConfig, FastMail, MessageSchema, MessageType
from fastapi_mail.errors import ConnectionErrors
from pydantic import ValidationError

from clinic_api.config import settings
from clinic_api.exceptions import MailDeliveryError

logger = logging.getLogger(__name__)


class MailSender(ABC):
    """
    Contract:
        - send() either hands the message to the mail server or raises
          MailDeliveryError
        - implementations never retry
    """

    @abstractmethod
    async def send(self, to: str, subject: str, body: str) -> None:
        ...

    @abstractmethod
    def is_configured(self) -> bool:
        """True when the sender has what it needs to attempt delivery."""
        ...


class FastMailSender(MailSender):
    """Plain-text mail through fastapi-mail (STARTTLS or implicit TLS, with login)."""

    def __init__(
        self,
        server: str,
        port: int,
        username: str = "",
        password: str = "",
        starttls: bool = True,
        ssl_tls: bool = False,
        timeout: int = 10,
        sender: str = "",
    ):
        self.server = server
        self.port = port
        self.username = username
        self.password = password
        self.starttls = starttls
        self.ssl_tls = ssl_tls
        self.timeout = timeout
        self.sender = sender or username
        self._config: Optional[ConnectionConfig] = None

    def is_configured(self) -> bool:
        return bool(self.server and self.username and self.password)

    def _connection_config(self) -> ConnectionConfig:
        if self._config is None:
            self._config = ConnectionConfig(
                MAIL_USERNAME=self.username,
                MAIL_PASSWORD=self.password,
                MAIL_FROM=self.sender,
                MAIL_PORT=self.port,
                MAIL_SERVER=self.server,
                MAIL_STARTTLS=self.starttls,
                MAIL_SSL_TLS=self.ssl_tls,
                USE_CREDENTIALS=True,
                TIMEOUT=self.timeout,
            )
        return self._config

    async def send(self, to: str, subject: str, body: str) -> None:
        if not self.is_configured():
            raise MailDeliveryError(
                message="Email delivery is not configured on this server.",
                context={"to": to},
            )
        try:
            client = FastMail(self._connection_config())
            message = MessageSchema(
                subject=subject,
                recipients=[to],
                body=body,
                subtype=MessageType.plain,
            )
            await client.send_message(message)
        except (ConnectionErrors, SMTPException, ValidationError) as e:
            logger.error("Mail to %s failed: %s: %s", to, type(e).__name__, e)
            raise MailDeliveryError(context={"to": to, "error_type": type(e).__name__})
        logger.info("Mail '%s' sent to %s", subject, to)


# ── Singleton Instance ────────────────────────────────────────────────────
mail_sender: MailSender = FastMailSender(
    server=settings.mail_server,
    port=settings.mail_port,
    username=settings.mail_username,
    password=settings.mail_password,
    starttls=settings.mail_starttls,
    ssl_tls=settings.mail_ssl_tls,
    timeout=settings.mail_timeout,
    sender=settings.mail_from,
)
