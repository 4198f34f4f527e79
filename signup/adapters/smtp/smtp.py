"""
SMTP notifier adapter - Implements Notifier protocol.

Sends confirmation messages through an SMTP relay with fastapi-mail.
Transport failures are raised as DeliveryError; retrying is left to the relay.
"""

import asyncio
import logging

from aiosmtplib import SMTPException
from fastapi_mail import ConnectionConfig, FastMail, MessageSchema, MessageType
from fastapi_mail.errors import ConnectionErrors

from signup.domain.exceptions import DeliveryError

logger = logging.getLogger(__name__)


class SmtpNotifier:
    """
    Implements Notifier protocol via fastapi-mail.

    send() is synchronous like the rest of the domain: it drives the async
    client to completion on a private event loop. Callers run on worker
    threads, never on the server's event loop.
    """

    def __init__(
        self,
        host: str,
        port: int,
        sender: str,
        sender_name: str = "",
        username: str | None = None,
        password: str | None = None,
        use_tls: bool = True,
        timeout: int = 10,
    ) -> None:
        self.config = ConnectionConfig(
            MAIL_USERNAME=username or "",
            MAIL_PASSWORD=password or "",
            MAIL_FROM=sender,
            MAIL_FROM_NAME=sender_name or None,
            MAIL_PORT=port,
            MAIL_SERVER=host,
            MAIL_STARTTLS=use_tls,
            MAIL_SSL_TLS=False,
            USE_CREDENTIALS=bool(username),
            VALIDATE_CERTS=True,
            TIMEOUT=timeout,
        )
        self._fastmail = FastMail(self.config)

    def build_message(self, to_address: str, subject: str, html_body: str) -> MessageSchema:
        return MessageSchema(
            subject=subject,
            recipients=[to_address],
            body=html_body,
            subtype=MessageType.html,
        )

    def send(self, to_address: str, subject: str, html_body: str) -> None:
        """
        Deliver the message to the SMTP relay.

        Raises:
            DeliveryError: On connection, authentication or refusal errors
        """
        message = self.build_message(to_address, subject, html_body)
        try:
            asyncio.run(self._fastmail.send_message(message))
        except (ConnectionErrors, SMTPException, OSError) as e:
            raise DeliveryError(
                f"SMTP delivery to {self.config.MAIL_SERVER}:{self.config.MAIL_PORT} failed"
            ) from e
        logger.info("Confirmation email handed to %s:%s", self.config.MAIL_SERVER, self.config.MAIL_PORT)
