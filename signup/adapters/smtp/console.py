"""
Console notifier adapter - Implements Notifier protocol.

This module provides a console-based implementation of the domain's
notifier port, logging confirmation messages for demo purposes.
"""

import logging

logger = logging.getLogger(__name__)


class ConsoleNotifier:
    """
    Implements Notifier protocol via console logging.

    Uses structural subtyping - no explicit inheritance from Protocol.
    For demo/development purposes - the message body, including the
    confirmation link, is logged so it can be copied from the logs.
    """

    def send(self, to_address: str, subject: str, html_body: str) -> None:
        """
        Log the message at INFO level (simulates email delivery).

        Args:
            to_address: Recipient email address
            subject: Message subject
            html_body: HTML message body
        """
        logger.info("[EMAIL] To: %s Subject: %s Body: %s", to_address, subject, html_body)
