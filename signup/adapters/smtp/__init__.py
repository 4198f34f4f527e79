"""Notifier adapters - Console and SMTP email delivery."""

from .console import ConsoleNotifier
from .smtp import SmtpNotifier

__all__ = ["ConsoleNotifier", "SmtpNotifier"]
