"""Notifier adapters - Verification code delivery."""

from .console import ConsoleNotifier
from .smtp import SmtpNotifier

__all__ = ["ConsoleNotifier", "SmtpNotifier"]
