"""
SMTP notifier adapter - Sends verification codes by email.

Port 465 uses implicit TLS; any other port upgrades with STARTTLS. Every
socket operation is bounded by the configured timeout, and any failure
is raised so the domain can report NotificationFailed.
"""

import logging
import smtplib
import ssl
from datetime import datetime, timezone
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

logger = logging.getLogger(__name__)

SUBJECT = "Your verification code"


class SmtpNotifier:
    """
    Implements Notifier protocol via smtplib.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(
        self,
        host: str,
        port: int,
        user: str,
        password: str,
        sender: str,
        timeout_seconds: float = 5.0,
    ) -> None:
        if not (host and user and password and sender):
            raise ValueError("SMTP host, user, password and sender are required")
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.sender = sender
        self.timeout_seconds = timeout_seconds

    def send_verification_code(self, email: str, code: str, expires_at: datetime) -> None:
        msg = self._build_message(email, code, expires_at)
        context = ssl.create_default_context()
        if self.port == 465:
            with smtplib.SMTP_SSL(
                self.host, self.port, context=context, timeout=self.timeout_seconds
            ) as server:
                server.login(self.user, self.password)
                server.sendmail(self.sender, [email], msg.as_string())
        else:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout_seconds) as server:
                server.ehlo()
                server.starttls(context=context)
                server.login(self.user, self.password)
                server.sendmail(self.sender, [email], msg.as_string())
        logger.info("Verification code sent to %s", email)

    def _build_message(self, email: str, code: str, expires_at: datetime) -> MIMEMultipart:
        expiry = expires_at.astimezone(timezone.utc).strftime("%Y-%m-%d %H:%M UTC")
        text_body = (
            f"Your verification code is {code}.\n"
            f"It expires at {expiry} and can be used once."
        )
        html_body = (
            f"<p>Your verification code is <strong>{code}</strong>.</p>"
            f"<p>It expires at {expiry} and can be used once.</p>"
        )
        msg = MIMEMultipart("alternative")
        msg["Subject"] = SUBJECT
        msg["From"] = self.sender
        msg["To"] = email
        msg.attach(MIMEText(text_body, "plain", "utf-8"))
        msg.attach(MIMEText(html_body, "html", "utf-8"))
        return msg
