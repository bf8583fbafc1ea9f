"""
Unit tests for SmtpNotifier adapter.

smtplib is patched; no sockets are opened.
"""

from datetime import datetime, timezone
from email import message_from_string
from unittest.mock import MagicMock, patch

import pytest

from otpgate.adapters.smtp.smtp import SUBJECT, SmtpNotifier

EXPIRES = datetime(2026, 1, 5, 12, 10, tzinfo=timezone.utc)


def make_notifier(port: int = 465) -> SmtpNotifier:
    return SmtpNotifier(
        host="smtp.example.com",
        port=port,
        user="mailer",
        password="mail-pass",
        sender="no-reply@example.com",
        timeout_seconds=3.0,
    )


class TestConstruction:
    @pytest.mark.parametrize("missing", ["host", "user", "password", "sender"])
    def test_required_fields(self, missing: str) -> None:
        kwargs = {
            "host": "smtp.example.com",
            "port": 465,
            "user": "mailer",
            "password": "mail-pass",
            "sender": "no-reply@example.com",
        }
        kwargs[missing] = ""
        with pytest.raises(ValueError):
            SmtpNotifier(**kwargs)


class TestSend:
    @patch("otpgate.adapters.smtp.smtp.smtplib.SMTP_SSL")
    def test_port_465_uses_implicit_tls(self, mock_ssl: MagicMock) -> None:
        server = mock_ssl.return_value.__enter__.return_value

        make_notifier(465).send_verification_code("ada@example.com", "483920", EXPIRES)

        args, kwargs = mock_ssl.call_args
        assert args == ("smtp.example.com", 465)
        assert kwargs["timeout"] == 3.0
        server.login.assert_called_once_with("mailer", "mail-pass")
        sender, recipients, body = server.sendmail.call_args.args
        assert sender == "no-reply@example.com"
        assert recipients == ["ada@example.com"]
        assert "483920" in body

    @patch("otpgate.adapters.smtp.smtp.smtplib.SMTP")
    def test_other_port_uses_starttls(self, mock_smtp: MagicMock) -> None:
        server = mock_smtp.return_value.__enter__.return_value

        make_notifier(587).send_verification_code("ada@example.com", "483920", EXPIRES)

        mock_smtp.assert_called_once_with("smtp.example.com", 587, timeout=3.0)
        server.starttls.assert_called_once()
        server.login.assert_called_once_with("mailer", "mail-pass")
        server.sendmail.assert_called_once()

    @patch("otpgate.adapters.smtp.smtp.smtplib.SMTP_SSL")
    def test_transport_errors_propagate(self, mock_ssl: MagicMock) -> None:
        mock_ssl.side_effect = TimeoutError("connect timed out")
        with pytest.raises(TimeoutError):
            make_notifier().send_verification_code("ada@example.com", "483920", EXPIRES)


class TestMessage:
    def test_headers_and_body(self) -> None:
        msg = make_notifier()._build_message("ada@example.com", "004821", EXPIRES)
        parsed = message_from_string(msg.as_string())

        assert parsed["Subject"] == SUBJECT
        assert parsed["To"] == "ada@example.com"
        assert parsed["From"] == "no-reply@example.com"
        plain = parsed.get_payload()[0].get_payload(decode=True).decode()
        assert "004821" in plain
        assert "2026-01-05 12:10 UTC" in plain
