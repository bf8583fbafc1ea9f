"""
Unit tests for ConsoleNotifier adapter.

Tests verify the console notifier implements the Notifier protocol
and logs verification codes in the expected format.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone

import pytest

from otpgate.adapters.smtp.console import ConsoleNotifier
from otpgate.domain.ports import Notifier

EXPIRES = datetime(2026, 1, 5, 12, 10, tzinfo=timezone.utc)


class TestConsoleNotifierProtocol:
    """Tests for Notifier protocol compliance."""

    def test_implements_notifier_protocol(self) -> None:
        notifier = ConsoleNotifier()

        def accepts_notifier(n: Notifier) -> None:
            pass

        accepts_notifier(notifier)
        assert callable(notifier.send_verification_code)

    def test_no_explicit_inheritance(self) -> None:
        """ConsoleNotifier uses structural subtyping, not inheritance."""
        assert ConsoleNotifier.__bases__ == (object,)


class TestSendVerificationCode:
    """Tests for send_verification_code method."""

    def test_logs_at_info(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO, logger="otpgate.adapters.smtp.console"):
            ConsoleNotifier().send_verification_code("test@example.com", "123456", EXPIRES)

        assert len(caplog.records) == 1
        assert caplog.records[0].levelno == logging.INFO

    def test_format(self, caplog: pytest.LogCaptureFixture) -> None:
        """Log format: [VERIFICATION] Email: ... Code: ... Expires: ..."""
        with caplog.at_level(logging.INFO, logger="otpgate.adapters.smtp.console"):
            ConsoleNotifier().send_verification_code("user@example.com", "004821", EXPIRES)

        assert "[VERIFICATION]" in caplog.text
        assert "Email: user@example.com" in caplog.text
        assert "Code: 004821" in caplog.text
        assert "Expires: 2026-01-05T12:10:00+00:00" in caplog.text

    def test_returns_none(self) -> None:
        assert ConsoleNotifier().send_verification_code("a@example.com", "1", EXPIRES) is None


class TestThreadSafety:
    """Tests for thread-safe logging."""

    def test_concurrent_logging_is_complete(self, caplog: pytest.LogCaptureFixture) -> None:
        """Concurrent calls each produce one whole record."""
        notifier = ConsoleNotifier()

        with caplog.at_level(logging.INFO, logger="otpgate.adapters.smtp.console"), ThreadPoolExecutor(
            max_workers=5
        ) as executor:
            futures = [
                executor.submit(
                    notifier.send_verification_code, f"user{i}@example.com", f"{i:06d}", EXPIRES
                )
                for i in range(10)
            ]
            for f in futures:
                f.result()

        assert len(caplog.records) == 10
        for record in caplog.records:
            assert "[VERIFICATION]" in record.message
            assert "Code:" in record.message
