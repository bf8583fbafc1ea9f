"""Test doubles shared across the suite."""

from datetime import datetime, timedelta, timezone

TEST_SECRET = "test-signing-secret-that-is-long-enough-for-hs256"
ADMIN_EMAIL = "root@example.com"
ADMIN_PASSWORD = "admin-password-1"


class FakeClock:
    """Callable clock returning a fixed, manually advanced UTC time."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2026, 1, 5, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


class RecordingNotifier:
    """Notifier that keeps every (email, code, expires_at) it was given."""

    def __init__(self) -> None:
        self.sent: list[tuple[str, str, datetime]] = []

    def send_verification_code(self, email: str, code: str, expires_at: datetime) -> None:
        self.sent.append((email, code, expires_at))

    def last_code_for(self, email: str) -> str:
        for sent_email, code, _ in reversed(self.sent):
            if sent_email == email:
                return code
        raise AssertionError(f"No code sent to {email}")


class FailingNotifier:
    """Notifier whose transport is down."""

    def send_verification_code(self, email: str, code: str, expires_at: datetime) -> None:
        raise ConnectionRefusedError("smtp unreachable")
