"""
Console notifier adapter - Implements Notifier protocol.

This module provides a console-based implementation of the domain's
notifier port, logging verification codes for development use.
"""

import logging
from datetime import datetime

logger = logging.getLogger(__name__)


class ConsoleNotifier:
    """
    Implements Notifier protocol via logging.

    Uses structural subtyping - no explicit inheritance from Protocol.
    For demo/development purposes; never configure it in production.
    """

    def send_verification_code(self, email: str, code: str, expires_at: datetime) -> None:
        """
        Log the verification code (simulates email delivery).

        The code is logged at INFO level so it is visible in container logs.

        Args:
            email: Recipient email address (normalized by domain layer)
            code: Verification code
            expires_at: Moment the code stops being accepted
        """
        logger.info(
            "[VERIFICATION] Email: %s Code: %s Expires: %s",
            email,
            code,
            expires_at.isoformat(),
        )
