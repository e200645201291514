"""
Console notifier adapter - Implements Notifier protocol.

This module provides a console-based implementation of the domain's
notifier port, logging outbound messages instead of pushing them to a
chat platform.
"""

import logging
from collections.abc import Mapping
from typing import Any

from cupid.domain.ports import NotificationKind

logger = logging.getLogger(__name__)


class ConsoleNotifier:
    """
    Implements Notifier protocol via console logging.

    Uses structural subtyping - no explicit inheritance from Protocol.
    For demo/development purposes - prints notifications to stdout.
    """

    def notify(self, user_id: str, kind: NotificationKind, params: Mapping[str, Any]) -> None:
        """
        Log a notification to console (simulates push delivery).

        The message is logged at INFO level to be visible in docker-compose logs.

        Args:
            user_id: Recipient's external id
            kind: Notification kind selected by the domain
            params: Template parameters
        """
        logger.info("[NOTIFY] To: %s Kind: %s Params: %s", user_id, kind.value, dict(params))
