"""
Notification outbox - queues messages during a unit of work.

Notifications are recorded while a store session is open and delivered
only after it commits, so a rolled-back match never announces itself.
Delivery is a single best-effort attempt per message.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .ports import NotificationKind, Notifier

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Notification:
    user_id: str
    kind: NotificationKind
    params: Mapping[str, Any] = field(default_factory=dict)


@dataclass
class Outbox:
    """Ordered list of pending notifications."""

    pending: list[Notification] = field(default_factory=list)

    def add(self, user_id: str, kind: NotificationKind, **params: Any) -> None:
        self.pending.append(Notification(user_id, kind, params))

    def dispatch(self, notifier: Notifier) -> int:
        """
        Send every pending notification once.

        A failed delivery is logged and skipped; it never rolls back the
        state change that caused it and is not retried.

        Returns:
            Number of notifications delivered without error
        """
        delivered = 0
        for notification in self.pending:
            try:
                notifier.notify(notification.user_id, notification.kind, notification.params)
            except Exception:
                logger.exception(
                    "Failed to deliver %s notification to %s",
                    notification.kind.value,
                    notification.user_id,
                )
                continue
            delivered += 1
        self.pending.clear()
        return delivered
