from __future__ import annotations

import logging
from typing import Protocol

from ..core.enums import NotificationType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor

logger = logging.getLogger(__name__)


class NotificationSender(Protocol):
    def send(self, *, user_id: int, notification_type: NotificationType, title: str, message: str) -> None:
        """Deliver one notification. May raise; callers treat delivery as best effort."""

        raise NotImplementedError


class DatabaseNotificationSender(NotificationSender):
    """Stores notifications in the ``notifications`` table for the user's inbox."""

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def send(self, *, user_id: int, notification_type: NotificationType, title: str, message: str) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO notifications(user_id, notification_type, title, message)
                VALUES(%s,%s,%s,%s)
                """,
                (int(user_id), notification_type.value, title, message),
            )


class LoggingNotificationSender(NotificationSender):
    def send(self, *, user_id: int, notification_type: NotificationType, title: str, message: str) -> None:
        logger.info("Notify user %s [%s] %s: %s", user_id, notification_type.value, title, message)
