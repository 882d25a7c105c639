# src/taskpad/connectors/console_notifier.py

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from datetime import datetime

from ..tasks.task_notifications import Notification

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


class ConsoleNotifier:
    """
    NotificationSink that prints notifications as console lines.

    Permission mirrors the browser model: "granted" shows, "denied" and
    "default" stay silent. request_permission() flips it to granted.
    """

    def __init__(
        self,
        permission: str = "granted",
        printer: Callable[[str], None] = print,
    ) -> None:
        self._permission = permission
        self._printer = printer
        # The overdue checker prints from its own thread.
        self._print_lock = threading.Lock()

    @property
    def permission(self) -> str:
        return self._permission

    def request_permission(self) -> str:
        self._permission = "granted"
        return self._permission

    def revoke_permission(self) -> str:
        self._permission = "denied"
        return self._permission

    def show(self, notification: Notification) -> None:
        marker = "!" if notification.require_interaction else "*"
        line = f"[{_ts_local()}] [{marker}] {notification.title}: {notification.body}"
        with self._print_lock:
            self._printer(line)
        logger.debug("Notification shown tag=%s", notification.tag)
