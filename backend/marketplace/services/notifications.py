"""User-visible notifications (toasts).

Fire-and-forget: callers never consume a return value. The collecting sink
keeps the messages so a route can hand them back to the client.
"""
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Notification:
    level: str  # "success" or "error"
    message: str


class Notifier(ABC):
    @abstractmethod
    def success(self, message: str) -> None:
        ...

    @abstractmethod
    def error(self, message: str) -> None:
        ...


class CollectingNotifier(Notifier):
    def __init__(self):
        self.notifications: list[Notification] = []

    def success(self, message: str) -> None:
        logger.info("Notify success: %s", message)
        self.notifications.append(Notification("success", message))

    def error(self, message: str) -> None:
        logger.warning("Notify error: %s", message)
        self.notifications.append(Notification("error", message))
