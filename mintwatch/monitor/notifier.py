# MIT License
# Copyright (c) 2025 Hashborn

"""Notification sender interface and a logging implementation."""

import logging
import threading
from dataclasses import dataclass
from typing import List, Protocol, Tuple

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Alert:
    owner_id: int
    pub_key: str
    message: str


class Notifier(Protocol):
    def notify(self, owner_id: int, message: str) -> None:
        ...


class LoggingNotifier:
    """Writes every alert to the log and keeps them for inspection."""

    def __init__(self):
        self.sent: List[Tuple[int, str]] = []
        self._lock = threading.Lock()

    def notify(self, owner_id: int, message: str) -> None:
        logger.warning(f"[ALERT] owner={owner_id}: {message}")
        with self._lock:
            self.sent.append((owner_id, message))
