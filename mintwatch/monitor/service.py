# MIT License
# Copyright (c) 2025 Hashborn

"""
Monitor loop: poll, evaluate, sleep, forever.
"""

import logging
import threading
import time
from typing import Optional

from .evaluator import NotificationEvaluator
from .poller import ValidatorPoller
from ..protocol.types.common import PollError

logger = logging.getLogger(__name__)


class MonitorService:
    def __init__(self, poller: ValidatorPoller, evaluator: NotificationEvaluator,
                 interval: int = 60, sleep=time.sleep):
        self.poller = poller
        self.evaluator = evaluator
        self.interval = interval
        self._sleep = sleep
        self.cycles = 0
        self.failed_cycles = 0
        self.thread: Optional[threading.Thread] = None

    def run_once(self) -> bool:
        """
        One cycle. Returns False if the poll failed; the previous snapshot is
        kept and nothing is evaluated against it.
        """
        self.cycles += 1
        try:
            self.poller.refresh()
        except PollError as e:
            self.failed_cycles += 1
            logger.error(f"Poll failed, keeping snapshot #{self.poller.store.current.generation}: {e}")
            return False
        except Exception as e:
            self.failed_cycles += 1
            logger.error(f"Unexpected poll error, keeping the previous snapshot: {e}", exc_info=True)
            return False

        try:
            self.evaluator.run_cycle()
        except Exception as e:
            # e.g. the user directory is down; the next cycle tries again
            logger.error(f"Evaluation failed: {e}", exc_info=True)
            return False
        return True

    def run(self, max_cycles: Optional[int] = None):
        """Blocks. Runs until process exit, or `max_cycles` cycles if given."""
        logger.info(f"Starting monitor (interval: {self.interval}s)")
        done = 0
        while True:
            self.run_once()
            done += 1
            if max_cycles is not None and done >= max_cycles:
                logger.info(f"Monitor finished after {done} cycle(s)")
                return
            logger.debug(f"Sleeping {self.interval}s")
            self._sleep(self.interval)

    def start(self) -> threading.Thread:
        """Runs the loop in a daemon thread next to request handling."""
        self.thread = threading.Thread(target=self.run, name="mintwatch-monitor", daemon=True)
        self.thread.start()
        return self.thread
