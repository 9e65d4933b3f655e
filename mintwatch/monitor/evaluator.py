# MIT License
# Copyright (c) 2025 Hashborn

"""
Notification Evaluator

Compares every watched masternode with the live snapshot. A masternode that
is not a validator (demoted or missing from the list) produces an alert on
every cycle until it is back; there is no de-duplication.
"""

import logging
from typing import Iterable, List

from .directory import UserDirectory, WatchedOperator
from .notifier import Alert, Notifier
from .snapshot import SnapshotStore
from ..observability.metrics import alerts_total
from ..protocol.types.candidate import shorten

logger = logging.getLogger(__name__)

ALERT_TEMPLATE = "Masternode {key} is not in the validator list!"


class NotificationEvaluator:
    def __init__(self, store: SnapshotStore, directory: UserDirectory, notifier: Notifier):
        self.store = store
        self.directory = directory
        self.notifier = notifier

    def evaluate(self, operators: Iterable[WatchedOperator]) -> List[Alert]:
        """Alerts due for `operators`, without sending anything."""
        alerts = []
        for operator in operators:
            if not operator.notifications or not operator.pub_key:
                continue
            if not self.store.is_validator(operator.pub_key):
                alerts.append(Alert(
                    owner_id=operator.owner_id,
                    pub_key=operator.pub_key,
                    message=ALERT_TEMPLATE.format(key=shorten(operator.pub_key)),
                ))
        return alerts

    def run_cycle(self) -> List[Alert]:
        """Evaluates all operators of the directory and hands alerts to the notifier."""
        alerts = self.evaluate(self.directory.list_watched_operators())

        for alert in alerts:
            logger.info(f"{shorten(alert.pub_key)} of owner {alert.owner_id} is out of validators")
            try:
                self.notifier.notify(alert.owner_id, alert.message)
                alerts_total.inc()
            except Exception as e:
                # Delivery is the notifier's business, keep going with the rest
                logger.error(f"Failed to notify owner {alert.owner_id}: {e}")

        return alerts
