# MIT License
# Copyright (c) 2025 Hashborn

"""
Validator monitoring: snapshot store, poller, evaluator and the loop tying
them together.
"""

from .snapshot import SnapshotStore
from .poller import ValidatorPoller
from .evaluator import NotificationEvaluator
from .service import MonitorService

__all__ = ["SnapshotStore", "ValidatorPoller", "NotificationEvaluator", "MonitorService"]
