# MIT License
# Copyright (c) 2025 Hashborn

"""
Validator Poller

Fetches /api/validators from the primary node, falls back to the secondary
once, and turns the answer into a Snapshot.
"""

import logging
import threading
from datetime import datetime, timezone
from typing import Optional

from .snapshot import SnapshotStore
from ..observability.metrics import polls_total, snapshot_candidates, snapshot_validators
from ..protocol.types.candidate import Snapshot, candidate_from_api
from ..protocol.types.common import MalformedAmount, NodeUnavailable, PollUnreachable
from ..rpc.client import NodeClient

logger = logging.getLogger(__name__)


class ValidatorPoller:
    def __init__(self, store: SnapshotStore, primary: NodeClient,
                 secondary: Optional[NodeClient] = None):
        self.store = store
        self.primary = primary
        self.secondary = secondary
        self._generation = store.current.generation
        self._generation_lock = threading.Lock()

    def _next_generation(self) -> int:
        # Never at or below the store, which reset() may have moved ahead
        with self._generation_lock:
            self._generation = max(self._generation, self.store.current.generation) + 1
            return self._generation

    def _fetch(self, client: NodeClient) -> Snapshot:
        entries = client.get_validators()
        now = datetime.now(timezone.utc)
        try:
            candidates = tuple(candidate_from_api(entry, now) for entry in entries)
        except (KeyError, TypeError, ValueError, AttributeError, MalformedAmount) as e:
            raise NodeUnavailable(f"Malformed validator entry from {client.base_url}: {e!r}")
        return Snapshot(candidates=candidates, generation=self._next_generation(), taken_at=now)

    def poll(self) -> Snapshot:
        """
        Returns a fresh Snapshot without touching the store.

        Raises:
            PollUnreachable: primary and secondary both failed
        """
        try:
            snapshot = self._fetch(self.primary)
            polls_total.labels(outcome="primary").inc()
            return snapshot
        except NodeUnavailable as e:
            logger.warning(f"Primary node failed: {e}")
            primary_error = e

        if self.secondary is None:
            polls_total.labels(outcome="unreachable").inc()
            raise PollUnreachable(f"Primary node unreachable, no secondary configured: {primary_error}")

        try:
            snapshot = self._fetch(self.secondary)
            polls_total.labels(outcome="secondary").inc()
            logger.info(f"Validators fetched from secondary node {self.secondary.base_url}")
            return snapshot
        except NodeUnavailable as e:
            polls_total.labels(outcome="unreachable").inc()
            raise PollUnreachable(f"Both nodes unreachable: primary: {primary_error}; secondary: {e}")

    def refresh(self) -> Snapshot:
        """poll() and swap the result in. On failure the old snapshot stays live."""
        snapshot = self.poll()
        self.store.replace(snapshot)
        snapshot_candidates.set(len(snapshot))
        snapshot_validators.set(snapshot.validators_count())
        logger.info(f"Snapshot #{snapshot.generation}: {len(snapshot)} candidates, "
                    f"{snapshot.validators_count()} validators")
        return snapshot
