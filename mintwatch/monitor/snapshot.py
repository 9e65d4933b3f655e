# MIT License
# Copyright (c) 2025 Hashborn

"""
Validator Snapshot Store.

Holds the candidate set of the last successful poll. Snapshots are frozen
and swapped as a whole, so a reader holding one never sees half of the
next poll.
"""

import logging
import threading
from typing import List, Optional

from ..protocol.types.candidate import Candidate, Snapshot
from ..protocol.types.common import CandidateStatus

logger = logging.getLogger(__name__)


class SnapshotStore:
    def __init__(self, snapshot: Optional[Snapshot] = None):
        self._snapshot = snapshot if snapshot is not None else Snapshot()
        self._lock = threading.Lock()

    @property
    def current(self) -> Snapshot:
        with self._lock:
            return self._snapshot

    def replace(self, snapshot: Snapshot) -> None:
        with self._lock:
            previous = self._snapshot
            self._snapshot = snapshot
        logger.debug(f"Snapshot replaced: generation {previous.generation} -> {snapshot.generation} "
                     f"({len(snapshot)} candidates)")

    def reset(self) -> None:
        """Drops every candidate. The only way the store is ever emptied."""
        with self._lock:
            generation = self._snapshot.generation
            self._snapshot = Snapshot(generation=generation + 1)
        logger.info("Snapshot store reset")

    def find_by_public_key(self, pub_key: str) -> Optional[Candidate]:
        for candidate in self.current.candidates:
            if candidate.pub_key == pub_key:
                return candidate
        return None

    def search(self, part: str) -> List[Candidate]:
        """Candidates whose key contains `part`, ignoring case, in snapshot order."""
        needle = part.upper()
        return [c for c in self.current.candidates if needle in c.pub_key.upper()]

    def is_validator(self, pub_key: str) -> bool:
        candidate = self.find_by_public_key(pub_key)
        # Absent and "known but only a candidate" both count as not validating
        return candidate is not None and candidate.status == CandidateStatus.VALIDATOR
