# MIT License
# Copyright (c) 2025 Hashborn

"""
On-demand masternode on/off.

Nonces come from the node's transaction count, so two requests from the same
account must not interleave: the second would read the count before the
first is mined and reuse its nonce. Requests are serialized per account;
different accounts run in parallel.
"""

import logging
import threading
from collections import defaultdict
from typing import Dict

from .builder import TransactionBuilder
from .submitter import TransactionSubmitter
from ..monitor.directory import WatchedOperator
from ..protocol.crypto.addresses import address_from_private
from ..protocol.crypto.keys import private_key_from_hex
from ..protocol.types.candidate import shorten
from ..protocol.types.common import SigningFailed

logger = logging.getLogger(__name__)

_ON = {"1", "on"}
_OFF = {"0", "off"}


def parse_switch_argument(argument: str) -> bool:
    """'on'/'1' -> True, 'off'/'0' -> False (any case). ValueError otherwise."""
    value = argument.strip().lower()
    if value in _ON:
        return True
    if value in _OFF:
        return False
    raise ValueError(f"Expected on/off/1/0, got {argument!r}")


class CandidateSwitch:
    def __init__(self, builder: TransactionBuilder, submitter: TransactionSubmitter):
        self.builder = builder
        self.submitter = submitter
        # One entry per payer ever seen; bounded by the number of bound accounts
        self._locks: Dict[str, threading.Lock] = defaultdict(threading.Lock)
        self._locks_guard = threading.Lock()

    def _lock_for(self, address: str) -> threading.Lock:
        with self._locks_guard:
            return self._locks[address]

    def set_state(self, payer_address: str, signing_key: str, pub_key: str, activate: bool) -> str:
        """Builds, signs and submits. Returns the transaction hash."""
        with self._lock_for(payer_address):
            signed = self.builder.build_activation_tx(payer_address, signing_key, pub_key, activate)
            tx_hash = self.submitter.submit(signed.hex)
            logger.info(f"{shorten(pub_key)} switched {'on' if activate else 'off'}: {tx_hash}")
            return tx_hash

    def set_operator_state(self, operator: WatchedOperator, activate: bool) -> str:
        """Same as set_state with the keys of a directory entry."""
        if not operator.can_sign:
            raise SigningFailed("No private key is bound to this masternode")
        address = operator.address
        if not address:
            try:
                address = address_from_private(private_key_from_hex(operator.private_key))
            except ValueError as e:
                raise SigningFailed(f"Cannot derive payer address: {e}")
        return self.set_state(address, operator.private_key, operator.pub_key, activate)
