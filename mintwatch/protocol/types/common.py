# MIT License
# Copyright (c) 2025 Hashborn

from enum import IntEnum
from typing import Optional


class CandidateStatus(IntEnum):
    CANDIDATE = 1   # Registered, not in the validator set
    VALIDATOR = 2


class TxType(IntEnum):
    """Minter transaction type tags."""
    SET_CANDIDATE_ONLINE = 0x0A
    SET_CANDIDATE_OFFLINE = 0x0B


class SigType(IntEnum):
    SINGLE = 0x01


class WatcherError(Exception):
    pass


class MalformedAmount(WatcherError, ValueError):
    pass


class NodeUnavailable(WatcherError):
    """Node could not be reached or answered with something unusable."""
    pass


class MalformedResponse(NodeUnavailable):
    """Node answered, but not with the JSON object we expect."""
    pass


class PollError(WatcherError):
    pass


class PollUnreachable(PollError):
    pass


class TxError(WatcherError):
    pass


class NonceUnavailable(TxError):
    pass


class MalformedKey(TxError, ValueError):
    pass


class SigningFailed(TxError):
    pass


class SubmitUnavailable(TxError):
    pass


class Rejected(TxError):
    """Node refused the transaction. `log` is the node's own diagnostic."""

    def __init__(self, code: int, log: Optional[str] = ""):
        self.code = code
        self.log = log or ""
        super().__init__(f"Err:{code} {self.log}".rstrip())

    def __eq__(self, other):
        if not isinstance(other, Rejected):
            return NotImplemented
        return (self.code, self.log) == (other.code, other.log)

    def __hash__(self):
        return hash((self.code, self.log))
