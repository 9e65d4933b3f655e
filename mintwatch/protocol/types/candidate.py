# MIT License
# Copyright (c) 2025 Hashborn

from datetime import datetime, timezone
from typing import Any, Dict, Tuple

from pydantic import BaseModel, ConfigDict, Field

from .common import CandidateStatus
from ..amounts import to_display_amount


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Stake(BaseModel):
    """One delegator's stake in a candidate."""
    model_config = ConfigDict(frozen=True)

    owner: str              # Delegator address (Mx...)
    coin: str               # Coin symbol the stake is held in
    value: str              # Raw amount, 18 decimals
    bip_value: str          # Raw amount converted to the base coin
    value_display: float = 0.0
    bip_value_display: float = 0.0


class Candidate(BaseModel):
    """
    A masternode as the node reported it during one poll.

    Frozen: a candidate that made it into a snapshot is never mutated, the
    next poll builds new objects.
    """
    model_config = ConfigDict(frozen=True)

    pub_key: str                          # Mp... (hex)
    candidate_address: str                # Mx... owner account
    total_stake: str = "0"                # Raw amount, 18 decimals
    total_stake_display: float = 0.0
    commission: int = 0                   # Percent
    created_at_block: int = 0
    status: CandidateStatus = CandidateStatus.CANDIDATE
    stakes: Tuple[Stake, ...] = ()

    # Taken from the enclosing validator entry
    accumulated_reward: str = "0"
    accumulated_reward_display: float = 0.0
    absent_times: int = 0

    updated_at: datetime = Field(default_factory=_utcnow)

    @property
    def is_validator(self) -> bool:
        return self.status == CandidateStatus.VALIDATOR

    def __eq__(self, other):
        # Refresh time is bookkeeping; two polls of the same data are equal
        if not isinstance(other, Candidate):
            return NotImplemented
        return self.model_dump(exclude={"updated_at"}) == other.model_dump(exclude={"updated_at"})

    def __hash__(self):
        return hash((self.pub_key, self.status, self.total_stake))


class Snapshot(BaseModel):
    """The candidate set as of one successful poll."""
    model_config = ConfigDict(frozen=True)

    candidates: Tuple[Candidate, ...] = ()
    generation: int = 0
    taken_at: datetime = Field(default_factory=_utcnow)

    def __len__(self) -> int:
        return len(self.candidates)

    def validators_count(self) -> int:
        return sum(1 for c in self.candidates if c.is_validator)


def stake_from_api(data: Dict[str, Any]) -> Stake:
    if not isinstance(data, dict):
        raise TypeError(f"Stake entry is not an object: {type(data).__name__}")
    value = data.get("value") or "0"
    bip_value = data.get("bip_value") or "0"
    return Stake(
        owner=data["owner"],
        coin=data["coin"],
        value=value,
        bip_value=bip_value,
        value_display=to_display_amount(value),
        bip_value_display=to_display_amount(bip_value),
    )


def candidate_from_api(entry: Dict[str, Any], updated_at: datetime) -> Candidate:
    """
    Maps one element of /api/validators `result` to a Candidate.

    Raises KeyError/TypeError on a missing or mistyped field and
    MalformedAmount on a bad amount string.
    """
    if not isinstance(entry, dict):
        raise TypeError(f"Validator entry is not an object: {type(entry).__name__}")
    data = entry["candidate"]
    if not isinstance(data, dict):
        raise TypeError(f"`candidate` is not an object: {type(data).__name__}")
    stakes = data.get("stakes") or []
    if not isinstance(stakes, list):
        raise TypeError(f"`stakes` is not a list: {type(stakes).__name__}")
    total_stake = data.get("total_stake") or "0"
    reward = entry.get("accumulated_reward") or "0"

    return Candidate(
        pub_key=data["pub_key"],
        candidate_address=data.get("candidate_address", ""),
        total_stake=total_stake,
        total_stake_display=to_display_amount(total_stake),
        commission=int(data.get("commission", 0)),
        created_at_block=int(data.get("created_at_block", 0)),
        status=CandidateStatus(int(data["status"])),
        stakes=tuple(stake_from_api(s) for s in stakes),
        accumulated_reward=reward,
        accumulated_reward_display=to_display_amount(reward),
        absent_times=int(entry.get("absent_times", 0)),
        updated_at=updated_at,
    )


def status_label(status: int) -> str:
    return "Validator" if status == CandidateStatus.VALIDATOR else "Candidate"


def shorten(value: str) -> str:
    """'Mp1234567890abcdef' -> 'Mp1234...cdef'"""
    if len(value) <= 10:
        return value
    return f"{value[:6]}...{value[-4:]}"
