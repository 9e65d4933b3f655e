# MIT License
# Copyright (c) 2025 Hashborn

from typing import List, Optional, Tuple

import rlp  # type: ignore
from pydantic import BaseModel, Field, field_validator

from .common import TxType, SigType
from ..config.params import COIN_SYMBOL_LENGTH
from ..crypto.hash import keccak256
from ..crypto.keys import sign_recoverable


def encode_coin_symbol(symbol: str) -> bytes:
    """'MNT' -> b'MNT' + 7 zero bytes."""
    raw = symbol.encode("ascii")
    if not raw or len(raw) > COIN_SYMBOL_LENGTH:
        raise ValueError(f"Coin symbol must be 1..{COIN_SYMBOL_LENGTH} ASCII chars: {symbol!r}")
    return raw.ljust(COIN_SYMBOL_LENGTH, b"\x00")


def encode_candidate_switch_data(pub_key_bytes: bytes) -> bytes:
    """Data field of SetCandidateOnline/SetCandidateOffline: RLP([pub_key])."""
    return rlp.encode([pub_key_bytes])


class Transaction(BaseModel):
    """
    Minter transaction.

    Wire layout (RLP list):
        nonce, [chain_id,] gas_price, gas_coin, type, data,
        payload, service_data, signature_type, signature_data

    chain_id is omitted when None (pre chain-id networks). The signing
    pre-image is the same list without signature_data.
    """
    nonce: int
    chain_id: Optional[int] = None
    gas_price: int = 1
    gas_coin: str
    tx_type: TxType
    data: bytes = b""
    payload: bytes = b""
    service_data: bytes = b""
    signature_type: SigType = SigType.SINGLE
    signature_data: bytes = b""

    # Kept for callers that want the triple without decoding signature_data
    v: int = Field(default=0, exclude=True)
    r: int = Field(default=0, exclude=True)
    s: int = Field(default=0, exclude=True)

    @field_validator("nonce")
    @classmethod
    def _nonce_is_uint64(cls, value: int) -> int:
        if not 0 <= value < 2 ** 64:
            raise ValueError(f"nonce out of uint64 range: {value}")
        return value

    def _fields(self) -> List:
        fields: List = [self.nonce]
        if self.chain_id is not None:
            fields.append(self.chain_id)
        fields.extend([
            self.gas_price,
            encode_coin_symbol(self.gas_coin),
            int(self.tx_type),
            self.data,
            self.payload,
            self.service_data,
            int(self.signature_type),
        ])
        return fields

    def signing_bytes(self) -> bytes:
        return rlp.encode(self._fields())

    def hash(self) -> bytes:
        """keccak256 of the unsigned encoding; this is what gets signed."""
        return keccak256(self.signing_bytes())

    @property
    def is_signed(self) -> bool:
        return bool(self.signature_data)

    def sign(self, priv_key_bytes: bytes):
        """Signs the transaction hash (single signature)."""
        recovery_id, r, s = sign_recoverable(self.hash(), priv_key_bytes)
        self.v = recovery_id + 27
        self.r = r
        self.s = s
        self.signature_type = SigType.SINGLE
        self.signature_data = rlp.encode([self.v, self.r, self.s])

    def serialize(self) -> bytes:
        if not self.is_signed:
            raise ValueError("Transaction is not signed")
        return rlp.encode(self._fields() + [self.signature_data])

    def serialize_hex(self) -> str:
        return self.serialize().hex()

    def signature(self) -> Tuple[int, int, int]:
        return self.v, self.r, self.s
