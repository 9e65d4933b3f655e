# MIT License
# Copyright (c) 2025 Hashborn

"""
Transaction Builder / Signer

Turns "switch masternode X on/off, paid by account Y" into a signed,
RLP-encoded Minter transaction ready for /api/sendTransaction.
"""

import logging
from typing import Optional, Union

from pydantic import BaseModel

from ..protocol.config.params import CURRENT_NETWORK
from ..protocol.crypto.addresses import decode_pubkey
from ..protocol.crypto.keys import private_key_from_hex
from ..protocol.types.candidate import shorten
from ..protocol.types.common import (
    MalformedKey, NodeUnavailable, NonceUnavailable, SigningFailed, TxType
)
from ..protocol.types.tx import Transaction, encode_candidate_switch_data
from ..rpc.client import NodeClient

logger = logging.getLogger(__name__)


class ActivationIntent(BaseModel):
    """What the owner asked for. The signing key travels separately."""
    pub_key: str
    activate: bool
    payer_address: str
    gas_coin: str

    @property
    def tx_type(self) -> TxType:
        return TxType.SET_CANDIDATE_ONLINE if self.activate else TxType.SET_CANDIDATE_OFFLINE


class SignedTransaction(BaseModel):
    intent: ActivationIntent
    nonce: int
    transaction: Transaction

    @property
    def raw(self) -> bytes:
        return self.transaction.serialize()

    @property
    def hex(self) -> str:
        """Lowercase hex of the wire bytes, as the node expects it."""
        return self.transaction.serialize_hex()


class TransactionBuilder:
    def __init__(self, client: NodeClient, gas_coin: str = CURRENT_NETWORK.base_coin,
                 gas_price: int = CURRENT_NETWORK.min_gas_price,
                 chain_id: Optional[int] = CURRENT_NETWORK.chain_id):
        self.client = client
        self.gas_coin = gas_coin
        self.gas_price = gas_price
        self.chain_id = chain_id

    def next_nonce(self, address: str) -> int:
        """Outgoing transaction count + 1. Not retried."""
        try:
            count = self.client.get_transaction_count(address)
        except NodeUnavailable as e:
            raise NonceUnavailable(f"Cannot get transaction count for {address}: {e}")
        return count + 1

    def build_activation_tx(self, payer_address: str, signing_key: Union[str, bytes],
                            target_public_key: str, activate: bool,
                            gas_coin: Optional[str] = None) -> SignedTransaction:
        """
        Builds and signs SetCandidateOnline (activate=True) or SetCandidateOffline.

        Args:
            payer_address: Mx... account whose nonce is used and which pays the fee
            signing_key: private key of payer_address, hex string or 32 raw bytes
            target_public_key: Mp... masternode key
            activate: desired state
            gas_coin: fee coin, defaults to the configured one

        Raises:
            NonceUnavailable, MalformedKey, SigningFailed
        """
        intent = ActivationIntent(
            pub_key=target_public_key,
            activate=activate,
            payer_address=payer_address,
            gas_coin=gas_coin or self.gas_coin,
        )

        nonce = self.next_nonce(payer_address)

        try:
            pub_key_bytes = decode_pubkey(target_public_key)
        except ValueError as e:
            raise MalformedKey(f"Bad masternode public key {target_public_key!r}: {e}")

        try:
            tx = Transaction(
                nonce=nonce,
                chain_id=self.chain_id,
                gas_price=self.gas_price,
                gas_coin=intent.gas_coin,
                tx_type=intent.tx_type,
                data=encode_candidate_switch_data(pub_key_bytes),
            )
            # encodes the gas coin, fails early on a bad symbol
            tx.signing_bytes()
        except ValueError as e:
            raise SigningFailed(f"Cannot encode transaction: {e}")

        try:
            if isinstance(signing_key, bytes):
                signing_key = signing_key.hex()
            tx.sign(private_key_from_hex(signing_key))
        except (ValueError, TypeError, AssertionError) as e:
            raise SigningFailed(f"Cannot sign with the given private key: {e}")

        logger.info(f"Built {intent.tx_type.name} for {shorten(target_public_key)} "
                    f"from {shorten(payer_address)} (nonce={nonce}, gas_coin={intent.gas_coin})")
        return SignedTransaction(intent=intent, nonce=nonce, transaction=tx)
