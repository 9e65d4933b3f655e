from typing import Optional

from .hash import keccak256
from .keys import public_key_from_private
from ..config.params import ADDRESS_PREFIX, PUBKEY_PREFIX, PUBKEY_LENGTH


def address_from_pubkey(pub_bytes: bytes, prefix: str = ADDRESS_PREFIX) -> str:
    """Minter address: last 20 bytes of keccak256 over the 64-byte public key."""
    if len(pub_bytes) != 64:
        raise ValueError(f"Expected 64-byte uncompressed public key, got {len(pub_bytes)}")
    return prefix + keccak256(pub_bytes)[-20:].hex()


def address_from_private(priv_bytes: bytes) -> str:
    return address_from_pubkey(public_key_from_private(priv_bytes))


def decode_pubkey(pub_key: str, prefix: str = PUBKEY_PREFIX) -> bytes:
    """'Mp<64 hex>' -> 32 raw bytes. Raises ValueError."""
    key = pub_key.strip()
    if key.startswith(prefix):
        key = key[len(prefix):]
    raw = bytes.fromhex(key)
    if len(raw) != PUBKEY_LENGTH:
        raise ValueError(f"Public key must be {PUBKEY_LENGTH} bytes, got {len(raw)}")
    return raw


def is_valid_address(addr: str, expected_prefix: Optional[str] = ADDRESS_PREFIX) -> bool:
    if expected_prefix and not addr.startswith(expected_prefix):
        return False
    body = addr[len(expected_prefix):] if expected_prefix else addr
    try:
        return len(bytes.fromhex(body)) == 20
    except ValueError:
        return False
