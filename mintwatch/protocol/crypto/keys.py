import hashlib
from typing import Tuple

from ecdsa import SigningKey, VerifyingKey, SECP256k1  # type: ignore

_ORDER = SECP256k1.order
_HALF_ORDER = _ORDER // 2


def private_key_from_hex(key_hex: str) -> bytes:
    """Parses a hex private key (optional 0x prefix). Raises ValueError."""
    key_hex = key_hex.strip()
    if key_hex[:2].lower() == "0x":
        key_hex = key_hex[2:]
    priv = bytes.fromhex(key_hex)
    if len(priv) != 32:
        raise ValueError(f"Private key must be 32 bytes, got {len(priv)}")
    if not 0 < int.from_bytes(priv, "big") < _ORDER:
        raise ValueError("Private key out of curve range")
    return priv


def public_key_from_private(priv_bytes: bytes) -> bytes:
    """Returns uncompressed 64-byte (x || y) public key from private key."""
    sk = SigningKey.from_string(priv_bytes, curve=SECP256k1)
    return sk.get_verifying_key().to_string()


def sign_recoverable(message_hash: bytes, priv_bytes: bytes) -> Tuple[int, int, int]:
    """
    Signs a 32-byte hash. Returns (recovery_id, r, s) with low-S normalized,
    the form go-ethereum's crypto.Sign produces.
    """
    sk = SigningKey.from_string(priv_bytes, curve=SECP256k1)
    r, s = sk.sign_digest_deterministic(
        message_hash,
        hashfunc=hashlib.sha256,
        sigencode=lambda r, s, order: (r, s),
    )
    if s > _HALF_ORDER:
        s = _ORDER - s

    expected = sk.get_verifying_key().to_string()
    for recovery_id in (0, 1):
        if recover_public_key(message_hash, recovery_id, r, s) == expected:
            return recovery_id, r, s
    raise ValueError("Could not determine recovery id")


def recover_public_key(message_hash: bytes, recovery_id: int, r: int, s: int) -> bytes:
    """Returns the 64-byte public key that produced (r, s) over message_hash."""
    # ecdsa yields the even-y R point first, i.e. recovery id 0
    signature = r.to_bytes(32, "big") + s.to_bytes(32, "big")
    candidates = VerifyingKey.from_public_key_recovery_with_digest(
        signature, message_hash, curve=SECP256k1, hashfunc=hashlib.sha256
    )
    return candidates[recovery_id].to_string()


def verify(message_hash: bytes, r: int, s: int, pub_bytes: bytes) -> bool:
    """Verifies ECDSA signature."""
    try:
        vk = VerifyingKey.from_string(pub_bytes, curve=SECP256k1)
        signature = r.to_bytes(32, "big") + s.to_bytes(32, "big")
        return vk.verify_digest(signature, message_hash)
    except Exception:
        return False
