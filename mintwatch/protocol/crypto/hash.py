from eth_utils import keccak as _keccak


def keccak256(data: bytes) -> bytes:
    """Returns Keccak-256 (pre-NIST SHA3) digest of bytes."""
    return _keccak(data)
