"""Hash and HMAC primitives, and hashing of mandatory quads."""

import secrets
from typing import Callable

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives import hmac as crypto_hmac

from vcdi_disclose.interfaces import Hasher

HMAC_KEY_LENGTH = 32  # 256 bits

_HASH_ALGORITHMS: dict[str, Callable[[], hashes.HashAlgorithm]] = {
    "sha256": hashes.SHA256,
    "sha384": hashes.SHA384,
}


def _hash_algorithm(algorithm: str) -> hashes.HashAlgorithm:
    try:
        return _HASH_ALGORITHMS[algorithm.lower().replace("-", "")]()
    except KeyError:
        raise ValueError(
            f"Unsupported hash algorithm: {algorithm!r} "
            f"(expected one of {sorted(_HASH_ALGORITHMS)})"
        ) from None


def create_hasher(algorithm: str = "sha256") -> Hasher:
    """Return a ``bytes -> digest`` function for ``algorithm``."""
    _hash_algorithm(algorithm)

    def hasher(data: bytes) -> bytes:
        digest = hashes.Hash(_hash_algorithm(algorithm))
        digest.update(data)
        return digest.finalize()

    return hasher


def create_hmac(key: bytes, algorithm: str = "sha256") -> Hasher:
    """Return a keyed ``bytes -> HMAC digest`` function.

    The key stays inside the returned closure; callers hand only the function
    to label map factories.
    """
    if not key:
        raise ValueError("HMAC key must not be empty")
    _hash_algorithm(algorithm)

    def sign(data: bytes) -> bytes:
        mac = crypto_hmac.HMAC(key, _hash_algorithm(algorithm))
        mac.update(data)
        return mac.finalize()

    return sign


def generate_hmac_key(length: int = HMAC_KEY_LENGTH) -> bytes:
    """Generate a random HMAC key from the OS CSPRNG."""
    return secrets.token_bytes(length)


def hash_mandatory_nquads(mandatory: list[str], hasher: Hasher) -> bytes:
    """Hash the mandatory quads, in the order given.

    The quads are concatenated as-is (each already ends with a line break)
    and UTF-8 encoded. Callers must pass them in canonical order, the same
    order the verifier will use.
    """
    return hasher("".join(mandatory).encode("utf-8"))
