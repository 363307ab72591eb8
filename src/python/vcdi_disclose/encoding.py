"""Base64url and multibase encoding helpers."""

import base64

import base58

# Multibase prefixes
MULTIBASE_BASE64URL = "u"
MULTIBASE_BASE58BTC = "z"

_MULTIBASE_PREFIXES = {
    "base64url": MULTIBASE_BASE64URL,
    "base58btc": MULTIBASE_BASE58BTC,
}


def b64url_encode(data: bytes) -> str:
    """Base64url-encode without padding."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def b64url_decode(s: str) -> bytes:
    return base64.urlsafe_b64decode(s + "=" * (-len(s) % 4))


def multibase_encode(data: bytes, base: str = "base64url") -> str:
    """Encode ``data`` as a multibase string (``u...`` or ``z...``)."""
    if base == "base64url":
        return MULTIBASE_BASE64URL + b64url_encode(data)
    if base == "base58btc":
        return MULTIBASE_BASE58BTC + base58.b58encode(data).decode("ascii")
    raise ValueError(
        f"Unsupported multibase encoding: {base!r} "
        f"(expected one of {sorted(_MULTIBASE_PREFIXES)})"
    )


def multibase_decode(value: str) -> bytes:
    """Decode a ``u`` or ``z`` multibase string."""
    if not value:
        raise ValueError("Empty multibase string")
    prefix, body = value[0], value[1:]
    if prefix == MULTIBASE_BASE64URL:
        return b64url_decode(body)
    if prefix == MULTIBASE_BASE58BTC:
        return base58.b58decode(body)
    raise ValueError(f"Unsupported multibase prefix: {prefix!r}")
