"""Opaque refresh-token generation and lookup hashing."""
import hashlib
import secrets

REFRESH_TOKEN_BYTES = 48


def generate_refresh_token() -> str:
    """Return a fresh 384-bit random token, hex encoded."""
    return secrets.token_hex(REFRESH_TOKEN_BYTES)


def hash_token(token: str) -> str:
    """Hash a refresh token before persisting or looking it up."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()
