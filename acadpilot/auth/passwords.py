"""Salted password hashing.

Stored records look like ``hex(salt):hex(key)``, where the key is
PBKDF2-HMAC-SHA256 over the UTF-8 password.
"""

import hashlib
import hmac
import secrets

HASH_NAME = "sha256"
ITERATIONS = 100_000
SALT_BYTES = 16
KEY_BYTES = 32


class MalformedHashError(ValueError):
    """A stored password record cannot be parsed."""


def _derive(password: str, salt: bytes) -> bytes:
    return hashlib.pbkdf2_hmac(HASH_NAME, password.encode("utf-8"), salt, ITERATIONS, dklen=KEY_BYTES)


def hash_password(password: str) -> str:
    salt = secrets.token_bytes(SALT_BYTES)
    return f"{salt.hex()}:{_derive(password, salt).hex()}"


def _parse(stored: str) -> tuple[bytes, bytes]:
    salt_hex, separator, key_hex = (stored or "").partition(":")
    if not separator or not salt_hex or not key_hex:
        raise MalformedHashError("Password record is missing its salt or key.")
    try:
        salt = bytes.fromhex(salt_hex)
        key = bytes.fromhex(key_hex)
    except ValueError as exc:
        raise MalformedHashError("Password record is not hex encoded.") from exc
    if len(key) != KEY_BYTES:
        raise MalformedHashError("Password record has an unexpected key length.")
    return salt, key


def verify_password(password: str, stored: str) -> bool:
    salt, expected = _parse(stored)
    return hmac.compare_digest(_derive(password, salt), expected)


# Used for unknown emails so a failed login costs one derivation either way.
DUMMY_HASH = hash_password(secrets.token_hex(16))
