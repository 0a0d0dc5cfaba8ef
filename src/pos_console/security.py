"""Password hashing and session token helpers."""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import os
import time
from typing import Optional, Tuple

_ITERATIONS = 390_000
_ALGORITHM = "sha256"
_SALT_BYTES = 16


def _split(hash_value: str) -> Tuple[bytes, bytes]:
    try:
        salt_b64, digest_b64 = hash_value.split(":", 1)
    except ValueError as exc:  # pragma: no cover - invalid hash input
        raise ValueError("Invalid stored hash format") from exc
    return base64.b64decode(salt_b64), base64.b64decode(digest_b64)


def hash_password(password: str) -> str:
    """Return a salted PBKDF2 hash for *password*."""

    salt = os.urandom(_SALT_BYTES)
    digest = hashlib.pbkdf2_hmac(_ALGORITHM, password.encode("utf-8"), salt, _ITERATIONS)
    return f"{base64.b64encode(salt).decode()}:{base64.b64encode(digest).decode()}"


def verify_password(password: str, stored_hash: str) -> bool:
    """Verify *password* against the stored hash."""

    salt, digest = _split(stored_hash)
    check = hashlib.pbkdf2_hmac(_ALGORITHM, password.encode("utf-8"), salt, _ITERATIONS)
    return hmac.compare_digest(digest, check)


def _signature(payload: str, secret_key: str) -> str:
    digest = hmac.new(secret_key.encode(), payload.encode(), hashlib.sha256).digest()
    return base64.urlsafe_b64encode(digest).decode().rstrip("=")


def sign_session(user_id: int, secret_key: str, issued_at: Optional[int] = None) -> str:
    """Return a signed ``<user_id>:<issued_at>.<signature>`` session token."""

    issued_at = int(time.time()) if issued_at is None else issued_at
    payload = f"{user_id}:{issued_at}"
    return f"{payload}.{_signature(payload, secret_key)}"


def verify_session(token: str, secret_key: str, max_age: Optional[int] = None) -> Optional[int]:
    """Return the user id carried by a valid, unexpired session token."""

    try:
        payload, signature = token.rsplit(".", 1)
        user_part, issued_part = payload.split(":", 1)
        user_id, issued_at = int(user_part), int(issued_part)
    except ValueError:
        return None

    padding = "=" * (-len(signature) % 4)
    try:
        provided = base64.urlsafe_b64decode(signature + padding)
    except (binascii.Error, ValueError):  # pragma: no cover - invalid base64
        return None

    expected = hmac.new(secret_key.encode(), payload.encode(), hashlib.sha256).digest()
    if not hmac.compare_digest(expected, provided):
        return None
    if max_age is not None and time.time() - issued_at > max_age:
        return None
    return user_id
