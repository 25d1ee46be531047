"""One-time login secrets: link tokens and six digit codes

A login request yields two secrets delivered in the same email:

- a link token (32 random bytes, URL-safe) embedded in the magic link.
  It has enough entropy that a fast SHA-256 hash is sufficient for storage
  and lets the callback look the row up by hash.
- a six digit code for typing into the login form. Six digits are cheap to
  brute force offline, so the code is hashed with Argon2id plus the server
  side pepper, and online guessing is capped by LOGIN_OTP_MAX_ATTEMPTS.

OWASP Parameters:
- Memory cost: 65536 KB (64 MB)
- Time cost: 3 iterations
- Parallelism: 4 threads
"""

import hashlib
import secrets

from argon2 import PasswordHasher, Type
from argon2.exceptions import VerifyMismatchError, VerificationError, InvalidHashError

from ..config import get_settings


OTP_CODE_LENGTH = 6

_hasher = PasswordHasher(
    memory_cost=65536,  # 64 MB
    time_cost=3,
    parallelism=4,
    hash_len=32,
    salt_len=16,
    type=Type.ID  # Argon2id variant
)


def _get_pepper() -> str:
    """Get SECRET_PEPPER from settings.

    Raises:
        ValueError: If SECRET_PEPPER is empty
    """
    pepper = get_settings().SECRET_PEPPER
    if not pepper:
        raise ValueError("SECRET_PEPPER is not configured")
    return pepper


def generate_link_token() -> str:
    return secrets.token_urlsafe(32)


def generate_code() -> str:
    """Return a uniformly random, zero padded six digit code."""
    return f"{secrets.randbelow(10 ** OTP_CODE_LENGTH):0{OTP_CODE_LENGTH}d}"


def hash_token(token: str) -> str:
    """SHA-256 hex digest used to store and look up high-entropy tokens.

    Shared by login link tokens and organization invite tokens.
    """
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def hash_code(code: str) -> str:
    """Hash a one-time code using Argon2id with the global pepper.

    Raises:
        ValueError: If code is empty or SECRET_PEPPER is not configured
    """
    if not code:
        raise ValueError("Code cannot be empty")

    return _hasher.hash(code + _get_pepper())


def verify_code(code: str, code_hash: str) -> bool:
    """Verify a one-time code against its Argon2id hash.

    Returns:
        bool: True if code matches hash, False otherwise
    """
    if not code or not code_hash:
        return False

    try:
        _hasher.verify(code_hash, code + _get_pepper())
        return True
    except (VerifyMismatchError, VerificationError, InvalidHashError):
        return False
