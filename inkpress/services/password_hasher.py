"""
Inkpress Backend - Password Hasher
===================================

What:  One-way salted password hashing and verification with bcrypt.
How:   hash() draws a fresh random salt for every call (bcrypt.gensalt), so two
       users with the same password get different hashes. The salt and cost
       factor are embedded in the 60-character output, which is all verify()
       needs.
Who:   Called by AuthService on register (hash) and login (verify).

Cost factor:
    settings.bcrypt_rounds (default 10). Each +1 doubles the work. bcrypt is
    CPU-bound, so the async wrappers push it onto a worker thread and the event
    loop keeps serving other requests while a login is being checked.
"""

import asyncio
import logging
from typing import Optional

import bcrypt

from inkpress.config import settings

logger = logging.getLogger(__name__)

# bcrypt ignores (newer releases reject) input beyond 72 bytes
BCRYPT_MAX_BYTES = 72


class PasswordHasher:
    """bcrypt-backed hasher with a per-call salt."""

    def __init__(self, rounds: Optional[int] = None):
        self.rounds = rounds or settings.bcrypt_rounds

    def hash(self, plaintext: str) -> str:
        """
        Hash a plaintext password.

        Returns:
            bcrypt hash string ("$2b$<rounds>$<salt><digest>")

        Raises:
            ValueError if the password exceeds 72 bytes. RegisterRequest
            rejects such passwords before they reach this point.
        """
        secret = plaintext.encode("utf-8")
        if len(secret) > BCRYPT_MAX_BYTES:
            raise ValueError(f"Password exceeds {BCRYPT_MAX_BYTES} bytes")
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(secret, salt).decode("utf-8")

    def verify(self, plaintext: str, hashed: str) -> bool:
        """
        Check a plaintext password against a stored hash.

        Never raises: an over-long password or a malformed stored hash
        simply fails verification.
        """
        secret = plaintext.encode("utf-8")
        if len(secret) > BCRYPT_MAX_BYTES:
            return False
        try:
            return bcrypt.checkpw(secret, hashed.encode("utf-8"))
        except ValueError:
            logger.warning("Stored password hash is malformed; rejecting login")
            return False

    async def hash_async(self, plaintext: str) -> str:
        return await asyncio.to_thread(self.hash, plaintext)

    async def verify_async(self, plaintext: str, hashed: str) -> bool:
        return await asyncio.to_thread(self.verify, plaintext, hashed)


# ── Singleton Instance ────────────────────────────────────────────────────
password_hasher = PasswordHasher()
