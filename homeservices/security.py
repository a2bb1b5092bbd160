"""
Security helpers for HomeServices.

- Password hashing (passlib, bcrypt)
- Capability checks over (identity, resource owner) pairs
"""

from typing import Optional

from passlib.context import CryptContext

from homeservices.storage.models import User


DEFAULT_BCRYPT_ROUNDS = 12


class PasswordHasher:
    """One-way password hashing with bcrypt."""

    def __init__(self, rounds: int = DEFAULT_BCRYPT_ROUNDS):
        self.context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=rounds,
        )

    def hash(self, password: str) -> str:
        return self.context.hash(password)

    def verify(self, password: str, password_hash: Optional[str]) -> bool:
        """Check a plaintext password against a stored hash. Never raises on bad hashes."""
        if not password_hash:
            return False
        try:
            return self.context.verify(password, password_hash)
        except ValueError:
            return False


def is_admin(identity: User) -> bool:
    return bool(identity.is_admin)


def is_self_or_admin(identity: User, owner_id: Optional[int]) -> bool:
    """True if `identity` owns the resource or is an admin."""
    if is_admin(identity):
        return True
    return owner_id is not None and identity.persisted_id == owner_id
