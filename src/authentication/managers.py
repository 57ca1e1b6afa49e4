"""Custom user manager handling salted bcrypt hashing and verification."""

import base64
import hashlib
import secrets

import bcrypt
from django.contrib.auth.base_user import BaseUserManager

SALT_LEN = 16


class UserManager(BaseUserManager):
    """Manager to create users with salted bcrypt password hashes.

    The password and a per-user salt are first digested with SHA-256 so that
    bcrypt's 72-byte input limit never truncates long passwords, then the
    base64 of the digest is hashed with bcrypt.
    """

    use_in_migrations = True

    def _create_user(self, user_id: str, password: str, **extra_fields):
        if not user_id:
            raise ValueError("The user id must be set")
        if "email" in extra_fields:
            extra_fields["email"] = self.normalize_email(extra_fields["email"])
        salt = self.generate_salt()
        user = self.model(id=user_id, salt=salt, **extra_fields)
        user.password_hash = self.hash_password(password, salt)
        user.save(using=self._db)
        return user

    def create_user(self, user_id: str, password: str | None = None, **extra_fields):
        """Create a regular user with a salted bcrypt hash."""
        if password is None:
            raise ValueError("Password must be provided")
        return self._create_user(user_id, password, **extra_fields)

    @staticmethod
    def generate_salt() -> bytes:
        return secrets.token_bytes(SALT_LEN)

    @staticmethod
    def _prehash(raw_password: str, salt: bytes) -> bytes:
        digest = hashlib.sha256(raw_password.encode() + bytes(salt)).digest()
        return base64.b64encode(digest)

    @classmethod
    def hash_password(cls, raw_password: str, salt: bytes) -> str:
        """Hash a raw password with ``salt`` and return the utf-8 bcrypt string."""
        hashed = bcrypt.hashpw(cls._prehash(raw_password, salt), bcrypt.gensalt())
        return hashed.decode()

    @classmethod
    def verify_password(cls, user, raw_password: str) -> bool:
        """Verify raw password against the stored salted bcrypt hash."""

        if not user.password_hash:
            return False
        return bcrypt.checkpw(
            cls._prehash(raw_password, user.salt),
            user.password_hash.encode("utf-8"),
        )


__all__ = ["UserManager", "SALT_LEN"]
