"""
Authentication module for the SafeSpeed system.

This module contains the User dataclass and the AuthService class which
manages dashboard accounts in the key-value store. Passwords are stored as
salted PBKDF2-HMAC-SHA256 hashes and compared in constant time.

The service does not keep a session itself: the dashboard stores the id of
the logged-in user per browser session and resolves it with find_user().
"""

import hashlib
import hmac
import logging
import re
import secrets
import uuid
from dataclasses import dataclass
from typing import Any, Optional

from .storage import KeyValueStore, StorageKeys

logger = logging.getLogger(__name__)

ROLES = ("admin", "driver")

PBKDF2_ITERATIONS = 100000
MIN_PASSWORD_LENGTH = 6
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

DEFAULT_ADMIN_EMAIL = "admin@fleetsafety.com"
DEFAULT_ADMIN_PASSWORD = "admin123"

INVALID_CREDENTIALS = "Invalid email or password"
DUPLICATE_EMAIL = "User with this email already exists"
INVALID_EMAIL = "Please enter a valid email address"
SHORT_PASSWORD = f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"


def hash_password(password: str) -> str:
    """Hash a password with PBKDF2-HMAC-SHA256 and a random salt."""
    salt = secrets.token_hex(16)
    hash_value = hashlib.pbkdf2_hmac(
        "sha256",
        password.encode(),
        salt.encode(),
        PBKDF2_ITERATIONS
    ).hex()
    return f"{salt}:{hash_value}"


def verify_password(password: str, stored_hash: str) -> bool:
    """Verify a password against a hash produced by hash_password()."""
    try:
        salt, hash_value = stored_hash.split(":")
        computed = hashlib.pbkdf2_hmac(
            "sha256",
            password.encode(),
            salt.encode(),
            PBKDF2_ITERATIONS
        ).hex()
        return hmac.compare_digest(computed, hash_value)
    except (ValueError, AttributeError):
        return False


@dataclass(frozen=True)
class User:
    """
    A dashboard account.

    Attributes:
        id: Unique user id
        email: Lower-cased email address
        role: "admin" or "driver"
        password_hash: Salted password hash (see hash_password)
    """

    id: str
    email: str
    role: str
    password_hash: str

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    def to_dict(self) -> dict[str, str]:
        return {
            "id": self.id,
            "email": self.email,
            "role": self.role,
            "passwordHash": self.password_hash,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "User":
        return cls(
            id=str(data["id"]),
            email=str(data["email"]),
            role=str(data["role"]),
            password_hash=str(data["passwordHash"]),
        )


class AuthService:
    """
    Account registration and login backed by a KeyValueStore.

    A default administrator account is created the first time the service
    finds no users, so a fresh installation can be configured.
    """

    def __init__(self, store: KeyValueStore) -> None:
        self.store = store
        self.ensure_default_admin()

    def users(self) -> list[User]:
        raw_users = self.store.get(StorageKeys.SAFE_SPEED_USERS) or []
        users = []
        for raw in raw_users if isinstance(raw_users, list) else []:
            try:
                users.append(User.from_dict(raw))
            except (KeyError, TypeError) as e:
                logger.warning("Skipping malformed user record: %s", e)
        return users

    def _add_user(self, user: User, only_if_empty: bool = False) -> tuple[bool, Optional[str]]:
        """
        Appends user to the stored list in one locked store update.

        The duplicate check runs against the list being updated, so two
        concurrent registrations cannot both claim the same email.

        Returns:
            A tuple containing:
            - bool: True if the user was stored
            - Optional[str]: None on success, or the reason it was not stored
        """
        rejected = None

        def append(raw_users: Any) -> list[dict[str, Any]]:
            nonlocal rejected
            if not isinstance(raw_users, list):
                raw_users = []
            if only_if_empty and raw_users:
                rejected = "Users already exist"
                return raw_users
            if any(isinstance(raw, dict) and str(raw.get("email", "")).lower() == user.email
                   for raw in raw_users):
                rejected = DUPLICATE_EMAIL
                return raw_users
            return raw_users + [user.to_dict()]

        if not self.store.update(StorageKeys.SAFE_SPEED_USERS, append, default=[]):
            return (False, "Failed to save account. Please try again.")
        return (rejected is None, rejected)

    def ensure_default_admin(self) -> Optional[User]:
        """
        Creates the default administrator if there are no users.

        Returns:
            The created admin, or None if users already exist or saving failed
        """
        if self.users():
            return None

        admin = User(
            id=uuid.uuid4().hex,
            email=DEFAULT_ADMIN_EMAIL,
            role="admin",
            password_hash=hash_password(DEFAULT_ADMIN_PASSWORD),
        )
        added, _ = self._add_user(admin, only_if_empty=True)
        if not added:
            return None
        logger.info("Created default admin account %s", DEFAULT_ADMIN_EMAIL)
        return admin

    def find_user(self, user_id: Optional[str]) -> Optional[User]:
        """
        Resolves a session's user id to its account.

        Returns:
            The user, or None if user_id is empty or no longer exists
        """
        if not user_id:
            return None
        for user in self.users():
            if user.id == user_id:
                return user
        return None

    def login(self, email: str, password: str) -> tuple[Optional[User], Optional[str]]:
        """
        Checks credentials. Email comparison is case-insensitive.

        Returns:
            A tuple containing:
            - Optional[User]: The authenticated user, or None
            - Optional[str]: None on success, or an error message
        """
        email = email.strip().lower()
        for user in self.users():
            if user.email.lower() == email and verify_password(password, user.password_hash):
                logger.info("User %s logged in", user.email)
                return (user, None)

        logger.info("Failed login attempt for %s", email)
        return (None, INVALID_CREDENTIALS)

    def register(self, email: str, password: str, role: str) -> tuple[Optional[User], Optional[str]]:
        """
        Creates a new account.

        Args:
            email: Email address, stored lower-cased
            password: Plain password (at least 6 characters)
            role: "admin" or "driver"

        Returns:
            A tuple containing:
            - Optional[User]: The new user, or None if registration failed
            - Optional[str]: None on success, or an error message
        """
        email = email.strip().lower()

        if any(u.email.lower() == email for u in self.users()):
            return (None, DUPLICATE_EMAIL)
        if not EMAIL_PATTERN.match(email):
            return (None, INVALID_EMAIL)
        if len(password) < MIN_PASSWORD_LENGTH:
            return (None, SHORT_PASSWORD)
        if role not in ROLES:
            return (None, f"Unknown role: {role}")

        user = User(
            id=uuid.uuid4().hex,
            email=email,
            role=role,
            password_hash=hash_password(password),
        )
        added, error = self._add_user(user)
        if not added:
            return (None, error)

        logger.info("Registered %s user %s", role, email)
        return (user, None)
