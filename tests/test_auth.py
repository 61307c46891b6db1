"""
Tests for AuthService and password hashing.

Tests cover:
- Default admin seeding
- Login: valid, wrong password, unknown email, case-insensitive email
- Registration: success, duplicate email, invalid email, short password, role
- Session resolution: find_user with current, stale and empty ids
- Concurrency: parallel registrations are neither lost nor duplicated
"""

from concurrent.futures import ThreadPoolExecutor

import pytest

from safespeed.auth import (
    DEFAULT_ADMIN_EMAIL,
    DEFAULT_ADMIN_PASSWORD,
    DUPLICATE_EMAIL,
    INVALID_CREDENTIALS,
    INVALID_EMAIL,
    SHORT_PASSWORD,
    AuthService,
    hash_password,
    verify_password,
)
from safespeed.storage import StorageKeys


class TestPasswordHashing:
    """Test suite for hash_password and verify_password."""

    def test_hash_is_not_reversible_encoding(self):
        hashed = hash_password("secret1")
        assert "secret1" not in hashed
        assert verify_password("secret1", hashed) is True

    def test_wrong_password(self):
        assert verify_password("secret2", hash_password("secret1")) is False

    def test_salted(self):
        assert hash_password("secret1") != hash_password("secret1")

    @pytest.mark.parametrize("stored", ["", "no-separator", "a:b:c"])
    def test_malformed_hash(self, stored):
        assert verify_password("secret1", stored) is False


class TestAuthService:
    """Test suite for AuthService."""

    @pytest.fixture
    def auth(self, store):
        """Fixture providing an AuthService over an empty store."""
        return AuthService(store)

    def test_default_admin_created(self, auth):
        users = auth.users()
        assert len(users) == 1
        assert users[0].email == DEFAULT_ADMIN_EMAIL
        assert users[0].is_admin

    def test_default_admin_created_once(self, store, auth):
        AuthService(store)
        assert len(auth.users()) == 1

    def test_no_default_admin_when_users_exist(self, store, auth):
        auth.register("driver@fleet.com", "driver1", "driver")
        store_users = store.get(StorageKeys.SAFE_SPEED_USERS)
        store.set(StorageKeys.SAFE_SPEED_USERS, store_users[1:])
        assert AuthService(store).ensure_default_admin() is None

    # ==================== Login ====================

    def test_login_default_admin(self, auth):
        user, error = auth.login(DEFAULT_ADMIN_EMAIL, DEFAULT_ADMIN_PASSWORD)
        assert error is None
        assert user.role == "admin"

    def test_login_case_insensitive_email(self, auth):
        user, error = auth.login(DEFAULT_ADMIN_EMAIL.upper(), DEFAULT_ADMIN_PASSWORD)
        assert error is None
        assert user is not None

    def test_login_wrong_password(self, auth):
        user, error = auth.login(DEFAULT_ADMIN_EMAIL, "wrong-password")
        assert user is None
        assert error == INVALID_CREDENTIALS

    def test_login_unknown_email(self, auth):
        user, error = auth.login("nobody@fleet.com", DEFAULT_ADMIN_PASSWORD)
        assert user is None
        assert error == INVALID_CREDENTIALS

    # ==================== Registration ====================

    def test_register_driver(self, auth):
        user, error = auth.register("Driver@Fleet.com", "driver1", "driver")
        assert error is None
        assert user.email == "driver@fleet.com"
        assert user.role == "driver"
        assert not user.is_admin

        logged_in, error = auth.login("driver@fleet.com", "driver1")
        assert error is None
        assert logged_in == user

    def test_register_duplicate_email(self, auth):
        user, error = auth.register(DEFAULT_ADMIN_EMAIL.upper(), "whatever1", "driver")
        assert user is None
        assert error == DUPLICATE_EMAIL

    @pytest.mark.parametrize("email", ["", "plain", "a@b", "a b@c.com", "@fleet.com"])
    def test_register_invalid_email(self, auth, email):
        user, error = auth.register(email, "driver1", "driver")
        assert user is None
        assert error == INVALID_EMAIL

    @pytest.mark.parametrize("password, ok", [("12345", False), ("123456", True)])
    def test_register_password_length_boundary(self, auth, password, ok):
        user, error = auth.register("d@fleet.com", password, "driver")
        assert (user is not None) is ok
        assert error == (None if ok else SHORT_PASSWORD)

    def test_register_unknown_role(self, auth):
        user, error = auth.register("d@fleet.com", "driver1", "mechanic")
        assert user is None
        assert "role" in error

    def test_password_not_stored_in_clear(self, store, auth):
        auth.register("d@fleet.com", "driver1", "driver")
        raw_users = store.get(StorageKeys.SAFE_SPEED_USERS)
        assert all("driver1" not in u["passwordHash"] for u in raw_users)

    # ==================== Session Resolution ====================

    def test_find_user(self, auth):
        user, _ = auth.register("d@fleet.com", "driver1", "driver")
        assert auth.find_user(user.id) == user

    @pytest.mark.parametrize("user_id", [None, "", "stale-id"])
    def test_find_user_missing(self, auth, user_id):
        assert auth.find_user(user_id) is None

    # ==================== Concurrency ====================

    @pytest.mark.slow
    def test_concurrent_registrations_are_all_kept(self, auth):
        emails = [f"driver{i}@fleet.com" for i in range(8)]
        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(lambda email: auth.register(email, "driver1", "driver"), emails))

        assert all(user is not None for user, _ in results)
        stored = {user.email for user in auth.users()}
        assert stored == set(emails) | {DEFAULT_ADMIN_EMAIL}

    @pytest.mark.slow
    def test_concurrent_duplicate_registration_keeps_one(self, auth):
        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(lambda _: auth.register("d@fleet.com", "driver1", "driver"), range(8)))

        assert sum(user is not None for user, _ in results) == 1
        assert all(error == DUPLICATE_EMAIL for user, error in results if user is None)
        assert [u.email for u in auth.users()].count("d@fleet.com") == 1
