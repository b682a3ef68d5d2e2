"""Unit tests for app.services.accounts: registration, conflicts, login and the signup race."""

import threading
import unittest
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import MagicMock, patch

from app.core.security import verify_password
from app.core.store import InMemoryCredentialStore
from app.models.user import Role
from app.schemas.auth import LoginRequest, SignupRequest
from app.services.accounts import (
    EMAIL_TAKEN,
    INVALID_CREDENTIALS,
    USERNAME_TAKEN,
    AuthenticationError,
    ConflictError,
    authenticate_user,
    register_user,
)


def _settings() -> MagicMock:
    settings = MagicMock()
    settings.BCRYPT_ROUNDS = 4
    return settings


def _signup(
    username: str = "alice",
    email: str = "alice@x.com",
    password: str = "Abcde1!",
    role: str = "user",
) -> SignupRequest:
    return SignupRequest.model_validate(
        {"username": username, "email": email, "type": role, "password": password}
    )


def _login(username: str = "alice", password: str = "Abcde1!") -> LoginRequest:
    return LoginRequest(username=username, password=password)


class TestRegisterUser(unittest.TestCase):
    """register_user stores a salted hash and never the plain password."""

    def setUp(self) -> None:
        self.store = InMemoryCredentialStore()

    def test_stores_record(self) -> None:
        record = register_user(self.store, _signup(role="admin"), _settings())
        self.assertIs(self.store.find_by_username("alice"), record)
        self.assertEqual(record.email, "alice@x.com")
        self.assertEqual(record.role, Role.ADMIN)
        self.assertTrue(record.password_salt)
        self.assertTrue(record.password_hash.startswith(record.password_salt))
        self.assertNotIn("Abcde1!", record.password_hash)

    def test_uses_configured_cost(self) -> None:
        settings = _settings()
        settings.BCRYPT_ROUNDS = 5
        record = register_user(self.store, _signup(), settings)
        self.assertTrue(record.password_salt.startswith("$2b$05$"))

    def test_username_conflict_regardless_of_other_fields(self) -> None:
        register_user(self.store, _signup(), _settings())
        with self.assertRaises(ConflictError) as ctx:
            register_user(
                self.store,
                _signup(email="other@x.com", password="Zyxwv9#", role="admin"),
                _settings(),
            )
        self.assertEqual(ctx.exception.message, USERNAME_TAKEN)
        self.assertEqual(self.store.count(), 1)

    def test_email_conflict_then_new_email_succeeds(self) -> None:
        register_user(self.store, _signup(), _settings())
        with self.assertRaises(ConflictError) as ctx:
            register_user(self.store, _signup(username="bob"), _settings())
        self.assertEqual(ctx.exception.message, EMAIL_TAKEN)
        self.assertIsNone(self.store.find_by_username("bob"))

        register_user(self.store, _signup(username="bob", email="bob@x.com"), _settings())
        self.assertEqual(self.store.count(), 2)

    def test_conflict_does_not_insert(self) -> None:
        register_user(self.store, _signup(), _settings())
        store = MagicMock(wraps=self.store)
        with self.assertRaises(ConflictError):
            register_user(store, _signup(), _settings())
        store.insert.assert_not_called()

    def test_hashes_outside_lock_and_rechecks_before_insert(self) -> None:
        competing = _signup(email="rival@x.com")
        calls: list[str] = []

        def hash_while_rival_registers(password: str, salt: str) -> str:
            calls.append(salt)
            if len(calls) > 1:
                return salt + "hash"
            # Another thread can take the lock while this signup is hashing.
            rival = threading.Thread(
                target=register_user, args=(self.store, competing, _settings())
            )
            rival.start()
            rival.join(timeout=5)
            self.assertFalse(rival.is_alive())
            return salt + "hash"

        with patch(
            "app.services.accounts.hash_password", side_effect=hash_while_rival_registers
        ):
            with self.assertRaises(ConflictError) as ctx:
                register_user(self.store, _signup(), _settings())
        self.assertEqual(ctx.exception.message, USERNAME_TAKEN)
        self.assertEqual(self.store.count(), 1)
        self.assertEqual(self.store.find_by_username("alice").email, "rival@x.com")


class TestAuthenticateUser(unittest.TestCase):
    """authenticate_user gives one error for unknown user and wrong password."""

    def setUp(self) -> None:
        self.store = InMemoryCredentialStore()
        register_user(self.store, _signup(), _settings())

    def test_correct_credentials(self) -> None:
        record = authenticate_user(self.store, _login(), _settings())
        self.assertEqual(record.username, "alice")

    def test_wrong_password_matches_unknown_user(self) -> None:
        with self.assertRaises(AuthenticationError) as wrong_pw:
            authenticate_user(self.store, _login(password="Abcde1?"), _settings())
        with self.assertRaises(AuthenticationError) as unknown:
            authenticate_user(self.store, _login(username="mallory"), _settings())
        self.assertEqual(wrong_pw.exception.message, INVALID_CREDENTIALS)
        self.assertEqual(unknown.exception.message, wrong_pw.exception.message)

    def test_each_single_character_change_fails(self) -> None:
        password = "Abcde1!"
        for i in range(len(password)):
            altered = password[:i] + ("x" if password[i] != "x" else "y") + password[i + 1 :]
            with self.subTest(altered=altered):
                with self.assertRaises(AuthenticationError):
                    authenticate_user(self.store, _login(password=altered), _settings())

    def test_username_is_case_sensitive(self) -> None:
        with self.assertRaises(AuthenticationError):
            authenticate_user(self.store, _login(username="Alice"), _settings())

    def test_unknown_user_still_checks_a_hash(self) -> None:
        with patch(
            "app.services.accounts.verify_password", wraps=verify_password
        ) as verify:
            with self.assertRaises(AuthenticationError):
                authenticate_user(self.store, _login(username="mallory"), _settings())
        verify.assert_called_once()
        plain, hashed = verify.call_args.args
        self.assertEqual(plain, "Abcde1!")
        self.assertTrue(hashed.startswith("$2b$04$"))

    def test_multibyte_password_changed_after_prefix_fails(self) -> None:
        password = "aA!" + "\U0001F600" * 17
        register_user(
            self.store, _signup(username="emoji", email="emoji@x.com", password=password), _settings()
        )
        authenticate_user(self.store, _login(username="emoji", password=password), _settings())
        altered = password[:-1] + "\U0001F601"
        with self.assertRaises(AuthenticationError):
            authenticate_user(self.store, _login(username="emoji", password=altered), _settings())
        with self.assertRaises(AuthenticationError):
            authenticate_user(
                self.store, _login(username="emoji", password=password + "\U0001F601"), _settings()
            )


class TestConcurrentRegistration(unittest.TestCase):
    """Concurrent signups for the same username or email produce exactly one account."""

    def _race(self, bodies: list[SignupRequest]) -> tuple[int, int]:
        store = InMemoryCredentialStore()
        barrier = threading.Barrier(len(bodies))

        def attempt(body: SignupRequest) -> bool:
            barrier.wait()
            try:
                register_user(store, body, _settings())
                return True
            except ConflictError:
                return False

        with ThreadPoolExecutor(max_workers=len(bodies)) as pool:
            results = list(pool.map(attempt, bodies))
        return sum(results), store.count()

    def test_same_username(self) -> None:
        bodies = [_signup(email=f"alice{i}@x.com") for i in range(8)]
        self.assertEqual(self._race(bodies), (1, 1))

    def test_same_email(self) -> None:
        bodies = [_signup(username=f"user{i}") for i in range(8)]
        self.assertEqual(self._race(bodies), (1, 1))


if __name__ == "__main__":
    unittest.main()
