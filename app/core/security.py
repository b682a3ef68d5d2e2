"""Password salting, hashing and verification (bcrypt)."""

import bcrypt

# bcrypt only looks at the first 72 bytes of the password; longer input is refused.
BCRYPT_MAX_BYTES = 72


def password_fits(plain_password: str) -> bool:
    """True if the UTF-8 encoded password is within bcrypt's input limit."""
    return len(plain_password.encode("utf-8")) <= BCRYPT_MAX_BYTES


def generate_salt(rounds: int) -> str:
    """Generate a fresh bcrypt salt with the given cost factor."""
    return bcrypt.gensalt(rounds=rounds).decode("utf-8")


def hash_password(plain_password: str, salt: str) -> str:
    """Hash a plain-text password with the given salt. Do not store plain passwords."""
    if not password_fits(plain_password):
        raise ValueError(f"Password exceeds {BCRYPT_MAX_BYTES} bytes")
    return bcrypt.hashpw(plain_password.encode("utf-8"), salt.encode("utf-8")).decode("utf-8")


def verify_password(plain_password: str, hashed: str) -> bool:
    """Verify a plain password against a stored hash (constant-time compare)."""
    # Never truncate: a longer password must not match on its first 72 bytes.
    if not password_fits(plain_password):
        return False
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False
