"""
Password hashing with bcrypt.

bcrypt only reads the first 72 bytes of its input (newer releases raise
instead of truncating), so both functions cut the UTF-8 encoding to 72 bytes.
"""

import bcrypt

BCRYPT_MAX_BYTES = 72

# Compared against when the email is unknown, so a failed login costs one
# bcrypt check whether or not the account exists.
_DUMMY_HASH = bcrypt.hashpw(b"dummy-password", bcrypt.gensalt()).decode("utf-8")


def _encode(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(password: str) -> str:
    """Return a salted bcrypt hash (60 characters)."""
    return bcrypt.hashpw(_encode(password), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    """Check a password against a stored hash. Malformed hashes never match."""
    try:
        return bcrypt.checkpw(_encode(password), hashed.encode("utf-8"))
    except ValueError:
        return False


def burn_password_check(password: str) -> None:
    """Spend the same effort as verify_password for a login with no user."""
    verify_password(password, _DUMMY_HASH)
