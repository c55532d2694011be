import secrets
from datetime import datetime, timedelta

import bcrypt

from whisperbox.database.entities import utcnow

BCRYPT_ROUNDS = 10
# bcrypt only reads the first 72 bytes; bcrypt>=5 rejects longer input
BCRYPT_MAX_BYTES = 72


def password_fits_bcrypt(password: str) -> bool:
    return len(password.encode("utf-8")) <= BCRYPT_MAX_BYTES


def hash_password(password: str) -> str:
    """
    Raises:
        ValueError: the password is longer than 72 bytes in UTF-8.
    """
    if not password_fits_bcrypt(password):
        raise ValueError(f"password cannot be longer than {BCRYPT_MAX_BYTES} bytes")
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def check_password(password: str, password_hash: str) -> bool:
    if not password_fits_bcrypt(password):
        # no stored hash was made from a password this long
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # malformed stored hash
        return False


def codes_match(expected: str, supplied: str) -> bool:
    """Constant-time comparison that also accepts non-ASCII input."""
    return secrets.compare_digest(expected.encode("utf-8"), supplied.encode("utf-8"))


def generate_verify_code() -> str:
    """A 6-digit numeric code in [100000, 999999]."""
    return str(100000 + secrets.randbelow(900000))


def code_expiry(ttl_minutes: int, now: datetime | None = None) -> datetime:
    return (now or utcnow()) + timedelta(minutes=ttl_minutes)
