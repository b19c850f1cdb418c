"""
Account keys for Inkwell.

An account holds two random keys: a secret key (``sk-...``) that
authenticates every request and a recovery key (``rk-...``) that can rotate
it. The first KEY_ID_LENGTH characters of a key are stored in clear as its
lookup id; the full key is only stored as a bcrypt hash.
"""
import os
import hashlib
import bcrypt

SECRET_KEY_PREFIX = "sk-"
RECOVERY_KEY_PREFIX = "rk-"
SECRET_KEY_BYTES = 32
RECOVERY_KEY_BYTES = 48
KEY_ID_LENGTH = 16
BCRYPT_ROUNDS = 12
# bcrypt ignores input past this many bytes
BCRYPT_MAX_BYTES = 72


def _random_hex(n_bytes: int) -> str:
    return os.urandom(n_bytes).hex()


def new_sk() -> str:
    return SECRET_KEY_PREFIX + _random_hex(SECRET_KEY_BYTES)


def new_rk() -> str:
    return RECOVERY_KEY_PREFIX + _random_hex(RECOVERY_KEY_BYTES)


def extract_key_id(key: str) -> str:
    """Clear-text lookup id for a key: its prefix and the first hex digits."""
    return key[:KEY_ID_LENGTH]


def _bcrypt_input(key: str) -> bytes:
    # Recovery keys are longer than bcrypt reads, so long keys are digested first
    raw = key.encode("utf-8")
    if len(raw) > BCRYPT_MAX_BYTES:
        return hashlib.sha256(raw).hexdigest().encode("utf-8")
    return raw


def hash_key(key: str) -> str:
    return bcrypt.hashpw(_bcrypt_input(key), bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_key(plain_key: str, hashed_key: str) -> bool:
    """
    Check a presented key against a stored hash.

    A malformed stored hash counts as a mismatch rather than an error.
    """
    try:
        return bcrypt.checkpw(_bcrypt_input(plain_key), hashed_key.encode("utf-8"))
    except (ValueError, TypeError):
        return False


def admin_usernames() -> set[str]:
    """Usernames listed in INKWELL_ADMIN_USERNAMES (comma-separated)."""
    config = os.getenv("INKWELL_ADMIN_USERNAMES", "")
    return {name.strip() for name in config.split(",") if name.strip()}


def role_for_username(username: str) -> str:
    """Role stored with a new account: admin for configured usernames."""
    return "admin" if username in admin_usernames() else "user"
