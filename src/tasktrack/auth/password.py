"""Password hashing utilities.

Learn: Uses bcrypt for secure password hashing. bcrypt generates a fresh
random salt for every hash and embeds it (plus the cost factor) in the
"$2b$10$..." output, so verification needs nothing but the stored string.
The default work factor is 10 rounds.
"""

import bcrypt

DEFAULT_ROUNDS = 10


def hash_password(password: str, rounds: int = DEFAULT_ROUNDS) -> str:
    """Hash a password with bcrypt.

    Passwords are truncated to 72 bytes (bcrypt's limit).
    """
    pw_bytes = password.encode("utf-8")[:72]
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(pw_bytes, salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its bcrypt hash.

    Comparison is delegated to bcrypt.checkpw. A malformed stored hash
    counts as a mismatch.
    """
    try:
        pw_bytes = password.encode("utf-8")[:72]
        hash_bytes = password_hash.encode("utf-8")
        return bcrypt.checkpw(pw_bytes, hash_bytes)
    except (ValueError, TypeError):
        return False
