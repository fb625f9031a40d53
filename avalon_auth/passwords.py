# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Avalon Collector contributors

"""Password hashing using bcrypt."""

import bcrypt

BCRYPT_ROUNDS = 10

# bcrypt only looks at the first 72 bytes of its input
MAX_PASSWORD_BYTES = 72


class PasswordTooLongError(ValueError):
    """Raised when a password exceeds what bcrypt can hash."""
    pass


def hash_password(password: str) -> str:
    """Hash a password using bcrypt.

    Raises:
        PasswordTooLongError: If the UTF-8 encoded password is longer than 72 bytes
    """
    encoded = password.encode("utf-8")
    if len(encoded) > MAX_PASSWORD_BYTES:
        raise PasswordTooLongError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
    salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    return bcrypt.hashpw(encoded, salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against a bcrypt hash.

    Passwords that could never have been hashed, and malformed hashes,
    simply fail verification.
    """
    if not password_hash:
        return False

    encoded = password.encode("utf-8")
    if len(encoded) > MAX_PASSWORD_BYTES:
        return False

    try:
        return bcrypt.checkpw(encoded, password_hash.encode("utf-8"))
    except ValueError:
        return False
