# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Avalon Collector contributors

"""Avalon Authentication Adapter.

Credential primitives shared by the collector's HTTP surface:

- ``JWTManager`` mints and validates HS256 session tokens
- ``hash_password`` / ``verify_password`` wrap bcrypt
- ``CredentialGate`` resolves raw API keys and session tokens into identities
"""

__version__ = "0.1.0"

from .gate import ApiKeyRepository, CredentialGate
from .jwt_manager import JWTManager
from .models import ServiceIdentity, UserIdentity
from .passwords import BCRYPT_ROUNDS, MAX_PASSWORD_BYTES, PasswordTooLongError, hash_password, verify_password

__all__ = [
    "__version__",
    "ApiKeyRepository",
    "BCRYPT_ROUNDS",
    "CredentialGate",
    "JWTManager",
    "MAX_PASSWORD_BYTES",
    "PasswordTooLongError",
    "ServiceIdentity",
    "UserIdentity",
    "hash_password",
    "verify_password",
]
