# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Avalon Collector contributors

"""JWT session token minting and validation."""

import secrets
import time
from typing import Any

import jwt

SUPPORTED_ALGORITHMS = ("HS256",)


class JWTManager:
    """Mints and validates stateless session tokens.

    Tokens carry the user id in ``sub`` and the username in ``username``.
    Validity depends only on the signature and the expiry; there is no
    revocation list and no refresh.

    Attributes:
        issuer: Token issuer
        algorithm: Signing algorithm (HS256)
        default_expiry: Default token lifetime in seconds
    """

    def __init__(
        self,
        issuer: str,
        secret_key: str,
        algorithm: str = "HS256",
        default_expiry: int = 86400,
    ):
        """Initialize JWT manager.

        Raises:
            ValueError: If algorithm is unsupported or the secret is empty
        """
        if algorithm not in SUPPORTED_ALGORITHMS:
            raise ValueError(f"Unsupported algorithm: {algorithm}. Use one of {SUPPORTED_ALGORITHMS}")
        if not secret_key:
            raise ValueError(f"{algorithm} requires secret_key")

        self.issuer = issuer
        self.algorithm = algorithm
        self.default_expiry = default_expiry
        self._secret_key = secret_key

    def mint_token(self, user_id: str, username: str, expires_in: int | None = None) -> str:
        """Mint a session token for a user.

        Args:
            user_id: Id of the user the token is issued to
            username: Username at the time of issue
            expires_in: Token lifetime in seconds (default: self.default_expiry)

        Returns:
            Signed JWT token string
        """
        now = int(time.time())
        expiry = self.default_expiry if expires_in is None else expires_in

        claims: dict[str, Any] = {
            "iss": self.issuer,
            "sub": user_id,
            "username": username,
            "iat": now,
            "exp": now + expiry,
            "jti": secrets.token_urlsafe(16),
        }
        return jwt.encode(claims, self._secret_key, algorithm=self.algorithm)

    def validate_token(self, token: str) -> dict[str, Any]:
        """Validate and decode a session token.

        Only the configured algorithm is accepted, so unsigned (``alg=none``)
        and foreign-algorithm tokens are rejected.

        Returns:
            Decoded token claims

        Raises:
            jwt.InvalidTokenError: If the token is malformed, forged or expired
        """
        claims = jwt.decode(
            token,
            self._secret_key,
            algorithms=[self.algorithm],
            issuer=self.issuer,
            options={"require": ["exp", "iat", "sub"]},
        )
        if not isinstance(claims.get("username"), str):
            raise jwt.InvalidTokenError("Token is missing the username claim")
        return claims
