# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Avalon Collector contributors

"""Administrator login and profile management."""

from typing import Any, Dict, Optional

from starlette.concurrency import run_in_threadpool

from avalon_auth import JWTManager, PasswordTooLongError, hash_password, verify_password
from avalon_logging import Logger, create_logger

from .errors import NotFound, ValidationFailed
from .user_store import UserRecord, UserStore


class AuthService:
    """Username/password login issuing stateless session tokens.

    bcrypt work runs in the threadpool so logins do not stall the event loop.
    """

    def __init__(self, users: UserStore, jwt_manager: JWTManager, logger: Optional[Logger] = None):
        self.users = users
        self.jwt_manager = jwt_manager
        self.logger = logger or create_logger(logger_type="stdout", level="INFO", name="avalon_collector.auth")

    async def _hash(self, password: str) -> str:
        try:
            return await run_in_threadpool(hash_password, password)
        except PasswordTooLongError as e:
            raise ValidationFailed(str(e)) from e

    async def login(self, username: str, password: str) -> Optional[Dict[str, Any]]:
        """Check credentials and mint a token.

        Returns:
            ``{"token", "user": {"id", "username"}}``, or None if the username
            is unknown or the password is wrong
        """
        user = await self.users.find_by_username(username)
        if user is None:
            return None
        if not await run_in_threadpool(verify_password, password, user.password_hash):
            return None

        token = self.jwt_manager.mint_token(user.id, user.username)
        self.logger.info("User logged in", user_id=user.id)
        return {"token": token, "user": user.public_dict()}

    async def create_user(self, username: str, password: str) -> UserRecord:
        """Raises ValidationFailed if the username is taken or the password too long."""
        if await self.users.find_by_username(username) is not None:
            raise ValidationFailed("Username already taken")
        return await self.users.create(username, await self._hash(password))

    async def seed_admin(self, username: str, password: Optional[str]) -> Optional[UserRecord]:
        """Create the initial administrator unless it already exists or no password is set."""
        if not password:
            return None
        if await self.users.find_by_username(username) is not None:
            return None
        user = await self.create_user(username, password)
        self.logger.info("Seeded administrator account", username=username)
        return user

    async def update_profile(
        self,
        user_id: str,
        username: Optional[str] = None,
        current_password: Optional[str] = None,
        new_password: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Change the username and/or password of a user.

        Returns:
            The updated public user view

        Raises:
            ValidationFailed: Nothing to update, missing or incorrect current
                password, username taken, password too long
            NotFound: The user no longer exists
        """
        if not username and not new_password:
            raise ValidationFailed("No data provided for update")
        if new_password and not current_password:
            raise ValidationFailed("Current password is required to change password")

        user = await self.users.find(user_id)
        if user is None:
            raise NotFound("User not found")

        if new_password:
            if not await run_in_threadpool(verify_password, current_password, user.password_hash):
                raise ValidationFailed("Current password is incorrect")

        if username and username != user.username:
            if await self.users.find_by_username(username) is not None:
                raise ValidationFailed("Username already taken")

        patch: Dict[str, Any] = {}
        if username:
            patch["username"] = username
        if new_password:
            patch["password"] = await self._hash(new_password)

        updated = await self.users.update(user_id, **patch)
        self.logger.info("Profile updated", user_id=user_id, password_changed=bool(new_password))
        return updated.public_dict()
