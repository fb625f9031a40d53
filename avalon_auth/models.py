# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Avalon Collector contributors

"""Identity models produced by credential resolution."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ServiceIdentity:
    """A reporting service, as bound to an active API key.

    Attributes:
        service: Service name every report from this key is attributed to
        key_id: Id of the API key record that was presented
        key_name: Human label of the API key
    """
    service: str
    key_id: str
    key_name: str = ""


@dataclass(frozen=True)
class UserIdentity:
    """An administrator, as carried by a valid session token."""
    user_id: str
    username: str

    def to_dict(self) -> dict:
        return {"userId": self.user_id, "username": self.username}
