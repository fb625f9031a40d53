# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Avalon Collector contributors

"""Collector error taxonomy.

Each error carries the HTTP status it is answered with. Messages are
safe to show to clients; internal details go to the log instead.
"""


class CollectorError(Exception):
    """Base class for errors answered with a client-facing message."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class Unauthenticated(CollectorError):
    """Missing, malformed, unknown or inactive credential."""
    status_code = 401


class ValidationFailed(CollectorError):
    """Request input failed validation."""
    status_code = 400


class PayloadTooLarge(ValidationFailed):
    """Request body exceeds the configured size limit."""
    status_code = 413


class NotFound(CollectorError):
    """Referenced record does not exist."""
    status_code = 404


class StoreFailure(CollectorError):
    """Persistence layer failed; nothing was written."""
    status_code = 500


class NotificationFailure(Exception):
    """A webhook delivery failed. Logged, never returned to clients."""
    pass
