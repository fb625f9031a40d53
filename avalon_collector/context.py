# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Avalon Collector contributors

"""Wiring of the collector's components for one application instance."""

from dataclasses import dataclass
from typing import Optional

import httpx

from avalon_auth import CredentialGate, JWTManager
from avalon_config import TypedConfig
from avalon_logging import Logger
from avalon_metrics import MetricsCollector
from avalon_storage import DocumentStore

from .api_key_store import ApiKeyStore
from .api_keys import ApiKeyService
from .auth_service import AuthService
from .broker import NotificationBroker
from .error_log import ErrorFileLogger
from .event_store import EventStore
from .ingestion import IngestionCoordinator
from .notifier import DiscordNotifier
from .settings_store import SettingsStore
from .user_store import UserStore


@dataclass
class CollectorContext:
    config: TypedConfig
    logger: Logger
    metrics: MetricsCollector
    document_store: DocumentStore
    http_client: httpx.AsyncClient
    events: EventStore
    api_keys: ApiKeyStore
    users: UserStore
    settings: SettingsStore
    broker: NotificationBroker
    gate: CredentialGate
    auth: AuthService
    api_key_service: ApiKeyService
    notifier: DiscordNotifier
    error_log: ErrorFileLogger
    ingestion: IngestionCoordinator


def build_context(
    config: TypedConfig,
    document_store: DocumentStore,
    logger: Logger,
    metrics: MetricsCollector,
    http_client: Optional[httpx.AsyncClient] = None,
) -> CollectorContext:
    """Create every component of the collector around one document store."""
    http_client = http_client or httpx.AsyncClient(timeout=config.webhook_timeout_seconds)

    events = EventStore(document_store)
    api_keys = ApiKeyStore(document_store)
    users = UserStore(document_store)
    settings = SettingsStore(
        document_store,
        default_webhook_url=config.discord_webhook_url,
        default_enabled=config.discord_enabled,
    )
    jwt_manager = JWTManager(
        issuer=config.jwt_issuer,
        secret_key=config.jwt_secret,
        default_expiry=config.jwt_expiry_seconds,
    )
    broker = NotificationBroker(logger=logger, metrics=metrics, send_timeout=config.subscriber_send_timeout_seconds)
    notifier = DiscordNotifier(settings, http_client, timeout=config.webhook_timeout_seconds)
    error_log = ErrorFileLogger(config.error_log_path)

    return CollectorContext(
        config=config,
        logger=logger,
        metrics=metrics,
        document_store=document_store,
        http_client=http_client,
        events=events,
        api_keys=api_keys,
        users=users,
        settings=settings,
        broker=broker,
        gate=CredentialGate(api_keys, jwt_manager, log=logger),
        auth=AuthService(users, jwt_manager, logger=logger),
        api_key_service=ApiKeyService(api_keys, users),
        notifier=notifier,
        error_log=error_log,
        ingestion=IngestionCoordinator(events, broker, notifier, error_log, logger=logger, metrics=metrics),
    )
