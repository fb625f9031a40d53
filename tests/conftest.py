# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Avalon Collector contributors

"""Shared fixtures for the collector test suite."""

import json

import httpx
import pytest
from fastapi.testclient import TestClient

from avalon_collector.config import load_collector_config
from avalon_collector.main import create_app
from avalon_logging import SilentLogger
from avalon_metrics import NoOpMetricsCollector
from avalon_storage import InMemoryDocumentStore

from .helpers import ADMIN_PASSWORD, ADMIN_USERNAME, TEST_JWT_SECRET, create_api_key


def pytest_configure(config):
    config.addinivalue_line("markers", "integration: end-to-end tests through the HTTP and WebSocket surface")


@pytest.fixture
def collector_env(tmp_path):
    """Environment for a collector with an in-memory store and a seeded admin."""
    return {
        "JWT_SECRET": TEST_JWT_SECRET,
        "ADMIN_USERNAME": ADMIN_USERNAME,
        "ADMIN_PASSWORD": ADMIN_PASSWORD,
        "ERROR_LOG_PATH": str(tmp_path / "errors.log"),
        "LOG_TYPE": "silent",
    }


@pytest.fixture
def collector_config(collector_env):
    return load_collector_config(environ=collector_env)


@pytest.fixture
def silent_logger():
    return SilentLogger(name="test")


@pytest.fixture
def metrics():
    return NoOpMetricsCollector()


@pytest.fixture
def document_store():
    store = InMemoryDocumentStore()
    store.connect()
    return store


class WebhookRecorder:
    """httpx.MockTransport handler that records webhook posts."""

    def __init__(self):
        self.requests = []
        self.status_code = 204
        self.error = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        if self.error is not None:
            raise self.error
        self.requests.append({"url": str(request.url), "json": json.loads(request.content)})
        return httpx.Response(self.status_code)


@pytest.fixture
def webhook():
    return WebhookRecorder()


@pytest.fixture
def http_client(webhook):
    return httpx.AsyncClient(transport=httpx.MockTransport(webhook))


@pytest.fixture
def app(collector_config, document_store, http_client, silent_logger, metrics):
    return create_app(
        config=collector_config,
        document_store=document_store,
        http_client=http_client,
        logger=silent_logger,
        metrics=metrics,
    )


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def admin_headers(client):
    """Authorization headers for the seeded admin."""
    response = client.post("/auth/login", json={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['token']}"}


@pytest.fixture
def billing_key(client, admin_headers):
    """An active API key bound to the "billing" service."""
    return create_api_key(client, admin_headers, "billing")


@pytest.fixture
def make_client(collector_config, document_store, http_client, silent_logger, metrics):
    """Build extra clients whose config differs from the default one."""
    clients = []

    def factory(raise_server_exceptions=True, **overrides):
        app = create_app(
            config=collector_config.replace(**overrides),
            document_store=document_store,
            http_client=http_client,
            logger=silent_logger,
            metrics=metrics,
        )
        test_client = TestClient(app, raise_server_exceptions=raise_server_exceptions)
        test_client.__enter__()
        clients.append(test_client)
        return test_client

    yield factory

    for test_client in clients:
        test_client.__exit__(None, None, None)
