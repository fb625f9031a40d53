# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Avalon Collector contributors

"""Integration tests for report ingestion and error management."""

import json

import pytest

from avalon_collector.dependencies import INVALID_API_KEY, MISSING_API_KEY, MISSING_AUTHORIZATION
from avalon_storage import DocumentStoreError

from .helpers import create_api_key, report

pytestmark = pytest.mark.integration


class TestReport:
    """Tests for POST /report."""

    def test_report_is_stored(self, client, billing_key):
        response = report(client, billing_key["key"], {
            "level": "fatal",
            "error": {"message": "Database timeout", "stack": "trace", "path": "/pay", "method": "POST"},
            "metadata": {"userId": 42},
        })

        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "ok"

        items = client.get("/errors").json()["items"]
        assert len(items) == 1
        item = items[0]
        assert item["id"] == body["id"]
        assert item["service"] == "billing"
        assert item["level"] == "fatal"
        assert item["message"] == "Database timeout"
        assert item["stack"] == "trace"
        assert item["path"] == "/pay"
        assert item["method"] == "POST"
        assert item["metadata"] == {"userId": 42}
        assert item["createdAt"].endswith("Z")

    def test_empty_report_gets_defaults(self, client, billing_key):
        assert report(client, billing_key["key"], {}).status_code == 201

        item = client.get("/errors").json()["items"][0]
        assert item["level"] == "error"
        assert item["message"] is None
        assert item["metadata"] is None

    def test_non_object_metadata_is_stored_verbatim(self, client, billing_key):
        report(client, billing_key["key"], {"metadata": ["retry", 3]})
        report(client, billing_key["key"], {"metadata": "plain"})

        stored = [item["metadata"] for item in client.get("/errors").json()["items"]]
        assert stored == ["plain", ["retry", 3]]

    def test_empty_body_is_accepted(self, client, billing_key):
        response = client.post("/report", headers={"X-API-Key": billing_key["key"]})
        assert response.status_code == 201

    def test_claimed_service_is_ignored(self, client, billing_key):
        """Test that the API key's service wins over the payload's."""
        report(client, billing_key["key"], {"service": "payments", "error": {"message": "spoof"}})

        assert client.get("/errors").json()["items"][0]["service"] == "billing"

    def test_client_timestamp_is_ignored(self, client, billing_key):
        report(client, billing_key["key"], {"timestamp": "1999-01-01T00:00:00Z"})

        assert not client.get("/errors").json()["items"][0]["createdAt"].startswith("1999")

    def test_unknown_level_is_stored_as_is(self, client, billing_key):
        report(client, billing_key["key"], {"level": "notice"})
        assert client.get("/errors").json()["items"][0]["level"] == "notice"

    def test_missing_api_key(self, client):
        response = client.post("/report", json={})

        assert response.status_code == 401
        assert response.json() == {"status": "error", "message": MISSING_API_KEY}

    def test_unknown_api_key(self, client, metrics):
        response = report(client, "avl_" + "0" * 36)

        assert response.status_code == 401
        assert response.json()["message"] == INVALID_API_KEY
        assert metrics.get_counter_total("auth_failures_total", tags={"kind": "api_key_invalid"}) == 1

    def test_rejected_report_is_not_stored(self, client, billing_key):
        report(client, "avl_wrong", {"error": {"message": "x"}})
        assert client.get("/errors").json()["items"] == []

    def test_invalid_json(self, client, billing_key):
        response = client.post(
            "/report",
            content=b"{not json",
            headers={"X-API-Key": billing_key["key"], "Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["status"] == "error"

    def test_non_object_body(self, client, billing_key):
        response = client.post(
            "/report",
            content=json.dumps([1, 2]),
            headers={"X-API-Key": billing_key["key"], "Content-Type": "application/json"},
        )
        assert response.status_code == 400
        assert response.json()["message"] == "Report must be a JSON object"

    def test_wrongly_typed_field(self, client, billing_key):
        response = report(client, billing_key["key"], {"error": {"message": {"nested": True}}})

        assert response.status_code == 400
        assert response.json()["message"].startswith("error.message")

    def test_oversized_body(self, client, billing_key):
        response = report(client, billing_key["key"], {"error": {"message": "x" * 300_000}})

        assert response.status_code == 413
        assert client.get("/errors").json()["items"] == []

    def test_error_log_file_is_written(self, client, billing_key, collector_env):
        event_id = report(client, billing_key["key"], {"error": {"message": "logged"}}).json()["id"]

        with open(collector_env["ERROR_LOG_PATH"], encoding="utf-8") as f:
            lines = [json.loads(line) for line in f]
        assert lines[-1]["id"] == event_id
        assert lines[-1]["service"] == "billing"
        assert lines[-1]["message"] == "logged"

    def test_report_triggers_webhook_when_enabled(self, client, admin_headers, billing_key, webhook):
        client.put(
            "/settings",
            json={"discordWebhookUrl": "https://discord.example/hook", "discordEnabled": True},
            headers=admin_headers,
        )

        report(client, billing_key["key"], {"level": "critical", "error": {"message": "down"}})

        assert len(webhook.requests) == 1
        embed = webhook.requests[0]["json"]["embeds"][0]
        assert embed["description"] == "down"
        assert "CRITICAL" in embed["title"]

    def test_webhook_failure_still_acknowledges(self, client, admin_headers, billing_key, webhook):
        webhook.status_code = 500
        client.put(
            "/settings",
            json={"discordWebhookUrl": "https://discord.example/hook", "discordEnabled": True},
            headers=admin_headers,
        )

        response = report(client, billing_key["key"], {"error": {"message": "still stored"}})

        assert response.status_code == 201
        assert client.get("/errors").json()["items"][0]["message"] == "still stored"


class TestListErrors:
    """Tests for GET /errors."""

    def test_newest_first(self, client, billing_key):
        ids = [report(client, billing_key["key"], {"error": {"message": str(i)}}).json()["id"] for i in range(3)]

        items = client.get("/errors").json()["items"]
        assert [item["id"] for item in items] == list(reversed(ids))

    def test_take_and_skip(self, client, billing_key):
        ids = [report(client, billing_key["key"]).json()["id"] for _ in range(4)]

        items = client.get("/errors", params={"take": 2, "skip": 1}).json()["items"]
        assert [item["id"] for item in items] == [ids[2], ids[1]]

    def test_take_zero_is_empty(self, client, billing_key):
        report(client, billing_key["key"])
        assert client.get("/errors", params={"take": 0}).json()["items"] == []

    @pytest.mark.parametrize("params", [{"take": -1}, {"take": "ten"}, {"skip": -3}])
    def test_invalid_paging(self, client, params):
        response = client.get("/errors", params=params)

        assert response.status_code == 400
        assert response.json()["status"] == "error"

    def test_page_size_is_capped(self, make_client, billing_key):
        small = make_client(default_errors_per_page=2, max_errors_per_page=3)
        for _ in range(5):
            report(small, billing_key["key"])

        assert len(small.get("/errors").json()["items"]) == 2
        assert len(small.get("/errors", params={"take": 50}).json()["items"]) == 3

    def test_public_by_default(self, client):
        assert client.get("/errors").status_code == 200

    def test_protected_when_configured(self, make_client, admin_headers):
        protected = make_client(protect_error_routes=True)

        denied = protected.get("/errors")
        assert denied.status_code == 401
        assert denied.json()["message"] == MISSING_AUTHORIZATION
        assert protected.delete("/errors").status_code == 401
        assert protected.get("/errors", headers=admin_headers).status_code == 200

    def test_store_failure_is_500(self, make_client, document_store, monkeypatch):
        failing = make_client()

        def broken_query(*args, **kwargs):
            raise DocumentStoreError("connection lost")

        monkeypatch.setattr(document_store, "query_documents", broken_query)
        response = failing.get("/errors")

        assert response.status_code == 500
        assert response.json() == {"status": "error", "message": "Failed to list error events"}


class TestDeleteErrors:
    """Tests for the deletion routes."""

    def test_delete_one(self, client, billing_key):
        event_id = report(client, billing_key["key"]).json()["id"]

        response = client.delete(f"/errors/{event_id}")

        assert response.status_code == 200
        assert response.json() == {"status": "ok", "message": "Error deleted successfully"}
        assert client.get("/errors").json()["items"] == []

    def test_delete_missing(self, client):
        response = client.delete("/errors/does-not-exist")

        assert response.status_code == 404
        assert response.json() == {"status": "error", "message": "Error not found"}

    def test_delete_by_service(self, client, admin_headers, billing_key):
        search_key = create_api_key(client, admin_headers, "search")
        report(client, billing_key["key"])
        report(client, billing_key["key"])
        report(client, search_key["key"])

        response = client.delete("/errors/service/billing")

        assert response.json() == {"status": "ok", "message": "2 error(s) deleted for service billing", "count": 2}
        remaining = client.get("/errors").json()["items"]
        assert [item["service"] for item in remaining] == ["search"]

    def test_delete_by_unknown_service(self, client):
        assert client.delete("/errors/service/nobody").json()["count"] == 0

    def test_delete_all(self, client, billing_key):
        for _ in range(3):
            report(client, billing_key["key"])

        response = client.delete("/errors")

        assert response.json() == {"status": "ok", "message": "3 error(s) deleted successfully", "count": 3}
        assert client.get("/errors").json()["items"] == []
        assert client.delete("/errors").json()["count"] == 0


class TestSampleRoutes:
    """Tests for the /test sample event routes."""

    def test_not_mounted_by_default(self, client):
        assert client.get("/test/all").status_code == 404

    def test_send_all(self, make_client):
        samples = make_client(enable_test_routes=True)

        body = samples.get("/test/all").json()

        assert body["status"] == "ok"
        assert [result["level"] for result in body["results"]] == [
            "critical", "fatal", "error", "warning", "info", "debug",
        ]
        items = samples.get("/errors").json()["items"]
        assert len(items) == 6
        assert {item["service"] for item in items} == {"test-service"}

    def test_send_one(self, make_client):
        samples = make_client(enable_test_routes=True)

        response = samples.get("/test/warning")

        assert response.status_code == 201
        assert samples.get("/errors").json()["items"][0]["level"] == "warning"

    def test_unknown_level(self, make_client):
        assert make_client(enable_test_routes=True).get("/test/bogus").status_code == 404
