"""End-to-end tests for the HTTP surface through TestClient."""

from __future__ import annotations

from fastapi.testclient import TestClient

from eva_api.config.settings import EvaSettings
from eva_api.main import create_app

_BASE = "/api/v1/equipment"


class TestHealthAndContext:
    def test_health(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["data"] == {"status": "healthy", "version": "2.0"}
        assert body["message"] == "Service healthy"

    def test_request_id_is_propagated(self, client):
        resp = client.get("/health", headers={"X-Request-ID": "abc-123"})
        assert resp.headers["x-request-id"] == "abc-123"
        assert resp.json()["metadata"]["request_id"] == "abc-123"

    def test_unsafe_request_id_is_replaced(self, client):
        resp = client.get("/health", headers={"X-Request-ID": "<script>alert(1)</script>"})
        assert resp.headers["x-request-id"] != "<script>alert(1)</script>"
        assert resp.json()["metadata"]["request_id"] == resp.headers["x-request-id"]

    def test_principal_from_headers(self, client, technician_headers):
        metadata = client.get("/health", headers=technician_headers).json()["metadata"]
        assert metadata["user_id"] == 3
        assert metadata["permissions"]["role"] == "technician"

    def test_locale_from_accept_language(self, client):
        metadata = client.get("/health", headers={"Accept-Language": "en-US,en;q=0.9"}).json()[
            "metadata"
        ]
        assert metadata["locale"] == "en"

    def test_default_locale(self, client):
        assert client.get("/health").json()["metadata"]["locale"] == "es"

    def test_timestamp_from_injected_clock(self, client):
        assert client.get("/health").json()["timestamp"] == "2024-05-01T12:00:00.000Z"


class TestListing:
    def test_paginated_list(self, client):
        resp = client.get(_BASE, params={"per_page": 5})
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert len(data["items"]) == 5
        assert data["items"][0]["id"] == 12
        assert data["pagination"]["total"] == 12
        assert data["pagination"]["last_page"] == 3
        assert data["pagination"]["next_page_url"] == f"{_BASE}?page=2"
        assert data["summary"] == "Showing 1–5 of 12"
        assert data["empty"] is False

    def test_per_page_is_capped(self, client):
        data = client.get(_BASE, params={"per_page": 1000}).json()["data"]
        assert data["pagination"]["per_page"] == 100

    def test_filter_by_status(self, client):
        data = client.get(_BASE, params={"status": "maintenance"}).json()["data"]
        assert [item["code"] for item in data["items"]] == ["EQ-003"]

    def test_search(self, client):
        body = client.get(_BASE, params={"search": "philips"}).json()
        assert body["message"] == "Search completed"
        assert body["data"]["query"] == "philips"
        assert body["data"]["count"] == 1
        assert body["data"]["results"][0]["brand"] == "Philips"

    def test_search_without_results(self, client):
        data = client.get(_BASE, params={"search": "zzz"}).json()["data"]
        assert data["empty"] is True
        assert data["summary"] == "Showing 0–0 of 0"

    def test_table_actions_follow_permissions(self, client, admin_headers, viewer_headers):
        admin = client.get(f"{_BASE}/table", headers=admin_headers).json()["data"]
        viewer = client.get(f"{_BASE}/table", headers=viewer_headers).json()["data"]
        assert admin["actions"] == ["view", "edit", "delete"]
        assert viewer["actions"] == ["view"]
        service = next(c for c in admin["columns"] if c["key"] == "service")
        assert service["sortable"] is False
        assert service["label"] == "Servicio"

    def test_options(self, client):
        data = client.get(f"{_BASE}/options", params={"service_id": 2}).json()["data"]
        assert [o["value"] for o in data["options"]] == [1, 2, 4, 12]
        assert data["options"][0]["label"] == "EQ-001 - Monitor de signos vitales"
        assert data["config"]["searchable"] is True

    def test_form_create_and_edit(self, client):
        create = client.get(f"{_BASE}/form").json()["data"]
        assert create["mode"] == "create"
        assert create["method"] == "POST"
        edit = client.get(f"{_BASE}/form", params={"equipment_id": 1}).json()["data"]
        assert edit["mode"] == "edit"
        assert edit["method"] == "PUT"
        assert edit["initial_values"]["code"] == "EQ-001"


class TestDetail:
    def test_get(self, client):
        body = client.get(f"{_BASE}/1").json()
        assert body["data"]["code"] == "EQ-001"
        assert body["data"]["service"] == "Unidad de Cuidados Intensivos"

    def test_missing(self, client):
        resp = client.get(f"{_BASE}/999")
        assert resp.status_code == 404
        body = resp.json()
        assert body["success"] is False
        assert body["status"] == "not_found"
        assert body["message"] == "Equipment 999 not found"

    def test_bad_id_is_validation_error(self, client):
        resp = client.get(f"{_BASE}/abc")
        assert resp.status_code == 422
        body = resp.json()
        assert body["status"] == "validation_error"
        assert "equipment_id" in body["errors"]

    def test_modal(self, client):
        data = client.get(f"{_BASE}/2/modal").json()["data"]
        assert data["modal_config"]["size"] == "lg"
        assert data["modal_config"]["title"] == "EQ-002 - Ventilador mecánico"

    def test_manual(self, client):
        data = client.get(f"{_BASE}/3/manual").json()["data"]
        assert data["file"]["size"] == 1572864
        assert data["file"]["size_human"] == "1.5 MB"
        assert data["file"]["mime_type"] == "application/pdf"


class TestMutations:
    def test_create(self, client, admin_headers):
        resp = client.post(
            _BASE,
            json={
                "code": "EQ-100",
                "name": "Monitor",
                "brand": "Mindray",
                "model": "uMEC12",
                "service_id": 1,
                "area_id": 11,
            },
            headers=admin_headers,
        )
        assert resp.status_code == 201
        assert resp.json()["data"]["id"] == 13

    def test_create_duplicate_conflicts(self, client, admin_headers):
        resp = client.post(
            _BASE,
            json={
                "code": "EQ-001",
                "name": "Otro",
                "brand": "X",
                "model": "Y",
                "service_id": 1,
                "area_id": 1,
            },
            headers=admin_headers,
        )
        assert resp.status_code == 409
        body = resp.json()
        assert body["status"] == "conflict"
        assert body["errors"] == {"code": ["duplicate"]}

    def test_create_invalid_body(self, client, admin_headers):
        resp = client.post(_BASE, json={"code": ""}, headers=admin_headers)
        assert resp.status_code == 422
        assert {"code", "name", "brand"} <= set(resp.json()["errors"])

    def test_status_change_requires_identity(self, client):
        resp = client.patch(f"{_BASE}/1/status", json={"status": "maintenance"})
        assert resp.status_code == 401
        assert resp.json()["status"] == "unauthorized"

    def test_status_change_requires_capability(self, client, viewer_headers):
        resp = client.patch(
            f"{_BASE}/1/status", json={"status": "maintenance"}, headers=viewer_headers
        )
        assert resp.status_code == 403
        assert resp.json()["status"] == "forbidden"

    def test_status_change_broadcasts(self, app, client, technician_headers):
        resp = client.patch(
            f"{_BASE}/1/status", json={"status": "out_of_service"}, headers=technician_headers
        )
        assert resp.status_code == 200
        assert resp.json()["data"]["status"] == "out_of_service"

        [event] = app.state.broadcaster.history()
        assert event.name == "equipment.status.changed"
        assert event.priority == "high"
        assert event.payload["changed_by"] == {"id": 3, "name": "user-3"}

    def test_unchanged_status_does_not_broadcast(self, app, client, technician_headers):
        client.patch(f"{_BASE}/1/status", json={"status": "operational"}, headers=technician_headers)
        assert app.state.broadcaster.history() == []

    def test_batch(self, client, admin_headers):
        resp = client.post(
            f"{_BASE}/batch",
            json={"ids": [1, 2, 999], "operation": "deactivate"},
            headers=admin_headers,
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["message"] == "Batch operation 'deactivate' completed with 1 failures"
        assert body["data"]["summary"] == {
            "total": 3,
            "successful": 2,
            "failed": 1,
            "success_rate": 66.67,
        }

    def test_batch_rejects_empty_ids(self, client, admin_headers):
        resp = client.post(
            f"{_BASE}/batch", json={"ids": [], "operation": "activate"}, headers=admin_headers
        )
        assert resp.status_code == 422

    def test_delete(self, client, admin_headers, supervisor_headers):
        assert client.delete(f"{_BASE}/1", headers=supervisor_headers).status_code == 403

        resp = client.delete(f"{_BASE}/1", headers=admin_headers)
        assert resp.status_code == 204
        assert resp.content == b""
        assert client.get(f"{_BASE}/1").status_code == 404


class TestExport:
    def test_sync_export(self, client, supervisor_headers):
        resp = client.post(f"{_BASE}/export", json={"format": "csv"}, headers=supervisor_headers)
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["format"] == "csv"
        assert data["records_count"] == 12
        assert data["filename"].endswith(".csv")

    def test_async_export_and_job_status(self, client, supervisor_headers):
        resp = client.post(
            f"{_BASE}/export", json={"run_async": True}, headers=supervisor_headers
        )
        assert resp.status_code == 202
        body = resp.json()
        assert body["status"] == "async_started"

        status = client.get(body["data"]["status_url"]).json()
        assert status["status"] == "job_status"
        assert status["data"]["state"] == "completed"
        assert status["data"]["progress"] == 100
        assert status["data"]["result"]["records_count"] == 12

    def test_unknown_job(self, client):
        assert client.get(f"{_BASE}/export/jobs/nope").status_code == 404

    def test_oldest_job_is_evicted(self, supervisor_headers):
        client = TestClient(create_app(EvaSettings(max_export_jobs=2)))
        urls = [
            client.post(
                f"{_BASE}/export", json={"run_async": True}, headers=supervisor_headers
            ).json()["data"]["status_url"]
            for _ in range(3)
        ]
        assert client.get(urls[0]).status_code == 404
        assert client.get(urls[1]).status_code == 200
        assert client.get(urls[2]).status_code == 200

    def test_technician_cannot_export(self, client, technician_headers):
        resp = client.post(f"{_BASE}/export", json={}, headers=technician_headers)
        assert resp.status_code == 403


class TestDashboard:
    def test_stats(self, client):
        data = client.get("/api/v1/dashboard").json()["data"]
        assert data["stats"]["total_equipment"] == 12
        assert data["stats"]["operational"] == 10
        assert data["stats"]["availability_rate"] == 83.33
        assert data["refresh_interval"] == 60
        assert data["charts"]["by_status"]["type"] == "pie"

    def test_notification(self, client):
        resp = client.post("/api/v1/notifications", json={"message": "Falla", "type": "error"})
        notification = resp.json()["data"]["notification"]
        assert notification["auto_dismiss"] is None
        assert notification["title"] == "Error"


class TestServiceKey:
    def _client(self) -> TestClient:
        return TestClient(create_app(EvaSettings(service_key="s3cret")), raise_server_exceptions=False)

    def test_missing_key_is_rejected(self):
        resp = self._client().get(_BASE)
        assert resp.status_code == 401
        body = resp.json()
        assert body["status"] == "unauthorized"
        assert body["message"] == "Invalid or missing service key"
        assert "x-request-id" in resp.headers

    def test_wrong_key_is_rejected(self):
        assert self._client().get(_BASE, headers={"X-Service-Key": "nope"}).status_code == 401

    def test_valid_key(self):
        assert self._client().get(_BASE, headers={"X-Service-Key": "s3cret"}).status_code == 200

    def test_health_is_public(self):
        assert self._client().get("/health").status_code == 200
