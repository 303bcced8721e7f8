"""Integration tests for the webhook and service endpoints.

Tests HTTP layer behavior: status codes, body validation, response structure.
The job queue is mocked so no workflow runs.

Run: pytest tests/integration/test_webhook_routes.py -v
"""

from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from src.api.main import app
from src.api.services import job_queue
from src.utils.error_handling import ConfigurationError

pytestmark = pytest.mark.integration


# ============================================
# Fixtures
# ============================================


@pytest.fixture
def client():
    """Test client with the real lifespan and a fresh job queue."""
    job_queue.jobs.clear()
    job_queue.job_queue = None
    with patch("src.api.main.configure_logging"):
        with TestClient(app) as test_client:
            yield test_client
    job_queue.jobs.clear()
    job_queue.job_queue = None


@pytest.fixture
def settings(make_settings):
    with patch("src.api.routes.webhook.get_settings") as mock_get:
        mock_get.return_value = make_settings(api={"max_body_mb": 1})
        yield mock_get


@pytest.fixture
def mock_enqueue():
    with patch("src.api.routes.webhook.enqueue_job", new_callable=AsyncMock) as mock:
        mock.return_value = "req-123"
        yield mock


# ============================================
# Webhook Tests
# ============================================


class TestFigmaTokensWebhook:
    """Tests for POST /webhook/figma-tokens."""

    def test_queues_update(self, client, settings, mock_enqueue, incoming_css):
        response = client.post(
            "/webhook/figma-tokens",
            content=incoming_css,
            headers={"Content-Type": "text/plain"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["message"] == "Design tokens update queued for processing"
        assert data["request_id"] == "req-123"
        mock_enqueue.assert_awaited_once_with(incoming_css, test_mode=False)

    def test_test_query_enables_test_mode(self, client, settings, mock_enqueue, incoming_css):
        response = client.post("/webhook/figma-tokens?test=true", content=incoming_css)

        assert response.status_code == 200
        mock_enqueue.assert_awaited_once_with(incoming_css, test_mode=True)

    def test_test_mode_from_settings(self, client, settings, mock_enqueue, make_settings):
        settings.return_value = make_settings(test_mode=True)

        client.post("/webhook/figma-tokens", content="@theme {}")

        mock_enqueue.assert_awaited_once_with("@theme {}", test_mode=True)

    def test_blank_body_rejected(self, client, settings, mock_enqueue):
        response = client.post("/webhook/figma-tokens", content="  \n\t")

        assert response.status_code == 400
        assert response.json() == {
            "success": False,
            "error": "Invalid request: CSS content is required",
        }
        mock_enqueue.assert_not_awaited()

    def test_empty_body_rejected(self, client, settings, mock_enqueue):
        response = client.post("/webhook/figma-tokens")

        assert response.status_code == 400
        mock_enqueue.assert_not_awaited()

    def test_non_utf8_body_rejected(self, client, settings, mock_enqueue):
        response = client.post("/webhook/figma-tokens", content=b"\xff\xfe@theme {}")

        assert response.status_code == 400
        assert "UTF-8" in response.json()["error"]

    def test_oversized_body_rejected(self, client, settings, mock_enqueue):
        body = "a" * (1024 * 1024 + 1)

        response = client.post("/webhook/figma-tokens", content=body)

        assert response.status_code == 413
        assert response.json()["success"] is False
        mock_enqueue.assert_not_awaited()

    def test_configuration_error(self, client, mock_enqueue):
        with patch(
            "src.api.routes.webhook.get_settings",
            side_effect=ConfigurationError("Failed to create settings: github_token missing"),
        ):
            response = client.post("/webhook/figma-tokens", content="@theme {}")

        assert response.status_code == 500
        assert response.json()["success"] is False
        assert "github_token" in response.json()["error"]
        mock_enqueue.assert_not_awaited()


class TestJobStatus:
    """Tests for GET /webhook/jobs/{request_id}."""

    def test_unknown_job(self, client):
        response = client.get("/webhook/jobs/missing")

        assert response.status_code == 404
        assert "Job not found" in response.json()["detail"]

    def test_pending_job(self, client):
        job_queue.jobs["abc"] = {"status": "pending", "test_mode": True, "queued_at": "2026-01-01T00:00:00+00:00"}

        response = client.get("/webhook/jobs/abc")

        assert response.status_code == 200
        data = response.json()
        assert data["request_id"] == "abc"
        assert data["status"] == "pending"
        assert data["test_mode"] is True
        assert data["result"] is None

    def test_completed_job(self, client):
        job_queue.jobs["abc"] = {
            "status": "completed",
            "result": {"success": True, "pr_url": "https://github.com/acme/design-system/pull/4"},
        }

        data = client.get("/webhook/jobs/abc").json()

        assert data["status"] == "completed"
        assert data["result"]["pr_url"] == "https://github.com/acme/design-system/pull/4"


# ============================================
# Service Endpoint Tests
# ============================================


class TestServiceEndpoints:
    """Tests for the root and health endpoints."""

    def test_root(self, client):
        data = client.get("/").json()

        assert data["status"] == "ok"
        assert data["message"] == "Design Token Sync"
        assert data["version"] == "1.0.0"

    def test_health(self, client):
        response = client.get("/api/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
