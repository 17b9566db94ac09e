from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from models.github import WebhookResponse
from modules.github.handler import GithubWebhookHandler
from modules.github.providers import get_github_handler
from server import server


@pytest.fixture
def client():
    handler = MagicMock(spec=GithubWebhookHandler)
    handler.dispatch.return_value = WebhookResponse(message="ping")
    server.handler.dependency_overrides[get_github_handler] = lambda: handler
    yield TestClient(server.handler)
    server.handler.dependency_overrides.clear()


@pytest.mark.unit
@pytest.mark.parametrize("path", ["/github", "/api/v1/github"])
def test_github_webhook_is_mounted(client, path):
    response = client.post(path, json={}, headers={"X-GitHub-Event": "ping"})

    assert response.status_code == 200
    assert response.json()["message"] == "ping"


@pytest.mark.unit
@pytest.mark.parametrize("path", ["/version", "/health"])
def test_system_routes_are_mounted(client, path):
    assert client.get(path).status_code == 200


@pytest.mark.unit
def test_rate_limiter_is_installed():
    assert server.handler.state.limiter is server.limiter
