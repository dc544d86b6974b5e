"""Shared fixtures: a fake GitHub and an app wired to it."""

import pytest
from fastapi.testclient import TestClient

from pdfhub.config import Settings
from pdfhub.main import create_app
from tests.fake_github import FakeGitHub

OWNER = "octocat"
TOKEN = "gho_octocat_token"
CODE = "good-code"


@pytest.fixture(autouse=True)
def test_env(monkeypatch):
    """Pin configuration so a developer's .env never leaks into tests."""
    monkeypatch.setenv("FRONTEND_URL", "http://localhost:5173")
    monkeypatch.setenv("SESSION_SECRET", "test-secret")
    monkeypatch.setenv("GITHUB_CLIENT_ID", "client-id")
    monkeypatch.setenv("GITHUB_CLIENT_SECRET", "client-secret")
    monkeypatch.setenv("PORT", "3000")
    for name in ("GITHUB_API_URL", "GITHUB_OAUTH_URL", "GITHUB_RAW_URL"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def fake_github():
    fake = FakeGitHub()
    fake.add_user(OWNER, TOKEN, code=CODE)
    return fake


@pytest.fixture
def client(settings, fake_github):
    app = create_app(settings, github_transport=fake_github.transport)
    with TestClient(app) as test_client:
        yield test_client


def login(client) -> None:
    response = client.get("/auth/github/callback", params={"code": CODE}, follow_redirects=False)
    assert response.status_code == 302


@pytest.fixture
def logged_in(client, fake_github):
    """Client holding a valid session; the GitHub call log starts empty."""
    login(client)
    fake_github.calls.clear()
    return client
