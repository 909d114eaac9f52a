import os

import pytest
from fastapi.testclient import TestClient

from app import create_app
from env import load_environment
from settings import ConfigError

RELAY_ENV = {
    "REDIRECT_URI": "http://localhost:8888/callback",
    "FRONTEND_URI": "http://localhost:3000",
    "SPOTIFY_CLIENT_ID": "env-client",
    "SPOTIFY_CLIENT_SECRET": "env-secret",
    "ORIGINS": '["http://localhost:3000"]',
    "SCOPE": "user-read-currently-playing",
}


def test_create_app_reads_settings_from_environment(monkeypatch):
    for key, value in RELAY_ENV.items():
        monkeypatch.setenv(key, value)

    app = create_app()

    assert app.state.settings.client_id == "env-client"
    assert app.state.settings.allowed_origins == frozenset({"http://localhost:3000"})
    assert app.state.transport is None


def test_create_app_fails_loudly_on_malformed_origins(monkeypatch):
    for key, value in RELAY_ENV.items():
        monkeypatch.setenv(key, value)
    monkeypatch.setenv("ORIGINS", "http://localhost:3000")

    with pytest.raises(ConfigError, match="ORIGINS"):
        create_app()


def test_healthz(client):
    response = client.get("/healthz")

    assert response.status_code == 200
    assert response.json() == {"ok": True}


def test_debug_route_is_not_exposed(settings):
    client = TestClient(create_app(settings))

    assert client.get("/testt").status_code == 404


def test_load_environment_reads_dotenv_without_overriding(monkeypatch, tmp_path):
    dotenv_file = tmp_path / ".env"
    dotenv_file.write_text("SCOPE=from-dotenv\nSPOTIFY_CLIENT_ID=from-dotenv\n")
    monkeypatch.setenv("SCOPE", "from-process")
    monkeypatch.setenv("SPOTIFY_CLIENT_ID", "placeholder")
    monkeypatch.delenv("SPOTIFY_CLIENT_ID")

    loaded = load_environment(dotenv_file)

    assert loaded == dotenv_file
    assert os.environ["SCOPE"] == "from-process"
    assert os.environ["SPOTIFY_CLIENT_ID"] == "from-dotenv"


def test_load_environment_without_file_returns_none(tmp_path):
    assert load_environment(tmp_path / "missing.env") is None
