import asyncio

import pytest
from fastapi.testclient import TestClient

from backend.config import Settings
from backend.configure import build
from backend.main import register_routes


@pytest.fixture
def frontend_dir(tmp_path):
    dist = tmp_path / "dist"
    (dist / "assets").mkdir(parents=True)
    (dist / "index.html").write_text("<!doctype html><title>spa</title>")
    (dist / "assets" / "app.js").write_text("console.log('spa');")
    return dist


@pytest.fixture
def settings(tmp_path, frontend_dir):
    return Settings(
        logger=False,
        database_url=f"sqlite:///{tmp_path / 'app.db'}",
        frontend_dir=frontend_dir,
        keys_dir=tmp_path / "keys",
    )


@pytest.fixture
def context(settings):
    return asyncio.run(build(register_routes, settings))


@pytest.fixture
def client(context):
    with TestClient(context.app) as client:
        yield client


@pytest.fixture
def signup(client):
    """Create a user and return its token."""

    def _signup(username="alice", password="correct-horse", picture=None):
        body = {"username": username, "password": password}
        if picture is not None:
            body["picture"] = picture
        response = client.post("/api/user/signup", json=body)
        assert response.status_code == 200, response.text
        return response.json()["token"]

    return _signup
