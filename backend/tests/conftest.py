"""
markerbridge: Test Configuration (conftest.py)
=================================================

What:  Shared pytest fixtures for the test suite.

Fixture Hierarchy (all function-scoped):
    ├── asset_roots:     Temporary UI and script trees built under tmp_path
    ├── recording_sink:  EmitSink that keeps every mapping it receives
    ├── no_env_file:     (autouse) Settings ignores any .env on disk
    ├── settings:        Settings pointing at asset_roots
    ├── app:             create_app(settings, recording_sink)
    └── test_client:     HTTPX AsyncClient routed straight into the app

Asset trees:
    ui/                          scripts/
    ├── index.html               ├── app.js
    ├── about.html               └── foo/
    ├── notes.txt                    └── bar.js
    ├── data.json
    ├── README
    ├── docs/
    │   └── index.html
    └── empty/                   (directory without index.html)
"""

import os
from typing import List

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from markerbridge.config import Settings
from markerbridge.main import create_app
from markerbridge.services.sink_base import EmitSink, MarkerMapping

# Keep a developer's shell from leaking into tests
for _key in list(os.environ):
    if _key.startswith("BRIDGE_"):
        del os.environ[_key]


class RecordingSink(EmitSink):
    """Keeps every delivered mapping, in order."""

    def __init__(self):
        self.delivered: List[MarkerMapping] = []
        self.closed = False

    async def deliver(self, mapping: MarkerMapping) -> None:
        self.delivered.append(mapping)

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def asset_roots(tmp_path):
    """
    Builds the UI and script trees shown in the module docstring.

    Returns: (ui_root, script_root) as pathlib.Path objects.
    """
    ui = tmp_path / "ui"
    scripts = tmp_path / "scripts"

    (ui / "docs").mkdir(parents=True)
    (ui / "empty").mkdir()
    (ui / "index.html").write_bytes(b"<html><body>tracker</body></html>")
    (ui / "about.html").write_bytes(b"<html>about</html>")
    (ui / "notes.txt").write_bytes(b"plain notes")
    (ui / "data.json").write_bytes(b'{"a": 1}')
    (ui / "README").write_bytes(b"no extension")
    (ui / "docs" / "index.html").write_bytes(b"<html>docs index</html>")

    (scripts / "foo").mkdir(parents=True)
    (scripts / "app.js").write_bytes(b"console.log('app');")
    (scripts / "foo" / "bar.js").write_bytes(b"console.log('bar');")

    return ui, scripts


@pytest.fixture(autouse=True)
def no_env_file(monkeypatch):
    """Stops Settings() from reading a .env file in the working directory."""
    monkeypatch.setitem(Settings.model_config, "env_file", None)


@pytest.fixture
def recording_sink():
    return RecordingSink()


@pytest.fixture
def settings(asset_roots):
    ui, scripts = asset_roots
    return Settings(_env_file=None, ui_root=str(ui), script_root=str(scripts), port=0)


@pytest.fixture
def app(settings, recording_sink):
    return create_app(settings, recording_sink)


@pytest_asyncio.fixture
async def test_client(app):
    """
    Async HTTP client talking to the app in-process.

    Usage:
        async def test_index(test_client):
            response = await test_client.get("/")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
