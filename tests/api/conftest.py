"""Pytest fixtures for API testing."""

import pytest
from fastapi import FastAPI
from httpx import AsyncClient, ASGITransport

from assistant_bridge.api.v1 import directories, queries
from assistant_bridge.services.directory_resolver import DirectoryResolver
from assistant_bridge.services.directory_store import DirectoryStore
from assistant_bridge.services.session_registry import SessionRegistry
from assistant_bridge.workers.claude import ClaudeStreamer
from assistant_bridge.workers.tool_servers import StaticToolServerProvider


@pytest.fixture
def base_directory(tmp_path):
    base = tmp_path / "projects"
    (base / "app").mkdir(parents=True)
    (base / "lib").mkdir()
    return base


@pytest.fixture
def store(tmp_path, base_directory, scheduler):
    return DirectoryStore(
        DirectoryResolver(str(base_directory)),
        str(tmp_path / "data" / "working-directories.json"),
        scheduler=scheduler
    )


@pytest.fixture
def registry():
    return SessionRegistry()


@pytest.fixture
def fake_claude(make_fake_claude):
    """Default CLI stand-in; tests rebuild it with their own output as needed."""
    return make_fake_claude()


@pytest.fixture
async def client(monkeypatch, store, registry, fake_claude):
    """Create async HTTP client with fresh components for each test."""
    streamer = ClaudeStreamer(StaticToolServerProvider(), binary=fake_claude.path)

    # Inject dependencies into routers
    monkeypatch.setattr(directories, "directory_store", store)
    monkeypatch.setattr(queries, "session_registry", registry)
    monkeypatch.setattr(queries, "streamer", streamer)

    # Create a test app without lifespan (to avoid conflicts)
    test_app = FastAPI(title="Assistant Bridge Test")
    test_app.include_router(directories.router)
    test_app.include_router(queries.router)

    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
