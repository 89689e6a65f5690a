"""Tests for query and session API endpoints."""

import json
import os

import pytest
from httpx import AsyncClient

from assistant_bridge.api.v1 import queries
from assistant_bridge.workers.claude import ClaudeStreamer
from assistant_bridge.workers.tool_servers import StaticToolServerProvider


def _ndjson(response):
    return [json.loads(line) for line in response.text.splitlines() if line]


@pytest.fixture
def use_claude(monkeypatch, make_fake_claude):
    """Point the query route at a fake CLI with the given behaviour."""
    def _use(*args, **kwargs):
        fake = make_fake_claude(*args, **kwargs)
        monkeypatch.setattr(
            queries, "streamer", ClaudeStreamer(
                StaticToolServerProvider(), binary=fake.path, permission_server_command="perm-server"
            )
        )
        return fake
    return _use


class TestQueryAPI:
    """SUT: POST /api/v1/query"""

    async def test_streams_ndjson(self, client: AsyncClient, use_claude, init_line, registry):
        use_claude([
            init_line("sess-9"),
            json.dumps({"type": "assistant", "content": "hello"}),
            json.dumps({"type": "result", "subtype": "success"}),
        ])

        response = await client.post(
            "/api/v1/query",
            json={"user_id": "U1", "channel_id": "C1", "thread_ts": "T1", "prompt": "hi"}
        )

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("application/x-ndjson")
        messages = _ndjson(response)
        assert [m["type"] for m in messages] == ["system", "assistant", "result"]
        assert messages[1] == {"type": "assistant", "content": "hello"}
        assert registry.get_session("U1", "C1", "T1").session_id == "sess-9"

    async def test_resumes_existing_session(self, client: AsyncClient, use_claude, init_line):
        fake = use_claude([init_line("sess-9")])
        body = {"user_id": "U1", "channel_id": "C1", "prompt": "first"}

        await client.post("/api/v1/query", json=body)
        await client.post("/api/v1/query", json={**body, "prompt": "second"})

        argv = fake.record()["argv"]
        assert argv[argv.index("--resume") + 1] == "sess-9"
        assert argv[-1] == "second"

    async def test_uses_working_directory(self, client: AsyncClient, use_claude, store, base_directory):
        store.set_working_directory("C1", "app")
        fake = use_claude([json.dumps({"type": "assistant"})])

        await client.post("/api/v1/query", json={"user_id": "U1", "channel_id": "C1", "prompt": "hi"})

        record = fake.record()
        assert os.path.realpath(record["cwd"]) == os.path.realpath(base_directory / "app")

    async def test_interactive_adds_permission_prompt(self, client: AsyncClient, use_claude):
        fake = use_claude([json.dumps({"type": "assistant"})])

        await client.post(
            "/api/v1/query",
            json={"user_id": "U1", "channel_id": "C1", "prompt": "hi", "interactive": True}
        )

        argv = fake.record()["argv"]
        assert argv[argv.index("--permission-mode") + 1] == "default"
        assert "--permission-prompt-tool-name" in argv

    async def test_interactive_without_permission_server(self, client: AsyncClient, registry):
        """Interactive queries are refused when no permission server is configured."""
        response = await client.post(
            "/api/v1/query",
            json={"user_id": "U1", "channel_id": "C1", "prompt": "hi", "interactive": True}
        )

        assert response.status_code == 400
        assert "PERMISSION_SERVER_COMMAND" in response.json()["detail"]
        assert registry.list_sessions() == []

    async def test_failure_ends_with_error_line(self, client: AsyncClient, use_claude):
        use_claude([json.dumps({"type": "assistant", "content": "partial"})], exit_code=2)

        response = await client.post(
            "/api/v1/query",
            json={"user_id": "U1", "channel_id": "C1", "prompt": "hi"}
        )

        messages = _ndjson(response)
        assert messages[0]["content"] == "partial"
        assert messages[-1]["type"] == "error"
        assert messages[-1]["error_kind"] == "ClaudeExitError"
        assert "code 2" in messages[-1]["error"]

    async def test_validation(self, client: AsyncClient):
        response = await client.post("/api/v1/query", json={"user_id": "U1", "channel_id": "C1", "prompt": ""})
        assert response.status_code == 422


class TestSessionsAPI:
    """SUT: /api/v1/sessions routes"""

    async def test_list_sessions(self, client: AsyncClient, registry):
        registry.create_session("U1", "C1", "T1")

        response = await client.get("/api/v1/sessions")
        data = response.json()

        assert data["total"] == 1
        assert data["sessions"][0]["user_id"] == "U1"
        assert data["sessions"][0]["thread_ts"] == "T1"
        assert data["sessions"][0]["session_id"] is None

    async def test_cleanup(self, client: AsyncClient, registry):
        registry.create_session("U1", "C1")

        response = await client.post("/api/v1/sessions/cleanup", params={"max_age_seconds": 3600})
        assert response.json() == {"removed": 0}

        response = await client.post("/api/v1/sessions/cleanup", params={"max_age_seconds": -1})
        assert response.json() == {"removed": 1}
        assert registry.list_sessions() == []
