"""Tests for the control endpoint HTTP client."""

from __future__ import annotations

import httpx
import pytest

from termsession.config.settings import Settings
from termsession.endpoint.client import ControlClient, ControlClientError
from termsession.endpoint.server import create_app
from termsession.session.controller import TerminalController


@pytest.fixture
def transport() -> httpx.ASGITransport:
    controller = TerminalController(Settings())
    return httpx.ASGITransport(app=create_app(controller))


class TestControlClient:
    """Test the client against an in-process endpoint."""

    def test_init_defaults(self) -> None:
        client = ControlClient()
        assert client._base_url == "http://127.0.0.1:8765"
        assert client._timeout == 10.0

    def test_init_strips_trailing_slash(self) -> None:
        client = ControlClient(base_url="http://10.0.0.5:9000/")
        assert client._base_url == "http://10.0.0.5:9000"

    @pytest.mark.asyncio
    async def test_request_before_connect(self) -> None:
        client = ControlClient()
        with pytest.raises(ControlClientError, match="Not connected"):
            await client.sessions()

    @pytest.mark.asyncio
    async def test_session_round_trip(self, transport: httpx.ASGITransport) -> None:
        async with ControlClient("http://testserver", transport=transport) as client:
            created = await client.create_session("main")
            assert created["name"] == "main"
            assert await client.sessions() == ["main"]

            await client.execute("main", "help")
            log = await client.log("main", since=2)
            assert log["entries"][0]["type"] == "command-echo"
            assert log["entries"][1]["type"] == "table"

            await client.push("main", [{"type": "plain", "content": "pushed"}])
            state = await client.state("main")
            assert state["log_size"] == 5

            metrics = await client.metrics("main")
            assert metrics["client_width"] == 660
            assert await client.control("main", "fullscreen") is True

            await client.destroy_session("main")
            assert await client.sessions() == []

    @pytest.mark.asyncio
    async def test_unknown_command_is_logged_as_error(self, transport: httpx.ASGITransport) -> None:
        async with ControlClient("http://testserver", transport=transport) as client:
            await client.create_session("main")
            await client.execute("main", "frobnicate")
            entries = (await client.log("main", since=2))["entries"]
            assert entries[-1] == {"type": "plain", "class": "error", "content": "Unknown command: frobnicate"}

    @pytest.mark.asyncio
    async def test_error_status_raises(self, transport: httpx.ASGITransport) -> None:
        async with ControlClient("http://testserver", transport=transport) as client:
            with pytest.raises(ControlClientError) as exc_info:
                await client.state("ghost")
        assert exc_info.value.status_code == 404
        assert "ghost" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_connect_failure(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503, json={"detail": "down"})

        client = ControlClient("http://testserver", transport=httpx.MockTransport(handler))
        with pytest.raises(ControlClientError, match="Failed to connect"):
            await client.connect()
        assert client._client is None
