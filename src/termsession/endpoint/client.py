"""HTTP client for the termsession control endpoint."""

from __future__ import annotations

import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)


class ControlClient:
    """Drives remote sessions through the HTTP control endpoint.

    Example usage::

        async with ControlClient("http://127.0.0.1:8765") as client:
            await client.execute("main", "help")
            log = await client.log("main")
    """

    def __init__(
        self,
        base_url: str = "http://127.0.0.1:8765",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def connect(self) -> None:
        """Open the HTTP client and check that /health answers."""
        self._client = httpx.AsyncClient(
            base_url=self._base_url, timeout=self._timeout, transport=self._transport
        )
        try:
            resp = await self._client.get("/health")
            resp.raise_for_status()
            logger.info("Connected to control endpoint at %s", self._base_url)
        except httpx.HTTPError as e:
            await self._client.aclose()
            self._client = None
            raise ControlClientError(f"Failed to connect to endpoint: {e}") from e

    async def disconnect(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            logger.info("Disconnected from control endpoint")

    async def sessions(self) -> list[str]:
        data = await self._request("GET", "/sessions")
        return data["sessions"]

    async def create_session(self, name: str | None = None) -> dict[str, Any]:
        return await self._request("POST", "/sessions", {"name": name})

    async def destroy_session(self, name: str) -> None:
        await self._request("DELETE", f"/sessions/{name}")

    async def state(self, name: str) -> dict[str, Any]:
        return await self._request("GET", f"/sessions/{name}/state")

    async def log(self, name: str, since: int = 0) -> dict[str, Any]:
        return await self._request("GET", f"/sessions/{name}/log", params={"since": since})

    async def push(self, name: str, entries: list[dict[str, Any]]) -> None:
        await self._request("POST", f"/sessions/{name}/messages", {"entries": entries})

    async def execute(self, name: str, command: str) -> dict[str, Any]:
        return await self._request("POST", f"/sessions/{name}/execute", {"command": command})

    async def answer(self, name: str, text: str) -> dict[str, Any]:
        return await self._request("POST", f"/sessions/{name}/answer", {"text": text})

    async def metrics(self, name: str) -> dict[str, Any]:
        return await self._request("GET", f"/sessions/{name}/metrics")

    async def control(self, name: str, message_type: str, payload: Any = None) -> Any:
        data = await self._request(
            "POST", f"/sessions/{name}/control", {"type": message_type, "payload": payload}
        )
        return data.get("result")

    async def _request(
        self,
        method: str,
        path: str,
        payload: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        if self._client is None:
            raise ControlClientError("Not connected to endpoint")
        try:
            resp = await self._client.request(method, path, json=payload, params=params)
        except httpx.HTTPError as e:
            raise ControlClientError(f"HTTP request to {path} failed: {e}") from e
        if resp.status_code >= 400:
            try:
                detail = resp.json().get("detail", resp.text)
            except ValueError:
                detail = resp.text
            raise ControlClientError(
                f"{method} {path} failed: {detail}", status_code=resp.status_code
            )
        return resp.json()

    async def __aenter__(self) -> ControlClient:
        await self.connect()
        return self

    async def __aexit__(self, exc_type: type | None, exc_val: Exception | None, exc_tb: object) -> None:
        await self.disconnect()


class ControlClientError(Exception):
    """Raised when a control endpoint request fails."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
