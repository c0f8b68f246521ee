"""Pytest configuration and fixtures for sketchctl tests."""

from __future__ import annotations

import asyncio
import json
import tempfile
from pathlib import Path
from typing import Any, Callable, Generator, Optional

import httpx
import pytest

API_URL = "https://api.test"
STORAGE_HOST = "storage.test"


class FakeSketchServer:
    """In-memory sketch API plus presigned storage, served via MockTransport.

    The storage side rejects any header outside the signed set with 403,
    the way real presigned endpoints do.
    """

    def __init__(self) -> None:
        self.etag = '"abc123"'
        self.keys: dict[str, str] = {}
        self.required_headers: dict[str, str] = {}
        self.fail_put: set[str] = set()
        self.fail_authorize: set[str] = set()
        self.put_delay = 0.0
        self.strict_headers = True
        self.observe: Optional[Callable[[], int]] = None

        self.authorizations: list[dict[str, Any]] = []
        self.confirmations: list[dict[str, Any]] = []
        self.put_headers: list[httpx.Headers] = []
        self.stored: dict[str, bytes] = {}
        self.in_flight = 0
        self.max_in_flight = 0
        self.max_observed = 0

    # =========================================================================
    # Routing
    # =========================================================================

    async def handler(self, request: httpx.Request) -> httpx.Response:
        if request.url.host == STORAGE_HOST:
            return await self._storage(request)
        body = json.loads(request.content) if request.content else {}
        if request.url.path == "/upload-authorization":
            return self._authorize(body)
        if request.url.path == "/upload-confirmation":
            return self._confirm(body)
        return httpx.Response(404, json={"detail": "not found"})

    def _authorize(self, body: dict[str, Any]) -> httpx.Response:
        self.authorizations.append(body)
        name = body["fileName"]
        if name in self.fail_authorize:
            return httpx.Response(500, json={"detail": "authorization backend down"})
        key = self.keys.get(name, name)
        return httpx.Response(
            200,
            json={
                "uploadUrl": f"https://{STORAGE_HOST}/bucket/{name}?X-Amz-Signature=secret",
                "objectKey": key,
                "expiresAt": "2030-01-01T00:00:00Z",
                "requiredHeaders": self.required_headers,
            },
        )

    def _confirm(self, body: dict[str, Any]) -> httpx.Response:
        self.confirmations.append(body)
        key = body["key"]
        return httpx.Response(
            200,
            json={
                "key": key,
                "success": True,
                "fileInfo": {
                    "key": key,
                    "size": len(self.stored.get(key, b"")),
                    "etag": body["integrityToken"],
                },
            },
        )

    async def _storage(self, request: httpx.Request) -> httpx.Response:
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        if self.observe is not None:
            self.max_observed = max(self.max_observed, self.observe())
        try:
            if self.put_delay:
                await asyncio.sleep(self.put_delay)
            self.put_headers.append(request.headers)
            name = request.url.path.rsplit("/", 1)[-1]

            if self.strict_headers:
                signed = {"host", "content-type", "content-length"}
                signed |= {k.lower() for k in self.required_headers}
                if set(request.headers.keys()) - signed:
                    return httpx.Response(403, text="<Error>SignatureDoesNotMatch</Error>")

            if name in self.fail_put:
                return httpx.Response(500, text="<Error>InternalError</Error>")

            self.stored[self.keys.get(name, name)] = request.content
            return httpx.Response(200, headers={"ETag": self.etag})
        finally:
            self.in_flight -= 1

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def server() -> FakeSketchServer:
    """Fake sketch API and storage endpoint."""
    return FakeSketchServer()


@pytest.fixture
def sample_config_yaml() -> str:
    """Sample config YAML content."""
    return """
default_profile: test
output_format: table

profiles:
  test:
    url: https://sketch-test.example.org
    verify_ssl: false
    timeout: 30
    max_concurrent: 2
    default_prefix: uploads

  production:
    url: https://sketch.example.org
    verify_ssl: true
    timeout: 60
"""
