"""Tests for sketchctl service layer."""

from __future__ import annotations

import json
from typing import Any, Callable

import httpx
import pytest

from sketchctl.core.client import SketchClient
from sketchctl.core.exceptions import AuthorizationError, ConfirmationError, ProcessingError
from sketchctl.models.sketch import SketchConfig, SketchMethod
from sketchctl.services.authorization import AuthorizationService
from sketchctl.services.confirmation import ConfirmationService
from sketchctl.services.processing import ProcessingService

API_URL = "https://api.test"


def _client(handler: Callable[[httpx.Request], httpx.Response], token: str | None = None) -> SketchClient:
    return SketchClient(API_URL, api_token=token, transport=httpx.MockTransport(handler))


def _responder(status: int = 200, payload: Any = None, seen: list | None = None):
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        return httpx.Response(status, json=payload)

    return handler


GRANT = {
    "uploadUrl": "https://storage.test/bucket/photo.png?sig=1",
    "objectKey": "uploads/photo.png",
    "expiresAt": "2030-01-01T00:00:00Z",
    "requiredHeaders": {"x-amz-acl": "private"},
}


# =============================================================================
# Authorization
# =============================================================================


class TestAuthorizationService:
    """Tests for AuthorizationService."""

    @pytest.mark.asyncio
    async def test_request_body_and_grant(self):
        seen: list[httpx.Request] = []
        async with _client(_responder(200, GRANT, seen), token="tok") as client:
            grant = await AuthorizationService(client).request_authorization(
                "photo.png",
                "image/png",
                prefix="uploads",
                is_public=True,
                metadata={"album": "trip"},
                expires_in=600,
            )

        request = seen[0]
        assert request.url.path == "/upload-authorization"
        assert request.headers["authorization"] == "Bearer tok"
        assert json.loads(request.content) == {
            "fileName": "photo.png",
            "contentType": "image/png",
            "prefix": "uploads",
            "isPublic": True,
            "metadata": {"album": "trip"},
            "expiresIn": 600,
        }
        assert grant.upload_url == GRANT["uploadUrl"]
        assert grant.object_key == "uploads/photo.png"
        assert grant.required_headers == {"x-amz-acl": "private"}
        assert grant.expires_at is not None

    @pytest.mark.asyncio
    async def test_optional_fields_omitted(self):
        seen: list[httpx.Request] = []
        async with _client(_responder(200, GRANT, seen)) as client:
            await AuthorizationService(client).request_authorization("photo.png", "image/png")

        body = json.loads(seen[0].content)
        assert body == {"fileName": "photo.png", "contentType": "image/png", "isPublic": False}
        assert "authorization" not in seen[0].headers

    @pytest.mark.asyncio
    async def test_http_error(self):
        async with _client(_responder(503, {"detail": "down"})) as client:
            with pytest.raises(AuthorizationError, match="HTTP 503"):
                await AuthorizationService(client).request_authorization("photo.png", "image/png")

    @pytest.mark.asyncio
    async def test_unreachable(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("no route", request=request)

        async with _client(handler) as client:
            with pytest.raises(AuthorizationError, match="no route"):
                await AuthorizationService(client).request_authorization("photo.png", "image/png")

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "payload",
        [
            {"objectKey": "k"},
            {"uploadUrl": "https://storage.test/k"},
            {"uploadUrl": "", "objectKey": "k"},
            ["not", "a", "dict"],
        ],
    )
    async def test_incomplete_grant(self, payload):
        async with _client(_responder(200, payload)) as client:
            with pytest.raises(AuthorizationError):
                await AuthorizationService(client).request_authorization("photo.png", "image/png")

    @pytest.mark.asyncio
    async def test_non_json_response(self):
        async with _client(lambda request: httpx.Response(200, text="<html>")) as client:
            with pytest.raises(AuthorizationError, match="not JSON"):
                await AuthorizationService(client).request_authorization("photo.png", "image/png")


# =============================================================================
# Confirmation
# =============================================================================


class TestConfirmationService:
    """Tests for ConfirmationService."""

    @pytest.mark.asyncio
    async def test_confirm(self):
        seen: list[httpx.Request] = []
        payload = {
            "key": "x",
            "success": True,
            "fileInfo": {"key": "x", "size": 2048, "etag": "abc123"},
        }
        async with _client(_responder(200, payload, seen)) as client:
            info = await ConfirmationService(client).confirm("x", "abc123")

        assert json.loads(seen[0].content) == {"key": "x", "integrityToken": "abc123"}
        assert (info.key, info.size, info.etag) == ("x", 2048, "abc123")

    @pytest.mark.asyncio
    async def test_refused_with_reason(self):
        payload = {"key": "x", "success": False, "error": "ETag mismatch"}
        async with _client(_responder(200, payload)) as client:
            with pytest.raises(ConfirmationError, match="ETag mismatch"):
                await ConfirmationService(client).confirm("x", "abc123")

    @pytest.mark.asyncio
    async def test_refused_without_reason(self):
        async with _client(_responder(200, {"success": False})) as client:
            with pytest.raises(ConfirmationError, match="Failed to confirm upload"):
                await ConfirmationService(client).confirm("x", "abc123")

    @pytest.mark.asyncio
    async def test_missing_file_info(self):
        async with _client(_responder(200, {"key": "x", "success": True})) as client:
            with pytest.raises(ConfirmationError, match="fileInfo"):
                await ConfirmationService(client).confirm("x", "abc123")

    @pytest.mark.asyncio
    async def test_http_error(self):
        async with _client(_responder(404, {"detail": "no such object"})) as client:
            with pytest.raises(ConfirmationError, match="HTTP 404") as exc_info:
                await ConfirmationService(client).confirm("x", "abc123")

        assert exc_info.value.object_key == "x"


# =============================================================================
# Processing
# =============================================================================


class TestProcessingService:
    """Tests for ProcessingService."""

    @pytest.mark.asyncio
    async def test_process_image(self):
        seen: list[httpx.Request] = []
        payload = {
            "success": True,
            "input_key": "uploads/photo.png",
            "output_key": "sketches/photo.png",
            "method": "artistic",
            "download_url": "https://storage.test/sketches/photo.png?sig=1",
        }
        async with _client(_responder(200, payload, seen)) as client:
            result = await ProcessingService(client).process_image(
                "uploads/photo.png",
                SketchMethod.ARTISTIC,
                SketchConfig(sigma_s=60, blur_type="gaussian"),
            )

        assert seen[0].url.path == "/process"
        assert json.loads(seen[0].content) == {
            "input_key": "uploads/photo.png",
            "method": "artistic",
            "config": {"sigma_s": 60, "blur_type": "gaussian"},
        }
        assert result.output_key == "sketches/photo.png"

    @pytest.mark.asyncio
    async def test_process_failure(self):
        payload = {"success": False, "error": "Unsupported image"}
        async with _client(_responder(200, payload)) as client:
            with pytest.raises(ProcessingError, match="Unsupported image"):
                await ProcessingService(client).process_image("uploads/photo.png")

    @pytest.mark.asyncio
    async def test_batch_process(self):
        seen: list[httpx.Request] = []
        payload = {
            "success": True,
            "total": 2,
            "successful": 1,
            "failed": 1,
            "results": [
                {"success": True, "input_key": "a.png", "output_key": "sketches/a.png"},
                {"success": False, "input_key": "b.png", "error": "corrupt"},
            ],
        }
        async with _client(_responder(200, payload, seen)) as client:
            result = await ProcessingService(client).batch_process(
                ["a.png", "b.png"], max_concurrency=2
            )

        body = json.loads(seen[0].content)
        assert body == {"input_keys": ["a.png", "b.png"], "method": "advanced", "max_concurrency": 2}
        assert result.successful == 1
        assert result.results[1].error == "corrupt"

    @pytest.mark.asyncio
    async def test_batch_process_empty(self):
        seen: list[httpx.Request] = []
        async with _client(_responder(200, {}, seen)) as client:
            result = await ProcessingService(client).batch_process([])

        assert result.success is True
        assert seen == []

    @pytest.mark.asyncio
    async def test_download_url(self):
        seen: list[httpx.Request] = []
        payload = {"url": "https://storage.test/sketches/photo.png?sig=1", "key": "sketches/photo.png"}
        async with _client(_responder(200, payload, seen)) as client:
            result = await ProcessingService(client).get_download_url("sketches/photo.png", 600)

        assert seen[0].url.path == "/download-url/sketches/photo.png"
        assert seen[0].url.params["expires_in"] == "600"
        assert result.url.startswith("https://storage.test/")

    @pytest.mark.asyncio
    async def test_http_error(self):
        async with _client(_responder(500, {"detail": "boom"})) as client:
            with pytest.raises(ProcessingError, match="HTTP 500"):
                await ProcessingService(client).process_image("uploads/photo.png")
