"""Async HTTP client for the sketch API.

Wraps a single ``httpx.AsyncClient`` bound to the API base URL. Storage PUTs
never go through this client: presigned URLs must not receive the API token.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import httpx

from sketchctl.core.exceptions import ApiError, NetworkError
from sketchctl.core.timeouts import DEFAULT_HTTP_TIMEOUT_SECONDS
from sketchctl.core.validation import validate_server_url

# =============================================================================
# SketchClient
# =============================================================================


@dataclass
class SketchClient:
    """HTTP client for the sketch API (one request per call, no retries)."""

    base_url: str
    api_token: str | None = None
    timeout: int = DEFAULT_HTTP_TIMEOUT_SECONDS
    verify_ssl: bool = True
    transport: httpx.AsyncBaseTransport | None = field(default=None, repr=False)
    _client: httpx.AsyncClient | None = field(init=False, default=None, repr=False)

    def __post_init__(self) -> None:
        """Validate and normalize URL."""
        self.base_url = validate_server_url(self.base_url)

    # =========================================================================
    # Client Management
    # =========================================================================

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the underlying HTTP client."""
        if self._client is None:
            headers = {"Accept": "application/json"}
            if self.api_token:
                headers["Authorization"] = f"Bearer {self.api_token}"
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                verify=self.verify_ssl,
                headers=headers,
                transport=self.transport,
                follow_redirects=True,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> SketchClient:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    # =========================================================================
    # HTTP Methods
    # =========================================================================

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any | None = None,
    ) -> httpx.Response:
        """Execute a single HTTP request.

        Raises:
            NetworkError: If the server cannot be reached or times out.
            ApiError: If the server answers with a non-2xx status.
        """
        client = self._get_client()
        url = f"{self.base_url}{path}"

        try:
            resp = await client.request(method, path, params=params, json=json)
        except httpx.TimeoutException as e:
            raise NetworkError(url, f"Timeout after {self.timeout}s") from e
        except httpx.HTTPError as e:
            raise NetworkError(url, str(e) or type(e).__name__) from e

        if not resp.is_success:
            raise ApiError(url, resp.status_code, resp.text[:500])
        return resp

    async def get(self, path: str, *, params: dict[str, Any] | None = None) -> httpx.Response:
        """GET request."""
        return await self._request("GET", path, params=params)

    async def post(self, path: str, *, json: Any | None = None) -> httpx.Response:
        """POST request."""
        return await self._request("POST", path, json=json)
