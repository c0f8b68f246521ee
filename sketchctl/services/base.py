"""Base service with common methods for all sketch API services."""

from __future__ import annotations

from typing import Any, TYPE_CHECKING

if TYPE_CHECKING:
    from sketchctl.core.client import SketchClient


class BaseService:
    """Base service class with common functionality."""

    def __init__(self, client: "SketchClient") -> None:
        """Initialize service with an API client.

        Args:
            client: SketchClient instance
        """
        self.client = client

    async def _get(self, path: str, **kwargs: Any) -> Any:
        """Execute GET request and return JSON data.

        Args:
            path: API endpoint path
            **kwargs: Additional request parameters

        Returns:
            Parsed JSON response data
        """
        resp = await self.client.get(path, **kwargs)
        return resp.json()

    async def _post(self, path: str, **kwargs: Any) -> Any:
        """Execute POST request and return JSON data.

        Args:
            path: API endpoint path
            **kwargs: Additional request parameters

        Returns:
            Parsed JSON response data
        """
        resp = await self.client.post(path, **kwargs)
        return resp.json()

    def _build_path(self, *parts: str) -> str:
        """Build API path from parts.

        Args:
            *parts: Path segments

        Returns:
            Joined path string
        """
        return "/" + "/".join(p.strip("/") for p in parts if p)
