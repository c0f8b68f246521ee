"""Sketch processing service.

Thin wrappers over the image-to-sketch endpoints. The conversion itself runs
server-side.
"""

from __future__ import annotations

import logging
from typing import Any

import pydantic

from sketchctl.core.exceptions import ApiError, NetworkError, ProcessingError
from sketchctl.models.sketch import (
    BatchProcessResult,
    DownloadUrl,
    ProcessResult,
    SketchConfig,
    SketchMethod,
)

from .base import BaseService

logger = logging.getLogger(__name__)


class ProcessingService(BaseService):
    """Service for sketch conversion of uploaded images."""

    async def _call(self, coro: Any, input_key: str | None) -> Any:
        try:
            return await coro
        except ApiError as e:
            raise ProcessingError(f"HTTP {e.status_code}: {e.body[:200]}", input_key) from e
        except NetworkError as e:
            raise ProcessingError(str(e), input_key) from e
        except ValueError as e:
            raise ProcessingError("Response was not JSON", input_key) from e

    async def process_image(
        self,
        input_key: str,
        method: SketchMethod = SketchMethod.ADVANCED,
        config: SketchConfig | None = None,
    ) -> ProcessResult:
        """Convert one uploaded image to a sketch.

        Args:
            input_key: Object key of the uploaded image.
            method: Rendering method.
            config: Optional tunables.

        Returns:
            ProcessResult with output key and download URL.

        Raises:
            ProcessingError: If the request fails or the service reports failure.
        """
        payload: dict[str, Any] = {"input_key": input_key, "method": method.value}
        if config is not None:
            payload["config"] = config.to_dict()

        data = await self._call(self._post("/process", json=payload), input_key)
        try:
            result = ProcessResult.model_validate(data)
        except pydantic.ValidationError as e:
            raise ProcessingError("Malformed process response", input_key) from e

        if not result.success:
            raise ProcessingError(result.error or "Failed to process image", input_key)

        logger.info("Processed %s -> %s", input_key, result.output_key)
        return result

    async def batch_process(
        self,
        input_keys: list[str],
        method: SketchMethod = SketchMethod.ADVANCED,
        config: SketchConfig | None = None,
        max_concurrency: int | None = None,
    ) -> BatchProcessResult:
        """Convert several uploaded images in one server-side batch.

        Per-image failures are reported inside the result; only a failed
        request or ``success: false`` for the whole batch raises.
        """
        if not input_keys:
            return BatchProcessResult(success=True)

        payload: dict[str, Any] = {"input_keys": input_keys, "method": method.value}
        if config is not None:
            payload["config"] = config.to_dict()
        if max_concurrency is not None:
            payload["max_concurrency"] = max_concurrency

        data = await self._call(self._post("/batch-process", json=payload), None)
        try:
            result = BatchProcessResult.model_validate(data)
        except pydantic.ValidationError as e:
            raise ProcessingError("Malformed batch-process response") from e

        if not result.success:
            raise ProcessingError("Batch processing failed")
        return result

    async def get_download_url(self, key: str, expires_in: int | None = None) -> DownloadUrl:
        """Get a presigned download URL for a stored object."""
        params = {"expires_in": expires_in} if expires_in else None
        path = self._build_path("download-url", key)
        data = await self._call(self._get(path, params=params), key)
        try:
            return DownloadUrl.model_validate(data)
        except pydantic.ValidationError as e:
            raise ProcessingError("Malformed download-url response", key) from e
