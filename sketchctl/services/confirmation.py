"""Upload confirmation service.

Tells the sketch API that a storage PUT finished so it can verify the object
and admit it. An upload is not successful until this call succeeds.
"""

from __future__ import annotations

import logging

import pydantic

from sketchctl.core.exceptions import ApiError, ConfirmationError, NetworkError
from sketchctl.models.upload import ConfirmationResponse, ConfirmedFile

from .base import BaseService

logger = logging.getLogger(__name__)

CONFIRMATION_PATH = "/upload-confirmation"


class ConfirmationService(BaseService):
    """Service for finalizing uploaded objects."""

    async def confirm(self, object_key: str, integrity_token: str) -> ConfirmedFile:
        """Confirm a completed transfer.

        Args:
            object_key: Key from the authorization grant.
            integrity_token: ETag returned by storage.

        Returns:
            Canonical file info (final key, size, etag).

        Raises:
            ConfirmationError: If the service is unreachable or refuses the upload.
        """
        payload = {"key": object_key, "integrityToken": integrity_token}

        try:
            data = await self._post(CONFIRMATION_PATH, json=payload)
        except ApiError as e:
            raise ConfirmationError(f"Confirmation failed: HTTP {e.status_code}", object_key) from e
        except NetworkError as e:
            raise ConfirmationError(
                f"Confirmation failed: {e.cause or 'service unreachable'}", object_key
            ) from e
        except ValueError as e:
            raise ConfirmationError("Confirmation response was not JSON", object_key) from e

        try:
            resp = ConfirmationResponse.model_validate(data)
        except pydantic.ValidationError as e:
            raise ConfirmationError("Malformed confirmation response", object_key) from e

        if not resp.success:
            raise ConfirmationError(resp.error or "Failed to confirm upload", object_key)
        if resp.file_info is None:
            raise ConfirmationError("Confirmation response missing fileInfo", object_key)

        logger.debug("Confirmed %s (%d bytes)", resp.file_info.key, resp.file_info.size)
        return resp.file_info
