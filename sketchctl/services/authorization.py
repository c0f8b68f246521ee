"""Upload authorization service.

Asks the sketch API for a presigned, single-use PUT URL for one file.
"""

from __future__ import annotations

import logging
from typing import Any

import pydantic

from sketchctl.core.exceptions import ApiError, AuthorizationError, NetworkError
from sketchctl.models.upload import AuthorizationGrant, AuthorizationRequest

from .base import BaseService

logger = logging.getLogger(__name__)

AUTHORIZATION_PATH = "/upload-authorization"


class AuthorizationService(BaseService):
    """Service for obtaining upload authorization grants."""

    async def request_authorization(
        self,
        file_name: str,
        content_type: str,
        *,
        prefix: str | None = None,
        is_public: bool = False,
        metadata: dict[str, str] | None = None,
        expires_in: int | None = None,
    ) -> AuthorizationGrant:
        """Request a grant to upload one file.

        Performs exactly one round trip; never retries.

        Args:
            file_name: Name of the file as the user supplied it.
            content_type: MIME type the PUT will declare.
            prefix: Destination prefix for the object key.
            is_public: Whether the object should be publicly readable.
            metadata: User metadata to attach to the object.
            expires_in: Requested grant lifetime in seconds.

        Returns:
            AuthorizationGrant with upload URL and object key.

        Raises:
            AuthorizationError: If the service is unreachable, rejects the
                request, or returns a grant without URL or key.
        """
        body = AuthorizationRequest(
            file_name=file_name,
            content_type=content_type,
            prefix=prefix,
            is_public=is_public,
            metadata=metadata,
            expires_in=expires_in,
        )

        try:
            data: Any = await self._post(AUTHORIZATION_PATH, json=body.to_wire())
        except ApiError as e:
            raise AuthorizationError(f"HTTP {e.status_code}", file_name) from e
        except NetworkError as e:
            raise AuthorizationError(e.cause or "service unreachable", file_name) from e
        except ValueError as e:
            raise AuthorizationError("response was not JSON", file_name) from e

        if not isinstance(data, dict):
            raise AuthorizationError("unexpected response shape", file_name)

        try:
            grant = AuthorizationGrant.model_validate(data)
        except pydantic.ValidationError as e:
            missing = sorted(
                str(err["loc"][0]) for err in e.errors() if err.get("loc")
            )
            raise AuthorizationError(
                f"response missing or invalid: {', '.join(missing)}", file_name
            ) from e

        logger.debug("Authorized %s as %s", file_name, grant.object_key)
        return grant
