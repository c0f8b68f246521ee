"""Transfer engine for presigned storage PUTs.

Sends one file's raw bytes to the URL in an authorization grant. Storage
backends that sign requests reject any header that was not part of the
signature, so the PUT carries Content-Type, the grant's required headers,
and nothing else that the caller controls.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Callable
from typing import Any

import httpx

from sketchctl.core.exceptions import (
    IntegrityTokenMissingError,
    TransferCancelledError,
    TransferFailedError,
)
from sketchctl.core.logging import redact_url
from sketchctl.core.timeouts import DEFAULT_TRANSFER_TIMEOUT_SECONDS
from sketchctl.models.upload import (
    DEFAULT_CHUNK_SIZE,
    AuthorizationGrant,
    SourceFile,
    TransferReceipt,
)

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int], None]


def unquote_etag(value: str) -> str:
    """Strip the weak-validator prefix and surrounding quotes from an ETag."""
    value = value.strip()
    if value.startswith("W/"):
        value = value[2:]
    return value.strip('"')


# =============================================================================
# Cancellation
# =============================================================================


class CancelToken:
    """One-shot cancellation signal for a single transfer."""

    def __init__(self) -> None:
        self._event = asyncio.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    async def wait(self) -> None:
        await self._event.wait()


# =============================================================================
# Transfer Engine
# =============================================================================


class TransferEngine:
    """Streams files to presigned URLs with progress and cancellation."""

    def __init__(
        self,
        *,
        timeout: int = DEFAULT_TRANSFER_TIMEOUT_SECONDS,
        verify_ssl: bool = True,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        require_integrity_token: bool = True,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.timeout = timeout
        self.verify_ssl = verify_ssl
        self.chunk_size = chunk_size
        self.require_integrity_token = require_integrity_token
        self.transport = transport
        self._client: httpx.AsyncClient | None = None

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the storage client with no default headers."""
        if self._client is None:
            client = httpx.AsyncClient(
                timeout=self.timeout,
                verify=self.verify_ssl,
                transport=self.transport,
                follow_redirects=False,
            )
            # httpx adds Accept, Accept-Encoding, Connection and User-Agent
            for name in list(client.headers.keys()):
                del client.headers[name]
            self._client = client
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> TransferEngine:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    # =========================================================================
    # Transfer
    # =========================================================================

    @staticmethod
    def build_headers(file: SourceFile, grant: AuthorizationGrant) -> httpx.Headers:
        """Headers for the PUT: the grant's required set plus Content-Type."""
        headers = httpx.Headers(grant.required_headers)
        headers["Content-Type"] = file.content_type
        # Explicit length keeps httpx from switching to chunked encoding
        headers["Content-Length"] = str(file.size)
        return headers

    async def _body(
        self, file: SourceFile, on_progress: ProgressCallback | None
    ) -> AsyncIterator[bytes]:
        sent = 0
        last = -1
        for chunk in file.iter_chunks(self.chunk_size):
            yield chunk
            sent += len(chunk)
            if on_progress is not None and file.size > 0:
                # 100 is reserved for a confirmed response
                percent = min(99, sent * 100 // file.size)
                if percent != last:
                    last = percent
                    on_progress(percent)

    async def transfer(
        self,
        file: SourceFile,
        grant: AuthorizationGrant,
        on_progress: ProgressCallback | None = None,
        cancel: CancelToken | None = None,
    ) -> TransferReceipt:
        """PUT a file to the grant's upload URL.

        Args:
            file: File to send.
            grant: Authorization grant for this file.
            on_progress: Receives integer percentages as bytes are sent.
            cancel: Token that aborts the transfer when fired.

        Returns:
            TransferReceipt carrying the storage ETag.

        Raises:
            TransferCancelledError: If the token fires before completion.
            TransferFailedError: On a non-2xx response or network failure.
            IntegrityTokenMissingError: If storage returned no ETag and one is required.
        """
        if cancel is not None and cancel.cancelled:
            raise TransferCancelledError(file.name)

        client = self._get_client()
        headers = self.build_headers(file, grant)
        logger.debug("PUT %s (%d bytes) to %s", file.name, file.size, redact_url(grant.upload_url))

        put_task = asyncio.create_task(
            client.put(grant.upload_url, content=self._body(file, on_progress), headers=headers)
        )
        try:
            if cancel is not None:
                cancel_task = asyncio.create_task(cancel.wait())
                try:
                    done, _ = await asyncio.wait(
                        {put_task, cancel_task}, return_when=asyncio.FIRST_COMPLETED
                    )
                finally:
                    cancel_task.cancel()
                if put_task not in done:
                    raise TransferCancelledError(file.name)
            resp = await put_task
        except httpx.TimeoutException as e:
            raise TransferFailedError(f"timed out after {self.timeout}s", file_name=file.name) from e
        except httpx.HTTPError as e:
            raise TransferFailedError(
                str(e) or "network error occurred during upload", file_name=file.name
            ) from e
        except OSError as e:
            raise TransferFailedError(f"could not read file: {e}", file_name=file.name) from e
        finally:
            if not put_task.done():
                put_task.cancel()
                await asyncio.gather(put_task, return_exceptions=True)

        if not resp.is_success:
            body = resp.text[:500]
            logger.warning(
                "Storage rejected %s with HTTP %d: %s", file.name, resp.status_code, body[:200]
            )
            raise TransferFailedError(
                f"HTTP {resp.status_code}",
                status_code=resp.status_code,
                body=body,
                file_name=file.name,
            )

        token = unquote_etag(resp.headers.get("etag", ""))
        if not token and self.require_integrity_token:
            raise IntegrityTokenMissingError(file.name)

        if on_progress is not None:
            on_progress(100)
        return TransferReceipt(integrity_token=token)
