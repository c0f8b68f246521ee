"""Batch upload coordinator.

Runs authorize -> transfer -> confirm for many files with a bounded number of
in-flight pipelines. A file's failure is recorded on that file and never
stops its siblings.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from sketchctl.core.exceptions import (
    InvalidTransitionError,
    ResourceNotFoundError,
    SketchCtlError,
    TransferCancelledError,
)
from sketchctl.core.logging import log_context
from sketchctl.core.validation import (
    validate_max_concurrent,
    validate_metadata,
    validate_prefix,
)
from sketchctl.models.progress import ProgressEvent
from sketchctl.models.upload import BatchResult, FileStatus, SourceFile, TrackedFile
from sketchctl.services.authorization import AuthorizationService
from sketchctl.services.confirmation import ConfirmationService
from sketchctl.uploaders.constants import (
    CANCELLED_MESSAGE,
    DEFAULT_MAX_CONCURRENT,
    IN_PROGRESS_MESSAGE,
    NOT_FOUND_MESSAGE,
)
from sketchctl.uploaders.feed import ProgressFeed
from sketchctl.uploaders.registry import UploadRegistry
from sketchctl.uploaders.transfer import CancelToken, TransferEngine

if TYPE_CHECKING:
    from sketchctl.core.client import SketchClient

logger = logging.getLogger(__name__)


@dataclass
class UploadOptions:
    """Per-batch settings forwarded to every file's pipeline."""

    prefix: Optional[str] = None
    is_public: bool = False
    metadata: Optional[dict[str, str]] = None
    max_concurrent: int = DEFAULT_MAX_CONCURRENT
    expires_in: Optional[int] = None

    def validate(self) -> None:
        validate_max_concurrent(self.max_concurrent)
        self.prefix = validate_prefix(self.prefix)
        self.metadata = validate_metadata(self.metadata)


class UploadCoordinator:
    """Orchestrates direct-to-storage uploads for batches of files."""

    def __init__(
        self,
        registry: UploadRegistry,
        authorizer: AuthorizationService,
        engine: TransferEngine,
        confirmer: ConfirmationService,
        feed: Optional[ProgressFeed] = None,
    ) -> None:
        self.registry = registry
        self.authorizer = authorizer
        self.engine = engine
        self.confirmer = confirmer
        self.feed = feed or ProgressFeed()
        self._tokens: dict[str, CancelToken] = {}
        self._contexts: dict[str, tuple[UploadOptions, list[str]]] = {}
        self._active_batches = 0

    @classmethod
    def create(
        cls,
        client: "SketchClient",
        *,
        engine: Optional[TransferEngine] = None,
        registry: Optional[UploadRegistry] = None,
        feed: Optional[ProgressFeed] = None,
    ) -> "UploadCoordinator":
        """Wire a coordinator to an API client."""
        return cls(
            registry=registry or UploadRegistry(),
            authorizer=AuthorizationService(client),
            engine=engine or TransferEngine(verify_ssl=client.verify_ssl),
            confirmer=ConfirmationService(client),
            feed=feed,
        )

    @property
    def is_uploading(self) -> bool:
        """Check if any batch is running."""
        return self._active_batches > 0

    # =========================================================================
    # Progress
    # =========================================================================

    def aggregate_progress(self, file_ids: Sequence[str]) -> float:
        """Mean progress over the given files; confirmed files count as 100."""
        values = []
        for file_id in file_ids:
            entry = self.registry.get(file_id)
            if entry is None:
                continue
            values.append(100 if entry.status is FileStatus.SUCCESS else entry.progress)
        if not values:
            return 0.0
        return sum(values) / len(values)

    def _publish(self, file_id: str, scope: Sequence[str]) -> None:
        entry = self.registry.get(file_id)
        if entry is None:
            return
        self.feed.publish(
            ProgressEvent(
                file_id=file_id,
                name=entry.name,
                percent=entry.progress,
                aggregate=self.aggregate_progress(scope),
                status=entry.status,
                bytes_total=entry.size,
            )
        )

    def _on_progress(self, file_id: str, percent: int, scope: Sequence[str]) -> None:
        self.registry.set_progress(file_id, percent)
        self._publish(file_id, scope)

    # =========================================================================
    # Per-file Pipeline
    # =========================================================================

    async def _run_pipeline(
        self, file_id: str, options: UploadOptions, scope: Sequence[str]
    ) -> BatchResult:
        entry = self.registry.get(file_id)
        if entry is None:
            return BatchResult.failed(NOT_FOUND_MESSAGE)

        token = self._tokens.setdefault(file_id, CancelToken())
        try:
            if token.cancelled:
                return BatchResult.failed(CANCELLED_MESSAGE, entry.name)

            self.registry.set_status(file_id, FileStatus.UPLOADING)
            self._publish(file_id, scope)
            source = entry.source

            try:
                grant = await self.authorizer.request_authorization(
                    source.name,
                    source.content_type,
                    prefix=options.prefix,
                    is_public=options.is_public,
                    metadata=options.metadata,
                    expires_in=options.expires_in,
                )
                if token.cancelled:
                    raise TransferCancelledError(source.name)
                receipt = await self.engine.transfer(
                    source,
                    grant,
                    on_progress=lambda percent: self._on_progress(file_id, percent, scope),
                    cancel=token,
                )
                confirmed = await self.confirmer.confirm(grant.object_key, receipt.integrity_token)
            except asyncio.CancelledError:
                # Caller cancelled the batch; leave the file retryable
                self.registry.set_status(file_id, FileStatus.ERROR, error_message=CANCELLED_MESSAGE)
                self._publish(file_id, scope)
                raise
            except Exception as e:
                message = e.message if isinstance(e, SketchCtlError) else str(e)
                message = message or type(e).__name__
                logger.warning("Upload of %s failed: %s", source.name, message)
                self.registry.set_status(file_id, FileStatus.ERROR, error_message=message)
                self._publish(file_id, scope)
                return BatchResult.failed(message, source.name)

            self.registry.set_status(
                file_id,
                FileStatus.SUCCESS,
                remote_key=confirmed.key,
                integrity_token=receipt.integrity_token,
            )
            self._publish(file_id, scope)
            logger.info("Uploaded %s as %s", source.name, confirmed.key)
            return BatchResult(
                key=confirmed.key,
                size=confirmed.size,
                integrity_token=confirmed.etag or receipt.integrity_token,
                success=True,
                name=source.name,
            )
        finally:
            self._tokens.pop(file_id, None)

    # =========================================================================
    # Batch Upload
    # =========================================================================

    @staticmethod
    def _result_from_entry(entry: TrackedFile) -> BatchResult:
        return BatchResult(
            key=entry.remote_key or "",
            size=entry.size,
            integrity_token=entry.integrity_token or "",
            success=True,
            name=entry.name,
        )

    async def upload_batch(
        self,
        files: Sequence[SourceFile],
        options: Optional[UploadOptions] = None,
    ) -> list[BatchResult]:
        """Upload files with at most ``options.max_concurrent`` in flight.

        Args:
            files: Files to upload. Files matching an already-registered
                (name, size) reuse that entry.
            options: Destination, visibility, metadata and concurrency.

        Returns:
            One BatchResult per input file, in input order.

        Raises:
            ValidationError: If the options are invalid.
        """
        options = options or UploadOptions()
        options.validate()
        if not files:
            return []

        self.registry.register(files)
        input_ids: list[Optional[str]] = []
        for source in files:
            entry = self.registry.find(source.name, source.size)
            input_ids.append(entry.id if entry is not None else None)

        scope = list(dict.fromkeys(fid for fid in input_ids if fid is not None))
        results: dict[str, BatchResult] = {}
        queue: list[str] = []

        for file_id in scope:
            entry = self.registry.get(file_id)
            if entry is None:
                continue
            if entry.status is FileStatus.SUCCESS:
                results[file_id] = self._result_from_entry(entry)
            elif entry.status is FileStatus.UPLOADING or file_id in self._tokens:
                results[file_id] = BatchResult.failed(IN_PROGRESS_MESSAGE, entry.name)
            else:
                queue.append(file_id)
                self._tokens[file_id] = CancelToken()
                self._contexts[file_id] = (options, scope)

        in_flight: dict[asyncio.Task[BatchResult], str] = {}
        pending = iter(queue)

        def _admit() -> None:
            while len(in_flight) < options.max_concurrent:
                file_id = next(pending, None)
                if file_id is None:
                    return
                task = asyncio.create_task(self._run_pipeline(file_id, options, scope))
                in_flight[task] = file_id

        self._active_batches += 1
        try:
            with log_context(
                "upload batch",
                logger,
                files=len(scope),
                queued=len(queue),
                max_concurrent=options.max_concurrent,
            ) as ctx:
                _admit()
                while in_flight:
                    done, _ = await asyncio.wait(in_flight, return_when=asyncio.FIRST_COMPLETED)
                    for task in done:
                        file_id = in_flight.pop(task)
                        results[file_id] = task.result()
                    _admit()

                failed = sum(1 for r in results.values() if not r.success)
                if failed:
                    ctx.warning("%d of %d files failed", failed, len(results))
                else:
                    ctx.info("%d files succeeded", len(results))
        finally:
            for task in in_flight:
                task.cancel()
            try:
                if in_flight:
                    await asyncio.gather(*in_flight, return_exceptions=True)
            finally:
                self._active_batches -= 1
                for file_id in queue:
                    if file_id not in results:
                        self._tokens.pop(file_id, None)

        return [
            results.get(fid, BatchResult.failed(NOT_FOUND_MESSAGE))
            if fid is not None
            else BatchResult.failed(NOT_FOUND_MESSAGE, source.name)
            for fid, source in zip(input_ids, files)
        ]

    # =========================================================================
    # Retry and Cancellation
    # =========================================================================

    async def retry_single(self, file_id: str) -> BatchResult:
        """Re-run the full pipeline for one file currently in ``error``.

        Raises:
            ResourceNotFoundError: If the id is not registered.
            InvalidTransitionError: If the file is not in ``error``.
        """
        entry = self.registry.get(file_id)
        if entry is None:
            raise ResourceNotFoundError("file", file_id)
        if entry.status is not FileStatus.ERROR or file_id in self._tokens:
            raise InvalidTransitionError(
                file_id, entry.status.value, FileStatus.UPLOADING.value
            )

        options, scope = self._contexts.get(file_id, (UploadOptions(), [file_id]))
        if file_id not in scope:
            scope = [file_id]
        self._tokens[file_id] = CancelToken()
        return await self._run_pipeline(file_id, options, scope)

    def cancel(self, file_id: str) -> bool:
        """Cancel one file's queued or in-flight upload.

        Returns:
            True if the file had a live upload to cancel.
        """
        token = self._tokens.get(file_id)
        if token is None:
            return False
        token.cancel()
        entry = self.registry.get(file_id)
        if entry is not None and entry.status in (FileStatus.PENDING, FileStatus.ERROR):
            # Not started yet: mark it here, the pipeline will skip it
            self.registry.set_status(file_id, FileStatus.ERROR, error_message=CANCELLED_MESSAGE)
        return True

    def cancel_all(self) -> int:
        """Cancel every queued or in-flight upload.

        Returns:
            Number of uploads cancelled.
        """
        return sum(1 for file_id in list(self._tokens) if self.cancel(file_id))

    def remove(self, file_id: str) -> bool:
        """Cancel any live upload for a file, then drop it from the registry."""
        self.cancel(file_id)
        self._contexts.pop(file_id, None)
        return self.registry.remove(file_id)

    def clear(self) -> None:
        """Cancel everything and empty the registry."""
        self.cancel_all()
        self._contexts.clear()
        self.registry.clear()

    async def aclose(self) -> None:
        """Close the transfer engine's HTTP client."""
        await self.engine.close()
