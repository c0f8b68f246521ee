"""Upload registry.

The single shared store of files submitted for upload. All mutation goes
through the methods below; reads return copies.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable
from dataclasses import replace
from typing import Optional

from sketchctl.core.exceptions import InvalidTransitionError
from sketchctl.models.upload import FileStatus, SourceFile, TrackedFile

logger = logging.getLogger(__name__)

# Allowed status moves; removal is always allowed and not listed here.
TRANSITIONS: dict[FileStatus, set[FileStatus]] = {
    FileStatus.PENDING: {FileStatus.UPLOADING, FileStatus.ERROR},
    FileStatus.UPLOADING: {FileStatus.SUCCESS, FileStatus.ERROR},
    FileStatus.ERROR: {FileStatus.UPLOADING},
    FileStatus.SUCCESS: set(),
}


class UploadRegistry:
    """Session-scoped store of tracked files, deduplicated by (name, size)."""

    def __init__(self) -> None:
        self._files: dict[str, TrackedFile] = {}
        self._by_identity: dict[tuple[str, int], str] = {}

    # =========================================================================
    # Registration
    # =========================================================================

    def register(self, files: Iterable[SourceFile]) -> None:
        """Track new files; files matching an existing (name, size) are skipped."""
        for source in files:
            identity = (source.name, source.size)
            if identity in self._by_identity:
                logger.debug("Skipping duplicate %s (%d bytes)", source.name, source.size)
                continue
            file_id = uuid.uuid4().hex
            self._files[file_id] = TrackedFile(id=file_id, source=source)
            self._by_identity[identity] = file_id

    # =========================================================================
    # Mutation
    # =========================================================================

    def set_progress(self, file_id: str, percent: int) -> None:
        """Record progress, clamped to 0-100 and never lowered mid-upload."""
        entry = self._files.get(file_id)
        if entry is None:
            return
        percent = max(0, min(100, int(percent)))
        if entry.status is FileStatus.UPLOADING and percent < entry.progress:
            return
        entry.progress = percent

    def set_status(
        self,
        file_id: str,
        status: FileStatus,
        remote_key: Optional[str] = None,
        error_message: Optional[str] = None,
        integrity_token: Optional[str] = None,
    ) -> None:
        """Move a file to a new status, touching only the fields that status owns.

        Raises:
            InvalidTransitionError: If the move is not allowed from the current status.
        """
        entry = self._files.get(file_id)
        if entry is None:
            return
        if status is not entry.status and status not in TRANSITIONS[entry.status]:
            raise InvalidTransitionError(file_id, entry.status.value, status.value)

        entry.status = status
        if status is FileStatus.UPLOADING:
            entry.progress = 0
            entry.error_message = None
        elif status is FileStatus.SUCCESS:
            entry.progress = 100
            entry.remote_key = remote_key
            entry.integrity_token = integrity_token
            entry.error_message = None
        elif status is FileStatus.ERROR:
            entry.error_message = error_message or "Unknown error occurred"

    def remove(self, file_id: str) -> bool:
        """Forget a file. Does not cancel an in-flight transfer."""
        entry = self._files.pop(file_id, None)
        if entry is None:
            return False
        self._by_identity.pop((entry.name, entry.size), None)
        return True

    def clear(self) -> None:
        """Forget every file."""
        self._files.clear()
        self._by_identity.clear()

    # =========================================================================
    # Reads
    # =========================================================================

    def get(self, file_id: str) -> Optional[TrackedFile]:
        entry = self._files.get(file_id)
        return replace(entry) if entry is not None else None

    def find(self, name: str, size: int) -> Optional[TrackedFile]:
        """Look up the live entry for a (name, size) pair."""
        file_id = self._by_identity.get((name, size))
        return self.get(file_id) if file_id is not None else None

    def all(self) -> list[TrackedFile]:
        """Snapshot of every entry in registration order."""
        return [replace(entry) for entry in self._files.values()]

    def count(self, status: FileStatus) -> int:
        return sum(1 for entry in self._files.values() if entry.status is status)

    def __len__(self) -> int:
        return len(self._files)

    def __contains__(self, file_id: object) -> bool:
        return file_id in self._files
