"""Progress models for tracking upload status.

Provides dataclasses for per-file progress events and batch summaries.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import List

from .upload import BatchResult, FileStatus


@dataclass(frozen=True)
class ProgressEvent:
    """A single progress notification for one file in a batch.

    ``aggregate`` is the mean progress of every file in the batch, with
    confirmed files counted as 100.
    """

    file_id: str
    name: str
    percent: int
    aggregate: float
    status: FileStatus = FileStatus.UPLOADING
    bytes_total: int = 0

    @property
    def is_terminal(self) -> bool:
        """Check if this event closes the file's current attempt."""
        return self.status in (FileStatus.SUCCESS, FileStatus.ERROR)


@dataclass
class OperationResult:
    """Generic operation result."""

    success: bool
    total: int
    succeeded: int
    failed: int
    duration: float
    errors: List[str] = field(default_factory=list)

    @property
    def success_rate(self) -> float:
        """Calculate success rate percentage."""
        if self.total == 0:
            return 100.0
        return (self.succeeded / self.total) * 100


@dataclass
class UploadSummary(OperationResult):
    """Upload batch summary."""

    total_bytes: int = 0

    @property
    def total_mb(self) -> float:
        """Return megabytes confirmed."""
        return self.total_bytes / (1024 * 1024)

    @property
    def throughput_mbps(self) -> float:
        """Calculate upload throughput in MB/s."""
        if self.duration == 0:
            return 0.0
        return self.total_mb / self.duration

    @classmethod
    def from_results(cls, results: Sequence[BatchResult], duration: float) -> "UploadSummary":
        """Summarize a batch's results."""
        succeeded = [r for r in results if r.success]
        failed = [r for r in results if not r.success]
        return cls(
            success=not failed,
            total=len(results),
            succeeded=len(succeeded),
            failed=len(failed),
            duration=duration,
            errors=[f"{r.name}: {r.error_message}".lstrip(": ") for r in failed],
            total_bytes=sum(r.size for r in succeeded),
        )
