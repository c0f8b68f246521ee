"""Models for direct-to-storage uploads.

Wire payloads are pydantic models; in-process state is plain dataclasses.
"""

from __future__ import annotations

import mimetypes
from collections.abc import Iterator
from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from pydantic import Field

from .base import BaseModel

DEFAULT_CONTENT_TYPE = "application/octet-stream"
DEFAULT_CHUNK_SIZE = 64 * 1024


# =============================================================================
# Source Files
# =============================================================================


@dataclass(frozen=True)
class SourceFile:
    """A caller-supplied file to upload, backed by a path or in-memory bytes."""

    name: str
    size: int
    content_type: str = DEFAULT_CONTENT_TYPE
    path: Optional[Path] = None
    data: Optional[bytes] = field(default=None, repr=False)

    @classmethod
    def from_path(cls, path: Path, content_type: Optional[str] = None) -> "SourceFile":
        """Build from a file on disk, guessing the content type from its suffix."""
        path = Path(path)
        if not path.is_file():
            raise FileNotFoundError(f"Not a file: {path}")
        guessed, _ = mimetypes.guess_type(path.name)
        return cls(
            name=path.name,
            size=path.stat().st_size,
            content_type=content_type or guessed or DEFAULT_CONTENT_TYPE,
            path=path,
        )

    @classmethod
    def from_bytes(
        cls, name: str, data: bytes, content_type: Optional[str] = None
    ) -> "SourceFile":
        """Build from in-memory bytes."""
        guessed, _ = mimetypes.guess_type(name)
        return cls(
            name=name,
            size=len(data),
            content_type=content_type or guessed or DEFAULT_CONTENT_TYPE,
            data=data,
        )

    def iter_chunks(self, chunk_size: int = DEFAULT_CHUNK_SIZE) -> Iterator[bytes]:
        """Yield the file's bytes in order."""
        if self.data is not None:
            for start in range(0, len(self.data), chunk_size):
                yield self.data[start : start + chunk_size]
            return
        if self.path is None:
            raise ValueError(f"SourceFile {self.name} has neither path nor data")
        with self.path.open("rb") as fh:
            while chunk := fh.read(chunk_size):
                yield chunk


# =============================================================================
# Registry State
# =============================================================================


class FileStatus(Enum):
    """Lifecycle status of a tracked file."""

    PENDING = "pending"
    UPLOADING = "uploading"
    SUCCESS = "success"
    ERROR = "error"


@dataclass
class TrackedFile:
    """One registry entry for a file submitted for upload."""

    id: str
    source: SourceFile = field(repr=False)
    status: FileStatus = FileStatus.PENDING
    progress: int = 0
    remote_key: Optional[str] = None
    integrity_token: Optional[str] = None
    error_message: Optional[str] = None

    @property
    def name(self) -> str:
        return self.source.name

    @property
    def size(self) -> int:
        return self.source.size

    @property
    def content_type(self) -> str:
        return self.source.content_type

    def to_dict(self) -> dict[str, Any]:
        """Convert to a flat dict for output."""
        return {
            "id": self.id,
            "name": self.name,
            "size": self.size,
            "content_type": self.content_type,
            "status": self.status.value,
            "progress": self.progress,
            "remote_key": self.remote_key,
            "integrity_token": self.integrity_token,
            "error_message": self.error_message,
        }


# =============================================================================
# Wire Payloads
# =============================================================================


class AuthorizationRequest(BaseModel):
    """Body of ``POST /upload-authorization``."""

    file_name: str = Field(..., alias="fileName")
    content_type: str = Field(DEFAULT_CONTENT_TYPE, alias="contentType")
    prefix: str | None = None
    is_public: bool = Field(False, alias="isPublic")
    metadata: dict[str, str] | None = None
    expires_in: int | None = Field(None, alias="expiresIn")


class AuthorizationGrant(BaseModel):
    """Time-limited, single-use permission to PUT one object."""

    upload_url: str = Field(..., alias="uploadUrl", min_length=1)
    object_key: str = Field(..., alias="objectKey", min_length=1)
    expires_at: datetime | None = Field(None, alias="expiresAt")
    required_headers: dict[str, str] = Field(default_factory=dict, alias="requiredHeaders")


class ConfirmedFile(BaseModel):
    """Canonical file info returned once the service admits an upload."""

    key: str
    size: int
    etag: str = ""


class ConfirmationResponse(BaseModel):
    """Body returned by ``POST /upload-confirmation``."""

    key: str | None = None
    success: bool = False
    file_info: ConfirmedFile | None = Field(None, alias="fileInfo")
    error: str | None = None


# =============================================================================
# Results
# =============================================================================


@dataclass(frozen=True)
class TransferReceipt:
    """What a successful storage PUT hands back."""

    integrity_token: str


@dataclass(frozen=True)
class BatchResult:
    """Outcome of one input file within a batch."""

    key: str
    size: int
    integrity_token: str
    success: bool
    error_message: Optional[str] = None
    name: str = ""

    @classmethod
    def failed(cls, message: str, name: str = "") -> "BatchResult":
        return cls(
            key="",
            size=0,
            integrity_token="",
            success=False,
            error_message=message,
            name=name,
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
