"""Data models for sketchctl.

Provides Pydantic models for API payloads and dataclasses for upload state.
"""

from __future__ import annotations

from .base import BaseModel
from .progress import OperationResult, ProgressEvent, UploadSummary
from .sketch import (
    BatchProcessResult,
    DownloadUrl,
    ProcessResult,
    SketchConfig,
    SketchMethod,
)
from .upload import (
    AuthorizationGrant,
    AuthorizationRequest,
    BatchResult,
    ConfirmationResponse,
    ConfirmedFile,
    FileStatus,
    SourceFile,
    TrackedFile,
    TransferReceipt,
)

__all__ = [
    # Base
    "BaseModel",
    # Upload
    "SourceFile",
    "FileStatus",
    "TrackedFile",
    "AuthorizationRequest",
    "AuthorizationGrant",
    "ConfirmedFile",
    "ConfirmationResponse",
    "TransferReceipt",
    "BatchResult",
    # Progress
    "ProgressEvent",
    "OperationResult",
    "UploadSummary",
    # Sketch
    "SketchMethod",
    "SketchConfig",
    "ProcessResult",
    "BatchProcessResult",
    "DownloadUrl",
]
