"""Models for the sketch processing endpoints."""

from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import Field

from .base import BaseModel


class SketchMethod(str, Enum):
    """Sketch rendering method offered by the service."""

    BASIC = "basic"
    ADVANCED = "advanced"
    ARTISTIC = "artistic"


class SketchConfig(BaseModel):
    """Optional tunables forwarded verbatim to the service."""

    sigma_s: float | None = Field(None, ge=0)
    sigma_r: float | None = Field(None, ge=0, le=1)
    shade_factor: float | None = Field(None, ge=0)
    kernel_size: int | None = Field(None, ge=1)
    blur_type: Literal["gaussian", "median", "bilateral"] | None = None
    edge_preserve: bool | None = None
    texture_enhance: bool | None = None
    contrast: float | None = None
    brightness: float | None = None
    smoothing_factor: float | None = None


class ProcessResult(BaseModel):
    """Outcome of processing one uploaded image."""

    success: bool = False
    input_key: str | None = None
    output_key: str | None = None
    method: str | None = None
    download_url: str | None = None
    error: str | None = None


class BatchProcessResult(BaseModel):
    """Outcome of a batch processing request."""

    success: bool = False
    total: int = 0
    successful: int = 0
    failed: int = 0
    results: list[ProcessResult] = Field(default_factory=list)


class DownloadUrl(BaseModel):
    """A presigned GET URL for a stored object."""

    url: str
    key: str
