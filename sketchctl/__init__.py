"""sketchctl - A client and CLI for the sketch image service.

This package uploads images straight to object storage through presigned
URLs and drives the sketch processing API:
- Authorize, transfer and confirm uploads with bounded concurrency
- Track per-file status and progress, with retry and cancellation
- Request sketch processing and download URLs for stored images
"""

__version__ = "0.1.0"

from sketchctl.core.client import SketchClient
from sketchctl.core.config import Config, Profile
from sketchctl.core.exceptions import (
    ConfigurationError,
    ConnectionError,
    NetworkError,
    ResourceNotFoundError,
    SketchCtlError,
    UploadError,
    ValidationError,
)
from sketchctl.uploaders.coordinator import UploadCoordinator, UploadOptions

__all__ = [
    "__version__",
    "SketchClient",
    "Config",
    "Profile",
    "UploadCoordinator",
    "UploadOptions",
    "SketchCtlError",
    "ConfigurationError",
    "ConnectionError",
    "NetworkError",
    "ResourceNotFoundError",
    "UploadError",
    "ValidationError",
]
