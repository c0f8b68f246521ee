"""Direct-to-storage upload machinery for sketchctl.

- Registry of tracked files and their status
- Transfer engine for presigned PUTs
- Batch coordinator with bounded concurrency, retry and cancellation
- Progress feed for rendering upload state
"""

from sketchctl.uploaders.constants import (
    DEFAULT_MAX_CONCURRENT,
    DEFAULT_MAX_FILES,
    DEFAULT_MAX_SIZE,
    DEFAULT_TIMEOUT,
    IMAGE_CONTENT_TYPES,
)
from sketchctl.uploaders.constraints import check_files, collect_source_files, format_size
from sketchctl.uploaders.coordinator import UploadCoordinator, UploadOptions
from sketchctl.uploaders.feed import ProgressFeed, Subscription
from sketchctl.uploaders.registry import UploadRegistry
from sketchctl.uploaders.transfer import CancelToken, TransferEngine

__all__ = [
    # Constants
    "DEFAULT_MAX_CONCURRENT",
    "DEFAULT_MAX_FILES",
    "DEFAULT_MAX_SIZE",
    "DEFAULT_TIMEOUT",
    "IMAGE_CONTENT_TYPES",
    # Constraints
    "check_files",
    "collect_source_files",
    "format_size",
    # Upload pipeline
    "UploadRegistry",
    "TransferEngine",
    "CancelToken",
    "UploadCoordinator",
    "UploadOptions",
    "ProgressFeed",
    "Subscription",
]
