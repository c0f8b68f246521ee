"""Shared constants for uploader modules.

These defaults match what the sketch service accepts out of the box.
"""

from sketchctl.core.timeouts import DEFAULT_TRANSFER_TIMEOUT_SECONDS

# =============================================================================
# Batch Defaults
# =============================================================================

# In-flight per-file pipelines
DEFAULT_MAX_CONCURRENT = 3

# Files accepted per batch
DEFAULT_MAX_FILES = 10

# Largest accepted file (10 MiB)
DEFAULT_MAX_SIZE = 10 * 1024 * 1024

# Storage PUT timeout
DEFAULT_TIMEOUT = DEFAULT_TRANSFER_TIMEOUT_SECONDS

# =============================================================================
# Accepted Content Types
# =============================================================================

IMAGE_CONTENT_TYPES = frozenset(
    {
        "image/png",
        "image/jpeg",
        "image/gif",
        "image/webp",
        "image/bmp",
    }
)

CANCELLED_MESSAGE = "Upload cancelled"
NOT_FOUND_MESSAGE = "File not found in registry"
IN_PROGRESS_MESSAGE = "Upload already in progress"
