"""Core modules for sketchctl."""

from sketchctl.core.client import SketchClient
from sketchctl.core.config import CONFIG_DIR, CONFIG_FILE, Config, Profile
from sketchctl.core.exceptions import (
    ApiError,
    AuthorizationError,
    ConfigurationError,
    ConfirmationError,
    ConnectionError,
    IntegrityTokenMissingError,
    InvalidTransitionError,
    NetworkError,
    OperationError,
    ProcessingError,
    ResourceNotFoundError,
    SketchCtlError,
    TransferCancelledError,
    TransferFailedError,
    UploadError,
    ValidationError,
)
from sketchctl.core.logging import LogContext, log_context, setup_logging
from sketchctl.core.output import (
    OutputFormat,
    console,
    print_error,
    print_json,
    print_output,
    print_success,
    print_table,
    print_warning,
)
from sketchctl.core.validation import (
    validate_max_concurrent,
    validate_metadata,
    validate_prefix,
    validate_server_url,
    validate_timeout,
)

__all__ = [
    # Exceptions
    "SketchCtlError",
    "ConfigurationError",
    "ValidationError",
    "ResourceNotFoundError",
    "InvalidTransitionError",
    "OperationError",
    "UploadError",
    "AuthorizationError",
    "TransferFailedError",
    "TransferCancelledError",
    "IntegrityTokenMissingError",
    "ConfirmationError",
    "ProcessingError",
    "ConnectionError",
    "NetworkError",
    "ApiError",
    # Validation
    "validate_server_url",
    "validate_max_concurrent",
    "validate_timeout",
    "validate_prefix",
    "validate_metadata",
    # Config
    "Config",
    "Profile",
    "CONFIG_DIR",
    "CONFIG_FILE",
    # Client
    "SketchClient",
    # Output
    "OutputFormat",
    "print_output",
    "print_table",
    "print_json",
    "print_error",
    "print_warning",
    "print_success",
    "console",
    # Logging
    "setup_logging",
    "LogContext",
    "log_context",
]
