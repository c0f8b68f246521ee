"""Exception hierarchy for sketchctl.

Provides typed exceptions for different failure modes with clear error messages.
"""

from __future__ import annotations

from typing import Any


class SketchCtlError(Exception):
    """Base exception for all sketchctl errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(SketchCtlError):
    """Error in configuration (missing, invalid, or malformed)."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any = None,
    ):
        details = {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = repr(value)
        super().__init__(message, details)
        self.field = field
        self.value = value


class ProfileNotFoundError(ConfigurationError):
    """Requested profile does not exist."""

    def __init__(self, profile: str):
        super().__init__(f"Profile not found: {profile}", field="profile", value=profile)
        self.profile = profile


# =============================================================================
# Validation Errors
# =============================================================================


class ValidationError(SketchCtlError):
    """Input validation failed."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any = None,
    ):
        details = {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = repr(value)
        super().__init__(message, details)
        self.field = field
        self.value = value


class InvalidURLError(ValidationError):
    """Invalid URL format."""

    def __init__(self, url: str, reason: str = ""):
        msg = f"Invalid URL: {url}"
        if reason:
            msg = f"{msg} - {reason}"
        super().__init__(msg, field="url", value=url)
        self.url = url
        self.reason = reason


# =============================================================================
# Registry Errors
# =============================================================================


class ResourceNotFoundError(SketchCtlError):
    """Requested entry does not exist."""

    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            {"resource_type": resource_type, "resource_id": resource_id},
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class InvalidTransitionError(SketchCtlError):
    """A tracked file was moved to a status its current status does not allow."""

    def __init__(self, file_id: str, current: str, target: str):
        super().__init__(
            f"Cannot move file {file_id} from {current} to {target}",
            {"file_id": file_id},
        )
        self.file_id = file_id
        self.current = current
        self.target = target


# =============================================================================
# Operation Errors
# =============================================================================


class OperationError(SketchCtlError):
    """Error during an operation."""

    def __init__(
        self,
        operation: str,
        message: str,
        details: dict[str, Any] | None = None,
    ):
        full_details = {"operation": operation}
        if details:
            full_details.update(details)
        super().__init__(message, full_details)
        self.operation = operation


class UploadError(OperationError):
    """Error during one file's upload pipeline."""

    def __init__(
        self,
        message: str,
        file_name: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        full_details = details or {}
        if file_name:
            full_details["file"] = file_name
        super().__init__("upload", message, full_details)
        self.file_name = file_name


class AuthorizationError(UploadError):
    """Could not obtain an upload authorization grant."""

    def __init__(self, reason: str, file_name: str | None = None):
        super().__init__(f"Failed to get upload authorization: {reason}", file_name)
        self.reason = reason


class TransferFailedError(UploadError):
    """The PUT to the storage endpoint failed."""

    def __init__(
        self,
        reason: str,
        status_code: int | None = None,
        body: str | None = None,
        file_name: str | None = None,
    ):
        details: dict[str, Any] = {}
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(f"Upload failed: {reason}", file_name, details)
        self.status_code = status_code
        self.body = body


class TransferCancelledError(UploadError):
    """The transfer was cancelled before it completed."""

    def __init__(self, file_name: str | None = None):
        super().__init__("Upload cancelled", file_name)


class IntegrityTokenMissingError(UploadError):
    """Storage accepted the bytes but returned no ETag."""

    def __init__(self, file_name: str | None = None):
        super().__init__("Storage response did not include an ETag", file_name)


class ConfirmationError(UploadError):
    """The authorizing service did not admit the uploaded object."""

    def __init__(self, reason: str, object_key: str | None = None):
        details = {"key": object_key} if object_key else {}
        super().__init__(reason, details=details)
        self.reason = reason
        self.object_key = object_key


class ProcessingError(OperationError):
    """The sketch service failed to process an image."""

    def __init__(self, message: str, input_key: str | None = None):
        details = {"input_key": input_key} if input_key else {}
        super().__init__("process", message, details)
        self.input_key = input_key


# =============================================================================
# Connection Errors
# =============================================================================


class ConnectionError(SketchCtlError):
    """Base class for connection-related errors."""

    def __init__(self, message: str, url: str | None = None):
        details = {"url": url} if url else {}
        super().__init__(message, details)
        self.url = url


class NetworkError(ConnectionError):
    """Network-level error (DNS, TCP, TLS, timeout)."""

    def __init__(self, url: str, cause: str | None = None):
        msg = f"Network error connecting to {url}"
        if cause:
            msg = f"{msg}: {cause}"
        super().__init__(msg, url)
        self.cause = cause


class ApiError(ConnectionError):
    """The API answered with a non-success HTTP status."""

    def __init__(self, url: str, status_code: int, body: str = ""):
        super().__init__(f"HTTP {status_code} from {url}", url)
        self.status_code = status_code
        self.body = body
        self.details["status_code"] = status_code
