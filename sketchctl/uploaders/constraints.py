"""Pre-flight checks on files submitted for upload."""

from __future__ import annotations

from collections.abc import Collection, Sequence
from pathlib import Path

from sketchctl.core.exceptions import ValidationError
from sketchctl.models.upload import SourceFile
from sketchctl.uploaders.constants import (
    DEFAULT_MAX_FILES,
    DEFAULT_MAX_SIZE,
    IMAGE_CONTENT_TYPES,
)


def format_size(num_bytes: int) -> str:
    """Human-readable byte count (binary units)."""
    size = float(num_bytes)
    for unit in ("B", "KB", "MB", "GB"):
        if size < 1024 or unit == "GB":
            return f"{size:.0f} {unit}" if unit == "B" else f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} GB"


def collect_source_files(paths: Sequence[Path]) -> list[SourceFile]:
    """Build SourceFiles from paths, skipping hidden files.

    Raises:
        ValidationError: If a path does not exist or is not a regular file.
    """
    files: list[SourceFile] = []
    for path in paths:
        path = Path(path).expanduser()
        if path.name.startswith("."):
            continue
        if not path.is_file():
            raise ValidationError(f"Not a file: {path}", field="path", value=str(path))
        files.append(SourceFile.from_path(path))
    return files


def check_files(
    files: Sequence[SourceFile],
    *,
    max_files: int | None = DEFAULT_MAX_FILES,
    max_size: int | None = DEFAULT_MAX_SIZE,
    accept: Collection[str] | None = IMAGE_CONTENT_TYPES,
) -> None:
    """Reject a batch that breaks the count, size or type limits.

    Pass None for any limit to disable it.

    Raises:
        ValidationError: On the first violated limit.
    """
    if max_files is not None and len(files) > max_files:
        raise ValidationError(
            f"You can only upload a maximum of {max_files} files at once",
            field="files",
            value=len(files),
        )

    for source in files:
        if max_size is not None and source.size > max_size:
            raise ValidationError(
                f"File {source.name} exceeds {format_size(max_size)}",
                field="size",
                value=source.size,
            )
        if accept is not None and source.content_type not in accept:
            raise ValidationError(
                f"File {source.name} has unsupported type {source.content_type}",
                field="content_type",
                value=source.content_type,
            )
