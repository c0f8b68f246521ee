"""Upload command for sketchctl."""

from __future__ import annotations

import asyncio
import time
from pathlib import Path
from typing import Optional

import click

from sketchctl.cli.common import Context, ExitCode, global_options, handle_errors, parse_key_values
from sketchctl.core.exceptions import ValidationError
from sketchctl.core.output import (
    OutputFormat,
    create_progress,
    print_error,
    print_output,
    print_success,
    print_table,
    print_warning,
)
from sketchctl.models.progress import ProgressEvent, UploadSummary
from sketchctl.models.upload import BatchResult, FileStatus, SourceFile
from sketchctl.uploaders.constants import (
    DEFAULT_MAX_CONCURRENT,
    DEFAULT_MAX_FILES,
    DEFAULT_MAX_SIZE,
    IMAGE_CONTENT_TYPES,
)
from sketchctl.uploaders.constraints import check_files, collect_source_files
from sketchctl.uploaders.coordinator import UploadCoordinator, UploadOptions
from sketchctl.uploaders.transfer import TransferEngine

RESULT_COLUMNS = ["name", "status", "key", "size", "error_message"]


def _describe(event: ProgressEvent) -> str:
    if event.status is FileStatus.SUCCESS:
        return f"[green]{event.name}[/green]"
    if event.status is FileStatus.ERROR:
        return f"[red]{event.name}[/red]"
    return event.name


async def _run_upload(
    ctx: Context,
    files: list[SourceFile],
    options: UploadOptions,
    *,
    show_progress: bool,
) -> list[BatchResult]:
    """Run one batch, rendering the progress feed when requested."""
    client = ctx.get_client()
    engine = TransferEngine(verify_ssl=client.verify_ssl)
    coordinator = UploadCoordinator.create(client, engine=engine)

    try:
        if not show_progress:
            return await coordinator.upload_batch(files, options)

        with create_progress() as progress:
            total_bytes = max(sum(f.size for f in files), 1)
            overall = progress.add_task("Total", total=total_bytes)
            task_ids: dict[str, int] = {}
            subscription = coordinator.feed.subscribe()

            async def render() -> None:
                async for event in subscription:
                    task_id = task_ids.get(event.file_id)
                    if task_id is None:
                        task_id = progress.add_task(event.name, total=max(event.bytes_total, 1))
                        task_ids[event.file_id] = task_id
                    progress.update(
                        task_id,
                        completed=event.bytes_total * event.percent / 100,
                        description=_describe(event),
                    )
                    progress.update(overall, completed=total_bytes * event.aggregate / 100)

            renderer = asyncio.create_task(render())
            try:
                return await coordinator.upload_batch(files, options)
            finally:
                subscription.close()
                await renderer
    finally:
        await coordinator.aclose()
        await client.close()


@click.command("upload")
@click.argument(
    "paths",
    nargs=-1,
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option("--prefix", default=None, help="Object key prefix (defaults to the profile's)")
@click.option("--public", "is_public", is_flag=True, help="Make the stored objects public")
@click.option("--meta", multiple=True, help="Object metadata as key=value (repeatable)")
@click.option(
    "--max-concurrent",
    "-c",
    type=int,
    default=None,
    help="Files uploaded at once (defaults to the profile's)",
)
@click.option("--expires-in", type=int, default=None, help="Upload URL lifetime in seconds")
@click.option(
    "--max-size",
    type=int,
    default=DEFAULT_MAX_SIZE,
    show_default=True,
    help="Largest accepted file in bytes",
)
@click.option(
    "--max-files",
    type=int,
    default=DEFAULT_MAX_FILES,
    show_default=True,
    help="Most files accepted per batch",
)
@click.option("--any-type", is_flag=True, help="Accept files that are not images")
@global_options
@handle_errors
def upload(
    ctx: Context,
    paths: tuple[Path, ...],
    prefix: Optional[str],
    is_public: bool,
    meta: tuple[str, ...],
    max_concurrent: Optional[int],
    expires_in: Optional[int],
    max_size: int,
    max_files: int,
    any_type: bool,
) -> None:
    """Upload image files straight to storage.

    Each file is authorized, sent to its presigned URL and confirmed.
    A failed file does not stop the others; the command exits non-zero
    if any file failed.

    Example:
        sketchctl upload photo.png
        sketchctl upload *.jpg --prefix uploads/2024 --meta album=trip -c 5
    """
    if not ctx.quiet:
        for path in paths:
            if path.name.startswith("."):
                print_warning(f"Skipping hidden file: {path.name}")
    files = collect_source_files(list(paths))
    if not files:
        raise ValidationError("No files to upload", field="paths")
    check_files(
        files,
        max_files=max_files,
        max_size=max_size,
        accept=None if any_type else IMAGE_CONTENT_TYPES,
    )

    profile = None
    if ctx.config is not None and ctx.config.profiles:
        profile = ctx.config.get_profile(ctx.profile_name)
    options = UploadOptions(
        prefix=prefix if prefix is not None else (profile.default_prefix if profile else None),
        is_public=is_public,
        metadata=parse_key_values(meta) or None,
        max_concurrent=max_concurrent or (profile.max_concurrent if profile else DEFAULT_MAX_CONCURRENT),
        expires_in=expires_in,
    )
    options.validate()

    show_progress = ctx.output_format == OutputFormat.TABLE and not ctx.quiet
    start = time.monotonic()
    results = asyncio.run(_run_upload(ctx, files, options, show_progress=show_progress))
    summary = UploadSummary.from_results(results, time.monotonic() - start)

    rows = [
        {**r.to_dict(), "name": r.name or f.name, "status": "success" if r.success else "error"}
        for r, f in zip(results, files)
    ]

    if ctx.quiet:
        print_output([row for row in rows if row["key"]], quiet=True)
    elif ctx.output_format == OutputFormat.JSON:
        print_output(
            {
                "success": summary.success,
                "total": summary.total,
                "succeeded": summary.succeeded,
                "failed": summary.failed,
                "total_size_mb": round(summary.total_mb, 2),
                "duration_seconds": round(summary.duration, 2),
                "results": rows,
            },
            format=OutputFormat.JSON,
        )
    else:
        print_table(rows, RESULT_COLUMNS, title="Upload Results", column_labels={"error_message": "Error"})
        if summary.success:
            print_success(
                f"Uploaded {summary.succeeded} file(s) "
                f"({summary.total_mb:.1f} MB) in {summary.duration:.1f}s"
            )
        else:
            print_error(f"{summary.failed} of {summary.total} file(s) failed")

    if not summary.success:
        raise SystemExit(ExitCode.GENERAL_ERROR)
