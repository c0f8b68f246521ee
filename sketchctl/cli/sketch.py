"""Sketch processing commands for sketchctl."""

from __future__ import annotations

import asyncio
import json
from typing import Any, Awaitable, Callable, Optional, TypeVar

import click
import pydantic

from sketchctl.cli.common import Context, global_options, handle_errors
from sketchctl.core.exceptions import ValidationError
from sketchctl.core.output import OutputFormat, print_output
from sketchctl.models.sketch import SketchConfig, SketchMethod
from sketchctl.services.processing import ProcessingService

T = TypeVar("T")

METHOD_CHOICE = click.Choice([m.value for m in SketchMethod])


def _parse_config(raw: Optional[str]) -> Optional[SketchConfig]:
    """Parse ``--config-json`` into a SketchConfig."""
    if not raw:
        return None
    try:
        return SketchConfig.model_validate(json.loads(raw))
    except (ValueError, pydantic.ValidationError) as e:
        raise ValidationError(f"Invalid sketch config: {e}", field="config") from e


def _run(ctx: Context, call: Callable[[ProcessingService], Awaitable[T]]) -> T:
    """Run one processing call and close the client afterwards."""

    async def runner() -> T:
        client = ctx.get_client()
        try:
            return await call(ProcessingService(client))
        finally:
            await client.close()

    return asyncio.run(runner())


@click.group()
def sketch() -> None:
    """Convert uploaded images to sketches."""
    pass


@sketch.command("process")
@click.argument("key")
@click.option("--method", "-m", type=METHOD_CHOICE, default=SketchMethod.ADVANCED.value, show_default=True)
@click.option("--config-json", default=None, help="Sketch tunables as a JSON object")
@global_options
@handle_errors
def sketch_process(ctx: Context, key: str, method: str, config_json: Optional[str]) -> None:
    """Convert one uploaded image.

    Example:
        sketchctl sketch process uploads/photo.png --method artistic
    """
    config = _parse_config(config_json)
    result = _run(ctx, lambda svc: svc.process_image(key, SketchMethod(method), config))

    data = result.to_dict()
    print_output(
        data,
        format=ctx.output_format,
        quiet=ctx.quiet,
        id_field="output_key",
    )


@sketch.command("batch")
@click.argument("keys", nargs=-1, required=True)
@click.option("--method", "-m", type=METHOD_CHOICE, default=SketchMethod.ADVANCED.value, show_default=True)
@click.option("--config-json", default=None, help="Sketch tunables as a JSON object")
@click.option("--max-concurrency", type=int, default=None, help="Server-side concurrency")
@global_options
@handle_errors
def sketch_batch(
    ctx: Context,
    keys: tuple[str, ...],
    method: str,
    config_json: Optional[str],
    max_concurrency: Optional[int],
) -> None:
    """Convert several uploaded images in one request.

    Example:
        sketchctl sketch batch uploads/a.png uploads/b.png
    """
    config = _parse_config(config_json)
    result = _run(
        ctx,
        lambda svc: svc.batch_process(list(keys), SketchMethod(method), config, max_concurrency),
    )

    rows: list[dict[str, Any]] = [r.to_dict() for r in result.results]
    if ctx.output_format == OutputFormat.JSON and not ctx.quiet:
        print_output(result.to_dict(), format=OutputFormat.JSON)
        return
    print_output(
        rows,
        format=ctx.output_format,
        columns=["input_key", "output_key", "success", "error"],
        title=f"Processed {result.successful}/{result.total}",
        quiet=ctx.quiet,
        id_field="output_key",
    )


@sketch.command("download-url")
@click.argument("key")
@click.option("--expires-in", type=int, default=None, help="URL lifetime in seconds")
@global_options
@handle_errors
def sketch_download_url(ctx: Context, key: str, expires_in: Optional[int]) -> None:
    """Get a presigned download URL for a stored object.

    Example:
        sketchctl sketch download-url sketches/photo.png --expires-in 600
    """
    result = _run(ctx, lambda svc: svc.get_download_url(key, expires_in))
    print_output(result.to_dict(), format=ctx.output_format, quiet=ctx.quiet, id_field="url")
