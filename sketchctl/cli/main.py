"""Main CLI entry point for sketchctl."""

from __future__ import annotations

import click

from sketchctl import __version__
from sketchctl.cli.config_cmd import config
from sketchctl.cli.sketch import sketch
from sketchctl.cli.upload import upload

# =============================================================================
# Main CLI Group
# =============================================================================


@click.group()
@click.version_option(version=__version__, prog_name="sketchctl")
def cli() -> None:
    """sketchctl - Upload images and turn them into sketches.

    Files go straight to object storage through presigned URLs; the sketch
    service only authorizes and confirms them.

    Get started:

      sketchctl config init            # Create config file

      sketchctl upload photo.png       # Upload an image

      sketchctl sketch process KEY     # Convert it

    Use --help on any command for more information.
    """
    pass


# =============================================================================
# Register Commands
# =============================================================================

cli.add_command(config)
cli.add_command(upload)
cli.add_command(sketch)


# =============================================================================
# Entry Point
# =============================================================================


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
