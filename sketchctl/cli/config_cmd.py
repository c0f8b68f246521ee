"""Config commands for sketchctl."""

from __future__ import annotations

from typing import Optional

import click

from sketchctl.core.config import CONFIG_FILE, DEFAULT_MAX_CONCURRENT, Config
from sketchctl.core.exceptions import SketchCtlError
from sketchctl.core.output import OutputFormat, print_error, print_key_value, print_output, print_success
from sketchctl.core.timeouts import DEFAULT_HTTP_TIMEOUT_SECONDS
from sketchctl.core.validation import validate_max_concurrent, validate_prefix, validate_server_url


def _load_config() -> Config:
    try:
        return Config.load(CONFIG_FILE)
    except SketchCtlError as e:
        print_error(str(e))
        raise SystemExit(1)


@click.group()
def config() -> None:
    """Manage sketchctl configuration."""
    pass


@config.command("init")
@click.option("--url", prompt="Sketch API URL", help="Sketch API base URL")
@click.option("--profile", default="default", help="Profile name")
@click.option("--prefix", default=None, help="Default object key prefix for uploads")
@click.option("--force", is_flag=True, help="Overwrite existing profile")
def config_init(url: str, profile: str, prefix: Optional[str], force: bool) -> None:
    """Create configuration file with a new profile.

    Example:
        sketchctl config init --url https://sketch.example.org
    """
    try:
        url = validate_server_url(url)
        prefix = validate_prefix(prefix)
    except SketchCtlError as e:
        print_error(str(e))
        raise SystemExit(1)

    if CONFIG_FILE.exists():
        cfg = _load_config()
        if cfg.has_profile(profile) and not force:
            print_error(f"Profile '{profile}' already exists. Use --force to overwrite.")
            raise SystemExit(1)
    else:
        cfg = Config()

    cfg.add_profile(name=profile, url=url, default_prefix=prefix)
    if len(cfg.profiles) == 1:
        cfg.default_profile = profile
    cfg.save(CONFIG_FILE)

    print_success(f"Configuration saved to {CONFIG_FILE}")
    print_key_value({"profile": profile, "url": url, "default_prefix": prefix or "-"})


@config.command("show")
@click.option("--output", "-o", type=click.Choice(["json", "table"]), default="table")
def config_show(output: str) -> None:
    """Show current configuration."""
    cfg = _load_config()

    if not cfg.profiles:
        print_error("No configuration found. Run 'sketchctl config init' first.")
        raise SystemExit(1)

    data = {
        "config_file": str(CONFIG_FILE),
        "default_profile": cfg.default_profile,
        "output_format": cfg.output_format,
        "profiles": list(cfg.profiles.keys()),
    }

    if output == "json":
        data["profile_details"] = {name: p.to_dict() for name, p in cfg.profiles.items()}
        print_output(data, format=OutputFormat.JSON)
        return

    print_key_value(data, title="Configuration")
    click.echo()
    for name, profile in cfg.profiles.items():
        marker = " (default)" if name == cfg.default_profile else ""
        click.echo(f"Profile: {name}{marker}")
        print_key_value(
            {
                "url": profile.url,
                "verify_ssl": profile.verify_ssl,
                "timeout": f"{profile.timeout}s",
                "max_concurrent": profile.max_concurrent,
                "default_prefix": profile.default_prefix or "-",
            }
        )
        click.echo()


@config.command("use-context")
@click.argument("profile")
def config_use_context(profile: str) -> None:
    """Switch the active profile.

    Example:
        sketchctl config use-context production
    """
    cfg = _load_config()

    if not cfg.has_profile(profile):
        print_error(f"Profile '{profile}' not found.")
        click.echo(f"Available profiles: {', '.join(cfg.profiles.keys())}")
        raise SystemExit(1)

    cfg.set_default_profile(profile)
    cfg.save(CONFIG_FILE)
    print_success(f"Switched to profile '{profile}'")


@config.command("add-profile")
@click.argument("name")
@click.option("--url", required=True, help="Sketch API base URL")
@click.option("--prefix", default=None, help="Default object key prefix for uploads")
@click.option("--timeout", type=int, default=DEFAULT_HTTP_TIMEOUT_SECONDS, help="Request timeout in seconds")
@click.option(
    "--max-concurrent",
    type=int,
    default=DEFAULT_MAX_CONCURRENT,
    help="Default number of files uploaded at once",
)
@click.option("--no-verify-ssl", is_flag=True, help="Disable SSL verification")
def config_add_profile(
    name: str,
    url: str,
    prefix: Optional[str],
    timeout: int,
    max_concurrent: int,
    no_verify_ssl: bool,
) -> None:
    """Add a new profile.

    Example:
        sketchctl config add-profile dev --url https://sketch-dev.example.org
    """
    try:
        url = validate_server_url(url)
        prefix = validate_prefix(prefix)
        validate_max_concurrent(max_concurrent)
    except SketchCtlError as e:
        print_error(str(e))
        raise SystemExit(1)

    cfg = _load_config()

    if cfg.has_profile(name):
        print_error(f"Profile '{name}' already exists.")
        raise SystemExit(1)

    cfg.add_profile(
        name=name,
        url=url,
        verify_ssl=not no_verify_ssl,
        timeout=timeout,
        max_concurrent=max_concurrent,
        default_prefix=prefix,
    )
    cfg.save(CONFIG_FILE)
    print_success(f"Profile '{name}' added")


@config.command("remove-profile")
@click.argument("name")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
def config_remove_profile(name: str, yes: bool) -> None:
    """Remove a profile.

    Example:
        sketchctl config remove-profile dev
    """
    cfg = _load_config()

    if not cfg.has_profile(name):
        print_error(f"Profile '{name}' not found.")
        raise SystemExit(1)

    if name == cfg.default_profile:
        print_error("Cannot remove the default profile. Switch to another profile first.")
        raise SystemExit(1)

    if not yes:
        click.confirm(f"Remove profile '{name}'?", abort=True)

    cfg.remove_profile(name)
    cfg.save(CONFIG_FILE)
    print_success(f"Profile '{name}' removed")
