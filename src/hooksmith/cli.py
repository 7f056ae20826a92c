"""Hooksmith CLI entry point."""

import asyncio
import logging
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from hooksmith.branches import should_track
from hooksmith.config import ConfigError, ListenerConfig, load_config, save_config
from hooksmith.git import NotARepositoryError, RepositoryDriver

console = Console()


def setup_logging(verbose: bool = False) -> None:
    """Configure logging with rich handler."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, console=console)],
    )


def _load(config_path: str | None) -> ListenerConfig:
    try:
        return load_config(Path(config_path) if config_path else None)
    except ConfigError as e:
        console.print(f"[red]{e}[/red]")
        raise SystemExit(1)


config_option = click.option(
    "--config", "config_path", type=click.Path(dir_okay=False), help="Config file path"
)


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """Hooksmith - keep a deployment up to date from repository webhooks."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    setup_logging(verbose)


@cli.command()
@config_option
@click.option("--host", default="0.0.0.0", help="Host to bind to")
@click.option("--port", type=int, default=None, help="Port to bind to (default: from config)")
def serve(config_path: str | None, host: str, port: int | None) -> None:
    """Listen for webhooks and apply updates."""
    import uvicorn

    from hooksmith.api.app import create_app
    from hooksmith.listener import build_listener

    config = _load(config_path)
    if not config.enabled:
        console.print("[yellow]Listener is disabled in config[/yellow]")
        return

    port = port or config.port
    app = create_app(config, build_listener(config))
    console.print(f"[bold green]Listening for webhooks on {host}:{port}{config.path}[/bold green]")
    uvicorn.run(app, host=host, port=port)


@cli.command("init-config")
@config_option
@click.option("--force", is_flag=True, help="Overwrite an existing config")
def init_config(config_path: str | None, force: bool) -> None:
    """Write a default config file."""
    from hooksmith.config import default_config_path

    path = Path(config_path) if config_path else default_config_path()
    if path.exists() and not force:
        console.print(f"[yellow]Config already exists at {path} (use --force)[/yellow]")
        raise SystemExit(1)

    save_config(ListenerConfig(), path)
    console.print(f"[green]Config written to {path}[/green]")


@cli.command()
@click.option("--root", type=click.Path(file_okay=False), default=".", help="Working copy")
def status(root: str) -> None:
    """Show the working copy's branch, commit and tag."""
    driver = RepositoryDriver(Path(root))

    try:
        state = asyncio.run(driver.state())
    except NotARepositoryError as e:
        console.print(f"[red]{e}[/red]")
        raise SystemExit(1)

    table = Table(title="Working Copy")
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Root", str(driver.root.resolve()))
    table.add_row("Branch", state.branch or "(detached)")
    table.add_row("Commit", state.commit or "-")
    table.add_row("Tag", state.tag or "-")
    console.print(table)


@cli.command("check-branch")
@click.argument("branch")
@config_option
def check_branch(branch: str, config_path: str | None) -> None:
    """Check whether BRANCH is tracked by the configured branch spec."""
    config = _load(config_path)
    if should_track(branch, config.branch):
        console.print(f"[green]{branch} is tracked[/green]")
    else:
        console.print(f"[yellow]{branch} is not tracked[/yellow]")
        raise SystemExit(1)


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
