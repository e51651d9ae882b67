"""Command-line interface for StaticPool."""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel

from staticpool.common.constants import DEFAULT_ROOT, DEFAULT_SERVER_PORT

app = typer.Typer(
    name="staticpool",
    help="StaticPool - serve a directory over HTTP with pooled disk I/O",
    add_completion=False,
)

console = Console()


def print_error(message: str) -> None:
    """Print error message."""
    console.print(f"[bold red]✗[/bold red] {message}")


@app.command()
def serve(
    root: Optional[Path] = typer.Argument(None, help=f"Directory to serve (default: from config or {DEFAULT_ROOT})"),
    port: Optional[int] = typer.Argument(
        None, help=f"TCP port to listen on (default: from config or {DEFAULT_SERVER_PORT})"
    ),
    host: Optional[str] = typer.Option(None, "--host", "-h", help="Bind host (default: from config or 127.0.0.1)"),
    pool_size: Optional[int] = typer.Option(None, "--pool-size", "-w", help="I/O worker threads (default: 4)"),
    max_pending: Optional[int] = typer.Option(
        None, "--max-pending", help="Reject with 503 beyond this many queued loads (default: unbounded)"
    ),
    log_level: Optional[str] = typer.Option(None, "--log-level", "-l", help="Log level (default: INFO)"),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Config file path (auto-discovered if not set)",
    ),
) -> None:
    """Serve ROOT on PORT.

    If --config is not provided, the config file is auto-discovered from:
      1. $STATICPOOL_CONFIG env var
      2. ./staticpool.yaml
      3. ./config/staticpool.yaml
      4. ~/.staticpool/server.yaml

    Positional arguments and flags override the config file.
    """
    from staticpool.server.config import discover_config_path, load_server_settings

    resolved_config = config if config is not None else discover_config_path()

    try:
        settings = load_server_settings(resolved_config)
    except Exception as e:
        print_error(f"Invalid configuration: {e}")
        raise typer.Exit(1)

    effective_root = root if root is not None else settings.root
    if not effective_root.is_dir():
        print_error(f"Root directory not found: {effective_root}")
        raise typer.Exit(1)

    console.print()
    info_lines = (
        f"[bold]Root:[/bold] {effective_root.resolve()}\n"
        f"[bold]Listen:[/bold] http://{host or settings.host}:{port or settings.port}\n"
        f"[bold]I/O workers:[/bold] {pool_size or settings.pool_size}\n"
        f"[bold]Queue limit:[/bold] {max_pending or settings.max_pending or 'unbounded'}\n"
    )
    if resolved_config:
        info_lines += f"[bold]Config:[/bold] {resolved_config.resolve()}"
    else:
        info_lines += "[bold]Config:[/bold] [dim]none (defaults + env vars)[/dim]"

    console.print(
        Panel(
            info_lines,
            title="[bold cyan]Starting Server[/bold cyan]",
            border_style="cyan",
        )
    )

    from staticpool.server.main import run_server

    try:
        run_server(
            root=root,
            port=port,
            host=host,
            config_path=resolved_config,
            pool_size=pool_size,
            max_pending=max_pending,
            log_level=log_level,
        )
    except Exception as e:
        print_error(f"Server error: {e}")
        raise typer.Exit(1)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
