from __future__ import annotations

import argparse
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Optional

import uvicorn
from rich.console import Console

from .core.config import get_settings
from .core.errors import ToolError
from .core.logging import configure_logging, level_from_name
from .tools.toolkit import MediaToolkit, locate_tools

console = Console()


def main(argv: Optional[list[str]] = None) -> None:
    """The main entry point for the CLI.

    Args:
        argv: The command-line arguments.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    if getattr(args, "check", False):
        _run_environment_check()
        return

    if not hasattr(args, "func"):
        parser.print_help()
        sys.exit(1)

    args.func(args)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="framespdf media service")
    parser.add_argument("--check", action="store_true", help="Validate presence of ffmpeg/ffprobe/ImageMagick")

    subparsers = parser.add_subparsers(dest="command")

    probe_parser = subparsers.add_parser("probe", help="Run the full ffprobe inspection and print it as JSON")
    probe_parser.add_argument("--file", required=True, help="Path to the source media file")
    probe_parser.set_defaults(func=_cmd_probe)

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP service")
    serve_parser.add_argument("--host", default=None, help="Bind address (default from FRAMESPDF_HOST)")
    serve_parser.add_argument("--port", type=int, default=None, help="Bind port (default from FRAMESPDF_PORT)")
    serve_parser.set_defaults(func=_cmd_serve)
    return parser


def _cmd_probe(args: argparse.Namespace) -> None:
    """Print duration, codec and stream summary for one file.

    Args:
        args: The command-line arguments.
    """
    media_path = Path(args.file).expanduser().resolve()
    if not media_path.exists():
        console.print(f"[red]File not found: {media_path}[/]")
        sys.exit(2)

    settings = get_settings()
    configure_logging(level=level_from_name(settings.log_level), renderer="console")
    try:
        toolkit = MediaToolkit.resolve(settings)
        probe = toolkit.inspect_full(media_path)
    except ToolError as exc:
        console.print(f"[red]probe failed:[/] {exc}")
        sys.exit(3)

    summary = asdict(probe)
    summary.pop("raw_json")
    console.print_json(data=summary)


def _cmd_serve(args: argparse.Namespace) -> None:
    settings = get_settings()
    host = args.host or settings.host
    port = args.port or settings.port
    console.print(f"[dim]work dir: {settings.work_root.resolve()}[/]")
    console.print(f"[green]open: http://{host}:{port}/docs[/]")
    uvicorn.run("framespdf.main:create_app", factory=True, host=host, port=port)


def _run_environment_check() -> None:
    """Check for the presence of required external dependencies."""
    results = locate_tools(get_settings())

    console.rule("[bold]Environment Check")
    for label, path in results.items():
        console.print(f"[bold]{label}[/]: {'✅ ' + path if path else '❌'}")

    if not all(results.values()):
        console.print("[red]Missing dependencies detected. Install ffmpeg and ImageMagick.[/]")
        sys.exit(1)
    console.print("[green]Environment looks good![/]")


if __name__ == "__main__":
    main()
