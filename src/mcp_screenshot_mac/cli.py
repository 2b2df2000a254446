"""mcp-screenshot-mac CLI."""

import importlib.metadata
import sys
from typing import get_args

import typer

import mcp_screenshot_mac.settings
from mcp_screenshot_mac.server import create_server
from mcp_screenshot_mac.settings import LOG_LEVEL
from mcp_screenshot_mac.utilities.logging import configure_logging, get_logger

logger = get_logger("cli")

app = typer.Typer(
    name="mcp-screenshot-mac",
    help="MCP server that captures macOS application windows",
    add_completion=False,
    no_args_is_help=True,  # Show help if no args provided
)


@app.command()
def version() -> None:
    """Show the mcp-screenshot-mac version."""
    try:
        version = importlib.metadata.version("mcp-screenshot-mac")
        print(f"mcp-screenshot-mac version {version}")
    except importlib.metadata.PackageNotFoundError:
        print("mcp-screenshot-mac version unknown (package not installed)")
        sys.exit(1)


@app.command()
def run(
    log_level: str = typer.Option(
        "",
        "--log-level",
        "-l",
        help="Log level, overriding MCP_SCREENSHOT_MAC_LOG_LEVEL",
    ),
) -> None:
    """Serve the screenshot tool over stdio."""
    settings = mcp_screenshot_mac.settings.settings
    level = log_level.upper() or settings.log_level
    if level not in get_args(LOG_LEVEL):
        raise typer.BadParameter(
            f"must be one of {', '.join(get_args(LOG_LEVEL))}", param_hint="--log-level"
        )
    configure_logging(level)
    logger.debug("Starting server", extra={"ttl_ms": settings.ttl_ms})

    create_server(settings).run()


if __name__ == "__main__":
    app()
