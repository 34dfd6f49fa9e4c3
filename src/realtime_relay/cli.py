"""realtime-relay CLI.

Usage:
    realtime-relay serve                      # listen on $RELAY_PORT / $PORT (default 8000)
    realtime-relay serve -p 9000 --log-level debug
    realtime-relay config                     # show the effective configuration
"""

from __future__ import annotations

import sys
from typing import Optional

import click
import structlog
import uvicorn

from realtime_relay import __version__
from realtime_relay.config import settings
from realtime_relay.log import configure_logging
from realtime_relay.main import create_app
from realtime_relay.relay.upstream import redact_endpoint


@click.group()
@click.version_option(version=__version__, prog_name="realtime-relay")
def cli():
    """realtime-relay — authenticated WebSocket relay."""


@cli.command()
@click.option("--host", "-b", help=f"Bind address (default: {settings.host})")
@click.option("--port", "-p", type=int, help=f"Listen port (default: {settings.port})")
@click.option("--log-level", help=f"Log level (default: {settings.log_level})")
@click.option("--json-logs", is_flag=True, help="One JSON object per log line")
def serve(
    host: Optional[str],
    port: Optional[int],
    log_level: Optional[str],
    json_logs: bool,
):
    """Run the relay server."""
    level = log_level or settings.log_level
    try:
        configure_logging(level, json_logs or settings.json_logs)
        app = create_app(settings)
    except ValueError as e:
        click.secho(f"Error: {e}", fg="red", err=True)
        sys.exit(1)

    bind_host = host or settings.host
    bind_port = port or settings.port
    structlog.get_logger().info("relay.listening", host=bind_host, port=bind_port)
    uvicorn.run(app, host=bind_host, port=bind_port, log_level=level.lower())


@cli.command()
def config():
    """Print the effective configuration (credential masked)."""
    click.secho("realtime-relay configuration", bold=True)
    rows = [
        ("upstream", redact_endpoint(settings.upstream_url)),
        ("api key", "set" if settings.api_key else "NOT SET"),
        ("listen", f"{settings.host}:{settings.port}"),
        ("open timeout", f"{settings.open_timeout}s"),
        ("drain timeout", f"{settings.drain_timeout}s"),
        ("log level", settings.log_level),
    ]
    for label, value in rows:
        click.echo(f"  {label.ljust(14)} {value}")


def main():
    """CLI entry point."""
    cli()


if __name__ == "__main__":
    main()
