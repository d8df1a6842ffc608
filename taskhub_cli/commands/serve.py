"""
Serve command - Run the TaskHub API server
"""

import os

import click
import uvicorn

from taskhub_cli.utils.errors import ConfigError
from taskhub_cli.utils.output import print_info, setup_logging
from taskhub_core.config import load_settings


@click.command()
@click.option('--host', help='Interface to bind (default from config)')
@click.option('--port', '-p', type=int, help='Port to listen on (default from config)')
@click.option('--reload', is_flag=True, help='Restart on code changes (development)')
@click.option(
    '--config', '-c', 'config_file',
    type=click.Path(dir_okay=False),
    help='Path to a .taskhub.yaml config file'
)
def serve(host: str, port: int, reload: bool, config_file: str):
    """
    Run the TaskHub API server (REST + WebSocket channel).

    \b
    Examples:
      taskhub serve
      taskhub serve --port 8080 --config deploy/.taskhub.yaml
    """
    try:
        settings = load_settings(config_file)
    except (OSError, ValueError) as exc:
        raise ConfigError(str(exc)) from exc

    if config_file:
        # the app factory re-reads configuration inside the server process
        os.environ["TASKHUB_CONFIG"] = os.path.abspath(config_file)

    setup_logging(settings.log_level)
    host = host or settings.host
    port = port or settings.port
    print_info(f"TaskHub listening on http://{host}:{port} (channel ws://{host}:{port}/ws)")

    uvicorn.run(
        "taskhub_api.main:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )
