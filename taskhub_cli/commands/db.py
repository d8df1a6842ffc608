"""
init-db command - Create the TaskHub schema
"""

import asyncio

import click

from taskhub_cli.utils.errors import ConfigError
from taskhub_cli.utils.output import print_success
from taskhub_core.config import load_settings
from taskhub_core.database import Database


async def _init_schema(url: str) -> None:
    db = Database(url)
    try:
        await db.init()
    finally:
        await db.dispose()


@click.command(name='init-db')
@click.option(
    '--config', '-c', 'config_file',
    type=click.Path(dir_okay=False),
    help='Path to a .taskhub.yaml config file'
)
def init_db(config_file: str):
    """Create the database tables if they do not exist."""
    try:
        settings = load_settings(config_file)
    except (OSError, ValueError) as exc:
        raise ConfigError(str(exc)) from exc

    asyncio.run(_init_schema(settings.database_url))
    print_success(f"Database ready at {settings.database_url}")
