"""
Config commands - Create and inspect TaskHub configuration
"""

from pathlib import Path

import click

from taskhub_cli.utils.errors import ConfigError
from taskhub_cli.utils.output import print_json, print_success
from taskhub_core.config import CONFIG_FILENAME, load_settings, write_default_config


@click.group()
def config():
    """Manage .taskhub.yaml configuration."""


@config.command(name='init')
@click.argument('path', default=CONFIG_FILENAME, type=click.Path(dir_okay=False))
@click.option('--force', is_flag=True, help='Overwrite an existing file')
def config_init(path: str, force: bool):
    """Write a default config file to PATH."""
    if Path(path).exists() and not force:
        raise ConfigError(f"{path} already exists (use --force to overwrite)")
    written = write_default_config(path)
    print_success(f"Wrote default config to {written}")


@config.command(name='show')
@click.option(
    '--config', '-c', 'config_file',
    type=click.Path(dir_okay=False),
    help='Path to a .taskhub.yaml config file'
)
def config_show(config_file: str):
    """Print the effective configuration (secret masked)."""
    try:
        settings = load_settings(config_file)
    except (OSError, ValueError) as exc:
        raise ConfigError(str(exc)) from exc
    print_json(settings.to_dict(mask_secret=True), title="TaskHub configuration")
