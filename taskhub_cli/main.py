"""
TaskHub CLI - Main entry point
"""

import click

from taskhub_cli import __version__
from taskhub_cli.utils.errors import handle_cli_error


@click.group()
@click.version_option(version=__version__, prog_name="taskhub")
@click.pass_context
def cli(ctx):
    """
    TaskHub - multi-user task tracking over REST and WebSocket

    \b
    Common Commands:
      serve     - Run the API server
      init-db   - Create the database schema
      config    - Create or inspect configuration

    \b
    Examples:
      taskhub config init              # Write .taskhub.yaml
      taskhub init-db                  # Create tables
      taskhub serve --port 3000        # Start the server
    """
    ctx.ensure_object(dict)


# Import and register commands
from taskhub_cli.commands.serve import serve
from taskhub_cli.commands.db import init_db
from taskhub_cli.commands.config import config

cli.add_command(serve)
cli.add_command(init_db)
cli.add_command(config)


def main():
    """Main entry point with error handling"""
    try:
        cli(obj={}, standalone_mode=False)
    except click.exceptions.Abort:
        raise SystemExit(1)
    except click.exceptions.ClickException as exc:
        exc.show()
        raise SystemExit(exc.exit_code)
    except Exception as exc:
        handle_cli_error(exc, verbose=False)


if __name__ == "__main__":
    main()
