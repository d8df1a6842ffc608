"""
Error handling utilities for TaskHub CLI
"""

import sys
from typing import Optional

from rich.console import Console
from rich.panel import Panel

console = Console(stderr=True)


class CLIError(Exception):
    """Base exception for CLI errors"""

    def __init__(self, message: str, exit_code: int = 1):
        self.message = message
        self.exit_code = exit_code
        super().__init__(message)


class ConfigError(CLIError):
    """Configuration could not be loaded or written"""

    def __init__(self, message: str):
        super().__init__(message, exit_code=3)


def format_exception(exc: Exception, context: Optional[str] = None) -> str:
    lines = []

    if context:
        lines.append(f"Error in {context}:")

    lines.append(f"{type(exc).__name__}: {str(exc)}")

    return "\n".join(lines)


def suggest_fix(exc: Exception) -> Optional[str]:
    """
    Suggest fixes for common errors

    Args:
        exc: The exception to analyze

    Returns:
        Suggestion string or None
    """
    error_msg = str(exc).lower()

    if "no such file or directory" in error_msg or "does not exist" in error_msg:
        return "Check that the path exists and is spelled correctly."

    if "address already in use" in error_msg:
        return "Another process is using the port; pass --port or set PORT."

    if "yaml" in error_msg or "mapping" in error_msg:
        return "Check that the config file is valid YAML (see 'taskhub config init')."

    if "no module named" in error_msg:
        return "Ensure all dependencies are installed with 'pip install -e .'."

    return None


def show_error(exc: Exception, context: Optional[str] = None, verbose: bool = False):
    """
    Display error message to user

    Args:
        exc: The exception to display
        context: Optional context about where error occurred
        verbose: Show full traceback if True
    """
    if verbose:
        console.print_exception()
        return

    console.print(Panel(format_exception(exc, context), title="Error", border_style="red"))
    suggestion = suggest_fix(exc)
    if suggestion:
        console.print(f"\n💡 [cyan]Suggestion:[/cyan] {suggestion}")


def handle_cli_error(exc: Exception, verbose: bool = False):
    """
    Handle CLI error and exit with appropriate code
    """
    show_error(exc, verbose=verbose)
    sys.exit(exc.exit_code if isinstance(exc, CLIError) else 1)
