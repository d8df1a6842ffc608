"""
Output utilities for TaskHub CLI using Rich
"""

import json
import logging
from typing import Any, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.syntax import Syntax

console = Console()


def print_success(message: str):
    """Print success message with green checkmark"""
    console.print(f"✓ {message}", style="bold green")


def print_info(message: str):
    """Print info message with blue icon"""
    console.print(f"ℹ {message}", style="bold blue")


def format_json(data: Any, indent: int = 2) -> str:
    """Format data as JSON string"""
    return json.dumps(data, indent=indent, default=str)


def print_json(data: Any, title: Optional[str] = None):
    """Print JSON with syntax highlighting"""
    syntax = Syntax(format_json(data), "json", theme="monokai", line_numbers=False)

    if title:
        console.print(Panel(syntax, title=title, border_style="cyan"))
    else:
        console.print(syntax)


def setup_logging(level: str = "INFO") -> None:
    """Route stdlib logging through Rich."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
        force=True,
    )
