"""
TaskHub CLI - run and administer a TaskHub server
"""

from taskhub_core import __version__

__all__ = ["__version__"]
