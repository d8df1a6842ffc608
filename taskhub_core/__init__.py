"""
TaskHub Core - owner-scoped tasks, attachments and realtime fan-out

The same operations back both the REST API and the WebSocket channel.
"""

__version__ = "0.1.0"

from taskhub_core.config import Settings, load_settings
from taskhub_core.broadcaster import Broadcaster, EventKind
from taskhub_core.security import Identity

__all__ = [
    "Settings",
    "load_settings",
    "Broadcaster",
    "EventKind",
    "Identity",
]
