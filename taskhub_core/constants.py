"""
Centralized constants and defaults for TaskHub
"""

# Session tokens
TOKEN_COOKIE_NAME = "token"
TOKEN_ALGORITHM = "HS256"
DEFAULT_TOKEN_TTL_DAYS = 7

# Credentials
MIN_PASSWORD_LENGTH = 6

# Attachments
DEFAULT_MAX_FILE_SIZE = 5 * 1024 * 1024  # 5 MiB per file
DEFAULT_UPLOAD_DIR = "uploads"
UPLOAD_URL_PREFIX = "/uploads"

# Storage
DEFAULT_DATABASE_URL = "sqlite+aiosqlite:///./data/taskhub.db"

# Realtime channel
CHANNEL_QUEUE_SIZE = 100  # pending outbound frames per connection
CLOSE_UNAUTHENTICATED = 4401
CLOSE_INVALID_TOKEN = 4403

# Server
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 3000
