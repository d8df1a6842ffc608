"""
Root conftest.py: test-suite wide fixtures.

Every test gets its own SQLite file and upload directory under tmp_path,
so no state leaks between tests.
"""

import pytest

from taskhub_core.config import Settings

TEST_SECRET = "test-secret-key-abc123"


@pytest.fixture()
def settings(tmp_path):
    """Isolated settings: per-test database and blob directory."""
    return Settings(
        env="development",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'taskhub.db'}",
        upload_dir=str(tmp_path / "uploads"),
        secret_key=TEST_SECRET,
    )
