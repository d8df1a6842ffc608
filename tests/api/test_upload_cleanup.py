"""
Tests that a failed upload leaves no blobs or rows behind.

Unexpected failures surface as a 500 here, so these tests use a client
that returns server errors instead of re-raising them.
"""
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession

from taskhub_core.attachments import BlobStore

PASSWORD = "secret123"


@pytest.fixture()
def lenient_client(app):
    with TestClient(app, raise_server_exceptions=False) as c:
        c.post("/auth/register", json={"username": "alice", "password": PASSWORD})
        yield c


def blob_files(settings):
    return list(settings.upload_path.iterdir())


def three_files():
    return [
        ("files", ("first.txt", b"1", "text/plain")),
        ("files", ("second.txt", b"2", "text/plain")),
        ("files", ("third.txt", b"3", "text/plain")),
    ]


class TestFailedBlobWrite:
    def test_sibling_blobs_removed_when_one_write_fails(self, lenient_client, settings, monkeypatch):
        original_write = BlobStore.write

        async def flaky_write(self, original_name, data):
            if original_name == "second.txt":
                raise OSError("disk full")
            return await original_write(self, original_name, data)

        monkeypatch.setattr(BlobStore, "write", flaky_write)
        resp = lenient_client.post("/tasks", data={"title": "upload"}, files=three_files())

        assert resp.status_code == 500
        assert resp.json()["error"] == "internal_error"
        assert blob_files(settings) == []
        assert lenient_client.get("/tasks").json() == []

    def test_existing_task_unchanged_when_write_fails(self, lenient_client, settings, monkeypatch):
        task = lenient_client.post("/tasks", json={"title": "Before"}).json()
        original_write = BlobStore.write

        async def flaky_write(self, original_name, data):
            if original_name == "third.txt":
                raise OSError("disk full")
            return await original_write(self, original_name, data)

        monkeypatch.setattr(BlobStore, "write", flaky_write)
        resp = lenient_client.put(f"/tasks/{task['id']}", data={"title": "After"}, files=three_files())

        assert resp.status_code == 500
        assert blob_files(settings) == []
        unchanged = lenient_client.get(f"/tasks/{task['id']}").json()
        assert unchanged["title"] == "Before"
        assert unchanged["files"] == []


class TestFailedCommit:
    def test_written_blobs_purged_when_create_commit_fails(self, lenient_client, settings, monkeypatch):
        async def failing_commit(self):
            raise RuntimeError("database is locked")

        monkeypatch.setattr(AsyncSession, "commit", failing_commit)
        resp = lenient_client.post("/tasks", data={"title": "upload"}, files=three_files())
        monkeypatch.undo()

        assert resp.status_code == 500
        assert blob_files(settings) == []
        assert lenient_client.get("/tasks").json() == []

    def test_written_blobs_purged_when_update_commit_fails(self, lenient_client, settings, monkeypatch):
        task = lenient_client.post("/tasks", json={"title": "Before"}).json()

        async def failing_commit(self):
            raise RuntimeError("database is locked")

        monkeypatch.setattr(AsyncSession, "commit", failing_commit)
        resp = lenient_client.put(f"/tasks/{task['id']}", data={"title": "After"}, files=three_files())
        monkeypatch.undo()

        assert resp.status_code == 500
        assert blob_files(settings) == []
        unchanged = lenient_client.get(f"/tasks/{task['id']}").json()
        assert unchanged["title"] == "Before"
        assert unchanged["files"] == []
