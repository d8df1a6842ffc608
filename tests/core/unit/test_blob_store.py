"""
Unit tests for the blob store and the attachment batch check
"""

import asyncio

import pytest

from taskhub_core.attachments import AttachmentManager, BlobStore
from taskhub_core.exceptions import FileTooLargeError
from taskhub_core.schemas import UploadedFile


class TestBlobStore:
    """Test blob naming and storage"""

    @pytest.mark.parametrize("original, suffix", [
        ("report.PDF", ".pdf"),
        ("archive.tar.gz", ".gz"),
        ("no_extension", ""),
        ("../../etc/passwd", ""),
        ("weird.ext with space", ""),
        ("", ""),
    ])
    def test_generated_name_keeps_only_safe_extension(self, original, suffix):
        name = BlobStore.generate_name(original)
        stem = name[:len(name) - len(suffix)] if suffix else name
        assert name.endswith(suffix)
        assert len(stem) == 32
        assert "/" not in name

    def test_names_are_unique(self):
        assert BlobStore.generate_name("a.txt") != BlobStore.generate_name("a.txt")

    def test_write_and_delete(self, tmp_path):
        store = BlobStore(tmp_path / "blobs")
        name = asyncio.run(store.write("note.txt", b"hello"))
        assert store.exists(name)
        assert store.path(name).read_bytes() == b"hello"

        asyncio.run(store.delete(name))
        assert not store.exists(name)
        # already gone is fine
        asyncio.run(store.delete(name))


class TestBatchCheck:
    """Test the per-file size ceiling"""

    def test_at_limit_accepted(self, tmp_path):
        manager = AttachmentManager(BlobStore(tmp_path), max_file_size=10)
        manager.check_batch([UploadedFile("a.bin", "application/octet-stream", b"x" * 10)])

    def test_one_oversize_file_rejects_batch(self, tmp_path):
        manager = AttachmentManager(BlobStore(tmp_path), max_file_size=10)
        batch = [
            UploadedFile("ok.bin", "application/octet-stream", b"x"),
            UploadedFile("big.bin", "application/octet-stream", b"x" * 11),
        ]
        with pytest.raises(FileTooLargeError) as exc_info:
            manager.check_batch(batch)
        assert exc_info.value.filename == "big.bin"

    def test_purge_swallows_os_errors(self, tmp_path):
        store = BlobStore(tmp_path)

        async def failing_delete(name):
            raise OSError("nope")

        store.delete = failing_delete
        asyncio.run(AttachmentManager(store).purge(["a", "b"]))

    def test_check_size_names_the_file(self, tmp_path):
        manager = AttachmentManager(BlobStore(tmp_path), max_file_size=10)
        manager.check_size("fits.bin", 10)
        with pytest.raises(FileTooLargeError) as exc_info:
            manager.check_size("huge.bin", 11)
        assert "huge.bin" in exc_info.value.message
