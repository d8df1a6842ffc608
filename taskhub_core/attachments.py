"""
Attachment manager and the filesystem blob store behind it.

An attachment row and its blob are one logical object. Rows are only ever
resolved through a join on the owning task's owner, never by bare id.
"""

from __future__ import annotations

import asyncio
import logging
import re
import uuid
from pathlib import Path
from typing import Iterable, Sequence

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from taskhub_core.constants import DEFAULT_MAX_FILE_SIZE, UPLOAD_URL_PREFIX
from taskhub_core.exceptions import FileTooLargeError, NotFoundError
from taskhub_core.models import Attachment, Task
from taskhub_core.schemas import FileOut, UploadedFile, file_out

logger = logging.getLogger(__name__)

_EXTENSION_RE = re.compile(r"^\.[A-Za-z0-9]{1,16}$")


class BlobStore:
    """Immutable blobs in a flat directory; names are generated, never client-supplied."""

    def __init__(self, root: Path):
        self.root = Path(root)

    def ensure(self) -> None:
        self.root.mkdir(parents=True, exist_ok=True)

    def path(self, name: str) -> Path:
        return self.root / name

    @staticmethod
    def generate_name(original_name: str) -> str:
        suffix = Path(original_name or "").suffix
        if not _EXTENSION_RE.match(suffix):
            suffix = ""
        return f"{uuid.uuid4().hex}{suffix.lower()}"

    def _write(self, name: str, data: bytes) -> None:
        self.ensure()
        # "xb" refuses to overwrite an existing blob
        with open(self.path(name), "xb") as f:
            f.write(data)

    def _delete(self, name: str) -> None:
        self.path(name).unlink(missing_ok=True)

    async def write(self, original_name: str, data: bytes) -> str:
        name = self.generate_name(original_name)
        await asyncio.to_thread(self._write, name, data)
        return name

    async def delete(self, name: str) -> None:
        await asyncio.to_thread(self._delete, name)

    def exists(self, name: str) -> bool:
        return self.path(name).exists()


class AttachmentManager:
    """
    Owns attachment rows and their blobs.

    Row changes happen inside the caller's session; blob removals are
    deferred to ``purge`` and run after the caller commits, so a failed
    transaction never leaves rows pointing at deleted bytes.
    """

    def __init__(self, blobs: BlobStore, max_file_size: int = DEFAULT_MAX_FILE_SIZE,
                 url_prefix: str = UPLOAD_URL_PREFIX):
        self.blobs = blobs
        self.max_file_size = max_file_size
        self.url_prefix = url_prefix.rstrip("/")

    def check_size(self, filename: str, size: int) -> None:
        if size > self.max_file_size:
            limit_mb = self.max_file_size / (1024 * 1024)
            raise FileTooLargeError(
                f"File {filename!r} exceeds the {limit_mb:g} MB limit",
                filename=filename,
            )

    def check_batch(self, files: Sequence[UploadedFile]) -> None:
        """Reject the whole batch if any single file exceeds the ceiling."""
        for upload in files:
            self.check_size(upload.filename, upload.size)

    async def attach(self, session: AsyncSession, task: Task,
                     files: Sequence[UploadedFile]) -> list[Attachment]:
        """
        Store every file of the batch and add rows referencing ``task``.

        Returns the new rows (flushed, with ids). Blob writes run
        concurrently; if any fails, the blobs already written for this
        batch are removed and the error propagates.
        """
        if not files:
            return []
        self.check_batch(files)

        results = await asyncio.gather(
            *(self.blobs.write(f.filename, f.data) for f in files),
            return_exceptions=True,
        )
        written = [r for r in results if isinstance(r, str)]
        failures = [r for r in results if isinstance(r, BaseException)]
        if failures:
            await self.purge(written)
            raise failures[0]

        rows = [
            Attachment(
                task_id=task.id,
                blob_name=name,
                original_name=upload.filename or name,
                mime_type=upload.content_type or "application/octet-stream",
                size_bytes=upload.size,
            )
            for upload, name in zip(files, written)
        ]
        session.add_all(rows)
        await session.flush()
        return rows

    def list(self, task: Task) -> list[FileOut]:
        return [file_out(a, self.url_prefix) for a in task.attachments]

    async def remove(self, session: AsyncSession, owner: int, attachment_id: int) -> Attachment:
        """Delete the row of an attachment owned (through its task) by ``owner``."""
        result = await session.execute(
            select(Attachment)
            .join(Task, Attachment.task_id == Task.id)
            .where(Attachment.id == attachment_id, Task.owner_id == owner)
        )
        attachment = result.scalar_one_or_none()
        if attachment is None:
            raise NotFoundError("File not found")
        await session.delete(attachment)
        await session.flush()
        return attachment

    async def remove_all_for_task(self, session: AsyncSession, task: Task) -> list[str]:
        """Delete every attachment row of ``task``; returns the blob names to purge."""
        result = await session.execute(
            select(Attachment.blob_name).where(Attachment.task_id == task.id)
        )
        blob_names = list(result.scalars())
        await session.execute(delete(Attachment).where(Attachment.task_id == task.id))
        return blob_names

    async def purge(self, blob_names: Iterable[str]) -> None:
        """Best-effort blob removal. Failures are logged, never raised."""
        for name in blob_names:
            try:
                await self.blobs.delete(name)
            except OSError as exc:
                logger.warning("Failed to remove blob %s: %s", name, exc)
