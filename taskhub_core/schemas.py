"""
Public record shapes shared by the HTTP API and the realtime channel.

Both transports serialize through these models, so a task looks the same
no matter which interface produced or reads it.
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict

from taskhub_core.models import Attachment, Task, User


class UserOut(BaseModel):
    id: int
    username: str

    @classmethod
    def from_row(cls, user: User) -> "UserOut":
        return cls(id=user.id, username=user.username)


class FileOut(BaseModel):
    id: int
    url: str
    name: str
    mime: str
    size: int = 0


class TaskOut(BaseModel):
    id: int
    title: str
    description: str = ""
    status: str
    due_date: Optional[date] = None
    created_at: datetime
    files: list[FileOut] = []

    def to_payload(self) -> dict[str, Any]:
        """JSON-ready dict, identical for HTTP bodies and channel frames."""
        return self.model_dump(mode="json")


class TaskFields(BaseModel):
    """
    Normalized task input, whatever encoding it arrived in.

    Only fields present in ``model_fields_set`` were supplied by the
    client; partial updates touch nothing else.
    """
    model_config = ConfigDict(extra="ignore")

    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None
    due_date: Optional[str] = None

    def supplied(self) -> dict[str, Any]:
        return {name: getattr(self, name) for name in self.model_fields_set}


@dataclass
class UploadedFile:
    """An uploaded file fully read into memory at the protocol boundary."""
    filename: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


def file_out(attachment: Attachment, url_prefix: str) -> FileOut:
    return FileOut(
        id=attachment.id,
        url=f"{url_prefix}/{attachment.blob_name}",
        name=attachment.original_name,
        mime=attachment.mime_type,
        size=attachment.size_bytes,
    )


def task_out(task: Task, url_prefix: str) -> TaskOut:
    return TaskOut(
        id=task.id,
        title=task.title,
        description=task.description,
        status=task.status,
        due_date=task.due_date,
        created_at=task.created_at,
        files=[file_out(a, url_prefix) for a in task.attachments],
    )
