"""
Task repository.

Every read and write takes the owner id and every query filters on it.
A task that exists but belongs to someone else is reported exactly like
a task that does not exist.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from taskhub_core.attachments import AttachmentManager
from taskhub_core.exceptions import (
    InvalidDueDateError,
    InvalidStatusError,
    NotFoundError,
    TitleRequiredError,
)
from taskhub_core.models import Task, TaskStatus
from taskhub_core.schemas import TaskFields


def parse_status(value: Optional[str]) -> str:
    try:
        return TaskStatus(value).value
    except ValueError as exc:
        raise InvalidStatusError() from exc


def parse_due_date(value: Any) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError as exc:
        raise InvalidDueDateError() from exc


def parse_title(value: Optional[str]) -> str:
    title = (value or "").strip()
    if not title:
        raise TitleRequiredError()
    return title


class TaskRepository:
    """Owner-scoped access to task rows within one session."""

    def __init__(self, session: AsyncSession, attachments: AttachmentManager):
        self.session = session
        self.attachments = attachments

    def _owned(self, owner: int):
        return select(Task).where(Task.owner_id == owner)

    async def list(self, owner: int, status: Optional[str] = None) -> list[Task]:
        """
        All tasks of ``owner``, optionally narrowed to one status.

        Dated tasks come first in ascending due-date order; tasks without
        a due date sort after every dated task.
        """
        query = self._owned(owner)
        if status:
            query = query.where(Task.status == parse_status(status))
        query = query.order_by(Task.due_date.is_(None), Task.due_date.asc(), Task.id.asc())
        result = await self.session.execute(query)
        return list(result.scalars())

    async def get(self, owner: int, task_id: int) -> Task:
        result = await self.session.execute(self._owned(owner).where(Task.id == task_id))
        task = result.scalar_one_or_none()
        if task is None:
            raise NotFoundError("Task not found")
        return task

    async def create(self, owner: int, fields: TaskFields) -> Task:
        task = Task(
            owner_id=owner,
            title=parse_title(fields.title),
            description=fields.description or "",
            status=parse_status(fields.status) if fields.status else TaskStatus.PENDING.value,
            due_date=parse_due_date(fields.due_date),
        )
        self.session.add(task)
        await self.session.flush()
        return task

    async def update(self, owner: int, task_id: int, fields: TaskFields) -> Task:
        """Apply only the fields the client supplied; the rest keep their values."""
        task = await self.get(owner, task_id)
        supplied = fields.supplied()

        changes: dict[str, Any] = {}
        if "title" in supplied:
            changes["title"] = parse_title(supplied["title"])
        if "description" in supplied:
            changes["description"] = supplied["description"] or ""
        if "status" in supplied:
            changes["status"] = parse_status(supplied["status"])
        if "due_date" in supplied:
            changes["due_date"] = parse_due_date(supplied["due_date"])

        for name, value in changes.items():
            setattr(task, name, value)
        await self.session.flush()
        return task

    async def delete(self, owner: int, task_id: int) -> list[str]:
        """
        Remove the task and its attachment rows.

        Returns the blob names the caller must purge once the transaction
        has committed.
        """
        task = await self.get(owner, task_id)
        blob_names = await self.attachments.remove_all_for_task(self.session, task)
        await self.session.execute(
            delete(Task).where(Task.id == task.id, Task.owner_id == owner)
        )
        return blob_names
