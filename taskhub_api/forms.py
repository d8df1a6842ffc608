"""
Task request parsing.

POST/PUT /tasks accept either a JSON object or a multipart form with a
``files`` part list. The body is decoded once here into a ``TaskForm``;
nothing downstream looks at the encoding again.
"""

import json
from dataclasses import dataclass, field

import pydantic
from fastapi import Request
from starlette.datastructures import UploadFile

from taskhub_core.exceptions import ValidationError
from taskhub_core.schemas import TaskFields, UploadedFile

FIELD_NAMES = ("title", "description", "status", "due_date")
FILE_PART_NAMES = ("files", "files[]")

FORM_CONTENT_TYPES = ("multipart/form-data", "application/x-www-form-urlencoded")


@dataclass
class TaskForm:
    fields: TaskFields
    files: list[UploadedFile] = field(default_factory=list)


async def parse_task_request(request: Request) -> TaskForm:
    """FastAPI dependency: decode a task body regardless of its encoding."""
    content_type = request.headers.get("content-type", "").lower()
    if content_type.startswith(FORM_CONTENT_TYPES):
        return await _parse_form(request)
    return await _parse_json(request)


async def _parse_form(request: Request) -> TaskForm:
    attachments = request.app.state.services.attachments
    async with request.form() as form:
        supplied = {
            name: form[name]
            for name in FIELD_NAMES
            if name in form and isinstance(form[name], str)
        }
        parts = [
            item
            for part_name in FILE_PART_NAMES
            for item in form.getlist(part_name)
            # browsers send an empty, nameless part when no file was picked
            if isinstance(item, UploadFile) and item.filename
        ]
        # parts are spooled to disk by the parser; size the batch before
        # pulling any of it into memory
        for item in parts:
            if item.size is not None:
                attachments.check_size(item.filename, item.size)
        files = [
            UploadedFile(
                filename=item.filename,
                content_type=item.content_type or "application/octet-stream",
                # one byte past the ceiling is enough for check_batch to refuse it
                data=await item.read(attachments.max_file_size + 1),
            )
            for item in parts
        ]
    return TaskForm(fields=TaskFields(**supplied), files=files)


async def _parse_json(request: Request) -> TaskForm:
    raw = await request.body()
    if not raw.strip():
        return TaskForm(fields=TaskFields())
    try:
        payload = json.loads(raw)
    except ValueError as exc:
        raise ValidationError("Request body is not valid JSON") from exc
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")
    try:
        fields = TaskFields.model_validate(payload)
    except pydantic.ValidationError as exc:
        first = exc.errors()[0]
        location = ".".join(str(part) for part in first["loc"])
        raise ValidationError(f"{location}: {first['msg']}") from exc
    return TaskForm(fields=fields)
