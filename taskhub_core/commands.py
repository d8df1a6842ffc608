"""
Channel commands as a tagged union.

Every frame a client sends is parsed once into exactly one of these
variants; the ``type`` field is the tag.

Frame shape:
    {"type": "tasks:update", "id": "c42", "data": {"id": 7, "status": "done"}}
"""

from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from taskhub_core.schemas import TaskFields


class GetTasksData(BaseModel):
    model_config = ConfigDict(extra="ignore")

    status: Optional[str] = None


class TaskIdData(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int


class UpdateTaskData(TaskFields):
    id: int


class _Command(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: Optional[Union[str, int]] = None  # correlation id echoed in the ack


class GetTasks(_Command):
    type: Literal["tasks:get"]
    data: GetTasksData = Field(default_factory=GetTasksData)


class CreateTask(_Command):
    type: Literal["tasks:create"]
    data: TaskFields = Field(default_factory=TaskFields)


class UpdateTask(_Command):
    type: Literal["tasks:update"]
    data: UpdateTaskData


class DeleteTask(_Command):
    type: Literal["tasks:delete"]
    data: TaskIdData


ChannelCommand = Annotated[
    Union[GetTasks, CreateTask, UpdateTask, DeleteTask],
    Field(discriminator="type"),
]

_command_adapter = TypeAdapter(ChannelCommand)


def parse_command(raw: str) -> ChannelCommand:
    """Parse a JSON text frame. Raises pydantic.ValidationError on anything else."""
    return _command_adapter.validate_json(raw)


def update_fields(data: UpdateTaskData) -> TaskFields:
    """Strip the id from an update payload, keeping which fields were supplied."""
    supplied = {name: getattr(data, name) for name in data.model_fields_set if name != "id"}
    return TaskFields(**supplied)
