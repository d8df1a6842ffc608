"""
Task routes. Thin adapters over TaskService; the service also notifies
realtime subscribers, so channel clients see every change made here.

Endpoints:
  GET    /tasks              List own tasks (?status=)
  GET    /tasks/{task_id}    Get one task
  POST   /tasks              Create a task (JSON or multipart with files)
  PUT    /tasks/{task_id}    Partially update a task, optionally adding files
  DELETE /tasks/{task_id}    Delete a task and its attachments
"""

from typing import Optional

from fastapi import APIRouter, Depends, Response

from taskhub_api.auth import get_services, require_identity
from taskhub_api.forms import TaskForm, parse_task_request
from taskhub_api.store import Services
from taskhub_core.schemas import TaskOut
from taskhub_core.security import Identity

router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.get("", response_model=list[TaskOut])
async def list_tasks(
    status: Optional[str] = None,
    identity: Identity = Depends(require_identity),
    services: Services = Depends(get_services),
):
    """Dated tasks first by due date, undated tasks last."""
    return await services.tasks.list_tasks(identity, status)


@router.get("/{task_id}", response_model=TaskOut)
async def get_task(
    task_id: int,
    identity: Identity = Depends(require_identity),
    services: Services = Depends(get_services),
):
    return await services.tasks.get_task(identity, task_id)


@router.post("", response_model=TaskOut, status_code=201)
async def create_task(
    identity: Identity = Depends(require_identity),
    form: TaskForm = Depends(parse_task_request),
    services: Services = Depends(get_services),
):
    return await services.tasks.create_task(identity, form.fields, form.files)


@router.put("/{task_id}", response_model=TaskOut)
async def update_task(
    task_id: int,
    identity: Identity = Depends(require_identity),
    form: TaskForm = Depends(parse_task_request),
    services: Services = Depends(get_services),
):
    """Only the fields present in the body change."""
    return await services.tasks.update_task(identity, task_id, form.fields, form.files)


@router.delete("/{task_id}", status_code=204)
async def delete_task(
    task_id: int,
    identity: Identity = Depends(require_identity),
    services: Services = Depends(get_services),
):
    await services.tasks.delete_task(identity, task_id)
    return Response(status_code=204)
