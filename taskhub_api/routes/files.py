"""
Attachment routes.

Endpoints:
  DELETE /files/{file_id}    Remove one attachment of an own task
"""

from fastapi import APIRouter, Depends, Response

from taskhub_api.auth import get_services, require_identity
from taskhub_api.store import Services
from taskhub_core.security import Identity

router = APIRouter(prefix="/files", tags=["files"])


@router.delete("/{file_id}", status_code=204)
async def delete_file(
    file_id: int,
    identity: Identity = Depends(require_identity),
    services: Services = Depends(get_services),
):
    """The file is resolved through its task's owner; foreign files are 404."""
    await services.tasks.delete_attachment(identity, file_id)
    return Response(status_code=204)
