"""
Realtime channel: a WebSocket carrying task commands and change events.

Authentication happens once, at the handshake; the token comes from the
session cookie or a ``token`` query parameter. A rejected handshake is
closed before it is accepted and never subscribed.

Frames (JSON text, ``{type, data, id}``):
  client -> server   {"type": "tasks:get", "id": "1", "data": {"status": "done"}}
  server -> client   {"type": "ack", "id": "1", "data": {"success": true, "data": [...]}}
  server -> client   {"type": "tasks:created", "id": null, "data": {...task...}}
"""

import asyncio
import contextlib
import json
import logging
from typing import Any, Dict, List, Optional

import pydantic
from fastapi import APIRouter, WebSocket

from taskhub_api.store import Services
from taskhub_core.commands import (
    ChannelCommand,
    CreateTask,
    DeleteTask,
    GetTasks,
    UpdateTask,
    parse_command,
    update_fields,
)
from taskhub_core.constants import (
    CHANNEL_QUEUE_SIZE,
    CLOSE_INVALID_TOKEN,
    CLOSE_UNAUTHENTICATED,
    TOKEN_COOKIE_NAME,
)
from taskhub_core.exceptions import AuthError, TaskHubError, UnauthenticatedError
from taskhub_core.security import Identity
from taskhub_core.service import TaskService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["channel"])


class ChannelConnection:
    """
    One live socket as seen by the broadcaster.

    Outbound frames go through a bounded queue drained by a writer task, so
    ``offer`` never blocks the code that produced the frame. While a
    command from this socket is being handled, events are held back and
    released right after its ack, so the issuer always sees the ack first.
    """

    def __init__(self, websocket: WebSocket, identity: Identity, queue_size: int = CHANNEL_QUEUE_SIZE):
        self.websocket = websocket
        self.identity = identity
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=queue_size)
        self._held: Optional[List[Dict[str, Any]]] = None
        self._closed = False

    def offer(self, message: Dict[str, Any]) -> bool:
        if self._closed:
            return False
        if self._held is not None:
            self._held.append(message)
            return True
        return self._put(message)

    def _put(self, message: Dict[str, Any]) -> bool:
        try:
            self._queue.put_nowait(message)
            return True
        except asyncio.QueueFull:
            logger.warning("Dropping %s for user %s: outbound queue full",
                           message.get("type"), self.identity.user_id)
            return False

    def hold(self) -> None:
        self._held = []

    async def release(self, ack: Dict[str, Any]) -> None:
        """
        Queue the ack, then the events held while the command ran.

        Events may be dropped when the queue is full; the ack is the reply
        the client is waiting on, so it waits for room instead. That also
        stops reading further commands from a client that is not reading.
        """
        held, self._held = self._held or [], None
        if self._closed:
            return
        await self._queue.put(ack)
        for message in held:
            self._put(message)

    async def run_writer(self) -> None:
        while True:
            message = await self._queue.get()
            try:
                await self.websocket.send_json(message)
            except Exception as exc:
                logger.info("Channel send to user %s failed, closing writer: %s",
                            self.identity.user_id, exc)
                self._closed = True
                self._discard_pending()
                return

    def _discard_pending(self) -> None:
        # frees a release() blocked on a full queue
        while not self._queue.empty():
            self._queue.get_nowait()

    def close(self) -> None:
        self._closed = True


def _ack(correlation_id: Any, payload: Dict[str, Any]) -> Dict[str, Any]:
    return {"type": "ack", "id": correlation_id, "data": payload}


def _error(code: str, message: str) -> Dict[str, Any]:
    return {"success": False, "error": code, "message": message}


def _frame_text(message: Dict[str, Any]) -> str:
    """Text of a received frame; binary frames are read as UTF-8 JSON."""
    text = message.get("text")
    if text is not None:
        return text
    try:
        return (message.get("bytes") or b"").decode("utf-8")
    except UnicodeDecodeError:
        # not JSON either way; handle_frame acks it as a validation error
        return ""


def _correlation_id(raw: str) -> Any:
    with contextlib.suppress(ValueError, TypeError, AttributeError):
        return json.loads(raw).get("id")
    return None


async def dispatch(tasks: TaskService, identity: Identity, command: ChannelCommand) -> Any:
    """Run one command against the shared task operations."""
    if isinstance(command, GetTasks):
        return [t.to_payload() for t in await tasks.list_tasks(identity, command.data.status)]
    if isinstance(command, CreateTask):
        return (await tasks.create_task(identity, command.data)).to_payload()
    if isinstance(command, UpdateTask):
        updated = await tasks.update_task(identity, command.data.id, update_fields(command.data))
        return updated.to_payload()
    if isinstance(command, DeleteTask):
        await tasks.delete_task(identity, command.data.id)
        return {"id": command.data.id}
    raise TypeError(f"Unhandled channel command: {type(command).__name__}")


async def handle_frame(tasks: TaskService, identity: Identity, raw: str) -> Dict[str, Any]:
    """Turn one inbound frame into its ack. Never raises."""
    try:
        command = parse_command(raw)
    except pydantic.ValidationError as exc:
        first = exc.errors()[0] if exc.errors() else {}
        return _ack(_correlation_id(raw), _error("validation_error", first.get("msg", "Malformed command")))

    try:
        result = await dispatch(tasks, identity, command)
    except TaskHubError as exc:
        return _ack(command.id, _error(exc.code, exc.message))
    except Exception:
        logger.exception("Channel command %s failed for user %s", command.type, identity.user_id)
        return _ack(command.id, _error("internal_error", "Internal server error"))
    return _ack(command.id, {"success": True, "data": result})


@router.websocket("/ws")
async def channel(websocket: WebSocket):
    services: Services = websocket.app.state.services
    token = websocket.cookies.get(TOKEN_COOKIE_NAME) or websocket.query_params.get("token")
    try:
        identity = services.accounts.authenticate(token)
    except AuthError as exc:
        code = CLOSE_UNAUTHENTICATED if isinstance(exc, UnauthenticatedError) else CLOSE_INVALID_TOKEN
        logger.info("Rejected channel handshake: %s", exc.code)
        await websocket.close(code=code)
        return

    await websocket.accept()
    connection = ChannelConnection(websocket, identity)
    writer = asyncio.create_task(connection.run_writer())
    services.broadcaster.subscribe(identity.user_id, connection)
    logger.info("Channel opened for user %s", identity.user_id)

    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
            connection.hold()
            ack = await handle_frame(services.tasks, identity, _frame_text(message))
            await connection.release(ack)
    finally:
        services.broadcaster.unsubscribe(connection)
        connection.close()
        writer.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await writer
        logger.info("Channel closed for user %s", identity.user_id)
