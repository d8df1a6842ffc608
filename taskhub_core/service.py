"""
Operations shared by the HTTP routes and the realtime channel.

Both transports call these methods and nothing else, so business behavior
cannot diverge between them. Every successful mutation is announced to the
owner's live subscribers here, once, whichever transport triggered it.
"""

import logging
from typing import Optional, Sequence

from taskhub_core.attachments import AttachmentManager
from taskhub_core.broadcaster import Broadcaster, EventKind
from taskhub_core.credentials import CredentialStore
from taskhub_core.database import Database
from taskhub_core.exceptions import InvalidTokenError, NotFoundError
from taskhub_core.schemas import TaskFields, TaskOut, UploadedFile, UserOut, task_out
from taskhub_core.security import Identity, PasswordHasher, TokenIssuer
from taskhub_core.tasks import TaskRepository

logger = logging.getLogger(__name__)


class AccountService:
    """Registration, login and session token handling."""

    def __init__(self, db: Database, hasher: PasswordHasher, issuer: TokenIssuer):
        self.db = db
        self.hasher = hasher
        self.issuer = issuer

    def _issue(self, user: UserOut) -> str:
        return self.issuer.issue(Identity(user_id=user.id, username=user.username))

    async def register(self, username: Optional[str], password: Optional[str]) -> tuple[UserOut, str]:
        async with self.db.session() as session:
            user = UserOut.from_row(await CredentialStore(session, self.hasher).register(username, password))
        return user, self._issue(user)

    async def login(self, username: Optional[str], password: Optional[str]) -> tuple[UserOut, str]:
        async with self.db.session() as session:
            user = UserOut.from_row(await CredentialStore(session, self.hasher).login(username, password))
        logger.info("User %s logged in", user.username)
        return user, self._issue(user)

    def authenticate(self, token: Optional[str]) -> Identity:
        return self.issuer.verify(token)

    async def me(self, identity: Identity) -> UserOut:
        async with self.db.session() as session:
            user = await CredentialStore(session, self.hasher).get(identity.user_id)
        if user is None:
            raise InvalidTokenError()
        return UserOut.from_row(user)


class TaskService:
    """
    Owner-scoped task and attachment operations.

    Each call is one logical operation on one session; the record returned
    after a mutation is re-read from storage inside that operation.
    """

    def __init__(self, db: Database, attachments: AttachmentManager, broadcaster: Broadcaster):
        self.db = db
        self.attachments = attachments
        self.broadcaster = broadcaster

    def _out(self, task) -> TaskOut:
        return task_out(task, self.attachments.url_prefix)

    async def list_tasks(self, owner: Identity, status: Optional[str] = None) -> list[TaskOut]:
        async with self.db.session() as session:
            tasks = await TaskRepository(session, self.attachments).list(owner.user_id, status)
            return [self._out(t) for t in tasks]

    async def get_task(self, owner: Identity, task_id: int) -> TaskOut:
        async with self.db.session() as session:
            task = await TaskRepository(session, self.attachments).get(owner.user_id, task_id)
            return self._out(task)

    async def create_task(self, owner: Identity, fields: TaskFields,
                          files: Sequence[UploadedFile] = ()) -> TaskOut:
        # size check first: an oversize batch must leave nothing behind
        self.attachments.check_batch(files)
        written: list[str] = []
        async with self.db.session() as session:
            repo = TaskRepository(session, self.attachments)
            try:
                task = await repo.create(owner.user_id, fields)
                written = [a.blob_name for a in await self.attachments.attach(session, task, files)]
                await session.commit()
            except Exception:
                await self.attachments.purge(written)
                raise
            session.expunge_all()
            created = self._out(await repo.get(owner.user_id, task.id))

        logger.info("Task %s created by user %s", created.id, owner.user_id)
        self.broadcaster.notify(owner.user_id, EventKind.TASK_CREATED, created.to_payload())
        return created

    async def update_task(self, owner: Identity, task_id: int, fields: TaskFields,
                          files: Sequence[UploadedFile] = ()) -> TaskOut:
        self.attachments.check_batch(files)
        written: list[str] = []
        async with self.db.session() as session:
            repo = TaskRepository(session, self.attachments)
            try:
                task = await repo.update(owner.user_id, task_id, fields)
                written = [a.blob_name for a in await self.attachments.attach(session, task, files)]
                await session.commit()
            except Exception:
                await self.attachments.purge(written)
                raise
            session.expunge_all()
            updated = self._out(await repo.get(owner.user_id, task_id))

        self.broadcaster.notify(owner.user_id, EventKind.TASK_UPDATED, updated.to_payload())
        return updated

    async def delete_task(self, owner: Identity, task_id: int) -> None:
        async with self.db.session() as session:
            blob_names = await TaskRepository(session, self.attachments).delete(owner.user_id, task_id)
            await session.commit()

        await self.attachments.purge(blob_names)
        logger.info("Task %s deleted by user %s (%d files)", task_id, owner.user_id, len(blob_names))
        self.broadcaster.notify(owner.user_id, EventKind.TASK_DELETED, {"id": task_id})

    async def delete_attachment(self, owner: Identity, attachment_id: int) -> None:
        updated: Optional[TaskOut] = None
        async with self.db.session() as session:
            attachment = await self.attachments.remove(session, owner.user_id, attachment_id)
            task_id = attachment.task_id
            await session.commit()
            try:
                session.expunge_all()
                task = await TaskRepository(session, self.attachments).get(owner.user_id, task_id)
                updated = self._out(task)
            except NotFoundError:
                # the parent task was deleted in between; its own delete notified
                logger.info("Task %s gone after removing file %s", task_id, attachment_id)
            finally:
                await self.attachments.purge([attachment.blob_name])

        if updated is not None:
            self.broadcaster.notify(owner.user_id, EventKind.TASK_UPDATED, updated.to_payload())
