"""
Services owned by one application instance.

Built once by the app factory and kept on ``app.state.services``; nothing
here is a module-level singleton, so every app (and every test) gets its
own database handle, blob store and subscriber registry.
"""

from dataclasses import dataclass

from taskhub_core.attachments import AttachmentManager, BlobStore
from taskhub_core.broadcaster import Broadcaster
from taskhub_core.config import Settings
from taskhub_core.constants import UPLOAD_URL_PREFIX
from taskhub_core.database import Database
from taskhub_core.security import PasswordHasher, TokenIssuer
from taskhub_core.service import AccountService, TaskService


@dataclass
class Services:
    settings: Settings
    db: Database
    broadcaster: Broadcaster
    attachments: AttachmentManager
    accounts: AccountService
    tasks: TaskService


def build_services(settings: Settings) -> Services:
    db = Database(settings.database_url)
    broadcaster = Broadcaster()
    attachments = AttachmentManager(
        BlobStore(settings.upload_path),
        max_file_size=settings.max_file_size,
        url_prefix=UPLOAD_URL_PREFIX,
    )
    issuer = TokenIssuer(settings.ensure_secret(), ttl_days=settings.token_ttl_days)
    return Services(
        settings=settings,
        db=db,
        broadcaster=broadcaster,
        attachments=attachments,
        accounts=AccountService(db, PasswordHasher(), issuer),
        tasks=TaskService(db, attachments, broadcaster),
    )
