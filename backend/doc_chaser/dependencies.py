from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from doc_chaser.config import Settings, settings
from doc_chaser.database import get_db
from doc_chaser.services.blob_store import BlobStore
from doc_chaser.services.messaging import ClickSendProvider, MessageGateway
from doc_chaser.services.notification_service import NotificationDispatcher
from doc_chaser.services.reminder_service import ReminderScheduler
from doc_chaser.services.request_store import RequestStore
from doc_chaser.utils.security import bearer_matches


def get_settings() -> Settings:
    return settings


def get_gateway(config: Settings = Depends(get_settings)) -> MessageGateway:
    return MessageGateway(ClickSendProvider(config), config)


def get_store(db: Session = Depends(get_db)) -> RequestStore:
    return RequestStore(db)


def get_blob_store(config: Settings = Depends(get_settings)) -> BlobStore:
    return BlobStore(config)


def get_dispatcher(
    gateway: MessageGateway = Depends(get_gateway),
    config: Settings = Depends(get_settings),
) -> NotificationDispatcher:
    return NotificationDispatcher(gateway, config)


def get_scheduler(
    store: RequestStore = Depends(get_store),
    gateway: MessageGateway = Depends(get_gateway),
    config: Settings = Depends(get_settings),
) -> ReminderScheduler:
    return ReminderScheduler(store, gateway, config)


async def require_cron_secret(
    authorization: str | None = Header(None),
    config: Settings = Depends(get_settings),
):
    # Without a configured secret the trigger is open, for local cron setups.
    if config.cron_secret and not bearer_matches(authorization, config.cron_secret):
        raise HTTPException(status_code=401, detail="Unauthorized")
