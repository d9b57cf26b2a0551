from datetime import datetime

from pydantic import BaseModel

from doc_chaser.schemas.notification import NotificationResponse


class RequestCreate(BaseModel):
    client_name: str
    client_phone: str
    client_email: str | None = None
    document_type: str
    deadline: datetime | None = None


class RequestResponse(BaseModel):
    id: str
    client_name: str
    client_phone: str
    client_email: str | None
    document_type: str
    created_at: str
    deadline: str | None
    status: str
    upload_link: str | None
    file_url: str | None
    uploaded_at: str | None
    last_reminder_at: str | None
    reminders_stopped: bool


class RequestCreateResponse(BaseModel):
    request: RequestResponse
    notification: NotificationResponse


class RequestListResponse(BaseModel):
    requests: list[RequestResponse]
    total: int
    page: int
    per_page: int
    counts: dict[str, int]
