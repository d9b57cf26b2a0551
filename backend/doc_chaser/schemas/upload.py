from pydantic import BaseModel

from doc_chaser.schemas.notification import NotificationResponse


class UploadRequestView(BaseModel):
    client_name: str
    document_type: str
    deadline: str | None


class UploadResponse(BaseModel):
    message: str
    file_url: str
    uploaded_at: str
    broker_notification: NotificationResponse | None
