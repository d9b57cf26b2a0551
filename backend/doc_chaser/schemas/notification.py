from pydantic import BaseModel


class ClientNotificationRequest(BaseModel):
    client_name: str | None = None
    client_phone: str | None = None
    client_email: str | None = None
    document_type: str | None = None
    upload_link: str | None = None


class BrokerNotificationRequest(BaseModel):
    client_name: str | None = None
    document_type: str | None = None


class ChannelResult(BaseModel):
    sent: bool = False
    error: str | None = None


class ChannelResults(BaseModel):
    sms: ChannelResult
    email: ChannelResult


class NotificationResponse(BaseModel):
    success: bool
    status: str
    results: ChannelResults
