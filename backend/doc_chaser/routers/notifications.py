from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse

from doc_chaser.dependencies import get_dispatcher
from doc_chaser.errors import ConfigurationError, ValidationError
from doc_chaser.schemas.notification import (
    BrokerNotificationRequest,
    ClientNotificationRequest,
    NotificationResponse,
)
from doc_chaser.services.notification_service import (
    NotificationDispatcher,
    STATUS_DELIVERED,
    STATUS_PARTIAL,
)

router = APIRouter(prefix="/notifications", tags=["notifications"])

# 207 tells the caller that some, not all, channels delivered.
_CLIENT_STATUS_CODES = {STATUS_DELIVERED: 200, STATUS_PARTIAL: 207}


@router.post("/client-created", response_model=NotificationResponse)
async def client_created(
    req: ClientNotificationRequest,
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    try:
        result = await dispatcher.notify_client_of_new_request(
            client_name=req.client_name,
            client_phone=req.client_phone,
            client_email=req.client_email,
            document_type=req.document_type,
            upload_link=req.upload_link,
        )
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return JSONResponse(status_code=_CLIENT_STATUS_CODES.get(result.status, 500), content=result.to_dict())


@router.post("/broker-notified", response_model=NotificationResponse)
async def broker_notified(
    req: BrokerNotificationRequest,
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    try:
        result = await dispatcher.notify_broker_of_completion(
            client_name=req.client_name,
            document_type=req.document_type,
        )
    except (ValidationError, ConfigurationError) as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return JSONResponse(status_code=200 if result.success else 500, content=result.to_dict())
