from fastapi import APIRouter, Depends, HTTPException, Query

from doc_chaser.config import Settings
from doc_chaser.dependencies import get_dispatcher, get_settings, get_store
from doc_chaser.models.document_request import (
    DOCUMENT_TYPES,
    DocumentRequest,
    STATUS_COMPLETED,
    STATUS_EXPIRED,
    STATUS_PENDING,
)
from doc_chaser.schemas.notification import NotificationResponse
from doc_chaser.schemas.request import (
    RequestCreate,
    RequestCreateResponse,
    RequestListResponse,
    RequestResponse,
)
from doc_chaser.services.notification_service import NotificationDispatcher
from doc_chaser.services.request_store import RequestStore
from doc_chaser.utils.timestamps import as_utc, utc_now

router = APIRouter(prefix="/requests", tags=["requests"])

VALID_STATUSES = {STATUS_PENDING, STATUS_COMPLETED, STATUS_EXPIRED}


def _request_to_response(request: DocumentRequest) -> RequestResponse:
    return RequestResponse(
        id=request.id,
        client_name=request.client_name,
        client_phone=request.client_phone,
        client_email=request.client_email,
        document_type=request.document_type,
        created_at=request.created_at,
        deadline=request.deadline,
        status=request.status,
        upload_link=request.upload_link,
        file_url=request.file_url,
        uploaded_at=request.uploaded_at,
        last_reminder_at=request.last_reminder_at,
        reminders_stopped=bool(request.reminders_stopped),
    )


@router.get("/document-types", response_model=list[str])
async def document_types():
    return DOCUMENT_TYPES


@router.post("", response_model=RequestCreateResponse, status_code=201)
async def create_request(
    req: RequestCreate,
    store: RequestStore = Depends(get_store),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
    config: Settings = Depends(get_settings),
):
    client_name = req.client_name.strip()
    client_phone = req.client_phone.strip()
    if not client_name or not client_phone:
        raise HTTPException(status_code=400, detail="client_name and client_phone are required")
    if req.document_type not in DOCUMENT_TYPES:
        raise HTTPException(status_code=400, detail=f"Invalid document_type. Must be one of: {DOCUMENT_TYPES}")
    if req.deadline is not None and as_utc(req.deadline) <= utc_now():
        raise HTTPException(status_code=400, detail="Deadline must be in the future")

    request = store.create(
        client_name=client_name,
        client_phone=client_phone,
        client_email=(req.client_email or "").strip() or None,
        document_type=req.document_type,
        deadline=req.deadline,
    )
    upload_link = config.upload_link(request.upload_token)
    store.set_upload_link(request.id, upload_link)

    # The request stands even if the client could not be reached; the sweep retries.
    result = await dispatcher.notify_client_of_new_request(
        client_name=request.client_name,
        client_phone=request.client_phone,
        client_email=request.client_email,
        document_type=request.document_type,
        upload_link=upload_link,
    )
    return RequestCreateResponse(
        request=_request_to_response(request),
        notification=NotificationResponse(**result.to_dict()),
    )


@router.get("", response_model=RequestListResponse)
async def list_requests(
    status: str | None = None,
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    store: RequestStore = Depends(get_store),
):
    if status and status not in VALID_STATUSES:
        raise HTTPException(status_code=400, detail=f"Invalid status. Must be one of: {sorted(VALID_STATUSES)}")

    requests, total = store.list_requests(status=status, page=page, per_page=per_page)
    return RequestListResponse(
        requests=[_request_to_response(r) for r in requests],
        total=total,
        page=page,
        per_page=per_page,
        counts=store.status_counts(),
    )


@router.get("/{request_id}", response_model=RequestResponse)
async def get_request(request_id: str, store: RequestStore = Depends(get_store)):
    request = store.get(request_id)
    if not request:
        raise HTTPException(status_code=404, detail="Request not found")
    return _request_to_response(request)


def _set_reminders_stopped(store: RequestStore, request_id: str, stopped: bool) -> RequestResponse:
    request = store.get(request_id)
    if not request:
        raise HTTPException(status_code=404, detail="Request not found")
    if not store.set_reminders_stopped(request_id, stopped):
        raise HTTPException(status_code=409, detail="Only pending requests take reminder settings")
    return _request_to_response(store.get(request_id))


@router.put("/{request_id}/reminders/stop", response_model=RequestResponse)
async def stop_reminders(request_id: str, store: RequestStore = Depends(get_store)):
    """Stop reminding the client about this request."""
    return _set_reminders_stopped(store, request_id, True)


@router.delete("/{request_id}/reminders/stop", response_model=RequestResponse)
async def resume_reminders(request_id: str, store: RequestStore = Depends(get_store)):
    """Resume reminders for this request."""
    return _set_reminders_stopped(store, request_id, False)
