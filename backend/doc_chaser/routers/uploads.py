import logging

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from fastapi.responses import FileResponse

from doc_chaser.config import Settings
from doc_chaser.dependencies import get_blob_store, get_dispatcher, get_settings, get_store
from doc_chaser.errors import ConfigurationError
from doc_chaser.models.document_request import DocumentRequest, STATUS_COMPLETED, STATUS_EXPIRED
from doc_chaser.schemas.notification import NotificationResponse
from doc_chaser.schemas.upload import UploadRequestView, UploadResponse
from doc_chaser.services.blob_store import BlobStore
from doc_chaser.services.notification_service import NotificationDispatcher
from doc_chaser.services.request_store import RequestStore
from doc_chaser.utils.timestamps import format_timestamp, utc_now

logger = logging.getLogger(__name__)

router = APIRouter(tags=["uploads"])


def _load_for_upload(store: RequestStore, token: str) -> DocumentRequest:
    request = store.get_by_token(token)
    if not request:
        raise HTTPException(status_code=404, detail="This upload link is invalid or has expired.")
    if request.status == STATUS_COMPLETED:
        raise HTTPException(status_code=409, detail="This document has already been uploaded.")
    if request.status == STATUS_EXPIRED:
        raise HTTPException(status_code=410, detail="This upload request has expired.")
    return request


@router.get("/upload/{token}", response_model=UploadRequestView)
async def view_upload_request(token: str, store: RequestStore = Depends(get_store)):
    request = _load_for_upload(store, token)
    return UploadRequestView(
        client_name=request.client_name,
        document_type=request.document_type,
        deadline=request.deadline,
    )


@router.post("/upload/{token}", response_model=UploadResponse)
async def upload_document(
    token: str,
    file: UploadFile = File(...),
    store: RequestStore = Depends(get_store),
    blobs: BlobStore = Depends(get_blob_store),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
    config: Settings = Depends(get_settings),
):
    request = _load_for_upload(store, token)
    request_id = request.id
    client_name = request.client_name
    document_type = request.document_type

    max_bytes = config.max_upload_bytes
    size = 0
    chunks: list[bytes] = []
    while True:
        chunk = await file.read(1024 * 1024)
        if not chunk:
            break
        size += len(chunk)
        if size > max_bytes:
            raise HTTPException(status_code=413, detail=f"File too large (max {max_bytes} bytes)")
        chunks.append(chunk)

    content = b"".join(chunks)
    if not content:
        raise HTTPException(status_code=400, detail="Empty file")

    blob = blobs.store(request_id, file.filename, content)
    file_url = blob.url
    uploaded_at = utc_now()
    if not store.mark_completed(request_id, file_url, uploaded_at):
        blobs.discard(blob)
        raise HTTPException(status_code=409, detail="This request is no longer pending.")
    logger.info("Request %s completed with %s", request_id, file_url)

    broker_notification = None
    try:
        result = await dispatcher.notify_broker_of_completion(client_name, document_type)
        broker_notification = NotificationResponse(**result.to_dict())
    except ConfigurationError as exc:
        logger.warning("Broker not notified of upload for %s: %s", request_id, exc)

    return UploadResponse(
        message="Your document has been uploaded successfully.",
        file_url=file_url,
        uploaded_at=format_timestamp(uploaded_at),
        broker_notification=broker_notification,
    )


@router.get("/files/{request_id}/{filename}")
async def download_file(request_id: str, filename: str, blobs: BlobStore = Depends(get_blob_store)):
    path = blobs.resolve(request_id, filename)
    if path is None:
        raise HTTPException(status_code=404, detail="File not found")
    return FileResponse(path=str(path), filename=filename)
