import uuid
from datetime import datetime

from sqlalchemy import case, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from doc_chaser.models.document_request import (
    DocumentRequest,
    STATUS_COMPLETED,
    STATUS_EXPIRED,
    STATUS_PENDING,
)
from doc_chaser.utils.security import generate_upload_token
from doc_chaser.utils.timestamps import format_timestamp, utc_now


class RequestStore:
    """Persistence for document requests.

    Every status or reminder write is conditional on the request still being
    pending (and, for reminders, on the last_reminder_at value the caller read),
    so a write based on a stale read matches no row and returns False.
    """

    def __init__(self, db: Session):
        self.db = db

    def create(self, client_name: str, client_phone: str, client_email: str | None,
               document_type: str, deadline: datetime | None = None) -> DocumentRequest:
        request = DocumentRequest(
            id=str(uuid.uuid4()),
            client_name=client_name,
            client_phone=client_phone,
            client_email=client_email or None,
            document_type=document_type,
            created_at=format_timestamp(utc_now()),
            deadline=format_timestamp(deadline) if deadline else None,
            status=STATUS_PENDING,
            upload_token=generate_upload_token(),
            reminders_stopped=False,
        )
        self.db.add(request)
        self._commit()
        self.db.refresh(request)
        return request

    def get(self, request_id: str) -> DocumentRequest | None:
        return self.db.query(DocumentRequest).filter(DocumentRequest.id == request_id).first()

    def get_by_token(self, token: str) -> DocumentRequest | None:
        return self.db.query(DocumentRequest).filter(DocumentRequest.upload_token == token).first()

    def get_pending_by_token(self, token: str) -> DocumentRequest | None:
        return (
            self.db.query(DocumentRequest)
            .filter(DocumentRequest.upload_token == token, DocumentRequest.status == STATUS_PENDING)
            .first()
        )

    def list_pending(self) -> list[DocumentRequest]:
        return (
            self.db.query(DocumentRequest)
            .filter(DocumentRequest.status == STATUS_PENDING)
            .filter(DocumentRequest.reminders_stopped.is_(False))
            .order_by(DocumentRequest.created_at)
            .all()
        )

    def list_requests(self, status: str | None = None, page: int = 1,
                      per_page: int = 20) -> tuple[list[DocumentRequest], int]:
        query = self.db.query(DocumentRequest)
        if status:
            query = query.filter(DocumentRequest.status == status)
        total = query.count()
        pending_first = case((DocumentRequest.status == STATUS_PENDING, 0), else_=1)
        requests = (
            query.order_by(pending_first, DocumentRequest.created_at.desc())
            .offset((page - 1) * per_page)
            .limit(per_page)
            .all()
        )
        return requests, total

    def status_counts(self) -> dict[str, int]:
        counts = {STATUS_PENDING: 0, STATUS_COMPLETED: 0, STATUS_EXPIRED: 0}
        rows = (
            self.db.query(DocumentRequest.status, func.count(DocumentRequest.id))
            .group_by(DocumentRequest.status)
            .all()
        )
        for status, count in rows:
            counts[status] = count
        return counts

    def set_upload_link(self, request_id: str, upload_link: str) -> bool:
        return self._update(
            self.db.query(DocumentRequest).filter(DocumentRequest.id == request_id),
            {DocumentRequest.upload_link: upload_link},
        )

    def mark_expired(self, request_id: str) -> bool:
        return self._update(
            self._pending(request_id),
            {DocumentRequest.status: STATUS_EXPIRED},
        )

    def mark_completed(self, request_id: str, file_url: str, uploaded_at: datetime | None = None) -> bool:
        return self._update(
            self._pending(request_id),
            {
                DocumentRequest.status: STATUS_COMPLETED,
                DocumentRequest.file_url: file_url,
                DocumentRequest.uploaded_at: format_timestamp(uploaded_at or utc_now()),
            },
        )

    def record_reminder(self, request_id: str, previous: str | None, reminded_at: datetime) -> bool:
        reminded = format_timestamp(reminded_at)
        query = self._pending(request_id)
        if previous is None:
            query = query.filter(DocumentRequest.last_reminder_at.is_(None))
        else:
            # Fixed-width UTC strings order chronologically; never move the value backwards.
            query = query.filter(
                DocumentRequest.last_reminder_at == previous,
                DocumentRequest.last_reminder_at < reminded,
            )
        return self._update(query, {DocumentRequest.last_reminder_at: reminded})

    def set_reminders_stopped(self, request_id: str, stopped: bool) -> bool:
        return self._update(
            self._pending(request_id),
            {DocumentRequest.reminders_stopped: stopped},
        )

    def _pending(self, request_id: str):
        return self.db.query(DocumentRequest).filter(
            DocumentRequest.id == request_id,
            DocumentRequest.status == STATUS_PENDING,
        )

    def _update(self, query, values: dict) -> bool:
        try:
            updated = query.update(values, synchronize_session=False)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        return updated > 0

    def _commit(self):
        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
