from sqlalchemy import Boolean, Column, Text
from doc_chaser.database import Base

STATUS_PENDING = "pending"
STATUS_COMPLETED = "completed"
STATUS_EXPIRED = "expired"

DOCUMENT_TYPES = [
    "Proof of Income",
    "ID / Driver's License",
    "Social Security Card",
    "Proof of Address",
    "Immigration Documents",
    "Employer Coverage Letter",
    "SEP Documentation",
    "Tax Return",
    "Pay Stub",
    "Bank Statement",
    "Other",
]


class DocumentRequest(Base):
    __tablename__ = "document_requests"

    id = Column(Text, primary_key=True)
    client_name = Column(Text, nullable=False)
    client_phone = Column(Text, nullable=False)
    client_email = Column(Text)
    document_type = Column(Text, nullable=False)
    created_at = Column(Text, nullable=False)
    deadline = Column(Text)
    status = Column(Text, nullable=False, default=STATUS_PENDING)
    upload_token = Column(Text, nullable=False, unique=True)
    upload_link = Column(Text)
    file_url = Column(Text)
    uploaded_at = Column(Text)
    last_reminder_at = Column(Text)
    reminders_stopped = Column(Boolean, nullable=False, default=False)
