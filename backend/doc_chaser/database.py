import sqlite3
from pathlib import Path
from sqlalchemy import create_engine, event
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from doc_chaser.config import settings


class Base(DeclarativeBase):
    pass


def _set_sqlite_pragmas(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def get_engine(db_path: Path | None = None):
    path = db_path or settings.db_path
    engine = create_engine(
        f"sqlite:///{path}",
        connect_args={"check_same_thread": False},
    )
    event.listen(engine, "connect", _set_sqlite_pragmas)
    return engine


engine = get_engine()
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


SCHEMA_SQL = """\
-- ============================================================
-- DOCUMENT REQUESTS
-- ============================================================
CREATE TABLE IF NOT EXISTS document_requests (
    id                TEXT PRIMARY KEY,
    client_name       TEXT NOT NULL,
    client_phone      TEXT NOT NULL,
    client_email      TEXT,
    document_type     TEXT NOT NULL,
    created_at        TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now')),
    deadline          TEXT,
    status            TEXT NOT NULL DEFAULT 'pending'
                      CHECK(status IN ('pending','completed','expired')),
    upload_token      TEXT NOT NULL UNIQUE,
    upload_link       TEXT,
    file_url          TEXT,
    uploaded_at       TEXT,
    last_reminder_at  TEXT,
    reminders_stopped INTEGER NOT NULL DEFAULT 0 CHECK(reminders_stopped IN (0,1))
);

CREATE INDEX IF NOT EXISTS idx_requests_status ON document_requests(status, reminders_stopped);
CREATE INDEX IF NOT EXISTS idx_requests_created ON document_requests(created_at);
"""


def init_db(db_path: Path | None = None):
    path = db_path or settings.db_path
    conn = sqlite3.connect(str(path))
    conn.executescript(SCHEMA_SQL)
    conn.close()
