import logging
import sqlite3
from contextlib import asynccontextmanager
from fastapi import FastAPI

from doc_chaser.config import settings
from doc_chaser.database import init_db
from doc_chaser.routers import diagnostics, notifications, reminders, requests, uploads
from doc_chaser.utils.filesystem import ensure_data_dirs

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("doc_chaser")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: create the request database if needed, then integrity-check it
    try:
        ensure_data_dirs()
        init_db()
        conn = sqlite3.connect(str(settings.db_path))
        result = conn.execute("PRAGMA integrity_check").fetchone()
        conn.close()
        if result and result[0] == "ok":
            logger.info("Database integrity check passed.")
        else:
            logger.error("DATABASE INTEGRITY CHECK FAILED: %s", result)
    except (OSError, sqlite3.Error) as exc:
        logger.error("Could not run startup schema/integrity check: %s", exc)
    if not settings.clicksend_username or not settings.clicksend_api_key:
        logger.warning("ClickSend credentials not configured; every send will fail until they are set.")
    yield


app = FastAPI(
    title="Doc Chaser",
    description="Document request tracking with SMS and email reminders",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(requests.router, prefix=settings.api_prefix)
app.include_router(uploads.router, prefix=settings.api_prefix)
app.include_router(notifications.router, prefix=settings.api_prefix)
app.include_router(reminders.router, prefix=settings.api_prefix)
app.include_router(diagnostics.router, prefix=settings.api_prefix)


@app.get("/health")
async def health():
    return {"status": "ok", "version": "0.1.0"}
