import hashlib
import os
from pathlib import Path
from typing import NamedTuple

from doc_chaser.config import Settings
from doc_chaser.utils.filesystem import ensure_request_dir, sanitize_filename


class StoredBlob(NamedTuple):
    url: str
    path: Path
    created: bool


class BlobStore:
    def __init__(self, settings: Settings):
        self.settings = settings

    def store(self, request_id: str, filename: str, content: bytes) -> StoredBlob:
        """Store an uploaded file read-only and return where it lives."""
        file_hash = hashlib.sha256(content).hexdigest()
        stored_name = f"{file_hash[:8]}_{sanitize_filename(filename or 'upload')}"

        request_dir = ensure_request_dir(request_id, self.settings.files_dir)
        file_path = request_dir / stored_name
        created = False
        if not file_path.exists():  # same hash and name means same content
            file_path.write_bytes(content)
            os.chmod(file_path, 0o444)
            created = True

        return StoredBlob(self.settings.file_url(f"{request_id}/{stored_name}"), file_path, created)

    def discard(self, blob: StoredBlob):
        """Remove a blob written by this call; files that already existed are left alone."""
        if blob.created:
            blob.path.unlink(missing_ok=True)

    def resolve(self, request_id: str, filename: str) -> Path | None:
        """Map a public file path back to disk, refusing anything outside the files dir."""
        files_dir = self.settings.files_dir.resolve()
        candidate = (files_dir / request_id / filename).resolve()
        if files_dir not in candidate.parents or not candidate.is_file():
            return None
        return candidate
