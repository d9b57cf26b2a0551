from pathlib import Path
from doc_chaser.config import settings


def ensure_data_dirs(data_path: Path | None = None) -> Path:
    path = data_path or settings.data_path
    path.mkdir(parents=True, exist_ok=True)
    (path / "files").mkdir(exist_ok=True)
    return path


def ensure_request_dir(request_id: str, files_dir: Path) -> Path:
    request_dir = files_dir / request_id
    request_dir.mkdir(parents=True, exist_ok=True)
    return request_dir


def sanitize_filename(name: str) -> str:
    keep = set("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789._-")
    return "".join(c if c in keep else "_" for c in name)
