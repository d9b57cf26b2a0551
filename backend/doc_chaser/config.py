from pathlib import Path
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    data_path: Path = Path.home() / "DocChaser"
    api_prefix: str = "/api/v1"
    # Public base URL used to build client upload links and the tracker link.
    app_url: str = ""
    # Optional shared secret for the reminder trigger (Authorization: Bearer <secret>).
    cron_secret: str | None = None
    log_level: str = "INFO"

    broker_phone: str | None = None
    broker_email: str | None = None

    clicksend_username: str | None = None
    clicksend_api_key: str | None = None
    # Sender identity registered in the ClickSend dashboard (Email -> Email Addresses).
    clicksend_email_address_id: str | None = None
    clicksend_from_name: str = "Smart Doc Chaser"
    clicksend_sms_source: str = "DocChaser"
    clicksend_api_base: str = "https://rest.clicksend.com/v3"
    clicksend_shorten_urls: bool = True
    provider_timeout_seconds: float = 15.0
    sms_max_chars: int = 612  # four concatenated segments

    max_upload_bytes: int = 10 * 1024 * 1024  # 10 MiB

    @property
    def db_path(self) -> Path:
        return self.data_path / "db.sqlite"

    @property
    def files_dir(self) -> Path:
        return self.data_path / "files"

    @property
    def base_url(self) -> str:
        return self.app_url.rstrip("/")

    @property
    def tracker_url(self) -> str:
        return f"{self.base_url}/tracker"

    def upload_link(self, token: str) -> str:
        return f"{self.base_url}/upload/{token}"

    def file_url(self, relative_path: str) -> str:
        return f"{self.base_url}{self.api_prefix}/files/{relative_path}"

    model_config = {"env_prefix": "DOCCHASER_"}


settings = Settings()
