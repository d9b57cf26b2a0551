"""
Transactional SMS and email delivery.

`MessageGateway` is what the scheduler and dispatcher talk to. It never raises:
every failure (missing configuration, network error, provider rejection) comes
back as a `SendOutcome` with `success=False`. The provider wire format lives in
`ClickSendProvider` only; tests substitute any object with the same `send`
coroutine.

ClickSend REST v3: https://developers.clicksend.com/docs/rest/v3/
"""
import base64
import logging
import re
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, Literal, Protocol

import httpx

from doc_chaser.config import Settings
from doc_chaser.errors import ConfigurationError

logger = logging.getLogger(__name__)

Channel = Literal["sms", "email"]

ERROR_CONFIGURATION = "configuration"
ERROR_TRANSPORT = "transport"
ERROR_PROVIDER = "provider"
ERROR_VALIDATION = "validation"

_PHONE_STRIP = re.compile(r"[\s\-()]")


@dataclass
class MessageContent:
    body: str
    subject: str | None = None


@dataclass
class SendOutcome:
    success: bool
    error: str | None = None
    error_kind: str | None = None
    debug: Any = None

    @classmethod
    def failure(cls, error: str, kind: str, debug: Any = None) -> "SendOutcome":
        return cls(success=False, error=error, error_kind=kind, debug=debug)

    @property
    def is_configuration_error(self) -> bool:
        return self.error_kind == ERROR_CONFIGURATION


class MessageProvider(Protocol):
    """Narrow delivery capability: one message, one recipient, one outcome."""

    async def send(self, channel: Channel, destination: str, content: MessageContent) -> SendOutcome:
        ...


def normalize_phone(phone: str) -> str:
    """Strip whitespace and grouping punctuation: '+1 (555) 010-2030' -> '+15550102030'."""
    return _PHONE_STRIP.sub("", phone or "")


class ClickSendProvider:
    """MessageProvider backed by the ClickSend REST API."""

    def __init__(self, settings: Settings, *, http_client: httpx.AsyncClient | None = None) -> None:
        self._settings = settings
        self._shared_http = http_client

    @asynccontextmanager
    async def _http_cm(self):
        if self._shared_http is not None:
            yield self._shared_http
            return
        async with httpx.AsyncClient() as client:
            yield client

    def _auth_header(self) -> str:
        username = self._settings.clicksend_username
        api_key = self._settings.clicksend_api_key
        if not username or not api_key:
            raise ConfigurationError("ClickSend credentials not configured")
        credentials = base64.b64encode(f"{username}:{api_key}".encode()).decode("ascii")
        return f"Basic {credentials}"

    def _email_address_id(self) -> int:
        raw = self._settings.clicksend_email_address_id
        if not raw:
            raise ConfigurationError(
                "Email not configured. Set DOCCHASER_CLICKSEND_EMAIL_ADDRESS_ID to the sender's email_address_id."
            )
        # Accept values like "32592 #for now": only the leading integer counts.
        match = re.match(r"\s*(\d+)", raw)
        if not match:
            raise ConfigurationError("DOCCHASER_CLICKSEND_EMAIL_ADDRESS_ID must be a numeric ID from ClickSend")
        return int(match.group(1))

    async def send(self, channel: Channel, destination: str, content: MessageContent) -> SendOutcome:
        if channel == "sms":
            return await self._send_sms(destination, content.body)
        if channel == "email":
            return await self._send_email(destination, content.subject or "", content.body)
        raise ValueError(f"Unsupported channel: {channel!r}")

    async def _post(self, path: str, payload: dict, auth: str) -> tuple[httpx.Response, dict | None]:
        async with self._http_cm() as client:
            response = await client.post(
                f"{self._settings.clicksend_api_base.rstrip('/')}{path}",
                json=payload,
                headers={"Authorization": auth},
                timeout=self._settings.provider_timeout_seconds,
            )
        try:
            data = response.json()
        except ValueError:
            return response, None
        return response, data if isinstance(data, dict) else None

    async def _send_sms(self, to: str, body: str) -> SendOutcome:
        auth = self._auth_header()
        payload = {
            "messages": [
                {"to": to, "body": body, "source": self._settings.clicksend_sms_source},
            ],
            # ClickSend rewrites links to smsu.io short links with click tracking.
            "shorten_urls": self._settings.clicksend_shorten_urls,
        }
        response, data = await self._post("/sms/send", payload, auth)
        if data is None:
            return SendOutcome.failure(
                "Malformed provider response", ERROR_PROVIDER,
                {"status_code": response.status_code, "text": response.text[:500]},
            )
        if not response.is_success:
            return SendOutcome.failure(data.get("response_msg") or "SMS failed", ERROR_PROVIDER, data)

        # HTTP 200 only means the batch was accepted; each message carries its own status.
        message_result = _first_message(data)
        status = message_result.get("status") if message_result else None
        if status != "SUCCESS":
            return SendOutcome.failure(
                status or "SMS failed", ERROR_PROVIDER,
                {"message_result": message_result, "full_response": data},
            )
        return SendOutcome(success=True, debug=data)

    async def _send_email(self, to: str, subject: str, body: str) -> SendOutcome:
        email_address_id = self._email_address_id()
        auth = self._auth_header()
        payload = {
            "to": [{"email": to, "name": to.split("@")[0]}],
            "from": {
                "email_address_id": email_address_id,
                "name": self._settings.clicksend_from_name,
            },
            "subject": subject,
            "body": body,
        }
        response, data = await self._post("/email/send", payload, auth)
        if data is None:
            return SendOutcome.failure(
                "Malformed provider response", ERROR_PROVIDER,
                {"status_code": response.status_code, "text": response.text[:500]},
            )
        if not response.is_success:
            return SendOutcome.failure(data.get("response_msg") or "Email failed", ERROR_PROVIDER, data)
        response_code = data.get("response_code")
        if response_code is not None and response_code != "SUCCESS":
            return SendOutcome.failure(data.get("response_msg") or response_code, ERROR_PROVIDER, data)
        return SendOutcome(success=True, debug=data)


def _first_message(data: dict) -> dict | None:
    inner = data.get("data")
    if not isinstance(inner, dict):
        return None
    messages = inner.get("messages")
    if not isinstance(messages, list) or not messages or not isinstance(messages[0], dict):
        return None
    return messages[0]


class MessageGateway:
    def __init__(self, provider: MessageProvider, settings: Settings) -> None:
        self._provider = provider
        self._settings = settings

    async def send_sms(self, to: str, body: str) -> SendOutcome:
        destination = normalize_phone(to)
        if not destination:
            return SendOutcome.failure("Missing phone number", ERROR_VALIDATION)
        max_chars = self._settings.sms_max_chars
        if len(body) > max_chars:
            logger.warning("SMS body is %d chars, truncating to %d", len(body), max_chars)
            body = body[:max_chars]
        logger.info("Sending SMS to %s", destination)
        logger.debug("SMS body (%d chars): %s", len(body), body)
        return await self._dispatch("sms", destination, MessageContent(body=body))

    async def send_email(self, to: str, subject: str, body: str) -> SendOutcome:
        recipient = (to or "").strip()
        if not recipient:
            return SendOutcome.failure("Missing email address", ERROR_VALIDATION)
        logger.info("Sending email to %s", recipient)
        logger.debug("Email subject=%r body=%s", subject, body[:500])
        return await self._dispatch("email", recipient, MessageContent(body=body, subject=subject))

    async def _dispatch(self, channel: Channel, destination: str, content: MessageContent) -> SendOutcome:
        try:
            outcome = await self._provider.send(channel, destination, content)
        except ConfigurationError as exc:
            logger.error("%s to %s not attempted: %s", channel, destination, exc)
            return SendOutcome.failure(str(exc), ERROR_CONFIGURATION, {"reason": "configuration"})
        except httpx.HTTPError as exc:
            logger.warning("%s to %s failed in transport: %r", channel, destination, exc)
            return SendOutcome.failure(str(exc) or type(exc).__name__, ERROR_TRANSPORT, {"caught": repr(exc)})
        except Exception as exc:
            logger.exception("%s to %s failed unexpectedly", channel, destination)
            return SendOutcome.failure(str(exc) or "Unknown error", ERROR_TRANSPORT, {"caught": repr(exc)})

        if not outcome.success:
            logger.warning("%s to %s rejected: %s", channel, destination, outcome.error)
        return outcome
