"""
Immediate notifications: the client when a request is created, the broker when
a document arrives.

Client delivery needs the SMS (the email is extra); broker delivery succeeds
when any configured channel gets through.
"""
import logging
from dataclasses import dataclass, field

from doc_chaser.config import Settings
from doc_chaser.errors import ConfigurationError, ValidationError
from doc_chaser.services import templates
from doc_chaser.services.messaging import MessageGateway, SendOutcome

logger = logging.getLogger(__name__)

STATUS_DELIVERED = "delivered"
STATUS_PARTIAL = "partial"
STATUS_FAILED = "failed"


@dataclass
class ChannelStatus:
    sent: bool = False
    error: str | None = None

    @classmethod
    def from_outcome(cls, outcome: SendOutcome) -> "ChannelStatus":
        return cls(sent=outcome.success, error=None if outcome.success else outcome.error)


@dataclass
class NotificationResult:
    success: bool
    sms: ChannelStatus = field(default_factory=ChannelStatus)
    email: ChannelStatus = field(default_factory=ChannelStatus)

    @property
    def status(self) -> str:
        if self.success:
            return STATUS_DELIVERED
        if self.sms.sent or self.email.sent:
            return STATUS_PARTIAL
        return STATUS_FAILED

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "status": self.status,
            "results": {
                "sms": {"sent": self.sms.sent, "error": self.sms.error},
                "email": {"sent": self.email.sent, "error": self.email.error},
            },
        }


def _require(**fields: str | None):
    missing = [name for name, value in fields.items() if not value or not value.strip()]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")


class NotificationDispatcher:
    def __init__(self, gateway: MessageGateway, settings: Settings):
        self.gateway = gateway
        self.settings = settings

    async def notify_client_of_new_request(self, client_name: str | None, client_phone: str | None,
                                           client_email: str | None, document_type: str | None,
                                           upload_link: str | None) -> NotificationResult:
        _require(client_name=client_name, client_phone=client_phone,
                 document_type=document_type, upload_link=upload_link)
        client_email = (client_email or "").strip() or None

        sms_outcome = await self.gateway.send_sms(
            client_phone, templates.client_sms(client_name, document_type, upload_link)
        )
        sms = ChannelStatus.from_outcome(sms_outcome)

        email = ChannelStatus()
        if client_email:
            template = templates.client_email(client_name, document_type, upload_link)
            email = ChannelStatus.from_outcome(
                await self.gateway.send_email(client_email, template.subject, template.body)
            )

        success = sms.sent and (not client_email or email.sent)
        result = NotificationResult(success=success, sms=sms, email=email)
        logger.info("Client notification for %s: %s", document_type, result.status)
        return result

    async def notify_broker_of_completion(self, client_name: str | None,
                                          document_type: str | None) -> NotificationResult:
        _require(client_name=client_name, document_type=document_type)
        broker_phone = self.settings.broker_phone
        broker_email = self.settings.broker_email
        if not broker_phone and not broker_email:
            logger.warning("No broker contact info configured")
            raise ConfigurationError("No broker contact info configured")

        sms = ChannelStatus()
        if broker_phone:
            sms = ChannelStatus.from_outcome(
                await self.gateway.send_sms(broker_phone, templates.broker_sms(client_name, document_type))
            )

        email = ChannelStatus()
        if broker_email:
            template = templates.broker_email(client_name, document_type, self.settings.tracker_url)
            email = ChannelStatus.from_outcome(
                await self.gateway.send_email(broker_email, template.subject, template.body)
            )

        result = NotificationResult(success=sms.sent or email.sent, sms=sms, email=email)
        logger.info("Broker notification for %s from %s: %s", document_type, client_name, result.status)
        return result
