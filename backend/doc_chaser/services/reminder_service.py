"""
Reminder sweep over outstanding document requests.

One sweep loads every pending request that has not opted out of reminders and,
per request, either expires it (deadline passed), reminds the client, or does
nothing. Records are independent; a failure on one is recorded in the sweep
result and the sweep moves on. last_reminder_at only advances after the client
SMS went out, so a failed reminder fires again on the next sweep.
"""
import asyncio
import logging
import math
from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError

from doc_chaser.config import Settings
from doc_chaser.errors import SweepError, SweepInProgressError
from doc_chaser.models.document_request import DocumentRequest, STATUS_PENDING
from doc_chaser.services import templates
from doc_chaser.services.messaging import MessageGateway
from doc_chaser.services.request_store import RequestStore
from doc_chaser.utils.timestamps import hours_between, parse_timestamp, utc_now

logger = logging.getLogger(__name__)

FIRST_REMINDER_AFTER_HOURS = 48
REMINDER_INTERVAL_HOURS = 24
URGENT_WINDOW_HOURS = 24

# One sweep at a time per process; overlapping triggers are refused.
_sweep_lock = asyncio.Lock()


@dataclass
class SweepResult:
    processed: int = 0
    reminders_sent: int = 0
    expired: int = 0
    errors: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class ReminderDecision:
    expired: bool = False
    should_remind: bool = False
    is_urgent: bool = False


def evaluate_request(request: DocumentRequest, now: datetime) -> ReminderDecision:
    """Decide what a sweep at `now` should do with one pending request."""
    created_at = parse_timestamp(request.created_at)
    last_reminder = parse_timestamp(request.last_reminder_at) if request.last_reminder_at else None
    deadline = parse_timestamp(request.deadline) if request.deadline else None

    hours_since_creation = hours_between(created_at, now)
    hours_since_last_reminder = hours_between(last_reminder, now) if last_reminder else math.inf
    hours_until_deadline = hours_between(now, deadline) if deadline else math.inf

    if deadline is not None and hours_until_deadline < 0:
        return ReminderDecision(expired=True)

    should_remind = False
    is_urgent = False

    if last_reminder is None and hours_since_creation >= FIRST_REMINDER_AFTER_HOURS:
        should_remind = True

    if last_reminder is not None and hours_since_last_reminder >= REMINDER_INTERVAL_HOURS:
        should_remind = True

    if deadline is not None and 0 < hours_until_deadline <= URGENT_WINDOW_HOURS:
        should_remind = True
        is_urgent = True

    return ReminderDecision(should_remind=should_remind, is_urgent=is_urgent)


class ReminderScheduler:
    def __init__(self, store: RequestStore, gateway: MessageGateway, settings: Settings):
        self.store = store
        self.gateway = gateway
        self.settings = settings

    async def run_sweep(self, now: datetime | None = None) -> SweepResult:
        if _sweep_lock.locked():
            raise SweepInProgressError("A reminder sweep is already running")
        async with _sweep_lock:
            return await self._sweep(now or utc_now())

    async def _sweep(self, now: datetime) -> SweepResult:
        result = SweepResult()
        try:
            pending = self.store.list_pending()
        except SQLAlchemyError as exc:
            logger.error("Reminder sweep aborted, could not load requests: %s", exc)
            raise SweepError(f"Failed to fetch requests: {exc}") from exc

        # Ids are read before the first commit; later attribute reads may hit the database.
        for request_id, request in [(r.id, r) for r in pending]:
            result.processed += 1
            try:
                await self._process(request, now, result)
            except SQLAlchemyError as exc:
                logger.warning("Could not process request %s: %s", request_id, exc)
                result.errors.append(f"Failed to process request {request_id}: {exc}")

        logger.info(
            "Reminder sweep done: processed=%d reminders_sent=%d expired=%d errors=%d",
            result.processed, result.reminders_sent, result.expired, len(result.errors),
        )
        return result

    async def _process(self, request: DocumentRequest, now: datetime, result: SweepResult):
        # Earlier commits in this sweep expire loaded rows, so these reads reload them.
        if request.status != STATUS_PENDING or request.reminders_stopped:
            return

        try:
            decision = evaluate_request(request, now)
        except ValueError as exc:
            result.errors.append(f"Invalid timestamp on request {request.id}: {exc}")
            return

        if decision.expired:
            await self._expire(request, result)
        elif decision.should_remind:
            await self._remind(request, now, decision.is_urgent, result)

    async def _expire(self, request: DocumentRequest, result: SweepResult):
        request_id = request.id
        client_name = request.client_name
        document_type = request.document_type
        try:
            updated = self.store.mark_expired(request_id)
        except SQLAlchemyError as exc:
            logger.warning("Could not expire request %s: %s", request_id, exc)
            result.errors.append(f"Failed to expire request {request_id}: {exc}")
            return
        if not updated:
            logger.info("Request %s left the pending state before it could expire", request_id)
            return

        result.expired += 1
        logger.info("Request %s expired (%s for %s)", request_id, document_type, client_name)
        await self._notify_broker_of_expiry(client_name, document_type)

    async def _notify_broker_of_expiry(self, client_name: str, document_type: str):
        if self.settings.broker_phone:
            outcome = await self.gateway.send_sms(
                self.settings.broker_phone, templates.expiry_sms(client_name, document_type)
            )
            if not outcome.success:
                logger.warning("Broker expiry SMS failed: %s", outcome.error)
        if self.settings.broker_email:
            email = templates.expiry_email(client_name, document_type)
            outcome = await self.gateway.send_email(self.settings.broker_email, email.subject, email.body)
            if not outcome.success:
                logger.warning("Broker expiry email failed: %s", outcome.error)

    async def _remind(self, request: DocumentRequest, now: datetime, is_urgent: bool, result: SweepResult):
        request_id = request.id
        previous_reminder = request.last_reminder_at
        upload_link = request.upload_link or self.settings.upload_link(request.upload_token)

        sms = await self.gateway.send_sms(
            request.client_phone,
            templates.reminder_sms(request.client_name, request.document_type, upload_link, is_urgent),
        )
        if not sms.success:
            result.errors.append(f"Failed to send reminder for {request_id}: {sms.error}")
            return

        if request.client_email:
            email = templates.reminder_email(request.client_name, request.document_type, upload_link, is_urgent)
            outcome = await self.gateway.send_email(request.client_email, email.subject, email.body)
            if not outcome.success:
                logger.warning("Reminder email for %s failed: %s", request_id, outcome.error)

        try:
            recorded = self.store.record_reminder(request_id, previous_reminder, now)
        except SQLAlchemyError as exc:
            result.errors.append(f"Reminder sent for {request_id} but not recorded: {exc}")
            return
        if not recorded:
            logger.warning("Request %s changed during the sweep, last_reminder_at not updated", request_id)

        result.reminders_sent += 1
        logger.info("Sent %sreminder for request %s", "urgent " if is_urgent else "", request_id)
