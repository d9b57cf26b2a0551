"""
Message text for client and broker notifications.

Every builder returns non-empty text, even when the upload link is missing.
Channel length limits are applied by the gateway, not here.
"""
from typing import NamedTuple

LINK_PLACEHOLDER = "[link not available]"
SHORT_LINK_PLACEHOLDER = "[link]"


class EmailTemplate(NamedTuple):
    subject: str
    body: str


def _first_name(client_name: str) -> str:
    parts = client_name.split()
    return parts[0] if parts else "there"


def client_sms(client_name: str, document_type: str, upload_link: str | None) -> str:
    first_name = _first_name(client_name)
    if upload_link:
        return f"Hi {first_name}! Please upload your {document_type}: {upload_link}"
    return f"Hi {first_name}! Your broker needs your {document_type}. Check your email for the upload link."


def client_email(client_name: str, document_type: str, upload_link: str | None) -> EmailTemplate:
    first_name = _first_name(client_name)
    body = (
        f"Hi {first_name},\n\n"
        "Hope you're doing well! Your insurance broker needs a quick document from you.\n\n"
        f"Document needed: {document_type}\n\n"
        "Uploading is easy - just click the link below:\n"
        f"{upload_link or LINK_PLACEHOLDER}\n\n"
        "This only takes a minute and helps us get your coverage sorted faster.\n\n"
        "Thanks so much!\n"
        "Your Insurance Team"
    )
    return EmailTemplate(subject=f"Action Needed: {document_type}", body=body)


def broker_sms(client_name: str, document_type: str) -> str:
    return f"Document uploaded! {client_name} submitted their {document_type}."


def broker_email(client_name: str, document_type: str, tracker_url: str) -> EmailTemplate:
    body = (
        f"{client_name} has uploaded their {document_type}.\n\n"
        f"View all requests: {tracker_url}\n\n"
        "- Smart Doc Chaser"
    )
    return EmailTemplate(subject=f"Document Received: {document_type} from {client_name}", body=body)


def reminder_sms(client_name: str, document_type: str, upload_link: str | None, is_urgent: bool = False) -> str:
    first_name = _first_name(client_name)
    link = upload_link or SHORT_LINK_PLACEHOLDER
    if is_urgent:
        return f"Hi {first_name}! Quick reminder - we still need your {document_type} soon. Upload here: {link}"
    return f"Hi {first_name}! Friendly reminder - we still need your {document_type}. Upload here: {link}"


def reminder_email(client_name: str, document_type: str, upload_link: str | None,
                   is_urgent: bool = False) -> EmailTemplate:
    first_name = _first_name(client_name)
    prefix = "Time Sensitive: " if is_urgent else "Friendly Reminder: "
    if is_urgent:
        opener = "Just a quick heads up - the deadline for your document is coming up soon!"
    else:
        opener = "Hope you're having a great day! Just a friendly nudge."
    body = (
        f"Hi {first_name},\n\n"
        f"{opener}\n\n"
        f"We still need your {document_type} to move forward with your coverage.\n\n"
        "Click here to upload (takes less than a minute):\n"
        f"{upload_link or LINK_PLACEHOLDER}\n\n"
        "If you have any questions, just reply to this email.\n\n"
        "Thanks!\n"
        "Your Insurance Team"
    )
    return EmailTemplate(subject=f"{prefix}{document_type} still needed", body=body)


def expiry_sms(client_name: str, document_type: str) -> str:
    return f"Request expired: {client_name}'s {document_type} was not uploaded by deadline."


def expiry_email(client_name: str, document_type: str) -> EmailTemplate:
    return EmailTemplate(
        subject=f"Request Expired: {document_type}",
        body=f"{client_name}'s {document_type} request has expired. The deadline has passed.",
    )
