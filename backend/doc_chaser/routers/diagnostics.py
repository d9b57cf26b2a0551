from fastapi import APIRouter, Depends, HTTPException

from doc_chaser.dependencies import get_gateway, require_cron_secret
from doc_chaser.services.messaging import MessageGateway, SendOutcome

router = APIRouter(
    prefix="/messaging",
    tags=["diagnostics"],
    dependencies=[Depends(require_cron_secret)],
)


def _outcome_to_dict(outcome: SendOutcome) -> dict:
    return {
        "success": outcome.success,
        "error": outcome.error,
        "error_kind": outcome.error_kind,
        "debug": outcome.debug,
    }


@router.get("/test")
async def test_messaging(
    phone: str | None = None,
    email: str | None = None,
    gateway: MessageGateway = Depends(get_gateway),
):
    """Send a test SMS and/or email through the configured provider."""
    if not phone and not email:
        raise HTTPException(
            status_code=400,
            detail="Provide ?phone=+1234567890 or ?email=test@example.com to test",
        )

    results = {}
    if phone:
        outcome = await gateway.send_sms(
            phone, "Test message from Smart Doc Chaser. If you received this, SMS delivery is working!"
        )
        results["sms"] = _outcome_to_dict(outcome)
    if email:
        outcome = await gateway.send_email(
            email,
            "Test Email from Smart Doc Chaser",
            "This is a test email. If you received this, email delivery is working!",
        )
        results["email"] = _outcome_to_dict(outcome)

    return {"message": "Test complete", "results": results}
