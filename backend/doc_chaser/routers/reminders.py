from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse

from doc_chaser.dependencies import get_scheduler, require_cron_secret
from doc_chaser.errors import SweepError, SweepInProgressError
from doc_chaser.schemas.reminder import SweepResponse, SweepResultResponse
from doc_chaser.services.reminder_service import ReminderScheduler, SweepResult

router = APIRouter(
    prefix="/reminders",
    tags=["reminders"],
    dependencies=[Depends(require_cron_secret)],
)


@router.get("/run", response_model=SweepResponse)
async def run_reminders(scheduler: ReminderScheduler = Depends(get_scheduler)):
    """Run one reminder sweep. Meant to be called by an external cron."""
    try:
        result = await scheduler.run_sweep()
    except SweepInProgressError as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    except SweepError as exc:
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": str(exc), "results": asdict(SweepResult())},
        )

    if result.processed == 0:
        message = "No pending requests to process"
    else:
        message = f"Processed {result.processed} requests"
    return SweepResponse(success=True, message=message, results=SweepResultResponse(**asdict(result)))
