from pydantic import BaseModel


class SweepResultResponse(BaseModel):
    processed: int
    reminders_sent: int
    expired: int
    errors: list[str]


class SweepResponse(BaseModel):
    success: bool
    message: str
    results: SweepResultResponse
