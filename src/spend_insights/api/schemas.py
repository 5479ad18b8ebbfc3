from pydantic import BaseModel

from spend_insights.models import Insights


class UploadResponse(BaseModel):
    insights: Insights | None
    transaction_count: int
    sources: list[str]


class ResetResponse(BaseModel):
    status: str
