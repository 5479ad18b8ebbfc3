from typing import Annotated

from fastapi import APIRouter, Depends

from spend_insights.api.dependencies import get_session
from spend_insights.manager import SpendingSession
from spend_insights.models import Insights, Transaction

router = APIRouter()


@router.get("/api/insights", response_model=Insights | None)
async def get_insights(
    session: Annotated[SpendingSession, Depends(get_session)],
) -> Insights | None:
    return session.insights


@router.get("/api/transactions", response_model=list[Transaction])
async def get_transactions(
    session: Annotated[SpendingSession, Depends(get_session)],
) -> list[Transaction]:
    return list(session.transactions)


@router.get("/api/categories")
async def get_categories(
    session: Annotated[SpendingSession, Depends(get_session)],
) -> list[str]:
    if session.insights is None:
        return []
    return session.insights.distinct_categories
