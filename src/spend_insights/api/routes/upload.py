from typing import Annotated

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from spend_insights.api.dependencies import get_session
from spend_insights.api.schemas import ResetResponse, UploadResponse
from spend_insights.errors import IngestionError, SourceReadError
from spend_insights.logger import get_logger
from spend_insights.manager import SpendingSession
from spend_insights.services.ingestion import RawSource

logger = get_logger(__name__)

router = APIRouter()

ERROR_PREFIX = "Error reading files"


async def read_uploads(files: list[UploadFile]) -> list[RawSource]:
    """Read uploads one after another so the merge order matches upload order."""
    sources: list[RawSource] = []
    for index, upload in enumerate(files):
        name = upload.filename or f"upload-{index + 1}"
        try:
            content = await upload.read()
        except OSError as exc:
            raise SourceReadError(f"{name}: {exc}", source=name) from exc
        sources.append(RawSource(name=name, content=content))
    return sources


@router.post("/api/upload", response_model=UploadResponse)
async def upload_files(
    files: Annotated[list[UploadFile], File()],
    session: Annotated[SpendingSession, Depends(get_session)],
) -> UploadResponse:
    try:
        sources = await read_uploads(files)
        insights = session.load(sources)
    except IngestionError as exc:
        raise HTTPException(status_code=400, detail=f"{ERROR_PREFIX}: {exc}") from exc

    return UploadResponse(
        insights=insights,
        transaction_count=len(session.transactions),
        sources=list(session.sources),
    )


@router.post("/api/reset", response_model=ResetResponse)
async def reset_session(
    session: Annotated[SpendingSession, Depends(get_session)],
) -> ResetResponse:
    session.reset()
    return ResetResponse(status="cleared")
