"""Record Summary — GET /summary/{key}, a one-line description of a looked-up record."""

import logging

from fastapi import APIRouter, Depends

from app.api.dependencies import get_pipeline
from app.schemas.record import SummaryResponse
from app.services.retrieval_pipeline import RecordRetrievalPipeline

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/summary", tags=["summary"])


@router.get("/{key}", response_model=SummaryResponse)
async def get_summary(
    key: str, pipeline: RecordRetrievalPipeline = Depends(get_pipeline),
):
    """Summarize a record; errors (incl. 404) use the standard envelope."""
    result = await pipeline.lookup(key)
    summary = SummaryResponse.from_record(result.record)
    logger.info(
        f"Summary generated: {summary.info}",
        extra={"record_key": result.record.name, "tier": result.source.value},
    )
    return summary
