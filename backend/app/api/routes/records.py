"""Record Lookup — GET /records/{key} served by the retrieval pipeline.

Invariants:
    - 200 → RecordResponse JSON, X-Record-Source header names the tier that answered
    - Not found → empty 404 body
    - Every other failure flows to the global error handlers (400/503/500 envelopes)

Design Decisions:
    - Thin route: all tier logic lives in RecordRetrievalPipeline (ADR: routes never contain business logic)
"""

from fastapi import APIRouter, Depends, Response, status

from app.api.dependencies import get_pipeline
from app.core.errors import RecordNotFoundError
from app.schemas.record import RecordResponse
from app.services.retrieval_pipeline import RecordRetrievalPipeline

router = APIRouter(prefix="/records", tags=["records"])

SOURCE_HEADER = "X-Record-Source"


@router.get(
    "/{key}",
    response_model=RecordResponse,
    responses={404: {"description": "Record not found (empty body)"}},
)
async def get_record(
    key: str,
    response: Response,
    pipeline: RecordRetrievalPipeline = Depends(get_pipeline),
):
    """Look up a record by name (cache → store → external source)."""
    try:
        result = await pipeline.lookup(key)
    except RecordNotFoundError:
        return Response(status_code=status.HTTP_404_NOT_FOUND)
    response.headers[SOURCE_HEADER] = result.source.value
    return RecordResponse.from_record(result.record)
