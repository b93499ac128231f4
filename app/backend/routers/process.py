"""
Router for the job processing endpoint.

Handles:
- Running the extraction pipeline for a queued job
"""

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from ..models import ProcessErrorResponse, ProcessRequest, ProcessResponse
from ..services.orchestrator import JobOrchestrator, get_orchestrator

logger = logging.getLogger(__name__)

router = APIRouter(prefix="", tags=["process"])


@router.post(
    "/process",
    response_model=ProcessResponse,
    responses={500: {"model": ProcessErrorResponse}},
)
async def process_job(
    request: ProcessRequest,
    orchestrator: JobOrchestrator = Depends(get_orchestrator),
):
    """
    Process a credit report for a job.

    Downloads the PDF, extracts credit items and records the job's final
    status. Returns item totals on success, or the error message with
    HTTP 500 when the job failed.
    """
    outcome = await orchestrator.run(request)

    if not outcome.success:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=ProcessErrorResponse(error=outcome.error or "Processing failed").model_dump(),
        )

    return ProcessResponse(
        job_id=outcome.job_id,
        total_items=outcome.summary.total_items,
        negative_items=outcome.summary.negative_items,
    )
