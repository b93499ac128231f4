"""
Router for job status lookups.
"""

from fastapi import APIRouter, Depends, HTTPException, status

from ..models import JobResponse
from ..services.repository import JobRepository, get_repository

router = APIRouter(prefix="/jobs", tags=["jobs"])


@router.get("/{job_id}", response_model=JobResponse)
async def get_job(
    job_id: str,
    repository: JobRepository = Depends(get_repository),
) -> JobResponse:
    """Get the status, timestamps and result summary of a job."""
    job = repository.get_job(job_id)
    if job is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Job {job_id} not found",
        )

    return JobResponse(
        id=job.id,
        profile_id=job.profile_id,
        file_path=job.file_path,
        file_name=job.file_name,
        status=job.status.value,
        started_at=job.started_at.isoformat() if job.started_at else None,
        completed_at=job.completed_at.isoformat() if job.completed_at else None,
        error_message=job.error_message,
        result_json=job.result_json,
    )
