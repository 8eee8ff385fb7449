# jobboard/api/v1/jobs.py
from fastapi import APIRouter, Depends, HTTPException

from jobboard.api.v1.auth import get_current_session
from jobboard.models.job import JobCreate, JobStatus, JobStatusUpdate
from jobboard.repositories import jobs as jobs_repo
from jobboard.repositories.applications import list_for_job
from jobboard.services import notifications
from jobboard.services.auth import Session

router = APIRouter()


@router.post("/jobs", status_code=201)
async def create_job_route(payload: JobCreate, session: Session = Depends(get_current_session)):
    if not session.is_recruiter:
        raise HTTPException(status_code=403, detail="Only recruiters can post jobs")
    job = await jobs_repo.create_job(session.user_id, payload)
    return job.model_dump(mode="json", by_alias=True)


@router.get("/jobs/{job_id}")
async def get_job_route(job_id: str, session: Session = Depends(get_current_session)):
    job = await jobs_repo.get_job(job_id)
    if not job:
        raise HTTPException(status_code=404, detail="Job not found")
    return job.model_dump(mode="json", by_alias=True)


@router.patch("/jobs/{job_id}/status")
async def update_job_status_route(job_id: str, payload: JobStatusUpdate,
                                  session: Session = Depends(get_current_session)):
    job = await jobs_repo.get_job(job_id)
    if not job:
        raise HTTPException(status_code=404, detail="Job not found")
    if job.recruiter_id != session.user_id:
        raise HTTPException(status_code=403, detail="You don't have permission to update this job")
    await jobs_repo.set_status(job_id, payload.status)

    notified = 0
    if payload.status == JobStatus.CLOSED.value and job.status != JobStatus.CLOSED.value:
        for app_doc in await list_for_job(job_id):
            if await notifications.notify_job_update(app_doc.applicant_id, job_id, job.title or "Position",
                                                     job.company or "Company", "closed"):
                notified += 1
    return {"updated": True, "status": payload.status, "notified": notified}
