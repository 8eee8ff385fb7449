# jobboard/repositories/jobs.py
from typing import Optional

from jobboard.db.mongo import get_db
from jobboard.models.job import Job, JobCreate, JobStatus
from jobboard.utils.documents import id_filter, utcnow

JOBS_COLLECTION = "jobs"


async def create_job(recruiter_id: str, obj: JobCreate) -> Job:
    db = get_db()
    job = Job(recruiter_id=recruiter_id, status=JobStatus.ACTIVE, created_at=utcnow(),
              **obj.model_dump())
    res = await db[JOBS_COLLECTION].insert_one(job.to_doc())
    job.id = str(res.inserted_id)
    return job


async def get_job(job_id: str) -> Optional[Job]:
    db = get_db()
    doc = await db[JOBS_COLLECTION].find_one(id_filter(job_id))
    return Job.from_doc(doc) if doc else None


async def set_status(job_id: str, status: JobStatus) -> bool:
    db = get_db()
    res = await db[JOBS_COLLECTION].update_one(id_filter(job_id), {"$set": {"status": JobStatus(status).value}})
    return res.matched_count > 0
