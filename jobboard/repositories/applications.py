# jobboard/repositories/applications.py
from datetime import datetime
from typing import Any, Dict, List, Optional

from jobboard.db.mongo import get_db
from jobboard.models.application import Application, ApplicationStatus, Note
from jobboard.utils.documents import id_filter, utcnow

APPLICATIONS_COLLECTION = "applications"


async def create_application(applicant_id: str, job_id: str, resume_data: Optional[Dict[str, Any]] = None,
                             cover_letter: Optional[str] = None) -> Application:
    db = get_db()
    app_doc = Application(
        applicant_id=applicant_id,
        job_id=job_id,
        status=ApplicationStatus.PENDING,
        resume_data=resume_data,
        cover_letter=cover_letter,
        notes=[],
        created_at=utcnow(),
    )
    res = await db[APPLICATIONS_COLLECTION].insert_one(app_doc.to_doc())
    app_doc.id = str(res.inserted_id)
    return app_doc


async def get_application(application_id: str) -> Optional[Application]:
    db = get_db()
    doc = await db[APPLICATIONS_COLLECTION].find_one(id_filter(application_id))
    return Application.from_doc(doc) if doc else None


async def list_for_job(job_id: str) -> List[Application]:
    db = get_db()
    cur = db[APPLICATIONS_COLLECTION].find({"jobId": job_id})
    return [Application.from_doc(d) async for d in cur]


async def set_status(application_id: str, status: ApplicationStatus) -> None:
    # unconstrained: any status may follow any other
    db = get_db()
    await db[APPLICATIONS_COLLECTION].update_one(
        id_filter(application_id),
        {"$set": {"status": ApplicationStatus(status).value, "lastUpdated": utcnow()}},
    )


async def add_note(application_id: str, note: Note) -> None:
    db = get_db()
    await db[APPLICATIONS_COLLECTION].update_one(
        id_filter(application_id),
        {"$push": {"notes": note.model_dump(by_alias=True)}, "$set": {"lastUpdated": utcnow()}},
    )


async def schedule_interview(application_id: str, interview_date: datetime) -> None:
    db = get_db()
    await db[APPLICATIONS_COLLECTION].update_one(
        id_filter(application_id),
        {"$set": {
            "interviewScheduled": True,
            "interviewDate": interview_date,
            "interviewStatus": "scheduled",
            "lastUpdated": utcnow(),
        }},
    )


async def save_analysis(application_id: str, analysis: Dict[str, Any]) -> None:
    db = get_db()
    now = utcnow()
    await db[APPLICATIONS_COLLECTION].update_one(
        id_filter(application_id),
        {"$set": {"resumeAnalysis": analysis, "analysisDate": now, "lastAnalyzed": now}},
    )
