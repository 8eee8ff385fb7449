# jobboard/api/v1/applications.py
import logging
from datetime import timedelta

from fastapi import APIRouter, Depends, HTTPException

from jobboard.api.v1.auth import get_current_session
from jobboard.models.application import Application, ApplicationCreate, InterviewSchedule, Note, NoteCreate, StatusUpdate
from jobboard.models.job import Job
from jobboard.repositories import applications as applications_repo
from jobboard.repositories.jobs import get_job
from jobboard.repositories.profiles import resolve_participant
from jobboard.services import notifications
from jobboard.services.auth import Session
from jobboard.services.resume_match import ResumeMatchError, analyze_match
from jobboard.utils.documents import utcnow

logger = logging.getLogger(__name__)

router = APIRouter()


def _dump(app_doc: Application):
    return app_doc.model_dump(mode="json", by_alias=True)


async def _load(application_id: str, session: Session):
    """Application and its job, or 404/403."""
    app_doc = await applications_repo.get_application(application_id)
    if not app_doc:
        raise HTTPException(status_code=404, detail="Application not found")
    job = await get_job(app_doc.job_id)
    recruiter_id = job.recruiter_id if job else None
    if session.user_id not in (recruiter_id, app_doc.applicant_id):
        raise HTTPException(status_code=403, detail="You don't have permission to view this application")
    return app_doc, job


async def _load_as_recruiter(application_id: str, session: Session):
    """Like _load, but only the recruiter who owns the job may act."""
    app_doc, job = await _load(application_id, session)
    if job is None or job.recruiter_id != session.user_id:
        raise HTTPException(status_code=403, detail="Only the job's recruiter can update this application")
    return app_doc, job


def _job_labels(job: Job):
    if job is None:
        return "Position", "Company"
    return job.title or "Position", job.company or "Company"


@router.post("/applications", status_code=201)
async def create_application_route(payload: ApplicationCreate, session: Session = Depends(get_current_session)):
    job = await get_job(payload.job_id)
    if not job:
        raise HTTPException(status_code=404, detail="Job not found")
    app_doc = await applications_repo.create_application(
        session.user_id, payload.job_id, resume_data=payload.resume_data, cover_letter=payload.cover_letter,
    )
    candidate = await resolve_participant(session.user_id)
    candidate_name = candidate.name if candidate else (session.display_name or "A candidate")
    await notifications.notify_new_application(job.recruiter_id, app_doc.id, job.id, job.title or "Position",
                                               candidate_name)
    return _dump(app_doc)


@router.get("/applications/{application_id}")
async def get_application_route(application_id: str, session: Session = Depends(get_current_session)):
    app_doc, job = await _load(application_id, session)
    if job is None or job.recruiter_id != session.user_id:
        app_doc.notes = [n for n in app_doc.notes if not n.is_private]
    return _dump(app_doc)


@router.patch("/applications/{application_id}/status")
async def update_status_route(application_id: str, payload: StatusUpdate,
                              session: Session = Depends(get_current_session)):
    app_doc, job = await _load_as_recruiter(application_id, session)
    if app_doc.status == payload.status:
        return {"updated": False, "status": app_doc.status}
    await applications_repo.set_status(application_id, payload.status)
    job_title, company = _job_labels(job)
    await notifications.notify_status_change(app_doc.applicant_id, application_id, job_title, company,
                                             payload.status)
    return {"updated": True, "status": payload.status}


@router.post("/applications/{application_id}/notes", status_code=201)
async def add_note_route(application_id: str, payload: NoteCreate, session: Session = Depends(get_current_session)):
    if not payload.text.strip():
        raise HTTPException(status_code=400, detail="Note text is empty")
    await _load_as_recruiter(application_id, session)
    note = Note(text=payload.text.strip(), created_by=session.display_name or "Recruiter",
                created_at=utcnow(), is_private=payload.is_private)
    await applications_repo.add_note(application_id, note)
    return note.model_dump(mode="json", by_alias=True)


@router.post("/applications/{application_id}/interview")
async def schedule_interview_route(application_id: str, payload: InterviewSchedule,
                                   session: Session = Depends(get_current_session)):
    app_doc, job = await _load_as_recruiter(application_id, session)
    when = payload.interview_date or (utcnow() + timedelta(days=5))
    await applications_repo.schedule_interview(application_id, when)
    job_title, company = _job_labels(job)
    await notifications.notify_interview(app_doc.applicant_id, application_id, job_title, company, when)
    return {"interviewScheduled": True, "interviewDate": when.isoformat()}


@router.post("/applications/{application_id}/analyze")
async def analyze_application_route(application_id: str, session: Session = Depends(get_current_session)):
    app_doc, job = await _load_as_recruiter(application_id, session)
    if not app_doc.resume_data:
        raise HTTPException(status_code=400, detail="Application has no resume data")
    try:
        analysis = await analyze_match(app_doc.resume_data, job.match_details())
    except ResumeMatchError as exc:
        logger.error("Resume match failed for application %s: %s", application_id, exc)
        raise HTTPException(status_code=502, detail="Failed to analyze resume match") from exc
    await applications_repo.save_analysis(application_id, analysis)
    return {"resumeAnalysis": analysis}
