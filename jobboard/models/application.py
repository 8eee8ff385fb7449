# jobboard/models/application.py
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional
from pydantic import Field

from jobboard.models.base import CamelModel, DocumentModel


class ApplicationStatus(str, Enum):
    PENDING = "pending"
    REVIEWED = "reviewed"
    SHORTLISTED = "shortlisted"
    REJECTED = "rejected"
    HIRED = "hired"


class Note(CamelModel):
    text: str
    created_by: str = "Recruiter"
    created_at: Optional[datetime] = None
    is_private: bool = True


class Application(DocumentModel):
    applicant_id: str
    job_id: str
    status: ApplicationStatus = ApplicationStatus.PENDING
    resume_analysis: Optional[Dict[str, Any]] = None
    resume_data: Optional[Dict[str, Any]] = None
    cover_letter: Optional[str] = None
    notes: List[Note] = Field(default_factory=list)
    interview_scheduled: bool = False
    interview_date: Optional[datetime] = None
    interview_status: Optional[str] = None
    analysis_date: Optional[datetime] = None
    created_at: Optional[datetime] = None
    last_updated: Optional[datetime] = None


class ApplicationCreate(CamelModel):
    job_id: str
    resume_data: Optional[Dict[str, Any]] = None
    cover_letter: Optional[str] = None


class StatusUpdate(CamelModel):
    status: ApplicationStatus


class NoteCreate(CamelModel):
    text: str
    is_private: bool = True


class InterviewSchedule(CamelModel):
    # defaults to five days out when omitted
    interview_date: Optional[datetime] = None
