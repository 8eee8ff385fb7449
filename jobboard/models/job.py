# jobboard/models/job.py
from datetime import datetime
from enum import Enum
from typing import Any, List, Optional
from pydantic import Field

from jobboard.models.base import CamelModel, DocumentModel


class JobStatus(str, Enum):
    ACTIVE = "active"
    PAUSED = "paused"
    CLOSED = "closed"


class Job(DocumentModel):
    recruiter_id: str
    title: str = ""
    company: str = ""
    status: JobStatus = JobStatus.ACTIVE
    skills: List[str] = Field(default_factory=list)
    salary: Optional[Any] = None
    description: str = ""
    requirements: Optional[Any] = None
    location: str = ""
    employment_type: Optional[str] = None
    experience_level: Optional[str] = None
    remote: bool = False
    benefits: Optional[Any] = None
    visa_sponsorship: bool = False
    created_at: Optional[datetime] = None

    def match_details(self) -> dict:
        """Job fields sent to the resume match service."""
        return {
            "title": self.title,
            "description": self.description,
            "requirements": self.requirements,
            "skills": self.skills,
            "employmentType": self.employment_type,
            "experienceLevel": self.experience_level,
            "benefits": self.benefits,
            "location": self.location,
            "remote": self.remote,
            "salary": self.salary,
            "visaSponsorship": self.visa_sponsorship,
        }


class JobCreate(CamelModel):
    title: str
    company: str
    skills: List[str] = Field(default_factory=list)
    salary: Optional[Any] = None
    description: str = ""
    requirements: Optional[Any] = None
    location: str = ""
    employment_type: Optional[str] = None
    experience_level: Optional[str] = None
    remote: bool = False


class JobStatusUpdate(CamelModel):
    status: JobStatus
