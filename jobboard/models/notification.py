# jobboard/models/notification.py
from datetime import datetime
from enum import Enum
from typing import List, Optional
from pydantic import Field

from jobboard.models.base import CamelModel, DocumentModel


class NotificationType(str, Enum):
    # applicant side
    APPLICATION_VIEWED = "application_viewed"
    STATUS_CHANGE = "status_change"
    MESSAGE = "message"
    INTERVIEW = "interview"
    JOB_UPDATE = "job_update"
    SYSTEM = "system"
    # recruiter side
    NEW_APPLICATION = "new_application"
    APPLICATION_UPDATE = "application_update"
    CANDIDATE_MESSAGE = "candidate_message"
    JOB_STATS = "job_stats"


class Action(CamelModel):
    label: str
    url: str


class NotificationCreate(CamelModel):
    user_id: str
    title: str
    message: str
    type: NotificationType
    related_id: Optional[str] = None
    job_title: Optional[str] = None
    company_name: Optional[str] = None
    candidate_name: Optional[str] = None
    actions: List[Action] = Field(default_factory=list)


class Notification(NotificationCreate, DocumentModel):
    created_at: Optional[datetime] = None
    read: bool = False


class NotificationUpdate(CamelModel):
    read: Optional[bool] = None
    title: Optional[str] = None
    message: Optional[str] = None
