# jobboard/services/notifications.py
"""
Builders for the notifications raised by recruiter/applicant actions.

Each ``notify_*`` helper writes one notification document. Delivery is
best-effort: failures are logged and ``None`` is returned so the action that
triggered the notification is never aborted.
"""
import logging
from datetime import datetime
from typing import List, Optional

from jobboard.models.notification import Action, Notification, NotificationCreate, NotificationType
from jobboard.repositories.notifications import create_notification

logger = logging.getLogger(__name__)


async def notify(obj: NotificationCreate) -> Optional[Notification]:
    try:
        return await create_notification(obj)
    except Exception:
        logger.exception("Failed to create %s notification for %s", obj.type, obj.user_id)
        return None


def _actions(*pairs) -> List[Action]:
    return [Action(label=label, url=url) for label, url in pairs]


async def notify_status_change(user_id: str, application_id: str, job_title: str, company_name: str, status: str):
    title = "Application Status Updated"
    message = f'Your application for {job_title} at {company_name} has been updated to "{status}".'
    if status == "shortlisted":
        title = "Application Shortlisted"
        message = f"Congratulations! Your application for {job_title} at {company_name} has been shortlisted."
    elif status == "rejected":
        title = "Application Not Selected"
        message = f"We're sorry, your application for {job_title} at {company_name} was not selected at this time."
    elif status == "hired":
        title = "Offer Extended"
        message = f"Congratulations! {company_name} would like to extend an offer for the {job_title} position."
    return await notify(NotificationCreate(
        user_id=user_id, title=title, message=message, type=NotificationType.STATUS_CHANGE,
        related_id=application_id, job_title=job_title, company_name=company_name,
        actions=_actions(("View Application", f"/applicant/applications/{application_id}")),
    ))


async def notify_application_viewed(user_id: str, application_id: str, job_title: str, company_name: str,
                                    recruiter_name: str):
    return await notify(NotificationCreate(
        user_id=user_id, title="Application Viewed",
        message=f"{recruiter_name} from {company_name} has viewed your application.",
        type=NotificationType.APPLICATION_VIEWED, related_id=application_id,
        job_title=job_title, company_name=company_name,
        actions=_actions(("View Application", f"/applicant/applications/{application_id}")),
    ))


async def notify_interview(user_id: str, application_id: str, job_title: str, company_name: str,
                           interview_date: datetime):
    when = interview_date.strftime("%A, %B %d, %Y at %I:%M %p")
    return await notify(NotificationCreate(
        user_id=user_id, title="Interview Invitation",
        message=f"You've been invited to interview for {job_title} at {company_name} on {when}.",
        type=NotificationType.INTERVIEW, related_id=application_id,
        job_title=job_title, company_name=company_name,
        actions=_actions(
            ("View Details", f"/applicant/interviews/{application_id}"),
            ("Accept", f"/applicant/interviews/{application_id}/accept"),
        ),
    ))


async def notify_recruiter_message(user_id: str, conversation_id: str, job_title: str, company_name: str,
                                   recruiter_name: str):
    return await notify(NotificationCreate(
        user_id=user_id, title="New Message",
        message=(f"{recruiter_name} from {company_name} has sent you a message "
                 f"regarding your application for {job_title}."),
        type=NotificationType.MESSAGE, related_id=conversation_id,
        job_title=job_title, company_name=company_name,
        actions=_actions(("View Message", f"/applicant/messages/{conversation_id}")),
    ))


async def notify_candidate_message(user_id: str, conversation_id: str, job_title: str, candidate_name: str):
    return await notify(NotificationCreate(
        user_id=user_id, title="New Message",
        message=f"{candidate_name} has sent you a message regarding their application for {job_title}.",
        type=NotificationType.CANDIDATE_MESSAGE, related_id=conversation_id,
        job_title=job_title, candidate_name=candidate_name,
        actions=_actions(("View Message", f"/recruiter/messages/{conversation_id}")),
    ))


async def notify_job_update(user_id: str, job_id: str, job_title: str, company_name: str, update_type: str):
    title = "Job Posting Updated"
    message = f"The job posting for {job_title} at {company_name} has been updated."
    if update_type == "closed":
        title = "Job Posting Closed"
        message = f"The job posting for {job_title} at {company_name} has been closed."
    elif update_type == "filled":
        title = "Job Position Filled"
        message = f"The {job_title} position at {company_name} has been filled."
    return await notify(NotificationCreate(
        user_id=user_id, title=title, message=message, type=NotificationType.JOB_UPDATE,
        related_id=job_id, job_title=job_title, company_name=company_name,
        actions=_actions(("View Job", f"/applicant/jobs/{job_id}")),
    ))


async def notify_new_application(user_id: str, application_id: str, job_id: str, job_title: str,
                                 candidate_name: str):
    return await notify(NotificationCreate(
        user_id=user_id, title="New Application",
        message=f"{candidate_name} has applied for the {job_title} position.",
        type=NotificationType.NEW_APPLICATION, related_id=application_id,
        job_title=job_title, candidate_name=candidate_name,
        actions=_actions(
            ("View Application", f"/recruiter/applications/{application_id}"),
            ("View Job", f"/recruiter/jobs/{job_id}"),
        ),
    ))
