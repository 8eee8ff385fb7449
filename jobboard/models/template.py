# jobboard/models/template.py
from datetime import datetime
from typing import Optional

from jobboard.models.base import CamelModel, DocumentModel


class MessageTemplate(DocumentModel):
    user_id: Optional[str] = None
    name: str = ""
    content: str = ""
    created_at: Optional[datetime] = None

    def usable_by(self, user_id: str) -> bool:
        """Defaults are shared; stored templates belong to their author only."""
        return self.user_id is None or self.user_id == user_id


class TemplateCreate(CamelModel):
    name: str
    content: str


# served when a user has no templates of their own
DEFAULT_TEMPLATES = [
    MessageTemplate(
        id="default-1",
        name="Introduction",
        content=(
            "Hi [Name],\n\nI'm [Your Name] from [Company]. I came across your profile and I'm impressed "
            "with your background. I'd love to discuss potential opportunities with you.\n\n"
            "Let me know if you're interested in chatting further.\n\nBest,\n[Your Name]"
        ),
    ),
    MessageTemplate(
        id="default-2",
        name="Interview Invitation",
        content=(
            "Hi [Name],\n\nThank you for your interest in the [Position] role at [Company]. I'd like to "
            "invite you for an interview to discuss the opportunity further.\n\nPlease let me know your "
            "availability for the next week, and I'll schedule a time that works for both of us.\n\n"
            "Looking forward to speaking with you!\n\nBest regards,\n[Your Name]"
        ),
    ),
    MessageTemplate(
        id="default-3",
        name="Follow Up",
        content=(
            "Hi [Name],\n\nI wanted to follow up on our previous conversation about the [Position] role "
            "at [Company]. Have you had a chance to think about the opportunity?\n\nI'm available to "
            "answer any questions you might have.\n\nBest,\n[Your Name]"
        ),
    ),
]
