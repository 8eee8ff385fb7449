# jobboard/models/profile.py
from typing import List

from pydantic import Field

from jobboard.models.base import DocumentModel
from jobboard.models.conversation import ParticipantDetails


class CandidateProfile(DocumentModel):
    name: str = "Unknown"
    email: str = ""
    title: str = "Candidate"
    avatar_url: str = ""
    phone: str = ""
    location: str = ""
    skills: List[str] = Field(default_factory=list)

    def as_participant(self) -> ParticipantDetails:
        return ParticipantDetails(name=self.name, role="candidate", avatar_url=self.avatar_url,
                                  email=self.email, title=self.title)


class UserProfile(DocumentModel):
    name: str = ""
    email: str = ""
    role: str = "user"
    avatar_url: str = ""
    company: str = ""

    def as_participant(self) -> ParticipantDetails:
        return ParticipantDetails(name=self.name or self.email or "Unknown", role=self.role,
                                  avatar_url=self.avatar_url, email=self.email, company=self.company or None)
