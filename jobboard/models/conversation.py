# jobboard/models/conversation.py
from datetime import datetime
from typing import Dict, List, Optional
from pydantic import Field, field_validator

from jobboard.models.base import CamelModel, DocumentModel


class ParticipantDetails(CamelModel):
    name: str = "Unknown"
    role: str = "user"
    avatar_url: str = ""
    email: str = ""
    title: Optional[str] = None
    company: Optional[str] = None


class Conversation(DocumentModel):
    participants: List[str]
    participant_details: Dict[str, ParticipantDetails] = Field(default_factory=dict)
    last_message: str = ""
    last_message_timestamp: Optional[datetime] = None
    unread_count: Dict[str, int] = Field(default_factory=dict)
    job_id: Optional[str] = None
    job_title: Optional[str] = None

    @field_validator("participants")
    @classmethod
    def _two_participants(cls, v: List[str]) -> List[str]:
        if len(v) != 2:
            raise ValueError(f"conversation must have exactly 2 participants, got {len(v)}")
        return v

    def other_participant(self, user_id: str) -> Optional[str]:
        for p in self.participants:
            if p != user_id:
                return p
        return None

    def includes(self, *user_ids: str) -> bool:
        return all(u in self.participants for u in user_ids)

    def unread_for(self, user_id: str) -> int:
        return self.unread_count.get(user_id, 0)


class ConversationCreate(CamelModel):
    other_user_id: str
    job_id: Optional[str] = None
