# jobboard/models/message.py
from datetime import datetime
from typing import Optional

from jobboard.models.base import CamelModel, DocumentModel


class Message(DocumentModel):
    conversation_id: str
    sender_id: str
    receiver_id: str
    content: str = ""
    timestamp: Optional[datetime] = None
    read: bool = False
    attachment_url: Optional[str] = None
    attachment_type: Optional[str] = None
    attachment_name: Optional[str] = None


class MessageCreate(CamelModel):
    content: str


class TemplateApply(CamelModel):
    template_id: str
