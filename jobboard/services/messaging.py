# jobboard/services/messaging.py
"""
Messaging view-models.

``ConversationThread`` mediates between one open conversation and the store:
it subscribes a live query over the thread's messages, keeps the local UI
state (draft, template selection, banner, scroll anchor) and issues the
writes for sending, attachments and read-state. ``ConversationList`` does the
same for the signed-in user's conversation list and creates conversations on
first contact.

Store failures are logged and surface as a generic ``banner``; nothing is
retried, queued or rolled back. Messages are never appended optimistically:
a sent message shows up once the live query re-delivers it.
"""
import logging
import mimetypes
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

from jobboard.models.conversation import Conversation, ParticipantDetails
from jobboard.models.job import Job
from jobboard.models.message import Message
from jobboard.models.template import MessageTemplate
from jobboard.repositories import conversations as conversations_repo
from jobboard.repositories import jobs as jobs_repo
from jobboard.repositories import messages as messages_repo
from jobboard.repositories import profiles as profiles_repo
from jobboard.services import notifications
from jobboard.services import storage
from jobboard.services.auth import Session
from jobboard.services.live_query import LiveQuery

logger = logging.getLogger(__name__)

SEND_FAILED = "Failed to send message"
LOAD_FAILED = "Failed to load conversation"

Listener = Callable[[Any], Awaitable[None]]


def fill_template(content: str, participant_name: Optional[str], sender_name: Optional[str],
                  company: Optional[str], position: Optional[str], recruiter_side: bool = True) -> str:
    """
    Substitute the four template placeholders. Unknown placeholders are left as-is.
    Fallbacks depend on who is writing: a recruiter addresses a candidate, a
    candidate addresses a recruiter.
    """
    if recruiter_side:
        name_default, sender_default, company_default = "Candidate", "Recruiter", "Our company"
    else:
        name_default, sender_default, company_default = "Recruiter", "Candidate", "the company"
    first_name = (participant_name or "").split(" ")[0] or name_default
    content = content.replace("[Name]", first_name)
    content = content.replace("[Your Name]", sender_name or sender_default)
    content = content.replace("[Company]", company or company_default)
    content = content.replace("[Position]", position or "the position")
    return content


def attachment_type_of(filename: str, content_type: Optional[str]) -> str:
    """MIME top-level type: 'image', 'application', 'text', ..."""
    mime = content_type or mimetypes.guess_type(filename)[0] or "application/octet-stream"
    return mime.split("/")[0]


class ConversationThread:
    def __init__(self, session: Session, conversation_id: str):
        self.session = session
        self.conversation_id = conversation_id
        self.conversation: Optional[Conversation] = None
        self.participant_id: Optional[str] = None
        self.participant: Optional[ParticipantDetails] = None
        self.job: Optional[Job] = None
        self.messages: List[Message] = []
        self.draft = ""
        self.selected_template_id: Optional[str] = None
        self.banner: Optional[str] = None
        self.scroll_anchor: Optional[str] = None
        self.loading = True
        self.not_found = False
        self.forbidden = False
        self._live: Optional[LiveQuery] = None
        self._listeners: List[Listener] = []

    def add_listener(self, listener: Listener) -> None:
        self._listeners.append(listener)

    async def _emit(self) -> None:
        for listener in list(self._listeners):
            await listener(self)

    def _placeholder_participant(self) -> ParticipantDetails:
        if self.session.is_recruiter:
            return ParticipantDetails(name="Candidate", role="candidate")
        return ParticipantDetails(name="Recruiter", role="recruiter")

    async def open(self, subscribe: bool = True) -> bool:
        """
        Load the conversation, its other participant and linked job, then
        attach the live query over the thread's messages. Returns False when
        the thread cannot be shown (missing, not a participant, store error).
        """
        try:
            self.conversation = await conversations_repo.get_conversation(self.conversation_id)
        except Exception:
            logger.exception("Error fetching conversation %s", self.conversation_id)
            self.banner = LOAD_FAILED
            self.loading = False
            return False

        if self.conversation is None:
            self.not_found = True
            self.loading = False
            return False
        if self.session.user_id not in self.conversation.participants:
            self.forbidden = True
            self.loading = False
            return False

        self.participant_id = self.conversation.other_participant(self.session.user_id)
        try:
            self.participant = await profiles_repo.resolve_participant(self.participant_id)
        except Exception:
            logger.exception("Error fetching participant %s", self.participant_id)
        if self.participant is None:
            self.participant = (self.conversation.participant_details.get(self.participant_id)
                                or self._placeholder_participant())

        if self.conversation.job_id:
            try:
                self.job = await jobs_repo.get_job(self.conversation.job_id)
            except Exception:
                logger.exception("Error fetching job %s", self.conversation.job_id)
        self.loading = False

        query, sort = messages_repo.thread_query(self.conversation_id)
        self._live = LiveQuery(messages_repo.MESSAGES_COLLECTION, query, sort, self._on_docs)
        try:
            if subscribe:
                await self._live.start()
            else:
                await self._live.refresh(force=True)
        except Exception:
            logger.exception("Error fetching messages for %s", self.conversation_id)
            self.banner = LOAD_FAILED
        return True

    async def _on_docs(self, docs: List[Dict[str, Any]]) -> None:
        await self.on_messages_pushed([Message.from_doc(d) for d in docs])

    async def on_messages_pushed(self, snapshot: List[Message]) -> None:
        """Replace the local list with the snapshot and mark incoming unread messages read."""
        self.messages = list(snapshot)

        me = self.session.user_id
        unread = [m for m in self.messages if m.receiver_id == me and not m.read]
        for m in unread:
            try:
                await messages_repo.mark_read(m.id)
            except Exception:
                logger.exception("Error marking message %s as read", m.id)
        if unread:
            try:
                await conversations_repo.reset_unread(self.conversation_id, me)
            except Exception:
                logger.exception("Error updating unread count for %s", self.conversation_id)

        self.scroll_anchor = self.messages[-1].id if self.messages else None
        await self._emit()

    def _can_send(self) -> bool:
        return self.conversation is not None and self.participant_id is not None

    async def _after_send(self, receiver_id: str, last_message: str) -> None:
        await conversations_repo.record_message(self.conversation_id, receiver_id, last_message)
        await self._notify_receiver(receiver_id)

    async def send(self, text: Optional[str] = None) -> bool:
        content = self.draft if text is None else text
        if not content or not content.strip() or not self._can_send():
            return False
        content = content.strip()
        try:
            await messages_repo.create_message(self.conversation_id, self.session.user_id,
                                               self.participant_id, content)
            await self._after_send(self.participant_id, content)
        except Exception:
            logger.exception("Error sending message to %s", self.conversation_id)
            self.banner = SEND_FAILED
            return False
        self.draft = ""
        self.banner = None
        return True

    async def send_with_attachment(self, data: bytes, filename: str, content_type: Optional[str] = None,
                                   caption: str = "") -> bool:
        if not self._can_send():
            return False
        filename = storage.safe_filename(filename)
        content = caption.strip() if caption and caption.strip() else f"Sent an attachment: {filename}"
        kind = attachment_type_of(filename, content_type)
        try:
            key = storage.attachment_key(self.conversation_id, filename)
            url = await storage.store_bytes(key, data, content_type or "application/octet-stream")
            await messages_repo.create_message(
                self.conversation_id, self.session.user_id, self.participant_id, content,
                attachment_url=url, attachment_type=kind, attachment_name=filename,
            )
            await self._after_send(self.participant_id, content)
        except Exception:
            logger.exception("Error uploading attachment to %s", self.conversation_id)
            self.banner = SEND_FAILED
            return False
        self.draft = ""
        self.banner = None
        return True

    def apply_template(self, template: Union[MessageTemplate, str]) -> str:
        content = template.content if isinstance(template, MessageTemplate) else template
        participant_name = self.participant.name if self.participant else None
        job_company = self.job.company if self.job else None
        if self.session.is_recruiter:
            company = job_company
        else:
            # the recruiter's own company wins over the posting's
            company = (self.participant.company if self.participant else None) or job_company
        self.draft = fill_template(
            content,
            participant_name=participant_name,
            sender_name=self.session.display_name,
            company=company,
            position=self.job.title if self.job else None,
            recruiter_side=self.session.is_recruiter,
        )
        if isinstance(template, MessageTemplate):
            self.selected_template_id = template.id
        return self.draft

    async def _notify_receiver(self, receiver_id: str) -> None:
        conv = self.conversation
        job_title = conv.job_title or (self.job.title if self.job else None) or "Position"
        sender = self.session.display_name
        receiver_role = self.participant.role if self.participant else None
        if self.session.is_recruiter and receiver_role == "candidate":
            company = (self.job.company if self.job else None) or sender or "Company"
            await notifications.notify_recruiter_message(receiver_id, self.conversation_id, job_title,
                                                         company, sender or "Recruiter")
        elif not self.session.is_recruiter and receiver_role == "recruiter":
            await notifications.notify_candidate_message(receiver_id, self.conversation_id, job_title,
                                                         sender or "Candidate")

    async def close(self) -> None:
        if self._live is not None:
            await self._live.stop()
            self._live = None

    def state(self) -> Dict[str, Any]:
        return {
            "conversationId": self.conversation_id,
            "conversation": self.conversation.model_dump(mode="json", by_alias=True) if self.conversation else None,
            "participantId": self.participant_id,
            "participant": self.participant.model_dump(mode="json", by_alias=True) if self.participant else None,
            "job": self.job.model_dump(mode="json", by_alias=True) if self.job else None,
            "messages": [m.model_dump(mode="json", by_alias=True) for m in self.messages],
            "draft": self.draft,
            "selectedTemplateId": self.selected_template_id,
            "banner": self.banner,
            "scrollAnchor": self.scroll_anchor,
            "loading": self.loading,
            "notFound": self.not_found,
        }


class ConversationList:
    def __init__(self, session: Session):
        self.session = session
        self.conversations: List[Conversation] = []
        self.banner: Optional[str] = None
        self._live: Optional[LiveQuery] = None
        self._listeners: List[Listener] = []

    def add_listener(self, listener: Listener) -> None:
        self._listeners.append(listener)

    async def list_for_user(self, user_id: Optional[str] = None, subscribe: bool = True) -> List[Conversation]:
        user_id = user_id or self.session.user_id
        query, sort = conversations_repo.user_conversations_query(user_id)
        self._live = LiveQuery(conversations_repo.CONVERSATIONS_COLLECTION, query, sort, self._on_docs)
        try:
            if subscribe:
                await self._live.start()
            else:
                await self._live.refresh(force=True)
        except Exception:
            logger.exception("Error fetching conversations for %s", user_id)
            self.banner = "Failed to load conversations"
        return self.conversations

    async def _on_docs(self, docs: List[Dict[str, Any]]) -> None:
        await self.on_conversations_pushed(conversations_repo.parse_conversations(docs))

    async def on_conversations_pushed(self, snapshot: List[Conversation]) -> None:
        for conv in snapshot:
            if not conv.participant_details:
                await self._repair_details(conv)
        self.conversations = list(snapshot)
        for listener in list(self._listeners):
            await listener(self)

    async def _repair_details(self, conv: Conversation) -> None:
        """Resolve missing participant details and persist them back onto the conversation."""
        details: Dict[str, ParticipantDetails] = {}
        for pid in conv.participants:
            try:
                resolved = await profiles_repo.resolve_participant(pid)
            except Exception:
                logger.exception("Error fetching participant %s", pid)
                continue
            if resolved is not None:
                details[pid] = resolved
        conv.participant_details = details
        if not details:
            return
        try:
            await conversations_repo.set_participant_details(conv.id, details)
        except Exception:
            logger.exception("Error updating participant details for %s", conv.id)

    def find_with(self, other_user_id: str) -> Optional[Conversation]:
        for conv in self.conversations:
            if conv.includes(other_user_id, self.session.user_id):
                return conv
        return None

    async def get_or_create(self, other_user_id: str, job_id: Optional[str] = None) -> Optional[Conversation]:
        existing = self.find_with(other_user_id)
        if existing is not None:
            return existing

        try:
            other = await profiles_repo.resolve_participant(other_user_id)
            if other is None:
                self.banner = "Candidate not found"
                return None
            me = await profiles_repo.resolve_participant(self.session.user_id)
            if me is None:
                me = ParticipantDetails(name=self.session.display_name or "Unknown", role=self.session.role)
            job_title = None
            if job_id:
                job = await jobs_repo.get_job(job_id)
                job_title = job.title if job else None
            conv = await conversations_repo.create_conversation(
                [self.session.user_id, other_user_id],
                {self.session.user_id: me, other_user_id: other},
                job_id=job_id,
                job_title=job_title,
            )
        except Exception:
            logger.exception("Error creating conversation with %s", other_user_id)
            self.banner = "Failed to create conversation"
            return None

        self.conversations.insert(0, conv)
        return conv

    def search(self, term: str) -> List[Conversation]:
        term = (term or "").lower()
        if not term:
            return list(self.conversations)
        out = []
        for conv in self.conversations:
            other = conv.participant_details.get(conv.other_participant(self.session.user_id) or "")
            fields = [conv.last_message]
            if other is not None:
                fields += [other.name, other.email]
            if any(term in (f or "").lower() for f in fields):
                out.append(conv)
        return out

    async def close(self) -> None:
        if self._live is not None:
            await self._live.stop()
            self._live = None
