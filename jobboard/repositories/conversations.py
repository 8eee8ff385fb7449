# jobboard/repositories/conversations.py
import logging
from typing import Dict, Iterable, List, Optional

from pydantic import ValidationError
from pymongo import DESCENDING

from jobboard.db.mongo import get_db
from jobboard.models.conversation import Conversation, ParticipantDetails
from jobboard.utils.documents import id_filter, utcnow

logger = logging.getLogger(__name__)

CONVERSATIONS_COLLECTION = "conversations"


def parse_conversations(docs: Iterable[dict]) -> List[Conversation]:
    out = []
    for d in docs:
        try:
            out.append(Conversation.from_doc(d))
        except ValidationError:
            logger.warning("Skipping malformed conversation %s", d.get("_id"))
    return out


def user_conversations_query(user_id: str):
    """Filter and sort of the conversation list for one user (array-contains on participants)."""
    return {"participants": user_id}, [("lastMessageTimestamp", DESCENDING)]


async def get_conversation(conversation_id: str) -> Optional[Conversation]:
    db = get_db()
    doc = await db[CONVERSATIONS_COLLECTION].find_one(id_filter(conversation_id))
    return Conversation.from_doc(doc) if doc else None


async def create_conversation(participants: List[str], participant_details: Dict[str, ParticipantDetails],
                              job_id: Optional[str] = None, job_title: Optional[str] = None) -> Conversation:
    db = get_db()
    conv = Conversation(
        participants=participants,
        participant_details=participant_details,
        last_message="",
        last_message_timestamp=utcnow(),
        unread_count={p: 0 for p in participants},
        job_id=job_id,
        job_title=job_title,
    )
    res = await db[CONVERSATIONS_COLLECTION].insert_one(conv.to_doc())
    conv.id = str(res.inserted_id)
    return conv


async def set_participant_details(conversation_id: str, details: Dict[str, ParticipantDetails]) -> None:
    db = get_db()
    payload = {uid: d.model_dump(by_alias=True, exclude_none=True) for uid, d in details.items()}
    await db[CONVERSATIONS_COLLECTION].update_one(id_filter(conversation_id), {"$set": {"participantDetails": payload}})


async def record_message(conversation_id: str, receiver_id: str, last_message: str) -> None:
    """Update last-message metadata and bump the receiver's unread counter atomically."""
    db = get_db()
    await db[CONVERSATIONS_COLLECTION].update_one(
        id_filter(conversation_id),
        {
            "$set": {"lastMessage": last_message, "lastMessageTimestamp": utcnow()},
            "$inc": {f"unreadCount.{receiver_id}": 1},
        },
    )


async def reset_unread(conversation_id: str, user_id: str) -> None:
    db = get_db()
    await db[CONVERSATIONS_COLLECTION].update_one(id_filter(conversation_id), {"$set": {f"unreadCount.{user_id}": 0}})
