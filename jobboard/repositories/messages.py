# jobboard/repositories/messages.py
from typing import List, Optional

from pymongo import ASCENDING

from jobboard.db.mongo import get_db
from jobboard.models.message import Message
from jobboard.utils.documents import id_filter, utcnow

MESSAGES_COLLECTION = "messages"


def thread_query(conversation_id: str):
    # _id breaks ties between messages written within the same clock tick
    return {"conversationId": conversation_id}, [("timestamp", ASCENDING), ("_id", ASCENDING)]


async def create_message(conversation_id: str, sender_id: str, receiver_id: str, content: str,
                         attachment_url: Optional[str] = None, attachment_type: Optional[str] = None,
                         attachment_name: Optional[str] = None) -> Message:
    db = get_db()
    msg = Message(
        conversation_id=conversation_id,
        sender_id=sender_id,
        receiver_id=receiver_id,
        content=content,
        timestamp=utcnow(),
        read=False,
        attachment_url=attachment_url,
        attachment_type=attachment_type,
        attachment_name=attachment_name,
    )
    res = await db[MESSAGES_COLLECTION].insert_one(msg.to_doc())
    msg.id = str(res.inserted_id)
    return msg


async def list_messages(conversation_id: str) -> List[Message]:
    db = get_db()
    query, sort = thread_query(conversation_id)
    cur = db[MESSAGES_COLLECTION].find(query).sort(sort)
    return [Message.from_doc(d) async for d in cur]


async def mark_read(message_id: str) -> None:
    db = get_db()
    await db[MESSAGES_COLLECTION].update_one(id_filter(message_id), {"$set": {"read": True}})
