# jobboard/repositories/notifications.py
from typing import Any, Dict, List, Optional

from pymongo import DESCENDING

from jobboard.db.mongo import get_db
from jobboard.models.notification import Notification, NotificationCreate
from jobboard.utils.documents import id_filter, utcnow

NOTIFICATIONS_COLLECTION = "notifications"


async def create_notification(obj: NotificationCreate) -> Notification:
    db = get_db()
    n = Notification(**obj.model_dump(), created_at=utcnow(), read=False)
    res = await db[NOTIFICATIONS_COLLECTION].insert_one(n.to_doc())
    n.id = str(res.inserted_id)
    return n


async def list_notifications(user_id: str, limit: int = 50, skip: int = 0) -> List[Notification]:
    db = get_db()
    cur = (db[NOTIFICATIONS_COLLECTION].find({"userId": user_id})
           .sort([("createdAt", DESCENDING), ("_id", DESCENDING)]).skip(skip).limit(limit))
    return [Notification.from_doc(d) async for d in cur]


async def get_notification(notification_id: str) -> Optional[Notification]:
    db = get_db()
    doc = await db[NOTIFICATIONS_COLLECTION].find_one(id_filter(notification_id))
    return Notification.from_doc(doc) if doc else None


async def update_notification(notification_id: str, changes: Dict[str, Any]) -> Optional[Notification]:
    db = get_db()
    if changes:
        await db[NOTIFICATIONS_COLLECTION].update_one(id_filter(notification_id), {"$set": changes})
    return await get_notification(notification_id)


async def delete_notification(notification_id: str) -> bool:
    db = get_db()
    res = await db[NOTIFICATIONS_COLLECTION].delete_one(id_filter(notification_id))
    return res.deleted_count > 0


async def count_unread(user_id: str) -> int:
    db = get_db()
    return await db[NOTIFICATIONS_COLLECTION].count_documents({"userId": user_id, "read": False})


async def mark_all_read(user_id: str) -> int:
    db = get_db()
    res = await db[NOTIFICATIONS_COLLECTION].update_many({"userId": user_id, "read": False}, {"$set": {"read": True}})
    return res.modified_count


async def count_by_type(user_id: str, read: Optional[bool] = None) -> Dict[str, int]:
    db = get_db()
    query: Dict[str, Any] = {"userId": user_id}
    if read is not None:
        query["read"] = read
    counts: Dict[str, int] = {}
    async for d in db[NOTIFICATIONS_COLLECTION].find(query, {"type": 1}):
        t = d.get("type")
        counts[t] = counts.get(t, 0) + 1
    return counts
