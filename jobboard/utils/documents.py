# jobboard/utils/documents.py
from datetime import datetime, timezone
from typing import Any, Dict

from bson import ObjectId


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def epoch_millis() -> int:
    return int(utcnow().timestamp() * 1000)


def id_filter(doc_id: str) -> Dict[str, Any]:
    """
    Match a document by id. Ids minted by the store are ObjectIds; ids of
    users and profiles are plain strings used verbatim as ``_id``.
    """
    if ObjectId.is_valid(doc_id):
        return {"_id": {"$in": [ObjectId(doc_id), doc_id]}}
    return {"_id": doc_id}
