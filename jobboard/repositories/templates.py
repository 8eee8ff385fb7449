# jobboard/repositories/templates.py
from typing import List, Optional

from jobboard.db.mongo import get_db
from jobboard.models.template import DEFAULT_TEMPLATES, MessageTemplate, TemplateCreate
from jobboard.utils.documents import id_filter, utcnow

TEMPLATES_COLLECTION = "messageTemplates"


async def list_templates(user_id: str, with_defaults: bool = True) -> List[MessageTemplate]:
    db = get_db()
    cur = db[TEMPLATES_COLLECTION].find({"userId": user_id})
    rows = [MessageTemplate.from_doc(d) async for d in cur]
    if not rows and with_defaults:
        return [t.model_copy() for t in DEFAULT_TEMPLATES]
    return rows


async def get_template(template_id: str) -> Optional[MessageTemplate]:
    for t in DEFAULT_TEMPLATES:
        if t.id == template_id:
            return t.model_copy()
    db = get_db()
    doc = await db[TEMPLATES_COLLECTION].find_one(id_filter(template_id))
    return MessageTemplate.from_doc(doc) if doc else None


async def create_template(user_id: str, obj: TemplateCreate) -> MessageTemplate:
    db = get_db()
    t = MessageTemplate(user_id=user_id, name=obj.name, content=obj.content, created_at=utcnow())
    res = await db[TEMPLATES_COLLECTION].insert_one(t.to_doc())
    t.id = str(res.inserted_id)
    return t


async def update_template(template_id: str, obj: TemplateCreate) -> bool:
    db = get_db()
    res = await db[TEMPLATES_COLLECTION].update_one(id_filter(template_id), {"$set": {"name": obj.name, "content": obj.content}})
    return res.matched_count > 0


async def delete_template(template_id: str) -> bool:
    db = get_db()
    res = await db[TEMPLATES_COLLECTION].delete_one(id_filter(template_id))
    return res.deleted_count > 0
