# jobboard/api/v1/templates.py
from fastapi import APIRouter, Depends, HTTPException

from jobboard.api.v1.auth import get_current_session
from jobboard.models.template import MessageTemplate, TemplateCreate
from jobboard.repositories.templates import create_template, delete_template, get_template, list_templates, update_template
from jobboard.services.auth import Session

router = APIRouter()


def _dump(t):
    return t.model_dump(mode="json", by_alias=True)


async def load_usable_template(template_id: str, session: Session) -> MessageTemplate:
    """Template the session may read: a shared default or one of its own. 404/403 otherwise."""
    t = await get_template(template_id)
    if not t:
        raise HTTPException(status_code=404, detail="Template not found")
    if not t.usable_by(session.user_id):
        raise HTTPException(status_code=403, detail="You don't have permission to use this template")
    return t


async def _load_own(template_id: str, session: Session) -> MessageTemplate:
    t = await load_usable_template(template_id, session)
    if t.user_id is None:
        raise HTTPException(status_code=400, detail="Default templates cannot be changed")
    return t


@router.get("/message-templates")
async def list_templates_route(session: Session = Depends(get_current_session)):
    rows = await list_templates(session.user_id)
    return {"items": [_dump(t) for t in rows]}


@router.post("/message-templates", status_code=201)
async def create_template_route(payload: TemplateCreate, session: Session = Depends(get_current_session)):
    if not payload.name.strip() or not payload.content.strip():
        raise HTTPException(status_code=400, detail="Template name and content are required")
    t = await create_template(session.user_id, payload)
    return _dump(t)


@router.put("/message-templates/{template_id}")
async def update_template_route(template_id: str, payload: TemplateCreate,
                                session: Session = Depends(get_current_session)):
    await _load_own(template_id, session)
    ok = await update_template(template_id, payload)
    if not ok:
        raise HTTPException(status_code=404, detail="Template not found")
    return {"updated": True}


@router.delete("/message-templates/{template_id}")
async def delete_template_route(template_id: str, session: Session = Depends(get_current_session)):
    await _load_own(template_id, session)
    ok = await delete_template(template_id)
    if not ok:
        raise HTTPException(status_code=404, detail="Not found or already deleted")
    return {"deleted": True}
