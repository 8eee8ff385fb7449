# jobboard/api/v1/conversations.py
"""
Conversation endpoints.

REST calls open a short-lived ConversationThread for the duration of the
request; the websocket keeps one open and pushes a state frame on every
snapshot until the client disconnects.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile, WebSocket, WebSocketDisconnect

from jobboard.api.v1.auth import get_current_session, session_from_token
from jobboard.api.v1.templates import load_usable_template
from jobboard.models.conversation import ConversationCreate
from jobboard.models.message import MessageCreate, TemplateApply
from jobboard.repositories.templates import get_template
from jobboard.services.auth import Session
from jobboard.services.messaging import ConversationList, ConversationThread

logger = logging.getLogger(__name__)

router = APIRouter()

# websocket close codes for a thread that cannot be opened
WS_UNAUTHORIZED = 4401
WS_FORBIDDEN = 4403
WS_NOT_FOUND = 4404
WS_LOAD_FAILED = 4500


def _dump(conv):
    return conv.model_dump(mode="json", by_alias=True)


def _close_code(thread: ConversationThread) -> int:
    if thread.not_found:
        return WS_NOT_FOUND
    if thread.forbidden:
        return WS_FORBIDDEN
    return WS_LOAD_FAILED


async def _open_thread(conversation_id: str, session: Session) -> ConversationThread:
    thread = ConversationThread(session, conversation_id)
    await thread.open(subscribe=False)
    if thread.not_found:
        raise HTTPException(status_code=404, detail="Conversation not found")
    if thread.forbidden:
        raise HTTPException(status_code=403, detail="Not a participant of this conversation")
    if thread.conversation is None:
        raise HTTPException(status_code=500, detail=thread.banner or "Failed to load conversation")
    return thread


@router.get("/conversations")
async def list_conversations_route(q: Optional[str] = Query(None), session: Session = Depends(get_current_session)):
    lst = ConversationList(session)
    await lst.list_for_user(subscribe=False)
    if lst.banner:
        raise HTTPException(status_code=500, detail=lst.banner)
    rows = lst.search(q) if q else lst.conversations
    return {"items": [_dump(c) for c in rows], "count": len(rows)}


@router.post("/conversations")
async def create_conversation_route(payload: ConversationCreate, session: Session = Depends(get_current_session)):
    if payload.other_user_id == session.user_id:
        raise HTTPException(status_code=400, detail="Cannot start a conversation with yourself")
    lst = ConversationList(session)
    await lst.list_for_user(subscribe=False)
    conv = await lst.get_or_create(payload.other_user_id, job_id=payload.job_id)
    if conv is None:
        status = 404 if lst.banner == "Candidate not found" else 500
        raise HTTPException(status_code=status, detail=lst.banner)
    return _dump(conv)


@router.get("/conversations/{conversation_id}")
async def get_conversation_route(conversation_id: str, session: Session = Depends(get_current_session)):
    thread = await _open_thread(conversation_id, session)
    return thread.state()


@router.post("/conversations/{conversation_id}/messages")
async def send_message_route(conversation_id: str, payload: MessageCreate,
                             session: Session = Depends(get_current_session)):
    if not payload.content.strip():
        raise HTTPException(status_code=400, detail="Message content is empty")
    thread = await _open_thread(conversation_id, session)
    if not await thread.send(payload.content):
        raise HTTPException(status_code=500, detail=thread.banner or "Failed to send message")
    return {"sent": True}


@router.post("/conversations/{conversation_id}/attachments")
async def send_attachment_route(conversation_id: str, file: UploadFile = File(...), caption: str = Form(""),
                                session: Session = Depends(get_current_session)):
    fname = file.filename or "attachment"
    data = await file.read()
    thread = await _open_thread(conversation_id, session)
    if not await thread.send_with_attachment(data, fname, file.content_type, caption):
        raise HTTPException(status_code=500, detail=thread.banner or "Failed to send message")
    return {"sent": True, "filename": fname}


@router.post("/conversations/{conversation_id}/apply-template")
async def apply_template_route(conversation_id: str, payload: TemplateApply,
                               session: Session = Depends(get_current_session)):
    template = await load_usable_template(payload.template_id, session)
    thread = await _open_thread(conversation_id, session)
    return {"templateId": template.id, "draft": thread.apply_template(template)}


@router.websocket("/ws/conversations/{conversation_id}")
async def conversation_ws(websocket: WebSocket, conversation_id: str, token: str = Query("")):
    session = session_from_token(token)
    if session is None:
        await websocket.close(code=WS_UNAUTHORIZED)
        return
    await websocket.accept()

    thread = ConversationThread(session, conversation_id)

    async def push(t: ConversationThread):
        await websocket.send_json(t.state())

    thread.add_listener(push)
    try:
        if not await thread.open():
            await websocket.send_json(thread.state())
            await websocket.close(code=_close_code(thread))
            return
        while True:
            frame = await websocket.receive_json()
            action = frame.get("action")
            if action == "send":
                await thread.send(frame.get("content") or "")
                if thread.banner:
                    await push(thread)
            elif action == "template":
                template = await get_template(frame.get("templateId") or "")
                if template and template.usable_by(session.user_id):
                    thread.apply_template(template)
                await push(thread)
            else:
                logger.warning("Unknown websocket action %r on %s", action, conversation_id)
    except WebSocketDisconnect:
        pass
    finally:
        await thread.close()
