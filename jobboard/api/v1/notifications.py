# jobboard/api/v1/notifications.py
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from jobboard.api.v1.auth import get_current_session
from jobboard.models.notification import Notification, NotificationCreate, NotificationUpdate
from jobboard.repositories import notifications as notifications_repo
from jobboard.services.auth import Session

router = APIRouter()


def _dump(n):
    return n.model_dump(mode="json", by_alias=True)


def _require_user(user_id: Optional[str], session: Session) -> str:
    """The requested userId, which must be the caller's own."""
    if not user_id:
        raise HTTPException(status_code=400, detail="User ID is required")
    if user_id != session.user_id:
        raise HTTPException(status_code=403, detail="You don't have permission to access these notifications")
    return user_id


async def _load_own(notification_id: str, session: Session) -> Notification:
    n = await notifications_repo.get_notification(notification_id)
    if not n:
        raise HTTPException(status_code=404, detail="Notification not found")
    if n.user_id != session.user_id:
        raise HTTPException(status_code=403, detail="You don't have permission to access this notification")
    return n


@router.get("/notifications")
async def list_notifications_route(user_id: Optional[str] = Query(None, alias="userId"), limit: int = Query(50),
                                   skip: int = Query(0), session: Session = Depends(get_current_session)):
    rows = await notifications_repo.list_notifications(_require_user(user_id, session), limit=limit, skip=skip)
    return {"items": [_dump(n) for n in rows], "count": len(rows)}


@router.post("/notifications", status_code=201)
async def create_notification_route(payload: NotificationCreate, session: Session = Depends(get_current_session)):
    _require_user(payload.user_id, session)
    n = await notifications_repo.create_notification(payload)
    return _dump(n)


@router.get("/notifications/count")
async def count_unread_route(user_id: Optional[str] = Query(None, alias="userId"),
                             session: Session = Depends(get_current_session)):
    count = await notifications_repo.count_unread(_require_user(user_id, session))
    return {"count": count}


@router.get("/notifications/types")
async def count_by_type_route(user_id: Optional[str] = Query(None, alias="userId"), read: Optional[bool] = Query(None),
                              session: Session = Depends(get_current_session)):
    counts = await notifications_repo.count_by_type(_require_user(user_id, session), read=read)
    return {"counts": counts}


@router.post("/notifications/read-all")
async def mark_all_read_route(user_id: Optional[str] = Query(None, alias="userId"),
                              session: Session = Depends(get_current_session)):
    modified = await notifications_repo.mark_all_read(_require_user(user_id, session))
    return {"modified": modified}


@router.get("/notifications/{notification_id}")
async def get_notification_route(notification_id: str, session: Session = Depends(get_current_session)):
    n = await _load_own(notification_id, session)
    return _dump(n)


@router.patch("/notifications/{notification_id}")
async def update_notification_route(notification_id: str, payload: NotificationUpdate,
                                    session: Session = Depends(get_current_session)):
    changes = payload.model_dump(by_alias=True, exclude_none=True)
    if not changes:
        raise HTTPException(status_code=400, detail="Nothing to update")
    await _load_own(notification_id, session)
    n = await notifications_repo.update_notification(notification_id, changes)
    if not n:
        raise HTTPException(status_code=404, detail="Notification not found")
    return _dump(n)


@router.delete("/notifications/{notification_id}")
async def delete_notification_route(notification_id: str, session: Session = Depends(get_current_session)):
    await _load_own(notification_id, session)
    ok = await notifications_repo.delete_notification(notification_id)
    if not ok:
        raise HTTPException(status_code=404, detail="Not found or already deleted")
    return {"deleted": True}
