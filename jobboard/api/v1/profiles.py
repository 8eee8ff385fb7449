# jobboard/api/v1/profiles.py
"""
Profile lookups and avatar upload.
- Avatar images are stored under avatars/{userId}_{epochMillis}
- The resulting URL is written to both the candidate profile and the user record
"""
import logging

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from jobboard.api.v1.auth import get_current_session
from jobboard.repositories.profiles import resolve_participant, set_avatar_url
from jobboard.services import storage
from jobboard.services.auth import Session

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/profiles/{user_id}")
async def get_profile_route(user_id: str, session: Session = Depends(get_current_session)):
    details = await resolve_participant(user_id)
    if not details:
        raise HTTPException(status_code=404, detail="Profile not found")
    return details.model_dump(mode="json", by_alias=True)


@router.post("/profiles/me/avatar")
async def upload_avatar_route(file: UploadFile = File(...), session: Session = Depends(get_current_session)):
    content_type = file.content_type or ""
    if not content_type.startswith("image/"):
        raise HTTPException(status_code=400, detail="Avatar must be an image")
    data = await file.read()
    try:
        url = await storage.store_bytes(storage.avatar_key(session.user_id), data, content_type)
    except Exception as exc:
        logger.exception("Error uploading avatar for %s", session.user_id)
        raise HTTPException(status_code=500, detail="Failed to store file") from exc
    await set_avatar_url(session.user_id, url)
    return {"avatarUrl": url}
