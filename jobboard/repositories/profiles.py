# jobboard/repositories/profiles.py
from typing import Optional

from jobboard.db.mongo import get_db
from jobboard.models.conversation import ParticipantDetails
from jobboard.models.profile import CandidateProfile, UserProfile
from jobboard.utils.documents import id_filter

CANDIDATES_COLLECTION = "candidateProfiles"
USERS_COLLECTION = "users"


async def get_candidate_profile(user_id: str) -> Optional[CandidateProfile]:
    db = get_db()
    doc = await db[CANDIDATES_COLLECTION].find_one(id_filter(user_id))
    return CandidateProfile.from_doc(doc) if doc else None


async def get_user(user_id: str) -> Optional[UserProfile]:
    db = get_db()
    doc = await db[USERS_COLLECTION].find_one(id_filter(user_id))
    return UserProfile.from_doc(doc) if doc else None


async def resolve_participant(user_id: str) -> Optional[ParticipantDetails]:
    """Candidate profile first, then the generic user record."""
    candidate = await get_candidate_profile(user_id)
    if candidate:
        return candidate.as_participant()
    user = await get_user(user_id)
    if user:
        return user.as_participant()
    return None


async def set_avatar_url(user_id: str, url: str) -> None:
    db = get_db()
    await db[CANDIDATES_COLLECTION].update_one(id_filter(user_id), {"$set": {"avatarUrl": url}})
    await db[USERS_COLLECTION].update_one(id_filter(user_id), {"$set": {"avatarUrl": url}})
