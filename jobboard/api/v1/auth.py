# jobboard/api/v1/auth.py
from fastapi import Depends, HTTPException
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from jobboard.services.auth import Session, decode_access_token

security = HTTPBearer()


async def get_current_session(credentials: HTTPAuthorizationCredentials = Depends(security)) -> Session:
    token = credentials.credentials
    try:
        return decode_access_token(token)
    except Exception:
        raise HTTPException(status_code=401, detail="Invalid token")


def session_from_token(token: str):
    """WebSocket variant: returns None instead of raising."""
    try:
        return decode_access_token(token)
    except Exception:
        return None
