# jobboard/services/auth.py
from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import jwt, JWTError
from pydantic import BaseModel
from jobboard.core.config import settings

# JWT config
ALGORITHM = "HS256"


class Session(BaseModel):
    """Identity of the caller, passed explicitly to every handler."""
    user_id: str
    display_name: Optional[str] = None
    role: str = "candidate"

    @property
    def is_recruiter(self) -> bool:
        return self.role == "recruiter"


def create_access_token(subject: str, name: Optional[str] = None, role: str = "candidate",
                        expires_delta: Optional[timedelta] = None) -> str:
    now = datetime.now(timezone.utc)
    minutes = int(getattr(settings, "ACCESS_TOKEN_EXPIRE_MINUTES", 60))
    exp = now + (expires_delta if expires_delta else timedelta(minutes=minutes))
    payload = {"sub": subject, "name": name, "role": role, "iat": now, "exp": exp}
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=ALGORITHM)


def decode_access_token(token: str) -> Session:
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError as exc:
        raise exc
    sub = payload.get("sub")
    if not sub:
        raise JWTError("token has no subject")
    return Session(user_id=sub, display_name=payload.get("name"), role=payload.get("role") or "candidate")
