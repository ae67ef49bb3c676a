from datetime import datetime, timedelta
from typing import Optional
from zoneinfo import ZoneInfo

from jose import JWTError, jwt

from feed_engine.config import settings
from feed_engine.identity.schemas import CurrentUser


def create_access_token(user: CurrentUser, expires_delta: Optional[timedelta] = None) -> str:
    """
    Issue a signed token for user.

    Tokens normally come from the identity provider; this is for scripts and tests.
    """
    expire = datetime.now(ZoneInfo("UTC")) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    claims = {"sub": user.id, "name": user.name, "exp": expire}
    if user.image_url:
        claims["picture"] = user.image_url
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def resolve_user_from_token(token: str) -> Optional[CurrentUser]:
    """Decode JWT into a CurrentUser or return None if invalid."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None

    subject = payload.get("sub")
    if not subject:
        return None
    return CurrentUser(
        id=str(subject),
        name=payload.get("name") or str(subject),
        image_url=payload.get("picture"),
    )
