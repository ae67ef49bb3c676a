from fastapi import Depends, Request

from feed_engine.exceptions import unauthorized_exception
from feed_engine.identity.schemas import CurrentUser
from feed_engine.identity.utils import resolve_user_from_token


def get_token_from_header(request: Request) -> str:
    """Get bearer token from the Authorization header"""
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        raise unauthorized_exception("Missing bearer token")
    return auth_header.split(" ", 1)[1]


async def get_current_user(token: str = Depends(get_token_from_header)) -> CurrentUser:
    user = resolve_user_from_token(token)
    if user is None:
        raise unauthorized_exception("Token is invalid or expired")
    return user
