from typing import Optional

from fastapi import APIRouter, Request
from starlette.requests import HTTPConnection

from takeaway.domain.schemas import UserProfile

router = APIRouter(prefix="/auth", tags=["auth"])

SESSION_COOKIE = "session"


def session_token(conn: HTTPConnection) -> Optional[str]:
    """Bearer header first, then the session cookie, then ?token= (websockets)."""
    auth = conn.headers.get("authorization", "")
    if auth.lower().startswith("bearer "):
        return auth[7:].strip()
    return conn.cookies.get(SESSION_COOKIE) or conn.query_params.get("token")


def current_user(request: Request) -> Optional[UserProfile]:
    return request.app.state.sessions.get_user(session_token(request))


def require_user(request: Request) -> UserProfile:
    """Raises AuthRequired, which main.py turns into a 401 with a redirect hint."""
    return request.app.state.sessions.require_user(session_token(request))


@router.get("/session")
def get_session(request: Request):
    user = current_user(request)
    return {"user": user.model_dump() if user else None}


@router.post("/signout")
def sign_out(request: Request):
    request.app.state.sessions.sign_out(session_token(request))
    return {"signed_out": True}
