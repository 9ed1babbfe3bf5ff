"""Request dependencies shared by the API routers."""

import logging

from fastapi import Header, HTTPException, Request, status

from src.services.day_view_service import ViewSession


logger = logging.getLogger(__name__)

# View sessions keyed by (user_id, X-Session-Id), kept for the process lifetime
_view_sessions: dict[tuple[str, str], ViewSession] = {}


async def get_current_user_id(request: Request, x_user_id: str | None = Header(default=None)) -> str:
    """Resolve the acting user from the X-User-Id header set by the auth proxy."""
    user_id = (x_user_id or "").strip()
    if not user_id:
        logger.warning("api_auth_missing_user", extra={"path": request.url.path})
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing X-User-Id header")
    return user_id


def get_view_session(user_id: str, session_id: str | None) -> ViewSession | None:
    """Return the view session for a client session, or None when the client sent none."""
    if not session_id:
        return None
    return _view_sessions.setdefault((user_id, session_id), ViewSession())


def reset_view_sessions() -> None:
    """Forget all view sessions."""
    _view_sessions.clear()
