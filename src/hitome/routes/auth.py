"""
Authentication routes.

LINE Login OAuth flow plus the cookie session endpoints.
"""

from typing import Optional
import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import JSONResponse, RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import settings
from ..database.connection import get_db
from ..models.session import Session
from ..schemas.auth import MeResponse, StoreSummary, UserResponse
from ..services.auth_service import (
    AuthService,
    clear_cookie,
    create_session_cookie,
    parse_session_cookie,
)
from ..services.exceptions import UpstreamError
from ..services.line_client import LineLoginClient
from ..services.store_service import StoreService
from .deps import get_optional_session

logger = logging.getLogger(__name__)

router = APIRouter()

STATE_COOKIE_NAME = "line_auth_state"
STATE_COOKIE_MAX_AGE = 600


def get_auth_service(db: AsyncSession = Depends(get_db)) -> AuthService:
    """Dependency to get auth service."""
    return AuthService(db)


def _state_cookie(value: str, max_age: int) -> str:
    parts = [f"{STATE_COOKIE_NAME}={value}", "Path=/", "HttpOnly"]
    if settings.COOKIE_SECURE:
        parts.append("Secure")
    parts.extend(["SameSite=Lax", f"Max-Age={max_age}"])
    return "; ".join(parts)


def _callback_url(request: Request) -> str:
    return str(request.url_for("line_login_callback"))


@router.get("/line")
async def line_login(request: Request):
    """
    Start LINE Login.

    Redirects to the LINE authorize page and remembers a CSRF state in a
    short-lived cookie.
    """
    if not settings.line_login_configured:
        raise HTTPException(status_code=500, detail="LINE Login is not configured")

    state = uuid.uuid4().hex
    nonce = uuid.uuid4().hex
    url = LineLoginClient().build_authorize_url(_callback_url(request), state, nonce)

    response = RedirectResponse(url, status_code=302)
    response.headers.append("set-cookie", _state_cookie(state, STATE_COOKIE_MAX_AGE))
    return response


@router.get("/line/callback", name="line_login_callback")
async def line_login_callback(
    request: Request,
    code: Optional[str] = Query(None),
    state: Optional[str] = Query(None),
    service: AuthService = Depends(get_auth_service),
):
    """
    Finish LINE Login: exchange the code, sign the user in and redirect home.
    """
    if not code or not state:
        raise HTTPException(status_code=400, detail="Invalid request")

    stored_state = parse_session_cookie(request.headers.get("cookie"), STATE_COOKIE_NAME)
    if state != stored_state:
        raise HTTPException(status_code=400, detail="Invalid state")

    client = LineLoginClient()
    try:
        tokens = await client.exchange_code(code, _callback_url(request))
        profile = await client.get_profile(tokens.get("access_token", ""))
    except UpstreamError as e:
        logger.error(f"LINE Login failed: {e}")
        raise HTTPException(status_code=500, detail="Authentication failed") from e

    if not profile.get("userId"):
        logger.error("LINE Login profile has no userId")
        raise HTTPException(status_code=500, detail="Authentication failed")

    user = await service.upsert_line_user(
        line_user_id=profile["userId"],
        name=profile.get("displayName") or "LINE User",
        avatar_url=profile.get("pictureUrl"),
    )
    session = await service.create_session(user.id)

    response = RedirectResponse("/", status_code=302)
    response.headers.append(
        "set-cookie", create_session_cookie(session.id, session.expires_at)
    )
    response.headers.append("set-cookie", _state_cookie("", 0))
    return response


@router.get("/me", response_model=MeResponse)
async def get_me(
    session: Optional[Session] = Depends(get_optional_session),
    service: AuthService = Depends(get_auth_service),
    db: AsyncSession = Depends(get_db),
):
    """
    Current user with their stores and the store the session points at.
    """
    user = await service.get_user(session.user_id) if session else None
    if not user:
        return JSONResponse(status_code=401, content={"authenticated": False})

    stores = await StoreService(db).list_for_user(user.id)
    return MeResponse(
        user=UserResponse(**user.to_dict()),
        currentStoreId=session.store_id,
        stores=[
            StoreSummary(id=s.id, name=s.name, isActive=bool(s.is_active))
            for s in stores
        ],
    )


@router.post("/logout")
async def logout(
    session: Optional[Session] = Depends(get_optional_session),
    service: AuthService = Depends(get_auth_service),
):
    """
    Delete the session and clear the cookie. Always succeeds.
    """
    if session:
        await service.delete_session(session.id)
        logger.info(f"User {session.user_id} logged out")

    response = JSONResponse(content={"success": True})
    response.headers.append("set-cookie", clear_cookie(settings.SESSION_COOKIE_NAME))
    return response
