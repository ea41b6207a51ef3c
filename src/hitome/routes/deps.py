"""
Shared route dependencies.

Cookie authentication and the mapping from service exceptions to HTTP errors.
"""

from typing import NoReturn, Optional
import logging

from fastapi import Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import settings
from ..database.connection import get_db
from ..models.session import Session
from ..models.store import Store
from ..services.auth_service import AuthService, parse_session_cookie
from ..services.exceptions import (
    AccessDeniedError,
    ConflictError,
    HitomeError,
    NotConfiguredError,
    NotFoundError,
    SignatureError,
    UpstreamError,
    ValidationFailedError,
)
from ..services.store_service import StoreService

logger = logging.getLogger(__name__)


_STATUS_CODES = {
    ValidationFailedError: 400,
    SignatureError: 401,
    AccessDeniedError: 403,
    NotFoundError: 404,
    ConflictError: 409,
    NotConfiguredError: 500,
    UpstreamError: 502,
}


def raise_http(exc: HitomeError) -> NoReturn:
    """Re-raise a service exception as the matching HTTPException."""
    for exc_type, status_code in _STATUS_CODES.items():
        if isinstance(exc, exc_type):
            if status_code >= 500:
                logger.error(f"{type(exc).__name__}: {exc}")
            raise HTTPException(status_code=status_code, detail=str(exc)) from exc

    logger.error(f"Unmapped service error {type(exc).__name__}: {exc}")
    raise HTTPException(status_code=500, detail=str(exc)) from exc


async def get_optional_session(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> Optional[Session]:
    """The caller's login session, or None."""
    session_id = parse_session_cookie(request.headers.get("cookie"))
    if not session_id:
        return None
    return await AuthService(db).get_session(session_id)


async def require_session(
    session: Optional[Session] = Depends(get_optional_session),
) -> Session:
    """Dependency that rejects unauthenticated requests with 401."""
    if not session:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return session


async def get_current_store(
    session: Session = Depends(require_session),
    db: AsyncSession = Depends(get_db),
) -> Optional[Store]:
    """
    The store the session is working in, or None when no store is selected.

    Raises 403 if the user has lost access to the selected store.
    """
    if not session.store_id:
        return None
    try:
        return await StoreService(db).get_for_user(session.user_id, session.store_id)
    except HitomeError as e:
        raise_http(e)


async def get_is_admin(
    session: Session = Depends(require_session),
    db: AsyncSession = Depends(get_db),
) -> bool:
    """Whether the caller's LINE account is listed in ADMIN_LINE_USER_IDS."""
    if not settings.ADMIN_LINE_USER_IDS:
        return False
    user = await AuthService(db).get_user(session.user_id)
    return bool(user and user.line_user_id in settings.ADMIN_LINE_USER_IDS)


async def get_inbox_store(
    store: Optional[Store] = Depends(get_current_store),
    is_admin: bool = Depends(get_is_admin),
) -> Optional[Store]:
    """
    The store whose inbox the caller works in.

    None stands for the unassigned inbox of the environment LINE channel,
    which only administrators may open.
    """
    if store is None and not is_admin:
        raise HTTPException(status_code=400, detail="No store selected")
    return store
