"""
Authentication service for hitome.

Handles users signed in through LINE Login and the cookie sessions that tie
them to a current store.
"""

from datetime import datetime
from typing import Optional
import logging
import re

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete

from ..config import settings
from ..models.session import Session
from ..models.user import User

logger = logging.getLogger(__name__)


def parse_session_cookie(cookie_header: Optional[str], name: Optional[str] = None) -> Optional[str]:
    """Extract the session token from a raw Cookie header."""
    if not cookie_header:
        return None
    name = name or settings.SESSION_COOKIE_NAME
    match = re.search(rf"(?:^|;\s*){re.escape(name)}=([^;]+)", cookie_header)
    return match.group(1) if match else None


def create_session_cookie(session_id: str, expires_at: datetime, now: Optional[datetime] = None) -> str:
    """Build the Set-Cookie value for a session."""
    max_age = max(int((expires_at - (now or datetime.utcnow())).total_seconds()), 0)
    parts = [
        f"{settings.SESSION_COOKIE_NAME}={session_id}",
        "Path=/",
        "HttpOnly",
    ]
    if settings.COOKIE_SECURE:
        parts.append("Secure")
    parts.extend(["SameSite=Lax", f"Max-Age={max_age}"])
    return "; ".join(parts)


def clear_cookie(name: str) -> str:
    parts = [f"{name}=", "Path=/", "HttpOnly"]
    if settings.COOKIE_SECURE:
        parts.append("Secure")
    parts.extend(["SameSite=Lax", "Max-Age=0"])
    return "; ".join(parts)


class AuthService:
    """Service for users and login sessions."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_session(self, session_id: str) -> Optional[Session]:
        """
        Get a session by its token.

        Returns:
            Session or None if unknown or expired
        """
        if not session_id:
            return None
        result = await self.db.execute(
            select(Session)
            .where(Session.id == session_id)
            .where(Session.expires_at > datetime.utcnow())
        )
        return result.scalar_one_or_none()

    async def create_session(self, user_id: str, store_id: Optional[str] = None) -> Session:
        session = Session(
            user_id=user_id,
            store_id=store_id,
            expires_at=datetime.utcnow() + settings.session_ttl,
        )
        self.db.add(session)
        await self.db.commit()
        await self.db.refresh(session)

        logger.info(f"Created login session for user {user_id}")
        return session

    async def delete_session(self, session_id: str) -> None:
        await self.db.execute(delete(Session).where(Session.id == session_id))
        await self.db.commit()

    async def update_session_store(self, session: Session, store_id: Optional[str]) -> Session:
        session.store_id = store_id
        await self.db.commit()
        await self.db.refresh(session)

        logger.info(f"Session for user {session.user_id} switched to store {store_id}")
        return session

    async def get_user(self, user_id: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def upsert_line_user(
        self,
        line_user_id: str,
        name: str,
        avatar_url: Optional[str] = None,
        email: Optional[str] = None,
    ) -> User:
        """
        Find the user for a LINE account, refreshing name and avatar, or create it.
        """
        result = await self.db.execute(
            select(User).where(User.line_user_id == line_user_id)
        )
        user = result.scalar_one_or_none()

        if user:
            user.name = name
            user.avatar_url = avatar_url
            if email:
                user.email = email
        else:
            user = User(
                line_user_id=line_user_id,
                name=name,
                avatar_url=avatar_url,
                email=email,
            )
            self.db.add(user)

        await self.db.commit()
        await self.db.refresh(user)

        logger.info(f"Signed in LINE user {line_user_id} as {user.id}")
        return user
