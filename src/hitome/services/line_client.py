"""
LINE API clients.

LineClient talks to the Messaging API on behalf of one channel (reply, push,
profile lookup). LineLoginClient implements the OAuth2 login flow used to sign
store staff in.
"""

from typing import Dict, List, Optional, Sequence, Union
from urllib.parse import urlencode
import logging

import httpx

from ..config import settings
from .exceptions import UpstreamError

logger = logging.getLogger(__name__)

# LINE accepts at most five message objects per reply/push call
MAX_MESSAGES_PER_CALL = 5


def _text_messages(texts: Union[str, Sequence[str]]) -> List[Dict[str, str]]:
    if isinstance(texts, str):
        texts = [texts]
    return [{"type": "text", "text": text} for text in texts if text][:MAX_MESSAGES_PER_CALL]


class LineClient:
    """Messaging API client for a single channel access token."""

    def __init__(
        self,
        access_token: str,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.access_token = access_token
        self.base_url = (base_url or settings.LINE_API_BASE).rstrip("/")
        self.timeout = timeout or settings.HTTP_TIMEOUT_SECONDS

    @property
    def _headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.access_token}",
        }

    async def _post(self, path: str, payload: dict) -> bool:
        url = f"{self.base_url}{path}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(url, json=payload, headers=self._headers)

            if response.status_code >= 400:
                logger.error(
                    f"LINE API {path} failed with HTTP {response.status_code}: "
                    f"{response.text[:200]}"
                )
                return False
            return True

        except httpx.TimeoutException:
            logger.error(f"LINE API {path} timed out after {self.timeout} seconds")
            return False
        except httpx.HTTPError as e:
            logger.error(f"LINE API {path} request failed: {type(e).__name__}: {e}")
            return False

    async def reply_message(self, reply_token: str, texts: Union[str, Sequence[str]]) -> bool:
        """Answer a webhook event using its one-shot reply token."""
        messages = _text_messages(texts)
        if not reply_token or not messages:
            return False
        return await self._post(
            "/v2/bot/message/reply",
            {"replyToken": reply_token, "messages": messages},
        )

    async def push_message(self, to: str, texts: Union[str, Sequence[str]]) -> bool:
        """Send messages to a user at any time (used for manual replies)."""
        messages = _text_messages(texts)
        if not to or not messages:
            return False
        return await self._post(
            "/v2/bot/message/push",
            {"to": to, "messages": messages},
        )

    async def get_profile(self, user_id: str) -> Optional[dict]:
        """
        Look up a user's display name and picture.

        Returns:
            Profile dict with displayName/userId/pictureUrl, or None on failure
        """
        url = f"{self.base_url}/v2/bot/profile/{user_id}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(url, headers=self._headers)
            if response.status_code >= 400:
                logger.warning(f"LINE profile lookup for {user_id} returned {response.status_code}")
                return None
            return response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"LINE profile lookup for {user_id} failed: {type(e).__name__}: {e}")
            return None


class LineLoginClient:
    """OAuth2 client for LINE Login."""

    SCOPE = "profile openid email"

    def __init__(
        self,
        channel_id: Optional[str] = None,
        channel_secret: Optional[str] = None,
        api_base: Optional[str] = None,
        auth_base: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.channel_id = channel_id or settings.LINE_LOGIN_CHANNEL_ID
        self.channel_secret = channel_secret or settings.LINE_LOGIN_CHANNEL_SECRET
        self.api_base = (api_base or settings.LINE_API_BASE).rstrip("/")
        self.auth_base = (auth_base or settings.LINE_AUTH_BASE).rstrip("/")
        self.timeout = timeout or settings.HTTP_TIMEOUT_SECONDS

    def build_authorize_url(self, redirect_uri: str, state: str, nonce: str) -> str:
        query = urlencode({
            "response_type": "code",
            "client_id": self.channel_id,
            "redirect_uri": redirect_uri,
            "state": state,
            "scope": self.SCOPE,
            "nonce": nonce,
        })
        return f"{self.auth_base}/oauth2/v2.1/authorize?{query}"

    async def exchange_code(self, code: str, redirect_uri: str) -> dict:
        """
        Exchange an authorization code for tokens.

        Raises:
            UpstreamError: If LINE rejects the code or cannot be reached
        """
        data = {
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": redirect_uri,
            "client_id": self.channel_id,
            "client_secret": self.channel_secret,
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    f"{self.api_base}/oauth2/v2.1/token",
                    data=data,
                    headers={"Content-Type": "application/x-www-form-urlencoded"},
                )
        except httpx.HTTPError as e:
            raise UpstreamError(f"Failed to exchange token: {e}") from e

        if response.status_code >= 400:
            raise UpstreamError(f"Failed to exchange token: HTTP {response.status_code}")
        return response.json()

    async def get_profile(self, access_token: str) -> dict:
        """
        Fetch the signed-in user's profile.

        Raises:
            UpstreamError: If the profile cannot be fetched
        """
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(
                    f"{self.api_base}/v2/profile",
                    headers={"Authorization": f"Bearer {access_token}"},
                )
        except httpx.HTTPError as e:
            raise UpstreamError(f"Failed to get profile: {e}") from e

        if response.status_code >= 400:
            raise UpstreamError(f"Failed to get profile: HTTP {response.status_code}")
        return response.json()
