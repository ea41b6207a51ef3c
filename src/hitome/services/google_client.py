"""
Google Business Profile client.

Only posting a reply to a review is needed; review notifications arrive
through the webhook.
"""

from typing import Optional
import logging

import httpx

from ..config import settings

logger = logging.getLogger(__name__)


class GoogleBusinessClient:
    """Reply to reviews with a store's OAuth access token."""

    def __init__(
        self,
        access_token: str,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.access_token = access_token
        self.base_url = (base_url or settings.GOOGLE_API_BASE).rstrip("/")
        self.timeout = timeout or settings.HTTP_TIMEOUT_SECONDS

    async def reply_to_review(self, review_name: str, comment: str) -> bool:
        """
        Create or replace the owner reply on a review.

        Args:
            review_name: Resource name accounts/{a}/locations/{l}/reviews/{r}
            comment: Reply text

        Returns:
            True if Google accepted the reply
        """
        if not review_name or not comment:
            return False

        url = f"{self.base_url}/v4/{review_name.lstrip('/')}/reply"
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.put(
                    url,
                    json={"comment": comment},
                    headers={"Authorization": f"Bearer {self.access_token}"},
                )
        except httpx.HTTPError as e:
            logger.error(f"Google review reply for {review_name} failed: {type(e).__name__}: {e}")
            return False

        if response.status_code >= 400:
            logger.error(
                f"Google review reply for {review_name} failed with HTTP "
                f"{response.status_code}: {response.text[:200]}"
            )
            return False
        return True
