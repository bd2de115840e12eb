"""
Slack Client
============
Minimal Slack Web API client for posting replies (chat.postMessage).
"""

import logging
from typing import Any, Dict, Optional

import httpx

from murphybot.models.schemas import OutboundReply

logger = logging.getLogger(__name__)


class SlackClient:
    """
    Posts replies through the Slack Web API.

    Args:
        bot_token: Bot token (xoxb-...)
        base_url: Web API base URL
        http_client: Optional shared httpx client, mainly for tests
    """

    def __init__(
        self,
        bot_token: str,
        base_url: str = "https://slack.com/api",
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.bot_token = bot_token
        self.base_url = base_url.rstrip("/")
        self._http = http_client

    @property
    def http(self) -> httpx.AsyncClient:
        if self._http is None:
            self._http = httpx.AsyncClient(timeout=15.0)
        return self._http

    async def post_reply(
        self,
        channel: str,
        reply: OutboundReply,
        thread_ts: Optional[str] = None,
    ) -> bool:
        """
        Send a reply to a channel (or thread).

        Returns:
            True when Slack accepted the message. Failures are logged, not raised.
        """
        if not self.bot_token:
            logger.error("SLACK_BOT_TOKEN is not set; reply dropped")
            return False

        payload: Dict[str, Any] = {"channel": channel, "text": reply.text}
        blocks = reply.to_slack_blocks()
        if blocks:
            payload["blocks"] = blocks
        if thread_ts:
            payload["thread_ts"] = thread_ts

        try:
            response = await self.http.post(
                f"{self.base_url}/chat.postMessage",
                json=payload,
                headers={"Authorization": f"Bearer {self.bot_token}"},
            )
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"❌ Slack post failed: {e}")
            return False

        if not data.get("ok"):
            logger.error(f"❌ Slack rejected message: {data.get('error', 'unknown_error')}")
            return False

        return True

    async def close(self) -> None:
        if self._http is not None:
            await self._http.aclose()
            self._http = None
