"""Post supervisor status messages to a Discord webhook."""

from __future__ import annotations

import logging
from typing import Optional

import httpx

logger = logging.getLogger(__name__)


class DiscordNotifier:
    """Fire-and-forget webhook poster.

    Delivery problems are logged and swallowed so a flaky webhook never takes
    the supervisor down with it.  Without a URL every call is a no-op.
    """

    def __init__(self, webhook_url: Optional[str], *, timeout: float = 10.0) -> None:
        self.webhook_url = webhook_url or None
        self.timeout = timeout

    @property
    def enabled(self) -> bool:
        return self.webhook_url is not None

    async def send(self, message: str) -> bool:
        """Post ``message``; return ``True`` when the webhook accepted it."""

        if self.webhook_url is None:
            logger.debug("Webhook disabled, not sending: %s", message)
            return False

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(self.webhook_url, json={"content": message})
        except httpx.HTTPError as exc:
            logger.warning("Webhook delivery failed: %s", exc)
            return False

        if response.is_success:
            return True
        logger.warning("Webhook rejected message (HTTP %s): %s", response.status_code, message)
        return False
