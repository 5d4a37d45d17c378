"""
Push payload handling — deep links and push token refresh.

A push payload may carry a link either at ``url`` or at ``data.url``. The
link reaches the resolver as a ``DeepLinkReceived`` event after a short
fixed delay that lets the UI settle; the resolver persists it for the next
launch.
"""

import asyncio
import logging
from typing import Any, Optional

from eggprofit.events import DeepLinkReceived, EventChannel, PushTokenRefreshed

logger = logging.getLogger(__name__)

DEEP_LINK_DELAY = 2.0


def extract_link(payload: dict[str, Any]) -> Optional[str]:
    link = payload.get("url")
    if isinstance(link, str) and link:
        return link
    data = payload.get("data")
    if isinstance(data, dict):
        link = data.get("url")
        if isinstance(link, str) and link:
            return link
    return None


class PushPayloadHandler:
    def __init__(self, channel: EventChannel, delay: float = DEEP_LINK_DELAY):
        self._channel = channel
        self._delay = delay

    def handle(self, payload: dict[str, Any]) -> Optional[str]:
        """Must be called from the running loop."""
        link = extract_link(payload)
        if link is None:
            return None
        logger.info(f"Push payload carries deep link {link}")
        loop = asyncio.get_running_loop()
        loop.call_later(self._delay, self._channel.push, DeepLinkReceived(address=link))
        return link

    def token_refreshed(self, token: Optional[str]) -> None:
        if token:
            self._channel.push(PushTokenRefreshed(token=token))
