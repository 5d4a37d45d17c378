"""
Launch events and the channel the resolver owns.

Collaborators never broadcast by name; each one is handed the resolver's
``EventChannel`` and pushes one typed event onto it.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Optional, Union

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConversionDataReceived:
    payload: dict[str, Any]


@dataclass(frozen=True)
class ConversionDataFailed:
    reason: str = ""


@dataclass(frozen=True)
class ConnectivityChanged:
    online: bool


@dataclass(frozen=True)
class RetryRequested:
    pass


@dataclass(frozen=True)
class PushTokenRefreshed:
    token: str


@dataclass(frozen=True)
class DeepLinkReceived:
    address: str


@dataclass(frozen=True)
class RemoteContentFailed:
    reason: str = ""


LaunchEvent = Union[
    ConversionDataReceived,
    ConversionDataFailed,
    ConnectivityChanged,
    RetryRequested,
    PushTokenRefreshed,
    DeepLinkReceived,
    RemoteContentFailed,
]


class EventChannel:
    """Queue of launch events, safe to push into from other threads."""

    def __init__(self) -> None:
        self._queue: asyncio.Queue[LaunchEvent] = asyncio.Queue()
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    def bind(self, loop: asyncio.AbstractEventLoop) -> None:
        self._loop = loop

    def push(self, event: LaunchEvent) -> None:
        loop = self._loop
        if loop is not None and loop.is_running():
            try:
                running = asyncio.get_running_loop()
            except RuntimeError:
                running = None
            if running is not loop:
                loop.call_soon_threadsafe(self._queue.put_nowait, event)
                return
        self._queue.put_nowait(event)

    async def get(self, timeout: Optional[float] = None) -> LaunchEvent:
        if timeout is None:
            return await self._queue.get()
        return await asyncio.wait_for(self._queue.get(), timeout=timeout)

    def get_nowait(self) -> Optional[LaunchEvent]:
        try:
            return self._queue.get_nowait()
        except asyncio.QueueEmpty:
            return None

    def empty(self) -> bool:
        return self._queue.empty()
