"""
Connectivity monitor — probes reachability on a background thread and
pushes ``ConnectivityChanged`` into the resolver's channel on every change.
"""

import asyncio
import logging
import socket
import threading
from typing import Callable, Optional

from eggprofit.events import ConnectivityChanged, EventChannel

logger = logging.getLogger(__name__)

Probe = Callable[[], bool]


def tcp_probe(host: str = "1.1.1.1", port: int = 53, timeout: float = 3.0) -> Probe:
    def probe() -> bool:
        try:
            with socket.create_connection((host, port), timeout=timeout):
                return True
        except OSError:
            return False
    return probe


class ConnectivityMonitor:
    def __init__(self, probe: Optional[Probe] = None, interval: float = 2.0):
        self._probe = probe or tcp_probe()
        self._interval = interval
        self._online: Optional[bool] = None
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def online(self) -> Optional[bool]:
        """Last observed status, ``None`` before the first probe."""
        return self._online

    async def check(self) -> bool:
        try:
            online = bool(await asyncio.to_thread(self._probe))
        except Exception as e:
            logger.error(f"Connectivity probe failed: {e}")
            online = False
        self._online = online
        return online

    def start(self, channel: EventChannel) -> None:
        if self._thread and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._watch, args=(channel,), name="eggprofit-connectivity", daemon=True,
        )
        self._thread.start()

    def stop(self) -> None:
        self._stop.set()
        if self._thread:
            self._thread.join(timeout=self._interval + 1.0)
            self._thread = None

    def _watch(self, channel: EventChannel) -> None:
        while not self._stop.is_set():
            try:
                online = bool(self._probe())
            except Exception as e:
                logger.error(f"Connectivity probe failed: {e}")
                online = False
            if online != self._online:
                logger.info(f"Connectivity changed: online={online}")
                self._online = online
                channel.push(ConnectivityChanged(online=online))
            self._stop.wait(self._interval)
