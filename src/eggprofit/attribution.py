"""
Attribution collector contract.

The attribution SDK is external: it supplies one conversion payload per
install (or fails) and a stable install id. Adapters push exactly one
``ConversionDataReceived`` / ``ConversionDataFailed`` into the channel.
"""

from typing import Any, Optional, Protocol

from eggprofit.events import ConversionDataFailed, ConversionDataReceived, EventChannel

ORGANIC_STATUS = "Organic"


def is_organic(payload: dict[str, Any]) -> bool:
    return payload.get("af_status") == ORGANIC_STATUS


class AttributionCollector(Protocol):
    @property
    def install_id(self) -> str: ...

    def start(self, channel: EventChannel) -> None: ...


class StaticAttributionCollector:
    """Collector with a payload known up front (CLI runs, tests, replays)."""

    def __init__(self, install_id: str, payload: Optional[dict[str, Any]] = None, error: Optional[str] = None):
        self._install_id = install_id
        self._payload = payload
        self._error = error

    @property
    def install_id(self) -> str:
        return self._install_id

    def start(self, channel: EventChannel) -> None:
        if self._error is not None or self._payload is None:
            channel.push(ConversionDataFailed(reason=self._error or "no conversion data"))
        else:
            channel.push(ConversionDataReceived(payload=dict(self._payload)))
