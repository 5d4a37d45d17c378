"""Shared fakes for the platform collaborators."""

import asyncio
import json
from typing import Any, Callable, Optional

import httpx
import pytest

from eggprofit.attribution import StaticAttributionCollector
from eggprofit.connectivity import ConnectivityMonitor
from eggprofit.models.config import InstallMetadata
from eggprofit.models.launch import PersistedLaunchState
from eggprofit.models.surface import Cookie
from eggprofit.notifications import NotificationPermissionGate
from eggprofit.remote_config import RemoteConfigClient
from eggprofit.resolver import LaunchResolver
from eggprofit.storage import CookieStore, LaunchStateStore, MemoryBackend
from eggprofit.transport.http import HttpClient

CONFIG_URL = "https://config.example/config.php"
ATTRIBUTION_URL = "https://attribution.example/install_data/v4.0/id1"
INSTALL_ID = "install-123"

Handler = Callable[[httpx.Request], httpx.Response]


class FakeProbe:
    def __init__(self, online: bool = True):
        self.online = online

    def __call__(self) -> bool:
        return self.online


class FakePrompter:
    def __init__(self, accept: bool = False, grant: bool = True):
        self.accept = accept
        self.grant = grant
        self.asked = 0
        self.permission_requests = 0

    async def ask(self) -> bool:
        self.asked += 1
        return self.accept

    async def request_permission(self) -> bool:
        self.permission_requests += 1
        return self.grant


class Recorder:
    """MockTransport handler that records requests and delegates to ``respond``."""

    def __init__(self, respond: Optional[Handler] = None):
        self.requests: list[httpx.Request] = []
        self.respond = respond or (lambda request: httpx.Response(200, json={"ok": False}))

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.respond(request)

    def bodies(self) -> list[dict[str, Any]]:
        return [json.loads(r.content) for r in self.requests if r.method == "POST"]


class FakeSurface:
    def __init__(self) -> None:
        self.current_url: Optional[str] = None
        self.can_go_back = False
        self.container: Any = None
        self.cookies: list[Cookie] = []
        self.calls: list[tuple[str, Any]] = []

    def load(self, url: str) -> None:
        self.calls.append(("load", url))
        self.current_url = url

    def stop_loading(self) -> None:
        self.calls.append(("stop", None))

    def go_back(self) -> None:
        self.calls.append(("back", None))

    def attach(self, container: Any) -> None:
        self.container = container

    def detach(self) -> None:
        self.calls.append(("detach", None))
        self.container = None

    def get_cookies(self) -> list[Cookie]:
        return list(self.cookies)

    def set_cookies(self, cookies: list[Cookie]) -> None:
        self.calls.append(("set_cookies", cookies))
        self.cookies = list(cookies)

    def loads(self) -> list[str]:
        return [arg for name, arg in self.calls if name == "load"]

    def count(self, name: str) -> int:
        return sum(1 for call, _ in self.calls if call == name)


async def wait_until(predicate: Callable[[], bool], timeout: float = 3.0) -> None:
    async def _poll() -> None:
        while not predicate():
            await asyncio.sleep(0.01)
    await asyncio.wait_for(_poll(), timeout=timeout)


def make_store(**state: Any) -> LaunchStateStore:
    return LaunchStateStore(MemoryBackend(PersistedLaunchState(**state).model_dump(mode="json")))


def make_remote(recorder: Recorder) -> RemoteConfigClient:
    http = HttpClient(transport=httpx.MockTransport(recorder))
    return RemoteConfigClient(
        http,
        config_endpoint=CONFIG_URL,
        attribution_endpoint=ATTRIBUTION_URL,
        dev_key="dev-key",
        config_timeout=1.0,
        attribution_timeout=1.0,
    )


def make_resolver(
    store: LaunchStateStore,
    recorder: Recorder,
    probe: Optional[FakeProbe] = None,
    payload: Optional[dict[str, Any]] = None,
    prompter: Optional[FakePrompter] = None,
    sleep: Optional[Callable[[float], Any]] = None,
    attribution_error: Optional[str] = None,
) -> LaunchResolver:
    if payload is None and attribution_error is None:
        payload = {"af_status": "Non-organic", "media_source": "ads"}

    async def _no_sleep(_delay: float) -> None:
        return None

    return LaunchResolver(
        store,
        make_remote(recorder),
        ConnectivityMonitor(probe or FakeProbe(True), interval=0.01),
        StaticAttributionCollector(INSTALL_ID, payload=payload, error=attribution_error),
        NotificationPermissionGate(store),
        prompter or FakePrompter(),
        metadata=InstallMetadata(bundle_id="com.egg.profit", store_id="id1"),
        attribution_wait=1.0,
        sleep=sleep or _no_sleep,
    )


@pytest.fixture
def cookie_store() -> CookieStore:
    return CookieStore(MemoryBackend())
