"""
Launch resolver — picks the top-level experience for this process run.

One resolution walks these steps strictly in order:

1. offline and already committed to native mode -> NATIVE_FALLBACK
2. offline otherwise -> CONNECTIVITY_FAILURE (re-entered on retry / reconnect)
3. committed to native mode -> NATIVE_FALLBACK, no network
4. first launch of an organic install -> delayed organic re-check
5. pending deep link -> consume it, REMOTE_CONTENT
6. notification permission gate (may suspend on the prompt)
7. session config fetch, with saved-address / native fallback on failure

Phases are finalised with a check-and-set against the run generation, so a
response that arrives after another path already finalised is dropped.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

from eggprofit.attribution import AttributionCollector, is_organic
from eggprofit.connectivity import ConnectivityMonitor
from eggprofit.errors import (
    AttributionVerificationFailed,
    ConfigFetchFailed,
    ConnectivityUnavailable,
    EggProfitError,
)
from eggprofit.events import (
    ConnectivityChanged,
    ConversionDataFailed,
    ConversionDataReceived,
    DeepLinkReceived,
    EventChannel,
    LaunchEvent,
    PushTokenRefreshed,
    RemoteContentFailed,
    RetryRequested,
)
from eggprofit.models.config import AttributionPayload, InstallMetadata
from eggprofit.models.launch import AppMode, LaunchPhase, PersistedLaunchState
from eggprofit.notifications import NotificationPermissionGate, NotificationPrompter
from eggprofit.remote_config import RemoteConfigClient
from eggprofit.storage import LaunchStateStore

logger = logging.getLogger(__name__)

PhaseListener = Callable[[LaunchPhase, Optional[str]], None]

ORGANIC_RECHECK_DELAY = 5.0
ATTRIBUTION_WAIT = 15.0


class LaunchResolver:
    def __init__(
        self,
        store: LaunchStateStore,
        remote: RemoteConfigClient,
        connectivity: ConnectivityMonitor,
        attribution: AttributionCollector,
        gate: NotificationPermissionGate,
        prompter: NotificationPrompter,
        metadata: Optional[InstallMetadata] = None,
        channel: Optional[EventChannel] = None,
        organic_recheck_delay: float = ORGANIC_RECHECK_DELAY,
        attribution_wait: float = ATTRIBUTION_WAIT,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self._store = store
        self._remote = remote
        self._connectivity = connectivity
        self._attribution = attribution
        self._gate = gate
        self._prompter = prompter
        self._metadata = metadata or InstallMetadata()
        self.channel = channel or EventChannel()
        self._organic_recheck_delay = organic_recheck_delay
        self._attribution_wait = attribution_wait
        self._sleep = sleep

        self._phase = LaunchPhase.LAUNCHING
        self._remote_address: Optional[str] = None
        self._prompt_visible = False
        self._online: Optional[bool] = None
        self._generation = 0
        self._resolving = False
        self._commit_lock = asyncio.Lock()
        self._settled = asyncio.Event()

        self._conversion: AttributionPayload = {}
        self._conversion_ready = asyncio.Event()

        self._listeners: list[PhaseListener] = []
        self._pump_task: Optional[asyncio.Task[None]] = None
        self._resolve_task: Optional[asyncio.Task[LaunchPhase]] = None
        self.history: list[LaunchPhase] = [LaunchPhase.LAUNCHING]
        self.last_error: Optional[EggProfitError] = None

    # read side for the dashboard

    @property
    def phase(self) -> LaunchPhase:
        return self._phase

    @property
    def remote_address(self) -> Optional[str]:
        return self._remote_address

    @property
    def prompt_visible(self) -> bool:
        return self._prompt_visible

    def add_listener(self, listener: PhaseListener) -> Callable[[], None]:
        """Call ``listener(phase, address)`` on every phase change. Returns a remover."""
        self._listeners.append(listener)
        def remove() -> None:
            try:
                self._listeners.remove(listener)
            except ValueError:
                pass
        return remove

    async def wait_settled(self, timeout: Optional[float] = None) -> LaunchPhase:
        """Wait until the phase is anything other than LAUNCHING."""
        await asyncio.wait_for(self._settled.wait(), timeout=timeout)
        return self._phase

    # lifecycle

    async def start(self) -> None:
        if self._pump_task is not None:
            return
        self.channel.bind(asyncio.get_running_loop())
        self._pump_task = asyncio.create_task(self._pump())
        self._connectivity.start(self.channel)
        self._attribution.start(self.channel)

    async def run(self) -> LaunchPhase:
        """Start collaborators and resolve; events keep being served afterwards."""
        await self.start()
        return await self.resolve()

    def retry(self) -> None:
        self.channel.push(RetryRequested())

    async def close(self) -> None:
        self._connectivity.stop()
        for task in (self._resolve_task, self._pump_task):
            if task is not None and not task.done():
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
        self._pump_task = None
        self._resolve_task = None

    # resolution

    async def resolve(self) -> LaunchPhase:
        self._resolving = True
        await self.start()
        async with self._commit_lock:
            self._generation += 1
            generation = self._generation
            self._set_phase(LaunchPhase.LAUNCHING, None)
            self.last_error = None
        try:
            await self._resolve(generation)
        except EggProfitError as e:
            logger.error(f"Launch resolution failed: {e}")
            self.last_error = e
            await self._fall_back(generation)
        except Exception as e:
            logger.exception(f"Launch resolution crashed: {e}")
            await self._fall_back(generation)
        finally:
            if generation == self._generation:
                self._resolving = False
        return self._phase

    async def _resolve(self, generation: int) -> None:
        self._online = await self._connectivity.check()
        state = self._store.state

        if not self._online:
            await self._go_offline(generation, state)
            return
        if state.app_mode == AppMode.NATIVE_FALLBACK:
            await self._commit(generation, LaunchPhase.NATIVE_FALLBACK)
            return

        snapshot = await self._conversion_snapshot()
        deep_link_allowed = True

        if not state.has_launched_before and is_organic(snapshot):
            await self._sleep(self._organic_recheck_delay)
            if not self._online:
                await self._go_offline(generation, self._store.state)
                return
            try:
                snapshot = await self._remote.verify_organic_install(self._attribution.install_id)
            except AttributionVerificationFailed as e:
                logger.warning(f"Organic re-check failed, keeping original attribution: {e}")
                self.last_error = e
                deep_link_allowed = False

        if deep_link_allowed and await self._take_deep_link(generation):
            return

        if self._gate.should_prompt():
            await self._prompt()

        if not self._online:
            await self._go_offline(generation, self._store.state)
            return
        await self._fetch_config(generation, snapshot)

    async def _conversion_snapshot(self) -> AttributionPayload:
        try:
            await asyncio.wait_for(self._conversion_ready.wait(), timeout=self._attribution_wait)
        except asyncio.TimeoutError:
            logger.warning("No attribution payload arrived, continuing without it")
        return dict(self._conversion)

    async def _take_deep_link(self, generation: int) -> bool:
        async with self._commit_lock:
            if not self._is_current(generation):
                return True
            link = await self._store.consume_deep_link()
            if not link:
                return False
            logger.info(f"Opening stored deep link {link}")
            self._set_phase(LaunchPhase.REMOTE_CONTENT, link)
            return True

    async def _prompt(self) -> None:
        self._prompt_visible = True
        try:
            await self._gate.run_prompt(self._prompter)
        except Exception as e:
            logger.error(f"Notification prompt failed, continuing without it: {e}")
        finally:
            self._prompt_visible = False

    async def _fetch_config(self, generation: int, snapshot: AttributionPayload) -> None:
        state = self._store.state
        metadata = self._metadata.model_copy(update={
            "af_id": self._attribution.install_id,
            "push_token": state.push_token or self._metadata.push_token,
        })
        try:
            response = await self._remote.fetch_session_config(snapshot, metadata)
        except ConfigFetchFailed as e:
            logger.warning(f"Session config failed ({e.kind}): {e}")
            self.last_error = e
            await self._fall_back(generation)
            return

        if response.ok:
            await self._commit(
                generation, LaunchPhase.REMOTE_CONTENT, response.address,
                persist={
                    "saved_address": response.address,
                    "saved_expiry": response.expires_at,
                    "app_mode": AppMode.REMOTE_CONTENT,
                    "has_launched_before": True,
                },
            )
        else:
            await self._commit(generation, LaunchPhase.NATIVE_FALLBACK, persist=self._native_mode())

    async def _fall_back(self, generation: int) -> None:
        saved = self._store.state.saved_address
        if saved:
            await self._commit(generation, LaunchPhase.REMOTE_CONTENT, saved)
        else:
            await self._commit(generation, LaunchPhase.NATIVE_FALLBACK, persist=self._native_mode())

    async def _go_offline(self, generation: int, state: PersistedLaunchState) -> None:
        self.last_error = ConnectivityUnavailable()
        if state.app_mode == AppMode.NATIVE_FALLBACK:
            await self._commit(generation, LaunchPhase.NATIVE_FALLBACK)
        else:
            await self._commit(generation, LaunchPhase.CONNECTIVITY_FAILURE)

    @staticmethod
    def _native_mode() -> dict[str, Any]:
        return {"app_mode": AppMode.NATIVE_FALLBACK, "has_launched_before": True}

    # phase bookkeeping

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation and self._phase == LaunchPhase.LAUNCHING

    async def _commit(
        self,
        generation: int,
        phase: LaunchPhase,
        address: Optional[str] = None,
        persist: Optional[dict[str, Any]] = None,
    ) -> bool:
        async with self._commit_lock:
            if not self._is_current(generation):
                logger.info(f"Dropping stale {phase.value} result from run {generation}")
                return False
            if persist:
                await self._store.update(**persist)
            self._set_phase(phase, address)
            return True

    def _set_phase(self, phase: LaunchPhase, address: Optional[str]) -> None:
        changed = phase != self._phase or address != self._remote_address
        self._phase = phase
        self._remote_address = address
        if phase == LaunchPhase.LAUNCHING:
            self._settled.clear()
        else:
            self._settled.set()
        if not changed:
            return
        self.history.append(phase)
        logger.info(f"Launch phase -> {phase.value}" + (f" ({address})" if address else ""))
        for listener in list(self._listeners):
            listener(phase, address)

    # events

    async def _pump(self) -> None:
        while True:
            event = await self.channel.get()
            try:
                await self._dispatch(event)
            except EggProfitError as e:
                logger.error(f"Handling {event!r} failed: {e}")

    async def _dispatch(self, event: LaunchEvent) -> None:
        if isinstance(event, ConversionDataReceived):
            if not self._conversion_ready.is_set():
                self._conversion = dict(event.payload)
                self._conversion_ready.set()
        elif isinstance(event, ConversionDataFailed):
            logger.warning(f"Attribution failed: {event.reason}")
            self._conversion_ready.set()
        elif isinstance(event, ConnectivityChanged):
            self._online = event.online
            if event.online and self._phase == LaunchPhase.CONNECTIVITY_FAILURE:
                self._relaunch()
        elif isinstance(event, RetryRequested):
            self._relaunch()
        elif isinstance(event, PushTokenRefreshed):
            await self._store.update(push_token=event.token)
        elif isinstance(event, DeepLinkReceived):
            if event.address:
                await self._store.update(pending_deep_link=event.address)
        elif isinstance(event, RemoteContentFailed):
            if self._phase == LaunchPhase.REMOTE_CONTENT:
                logger.warning(f"Remote content could not recover ({event.reason}), showing native dashboard")
                self._set_phase(LaunchPhase.NATIVE_FALLBACK, None)

    def _relaunch(self) -> None:
        if self._resolving:
            logger.info("Retry ignored, a resolution is already in flight")
            return
        # set before the task runs so a second queued event sees it
        self._resolving = True
        self._resolve_task = asyncio.create_task(self.resolve())
