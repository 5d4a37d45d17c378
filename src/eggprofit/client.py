"""
EggProfitLauncher — wires the launch resolver and browsing session manager
from one ``Settings`` object.
"""

from datetime import timedelta
from typing import Any, Optional

import httpx

from eggprofit.attribution import AttributionCollector
from eggprofit.browsing.policy import ServerTrustHandler
from eggprofit.browsing.session import BrowsingSessionManager
from eggprofit.browsing.surface import ExternalOpener, SurfaceFactory
from eggprofit.config import Settings
from eggprofit.connectivity import ConnectivityMonitor, Probe, tcp_probe
from eggprofit.models.config import InstallMetadata
from eggprofit.models.launch import LaunchPhase
from eggprofit.notifications import NotificationPermissionGate, NotificationPrompter
from eggprofit.push import PushPayloadHandler
from eggprofit.remote_config import RemoteConfigClient
from eggprofit.resolver import LaunchResolver
from eggprofit.storage import CookieStore, LaunchStateStore
from eggprofit.transport.http import HttpClient


class EggProfitLauncher:
    """Launch-time entry point for the app shell."""

    def __init__(
        self,
        settings: Settings,
        attribution: AttributionCollector,
        prompter: NotificationPrompter,
        probe: Optional[Probe] = None,
        store: Optional[LaunchStateStore] = None,
        cookie_store: Optional[CookieStore] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings
        self.store = store or LaunchStateStore.in_dir(settings.state_dir)
        self.cookie_store = cookie_store or CookieStore.in_dir(settings.state_dir)
        self.http = HttpClient(timeout=settings.config_timeout, transport=transport)
        self.remote = RemoteConfigClient(
            self.http,
            config_endpoint=settings.config_endpoint,
            attribution_endpoint=settings.attribution_endpoint,
            dev_key=settings.dev_key,
            config_timeout=settings.config_timeout,
            attribution_timeout=settings.attribution_timeout,
        )
        self.connectivity = ConnectivityMonitor(
            probe or tcp_probe(settings.connectivity_host, settings.connectivity_port),
            interval=settings.connectivity_interval,
        )
        self.gate = NotificationPermissionGate(
            self.store,
            cooldown=timedelta(seconds=settings.prompt_cooldown),
            timeout=settings.prompt_timeout,
        )
        self.resolver = LaunchResolver(
            self.store,
            self.remote,
            self.connectivity,
            attribution,
            self.gate,
            prompter,
            metadata=InstallMetadata(
                bundle_id=settings.bundle_id,
                store_id=settings.app_store_id,
                locale=InstallMetadata.locale_tag(settings.preferred_language),
                firebase_project_id=settings.firebase_project_id,
            ),
            organic_recheck_delay=settings.organic_recheck_delay,
            attribution_wait=settings.attribution_wait,
        )
        self.push = PushPayloadHandler(self.resolver.channel, delay=settings.deep_link_delay)

    @property
    def phase(self) -> LaunchPhase:
        return self.resolver.phase

    @property
    def remote_address(self) -> Optional[str]:
        return self.resolver.remote_address

    async def launch(self) -> LaunchPhase:
        return await self.resolver.run()

    def browsing(
        self, surface_factory: SurfaceFactory, container: Any, external_opener: ExternalOpener,
    ) -> BrowsingSessionManager:
        """Session manager for the remote-content phase, reporting back to the resolver."""
        return BrowsingSessionManager(
            surface_factory,
            container,
            self.cookie_store,
            external_opener,
            trust=ServerTrustHandler(self.settings.trust_policy, self.settings.trusted_hosts),
            redirect_threshold=self.settings.redirect_threshold,
            channel=self.resolver.channel,
        )

    async def close(self) -> None:
        await self.resolver.close()
        await self.http.close()
