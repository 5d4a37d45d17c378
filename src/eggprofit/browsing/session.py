"""
Embedded browsing session manager.

Owns the primary surface and any popup child surfaces, applies the single
navigation policy to all of them, guards against redirect loops, and keeps
the persisted cookie snapshot current.

Surface events (redirect, load failed, load finished) arrive on one queue
and are handled in order by ``run()``; ``handle_event`` can also be called
directly by platform glue that already runs on the loop.
"""

import asyncio
import logging
from typing import Any, Optional

from eggprofit.browsing.policy import ServerTrustHandler, decide_navigation, is_web_address
from eggprofit.browsing.surface import BrowsingSurface, ExternalOpener, SurfaceFactory
from eggprofit.errors import EggProfitError, RedirectLoopDetected, TooManyRedirects
from eggprofit.events import EventChannel, RemoteContentFailed
from eggprofit.models.surface import (
    AuthChallenge,
    ChallengeDisposition,
    Cookie,
    CookieSnapshot,
    LoadErrorKind,
    LoadFailed,
    LoadFinished,
    NavigationDecision,
    NavigationRequest,
    Redirect,
    SurfaceEvent,
)
from eggprofit.storage import CookieStore

logger = logging.getLogger(__name__)

DEFAULT_REDIRECT_THRESHOLD = 70


class SurfaceSession:
    """A surface plus the navigation state private to it."""

    __slots__ = ("surface", "is_primary", "last_successful_address", "redirect_count")

    def __init__(self, surface: BrowsingSurface, is_primary: bool = False):
        self.surface = surface
        self.is_primary = is_primary
        self.last_successful_address: Optional[str] = None
        self.redirect_count = 0

    def __repr__(self) -> str:
        kind = "primary" if self.is_primary else "child"
        return f"SurfaceSession({kind}, last={self.last_successful_address!r}, redirects={self.redirect_count})"


def group_cookies(cookies: list[Cookie]) -> CookieSnapshot:
    snapshot: CookieSnapshot = {}
    for cookie in cookies:
        snapshot.setdefault(cookie.domain, {})[cookie.name] = cookie.model_dump(exclude={"name", "domain"})
    return snapshot


def flatten_cookies(snapshot: CookieSnapshot) -> list[Cookie]:
    cookies: list[Cookie] = []
    for domain, by_name in snapshot.items():
        if not isinstance(by_name, dict):
            continue
        for name, attrs in by_name.items():
            try:
                cookies.append(Cookie.model_validate({**attrs, "name": name, "domain": domain}))
            except (TypeError, ValueError) as e:
                logger.warning(f"Skipping stored cookie {domain}/{name}: {e}")
    return cookies


class BrowsingSessionManager:
    def __init__(
        self,
        surface_factory: SurfaceFactory,
        container: Any,
        cookie_store: CookieStore,
        external_opener: ExternalOpener,
        trust: Optional[ServerTrustHandler] = None,
        redirect_threshold: int = DEFAULT_REDIRECT_THRESHOLD,
        channel: Optional[EventChannel] = None,
    ):
        self._factory = surface_factory
        self._container = container
        self._cookie_store = cookie_store
        self._open_externally = external_opener
        self._trust = trust or ServerTrustHandler()
        self._threshold = redirect_threshold
        self._channel = channel
        self._primary: Optional[SurfaceSession] = None
        self._children: list[SurfaceSession] = []
        self._events: asyncio.Queue[tuple[SurfaceSession, SurfaceEvent]] = asyncio.Queue()

    @property
    def primary(self) -> Optional[SurfaceSession]:
        return self._primary

    @property
    def children(self) -> list[SurfaceSession]:
        return list(self._children)

    def open_primary(self, address: str) -> SurfaceSession:
        """(Re)create the primary surface, restore cookies, then load ``address``."""
        if self._primary is not None:
            self._primary.surface.detach()
        surface = self._factory()
        surface.attach(self._container)
        self.restore_cookies(surface)
        self._primary = SurfaceSession(surface, is_primary=True)
        surface.load(address)
        return self._primary

    # navigation policy

    def decide_policy(self, session: SurfaceSession, request: NavigationRequest) -> NavigationDecision:
        url = (request.url or "").strip()
        if not url:
            return NavigationDecision.CANCEL
        decision = decide_navigation(url)
        if decision == NavigationDecision.ALLOW:
            session.last_successful_address = url
        else:
            logger.info(f"Handing non-web address to the platform: {url}")
            self._open_externally(url)
        return decision

    def handle_challenge(self, challenge: AuthChallenge) -> ChallengeDisposition:
        return self._trust.handle(challenge)

    # surface events

    def post(self, session: SurfaceSession, event: SurfaceEvent) -> None:
        self._events.put_nowait((session, event))

    async def run(self) -> None:
        while True:
            session, event = await self._events.get()
            try:
                self.handle_event(session, event)
            except EggProfitError as e:
                logger.error(f"Surface event {event!r} failed: {e}")

    def handle_event(self, session: SurfaceSession, event: SurfaceEvent) -> None:
        if isinstance(event, Redirect):
            self._on_redirect(session, event)
        elif isinstance(event, LoadFailed):
            if event.kind == LoadErrorKind.TOO_MANY_REDIRECTS:
                self._fall_back(session, TooManyRedirects(event.url))
            else:
                logger.info(f"Load failed ({event.kind.value}) for {event.url}: {event.message}")
                if not session.is_primary and event.kind != LoadErrorKind.CANCELLED:
                    self.close_child(session)
        elif isinstance(event, LoadFinished):
            if is_web_address(event.url):
                session.last_successful_address = event.url
            session.redirect_count = 0

    def _on_redirect(self, session: SurfaceSession, event: Redirect) -> None:
        current = session.surface.current_url
        if is_web_address(current):
            session.last_successful_address = current
        session.redirect_count += 1
        self.persist_cookies(session.surface)
        if session.redirect_count > self._threshold:
            self._fall_back(session, RedirectLoopDetected(session.redirect_count, event.url))

    def _fall_back(self, session: SurfaceSession, error: EggProfitError) -> None:
        logger.warning(f"{error} on {session!r}")
        session.surface.stop_loading()
        session.redirect_count = 0
        target = session.last_successful_address
        if target:
            session.surface.load(target)
            return
        if session.is_primary:
            if self._channel is not None:
                self._channel.push(RemoteContentFailed(reason=error.code))
        else:
            self.close_child(session)

    # child surfaces

    def create_child(self, request: NavigationRequest) -> Optional[SurfaceSession]:
        """Spawn a child surface for a new-context request with no target frame."""
        if request.has_target_frame:
            return None
        surface = self._factory()
        surface.attach(self._container)
        child = SurfaceSession(surface)
        self._children.append(child)
        url = (request.url or "").strip()
        if url:
            surface.load(url)
        return child

    def dismiss_newest(self) -> bool:
        """Edge-dismiss gesture: go back in the newest child, or close it."""
        if not self._children:
            return False
        child = self._children[-1]
        if child.surface.can_go_back:
            child.surface.go_back()
        else:
            self.close_child(child)
        return True

    def close_child(self, child: SurfaceSession) -> None:
        child.surface.detach()
        try:
            self._children.remove(child)
        except ValueError:
            pass

    # cookies

    def persist_cookies(self, surface: BrowsingSurface) -> None:
        self._cookie_store.save(group_cookies(surface.get_cookies()))

    def restore_cookies(self, surface: BrowsingSurface) -> None:
        cookies = flatten_cookies(self._cookie_store.load())
        if cookies:
            surface.set_cookies(cookies)
