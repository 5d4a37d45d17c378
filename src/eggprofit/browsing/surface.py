"""
Platform contract for a browsing surface (the embedded web engine view).
"""

from typing import Any, Callable, Optional, Protocol

from eggprofit.models.surface import Cookie

ExternalOpener = Callable[[str], None]


class BrowsingSurface(Protocol):
    @property
    def current_url(self) -> Optional[str]: ...

    @property
    def can_go_back(self) -> bool: ...

    def load(self, url: str) -> None: ...

    def stop_loading(self) -> None: ...

    def go_back(self) -> None: ...

    def attach(self, container: Any) -> None: ...

    def detach(self) -> None: ...

    def get_cookies(self) -> list[Cookie]: ...

    def set_cookies(self, cookies: list[Cookie]) -> None: ...


SurfaceFactory = Callable[[], BrowsingSurface]
