from eggprofit.browsing.policy import ServerTrustHandler, TrustPolicy, decide_navigation
from eggprofit.browsing.session import BrowsingSessionManager, SurfaceSession
from eggprofit.browsing.surface import BrowsingSurface

__all__ = [
    "BrowsingSessionManager",
    "BrowsingSurface",
    "ServerTrustHandler",
    "SurfaceSession",
    "TrustPolicy",
    "decide_navigation",
]
