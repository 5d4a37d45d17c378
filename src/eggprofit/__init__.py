"""
eggprofit — launch resolution and embedded browsing session for the
EggProfit app shell.

Decides at launch between the native dashboard and remote content, and
manages the embedded browsing surfaces that show the remote content.
"""

__version__ = "0.1.0"

from eggprofit.client import EggProfitLauncher
from eggprofit.browsing.session import BrowsingSessionManager
from eggprofit.config import Settings, load_settings
from eggprofit.errors import (
    EggProfitError,
    ConnectivityUnavailable,
    AttributionVerificationFailed,
    ConfigFetchFailed,
    RedirectLoopDetected,
    TooManyRedirects,
    StateInvariantError,
)
from eggprofit.models.launch import AppMode, LaunchPhase, PersistedLaunchState
from eggprofit.resolver import LaunchResolver

__all__ = [
    "EggProfitLauncher",
    "BrowsingSessionManager",
    "LaunchResolver",
    "Settings",
    "load_settings",
    "EggProfitError",
    "ConnectivityUnavailable",
    "AttributionVerificationFailed",
    "ConfigFetchFailed",
    "RedirectLoopDetected",
    "TooManyRedirects",
    "StateInvariantError",
    "AppMode",
    "LaunchPhase",
    "PersistedLaunchState",
]
