from eggprofit.models.config import AttributionPayload, InstallMetadata, SessionConfigResponse
from eggprofit.models.launch import AppMode, LaunchPhase, PersistedLaunchState
from eggprofit.models.surface import (
    AuthChallenge,
    ChallengeDisposition,
    ChallengeKind,
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

__all__ = [
    "AttributionPayload",
    "InstallMetadata",
    "SessionConfigResponse",
    "AppMode",
    "LaunchPhase",
    "PersistedLaunchState",
    "AuthChallenge",
    "ChallengeDisposition",
    "ChallengeKind",
    "Cookie",
    "CookieSnapshot",
    "LoadErrorKind",
    "LoadFailed",
    "LoadFinished",
    "NavigationDecision",
    "NavigationRequest",
    "Redirect",
    "SurfaceEvent",
]
