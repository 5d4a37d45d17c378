"""
Browsing surface models — navigation requests, surface events and cookies.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel

CookieSnapshot = dict[str, dict[str, dict[str, Any]]]


class NavigationDecision(str, Enum):
    ALLOW = "allow"
    CANCEL = "cancel"
    OPEN_EXTERNALLY = "open_externally"


class LoadErrorKind(str, Enum):
    TOO_MANY_REDIRECTS = "too_many_redirects"
    CANCELLED = "cancelled"
    OTHER = "other"


class ChallengeKind(str, Enum):
    SERVER_TRUST = "server_trust"
    OTHER = "other"


class ChallengeDisposition(str, Enum):
    USE_PRESENTED_TRUST = "use_presented_trust"
    DEFAULT_HANDLING = "default_handling"


class Cookie(BaseModel):
    name: str
    value: str
    domain: str
    path: str = "/"
    expires: Optional[float] = None
    secure: bool = False
    http_only: bool = False


@dataclass(frozen=True)
class NavigationRequest:
    url: str
    has_target_frame: bool = True


@dataclass(frozen=True)
class AuthChallenge:
    kind: ChallengeKind
    host: str


@dataclass(frozen=True)
class Redirect:
    url: str


@dataclass(frozen=True)
class LoadFailed:
    kind: LoadErrorKind
    url: Optional[str] = None
    message: str = ""


@dataclass(frozen=True)
class LoadFinished:
    url: str


SurfaceEvent = Union[Redirect, LoadFailed, LoadFinished]
