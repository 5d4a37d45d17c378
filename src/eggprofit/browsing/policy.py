"""
Navigation and server-trust policy for embedded browsing surfaces.
"""

import logging
from enum import Enum
from typing import Iterable, Optional
from urllib.parse import urlsplit

from eggprofit.models.surface import (
    AuthChallenge,
    ChallengeDisposition,
    ChallengeKind,
    NavigationDecision,
)

logger = logging.getLogger(__name__)

WEB_SCHEMES = frozenset({"http", "https"})


class TrustPolicy(str, Enum):
    SYSTEM = "system"              # platform default evaluation for every challenge
    TRUSTED_HOSTS = "trusted_hosts"  # accept presented trust only for listed hosts
    ACCEPT_ALL = "accept_all"      # accept any presented server trust


def is_web_address(url: Optional[str]) -> bool:
    if not url:
        return False
    return urlsplit(url.strip()).scheme.lower() in WEB_SCHEMES


def decide_navigation(url: str) -> NavigationDecision:
    if is_web_address(url):
        return NavigationDecision.ALLOW
    return NavigationDecision.OPEN_EXTERNALLY


class ServerTrustHandler:
    def __init__(self, policy: TrustPolicy = TrustPolicy.SYSTEM, trusted_hosts: Iterable[str] = ()):
        self.policy = policy
        self._trusted_hosts = {h.lower() for h in trusted_hosts}
        if policy == TrustPolicy.ACCEPT_ALL:
            logger.warning("Server trust policy accept_all: certificate validation is disabled for browsing surfaces")

    def handle(self, challenge: AuthChallenge) -> ChallengeDisposition:
        if challenge.kind != ChallengeKind.SERVER_TRUST:
            return ChallengeDisposition.DEFAULT_HANDLING
        if self.policy == TrustPolicy.ACCEPT_ALL:
            return ChallengeDisposition.USE_PRESENTED_TRUST
        if self.policy == TrustPolicy.TRUSTED_HOSTS and challenge.host.lower() in self._trusted_hosts:
            return ChallengeDisposition.USE_PRESENTED_TRUST
        return ChallengeDisposition.DEFAULT_HANDLING
