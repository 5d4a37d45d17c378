"""
Launch models — phase, app mode and the persisted launch state.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, model_validator


class LaunchPhase(str, Enum):
    LAUNCHING = "launching"
    REMOTE_CONTENT = "remote_content"
    NATIVE_FALLBACK = "native_fallback"
    CONNECTIVITY_FAILURE = "connectivity_failure"


class AppMode(str, Enum):
    UNSET = "unset"
    REMOTE_CONTENT = "remote_content"
    NATIVE_FALLBACK = "native_fallback"


class PersistedLaunchState(BaseModel):
    has_launched_before: bool = False
    app_mode: AppMode = AppMode.UNSET
    saved_address: Optional[str] = None
    saved_expiry: Optional[float] = None
    accepted_notifications: bool = False
    system_declined_notifications: bool = False
    last_notification_prompt_at: Optional[datetime] = None
    push_token: Optional[str] = None
    pending_deep_link: Optional[str] = None

    @model_validator(mode="after")
    def _remote_mode_needs_address(self) -> "PersistedLaunchState":
        if self.app_mode == AppMode.REMOTE_CONTENT and not self.saved_address:
            raise ValueError("app_mode remote_content requires a non-empty saved_address")
        return self
