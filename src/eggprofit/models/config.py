"""
Remote config models — session config response and install metadata.
"""

from typing import Any, Optional

from pydantic import BaseModel, Field, StrictBool, model_validator

AttributionPayload = dict[str, Any]


class SessionConfigResponse(BaseModel):
    ok: StrictBool = False
    address: Optional[str] = Field(default=None, alias="url")
    expires_at: Optional[float] = Field(default=None, alias="expires")

    model_config = {"populate_by_name": True}

    @model_validator(mode="after")
    def _ok_needs_address(self) -> "SessionConfigResponse":
        if self.ok and not self.address:
            raise ValueError("ok response without url")
        return self


class InstallMetadata(BaseModel):
    """Fields merged into every session config request."""
    af_id: Optional[str] = None
    bundle_id: str = "com.example.app"
    os: str = "iOS"
    store_id: str = ""
    locale: str = "EN"
    push_token: Optional[str] = None
    firebase_project_id: Optional[str] = None

    @staticmethod
    def locale_tag(preferred_language: Optional[str]) -> str:
        """Two-letter upper-cased language prefix, e.g. ``en-US`` -> ``EN``."""
        if not preferred_language:
            return "EN"
        return preferred_language[:2].upper()
