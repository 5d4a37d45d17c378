"""
Settings — endpoints, identifiers, timeouts and session policy.

Read from ``~/.eggprofit/config.json``; any field can be overridden with an
``EGGPROFIT_<FIELD>`` environment variable.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ValidationError

from eggprofit.browsing.policy import TrustPolicy

logger = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".eggprofit"
CONFIG_FILE = CONFIG_DIR / "config.json"
ENV_PREFIX = "EGGPROFIT_"


class Settings(BaseModel):
    config_endpoint: str = "https://eggprofit.com/config.php"
    attribution_endpoint: str = "https://gcdsdk.appsflyer.com/install_data/v4.0/id6753625851"
    dev_key: str = "efbC7vNvdEdhD44rPp5wS4"
    app_store_id: str = "id6753625851"
    bundle_id: str = "com.example.app"
    firebase_project_id: Optional[str] = None
    preferred_language: Optional[str] = None

    config_timeout: float = 30.0
    attribution_timeout: float = 10.0
    attribution_wait: float = 15.0
    organic_recheck_delay: float = 5.0
    deep_link_delay: float = 2.0
    prompt_timeout: Optional[float] = None
    prompt_cooldown: float = 3 * 24 * 60 * 60

    connectivity_host: str = "1.1.1.1"
    connectivity_port: int = 53
    connectivity_interval: float = 2.0

    redirect_threshold: int = 70
    trust_policy: TrustPolicy = TrustPolicy.SYSTEM
    trusted_hosts: list[str] = []

    state_dir: Path = CONFIG_DIR


def _env_overrides(fields: dict[str, Any]) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    for name in fields:
        raw = os.environ.get(f"{ENV_PREFIX}{name.upper()}")
        if raw is None:
            continue
        if name == "trusted_hosts":
            overrides[name] = [h.strip() for h in raw.split(",") if h.strip()]
        else:
            overrides[name] = raw
    return overrides


def load_settings(path: Optional[Path] = None) -> Settings:
    """Load settings from a JSON file, then apply environment overrides."""
    path = path or CONFIG_FILE
    try:
        data = json.loads(Path(path).read_text())
    except FileNotFoundError:
        data = {}
    except json.JSONDecodeError as e:
        logger.warning(f"Ignoring unreadable config file {path}: {e}")
        data = {}
    if not isinstance(data, dict):
        data = {}
    data.update(_env_overrides(Settings.model_fields))
    try:
        return Settings.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Invalid settings in {path}: {e}") from e
