"""Settings loading."""

import json

import pytest

from eggprofit.browsing.policy import TrustPolicy
from eggprofit.config import Settings, load_settings


def test_defaults_when_file_missing(tmp_path, monkeypatch):
    monkeypatch.delenv("EGGPROFIT_REDIRECT_THRESHOLD", raising=False)
    settings = load_settings(tmp_path / "missing.json")
    assert settings == Settings()
    assert settings.redirect_threshold == 70
    assert settings.trust_policy == TrustPolicy.SYSTEM
    assert settings.organic_recheck_delay == 5.0


def test_file_values(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({
        "config_endpoint": "https://config.example/config.php",
        "state_dir": str(tmp_path / "state"),
        "trust_policy": "trusted_hosts",
        "trusted_hosts": ["x.example"],
    }))
    settings = load_settings(path)
    assert settings.config_endpoint == "https://config.example/config.php"
    assert settings.state_dir == tmp_path / "state"
    assert settings.trust_policy == TrustPolicy.TRUSTED_HOSTS
    assert settings.trusted_hosts == ["x.example"]


def test_env_overrides_file(tmp_path, monkeypatch):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"redirect_threshold": 10}))
    monkeypatch.setenv("EGGPROFIT_REDIRECT_THRESHOLD", "25")
    monkeypatch.setenv("EGGPROFIT_TRUSTED_HOSTS", "a.example, b.example,")
    settings = load_settings(path)
    assert settings.redirect_threshold == 25
    assert settings.trusted_hosts == ["a.example", "b.example"]


def test_unreadable_file_falls_back_to_defaults(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{oops")
    assert load_settings(path).dev_key == Settings().dev_key


def test_invalid_value_raises(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"trust_policy": "sometimes"}))
    with pytest.raises(ValueError):
        load_settings(path)
