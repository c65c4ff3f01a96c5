"""
Tests for configuration loading
"""

import pytest

from keywordtrends.config import (
    EnvConfigProvider,
    MappingConfigProvider,
    Settings,
    normalize_customer_id,
)
from keywordtrends.exceptions import ConfigurationError

REQUIRED = {
    "GOOGLE_ADS_DEVELOPER_TOKEN": "dev-token",
    "GOOGLE_ADS_ACCOUNT_ID": "123-456-7890",
    "GOOGLE_CLOUD_PROJECT": "test-project",
}


def test_load_defaults():
    settings = Settings.load(MappingConfigProvider(REQUIRED))
    assert settings.developer_token == "dev-token"
    assert settings.ads_account_id == "1234567890"
    assert settings.gcp_project_id == "test-project"
    assert settings.model_id == "gemini-2.5-pro"
    assert settings.location == "us-central1"
    assert settings.access_token is None


def test_load_overrides():
    values = {**REQUIRED, "GEMINI_MODEL": "gemini-2.5-flash", "GOOGLE_CLOUD_LOCATION": "europe-west4"}
    settings = Settings.load(MappingConfigProvider(values))
    assert settings.model_id == "gemini-2.5-flash"
    assert settings.location == "europe-west4"


def test_missing_keys():
    with pytest.raises(ConfigurationError) as exc_info:
        Settings.load(MappingConfigProvider({"GOOGLE_CLOUD_PROJECT": "p"}))
    assert exc_info.value.details["missing"] == [
        "GOOGLE_ADS_DEVELOPER_TOKEN",
        "GOOGLE_ADS_ACCOUNT_ID",
    ]


def test_settings_immutable():
    settings = Settings.load(MappingConfigProvider(REQUIRED))
    with pytest.raises(Exception):
        settings.model_id = "other"


def test_env_provider(monkeypatch):
    for key, value in REQUIRED.items():
        monkeypatch.setenv(key, value)
    monkeypatch.delenv("GOOGLE_ADS_ACCESS_TOKEN", raising=False)

    assert EnvConfigProvider().get("GOOGLE_CLOUD_PROJECT") == "test-project"
    assert Settings.load().ads_account_id == "1234567890"


def test_check():
    status = Settings.check(MappingConfigProvider({"GOOGLE_CLOUD_PROJECT": "p"}))
    assert status["GOOGLE_CLOUD_PROJECT"] is True
    assert status["GOOGLE_ADS_DEVELOPER_TOKEN"] is False
    assert status["GOOGLE_ADS_ACCESS_TOKEN"] is False


def test_normalize_customer_id():
    assert normalize_customer_id("123-456-7890") == "1234567890"
    assert normalize_customer_id(1234567890) == "1234567890"
