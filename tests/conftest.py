"""
Shared fixtures for KeywordTrends tests
"""

from unittest.mock import Mock

import pytest

from keywordtrends.ads_client import GoogleAdsClient
from keywordtrends.config import Settings
from keywordtrends.models import GenerativeRequestConfig


class FakeTransport:
    """Gemini transport returning canned texts in order and recording requests."""

    def __init__(self, *responses: str):
        self.responses = list(responses)
        self.calls = []

    def generate(self, prompt, config):
        self.calls.append((prompt, config))
        return self.responses.pop(0)


@pytest.fixture
def settings():
    return Settings(
        developer_token="dev-token",
        ads_account_id="1234567890",
        gcp_project_id="test-project",
        access_token="test-token",
    )


@pytest.fixture
def ads_client():
    """GoogleAdsClient double; configure `post`/`search` per test."""
    client = Mock(spec=GoogleAdsClient)
    client.customer_id = "1234567890"
    return client


@pytest.fixture
def model_config():
    return GenerativeRequestConfig(model_id="gemini-test", project_id="test-project")


@pytest.fixture
def sample_ideas():
    """keyword -> 13 months of search volumes (oldest first)"""
    return {
        "dog pool": [100] * 12 + [200],
        "dog games": [100] * 12 + [150],
        "dog toys": [500] * 13,
        "dog bed": [400] * 12 + [300],
    }


@pytest.fixture
def fake_transport():
    return FakeTransport
