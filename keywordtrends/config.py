"""
Configuration loading.

Settings are read once from a ConfigProvider (the process environment by
default) and passed into the clients; nothing reads the environment later.
"""

import logging
import os
from typing import Mapping, Optional, Protocol

from pydantic import BaseModel, ConfigDict, Field

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEVELOPER_TOKEN = "GOOGLE_ADS_DEVELOPER_TOKEN"
ADS_ACCOUNT_ID = "GOOGLE_ADS_ACCOUNT_ID"
ACCESS_TOKEN = "GOOGLE_ADS_ACCESS_TOKEN"
GCP_PROJECT_ID = "GOOGLE_CLOUD_PROJECT"
GCP_LOCATION = "GOOGLE_CLOUD_LOCATION"
MODEL_ID = "GEMINI_MODEL"

REQUIRED_KEYS = (DEVELOPER_TOKEN, ADS_ACCOUNT_ID, GCP_PROJECT_ID)

DEFAULT_MODEL_ID = "gemini-2.5-pro"
DEFAULT_LOCATION = "us-central1"


class ConfigProvider(Protocol):
    """Key-value source of configuration strings."""

    def get(self, key: str) -> Optional[str]: ...


class EnvConfigProvider:
    """Reads configuration from environment variables."""

    def get(self, key: str) -> Optional[str]:
        return os.getenv(key)


class MappingConfigProvider:
    """Reads configuration from a plain mapping."""

    def __init__(self, values: Mapping[str, str]):
        self._values = dict(values)

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)


def normalize_customer_id(value: str) -> str:
    """'123-456-7890' -> '1234567890'"""
    return str(value).replace("-", "").strip()


class Settings(BaseModel):
    """Immutable runtime settings."""

    model_config = ConfigDict(frozen=True)

    developer_token: str = Field(..., description="Google Ads API developer token")
    ads_account_id: str = Field(..., description="Google Ads (manager) account ID, digits only")
    gcp_project_id: str = Field(..., description="GCP project used for Vertex AI")
    model_id: str = Field(default=DEFAULT_MODEL_ID, description="Gemini model ID")
    location: str = Field(default=DEFAULT_LOCATION, description="Vertex AI region")
    access_token: Optional[str] = Field(
        default=None,
        description="Static OAuth access token; Application Default Credentials are used when unset",
    )

    @classmethod
    def load(cls, provider: Optional[ConfigProvider] = None) -> "Settings":
        """
        Load settings from a provider.

        Raises:
            ConfigurationError: if a required key is missing
        """
        provider = provider or EnvConfigProvider()
        missing = [key for key in REQUIRED_KEYS if not provider.get(key)]
        if missing:
            raise ConfigurationError(
                f"Missing required configuration: {', '.join(missing)}",
                {"missing": missing},
            )

        settings = cls(
            developer_token=provider.get(DEVELOPER_TOKEN).strip(),
            ads_account_id=normalize_customer_id(provider.get(ADS_ACCOUNT_ID)),
            gcp_project_id=provider.get(GCP_PROJECT_ID).strip(),
            model_id=provider.get(MODEL_ID) or DEFAULT_MODEL_ID,
            location=provider.get(GCP_LOCATION) or DEFAULT_LOCATION,
            access_token=provider.get(ACCESS_TOKEN) or None,
        )
        logger.info(
            f"Settings loaded (account={settings.ads_account_id}, "
            f"project={settings.gcp_project_id}, model={settings.model_id})"
        )
        return settings

    @staticmethod
    def check(provider: Optional[ConfigProvider] = None) -> dict[str, bool]:
        """Report which configuration keys are set."""
        provider = provider or EnvConfigProvider()
        keys = (*REQUIRED_KEYS, MODEL_ID, GCP_LOCATION, ACCESS_TOKEN)
        return {key: bool(provider.get(key)) for key in keys}
