"""
Exception hierarchy for KeywordTrends
"""

from typing import Optional


class KeywordTrendsError(Exception):
    """Base class for all KeywordTrends errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ConfigurationError(KeywordTrendsError):
    """Required configuration is missing or invalid."""


class AdsApiError(KeywordTrendsError):
    """Google Ads API call failed (transport, non-2xx or error payload)."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[dict] = None,
    ):
        super().__init__(message, details)
        self.status_code = status_code


class MalformedResponseError(KeywordTrendsError):
    """A response expected to be JSON could not be parsed."""

    def __init__(self, message: str, raw_text: Optional[str] = None):
        super().__init__(message, {"raw_text": raw_text})
        self.raw_text = raw_text


class SchemaValidationError(KeywordTrendsError):
    """Structured model output does not conform to the requested schema."""

    def __init__(self, message: str, violations: Optional[list[str]] = None):
        super().__init__(message, {"violations": violations or []})
        self.violations = violations or []


class LookupNotFoundError(KeywordTrendsError, LookupError):
    """A location or language name could not be resolved to a criterion ID."""

    def __init__(self, name: str, target_type: str):
        super().__init__(
            f"No {target_type} criterion found for '{name}'",
            {"name": name, "target_type": target_type},
        )
        self.name = name
        self.target_type = target_type


class UnknownGrowthMetricError(KeywordTrendsError, ValueError):
    """Growth metric name is not one of the supported metrics."""
