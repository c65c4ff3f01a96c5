"""
KeywordTrends - Google Ads keyword trends and ad ideation using Gemini.

Find the fastest growing search terms around your topics and turn them into
insights and ad campaigns.

Features:
- Keyword ideas with 2 years of monthly search volumes (Google Ads Keyword Planner)
- Growth metrics (YoY, MoM, latest vs average/max, last 3 months vs average)
- Topic clustering with hallucination filtering
- Trending keywords with Google Search grounding
- New search terms and ad copy from your Google Ads account

Usage:
    from keywordtrends import KeywordTrends, Settings

    trends = KeywordTrends(Settings.load())
    ideas = trends.get_ideas(["dog toys"], country="Germany", language="German")
    html = trends.get_insights(ideas.to_search_volumes(), ideas.seed_keywords, "yoy")
    clusters = trends.get_clusters(ideas.to_search_volumes(), "Cluster by product category")

    for cluster in clusters.clusters:
        print(f"{cluster.topic} | volume: {cluster.search_volume} | YoY: {cluster.growth.yoy:.0%}")
"""

__version__ = "0.1.0"

from .models import (
    AdCopy,
    Cluster,
    ClusteringResult,
    ClusterProposal,
    GenerativeRequestConfig,
    GrowthMetrics,
    IdeaRow,
    IdeasResult,
    KeywordIdea,
    MonthlySearchVolume,
    ResponseType,
    SearchTermSet,
    TopPerformingAd,
)
from .exceptions import (
    AdsApiError,
    ConfigurationError,
    KeywordTrendsError,
    LookupNotFoundError,
    MalformedResponseError,
    SchemaValidationError,
    UnknownGrowthMetricError,
)
from .config import EnvConfigProvider, MappingConfigProvider, Settings
from .growth import GrowthMetric, calculate_growth, rank_by_growth
from .ads_client import GoogleAdsClient
from .ideas import KeywordIdeationClient
from .geo import GeoResolver
from .gateway import GenerativeModelGateway, VertexGeminiTransport
from .clustering import KeywordClusterer, reconcile_clusters
from .reporting import AdPerformanceReporter, ReportingDiffEngine
from .pipeline import KeywordTrends

__all__ = [
    # Main API
    "KeywordTrends",
    "Settings",
    "EnvConfigProvider",
    "MappingConfigProvider",
    # Models
    "KeywordIdea",
    "MonthlySearchVolume",
    "GrowthMetrics",
    "IdeaRow",
    "IdeasResult",
    "ClusterProposal",
    "Cluster",
    "ClusteringResult",
    "GenerativeRequestConfig",
    "ResponseType",
    "SearchTermSet",
    "AdCopy",
    "TopPerformingAd",
    # Growth
    "GrowthMetric",
    "calculate_growth",
    "rank_by_growth",
    # Google Ads
    "GoogleAdsClient",
    "KeywordIdeationClient",
    "GeoResolver",
    "ReportingDiffEngine",
    "AdPerformanceReporter",
    # Gemini
    "GenerativeModelGateway",
    "VertexGeminiTransport",
    "KeywordClusterer",
    "reconcile_clusters",
    # Errors
    "KeywordTrendsError",
    "ConfigurationError",
    "AdsApiError",
    "MalformedResponseError",
    "SchemaValidationError",
    "LookupNotFoundError",
    "UnknownGrowthMetricError",
]
