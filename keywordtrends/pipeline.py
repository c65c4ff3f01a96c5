"""
End-to-end keyword trends pipeline: ideas -> growth -> prompts -> Gemini.
"""

import logging
import time
from typing import Callable, Mapping, Optional, Sequence, Union

from .ads_client import GoogleAdsClient
from .clustering import KeywordClusterer
from .config import Settings
from .gateway import GenerativeModelGateway
from .geo import GeoResolver
from .growth import MIN_GROWTH, GrowthMetric, parse_metric, rank_by_growth
from .ideas import MAX_KEYWORDS_PER_REQUEST, MAX_SEED_KEYWORDS, KeywordIdeationClient, ideas_to_rows
from .models import (
    AdCopy,
    ClusteringResult,
    GenerativeRequestConfig,
    IdeasResult,
    ResponseType,
)
from .prompts import (
    DEFAULT_STYLE_GUIDE,
    build_ad_examples_prompt,
    build_ad_request_prompt,
    build_campaign_prompt,
    build_insights_prompt,
    build_new_search_terms_prompt,
    build_trends_prompt,
)
from .reporting import AdPerformanceReporter, ReportingDiffEngine

logger = logging.getLogger(__name__)


class KeywordTrends:
    """
    Keyword research and ad ideation with Google Ads + Gemini.

    Features:
    - Keyword ideas with 2 years of monthly search volumes
    - Growth based trend insights (HTML)
    - Topic clustering with hallucination filtering
    - Trending keyword discovery with Google Search grounding
    - Campaign and ad copy generation
    - New search terms from the search term report

    Usage:
        with KeywordTrends(Settings.load()) as trends:
            ideas = trends.get_ideas(["dog toys"], country="Germany", language="German")
            html = trends.get_insights(ideas.to_search_volumes(), ["dog toys"])
    """

    def __init__(
        self,
        settings: Settings,
        ads_client: Optional[GoogleAdsClient] = None,
        gateway: Optional[GenerativeModelGateway] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.settings = settings
        self._owns_ads = ads_client is None
        self.ads = ads_client or GoogleAdsClient(settings)
        self.ideation = KeywordIdeationClient(self.ads, sleep=sleep)
        self.geo = GeoResolver(self.ads)
        self.gateway = gateway or GenerativeModelGateway()
        self.clusterer = KeywordClusterer(self.gateway)
        self.search_terms = ReportingDiffEngine(self.ads)
        self.ad_performance = AdPerformanceReporter(self.ads)

    def close(self) -> None:
        """Close the Ads HTTP client if this pipeline created it."""
        if self._owns_ads:
            self.ads.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def request_config(
        self,
        response_type: ResponseType = ResponseType.TEXT,
        base: Optional[GenerativeRequestConfig] = None,
        **overrides,
    ) -> GenerativeRequestConfig:
        """Request config from `base` (or settings defaults) with the given response type."""
        if base is None:
            base = GenerativeRequestConfig(
                model_id=self.settings.model_id,
                project_id=self.settings.gcp_project_id,
                location=self.settings.location,
            )
        return base.model_copy(update={"response_type": response_type, **overrides})

    def get_ideas(
        self,
        seed_keywords: Sequence[str],
        country: Optional[str] = None,
        language: Optional[str] = None,
        max_ideas: int = MAX_KEYWORDS_PER_REQUEST,
    ) -> IdeasResult:
        """
        Fetch keyword ideas for up to MAX_SEED_KEYWORDS seed keywords.

        Args:
            seed_keywords: Seed keywords; extra seeds are ignored with a warning
            country: Country name or geo criterion ID (optional)
            language: Language name or language criterion ID (optional)
            max_ideas: Maximum number of ideas

        Returns:
            IdeasResult with one row per idea above the volume threshold
        """
        seeds = [kw.strip() for kw in seed_keywords if kw and kw.strip()]
        if len(seeds) > MAX_SEED_KEYWORDS:
            logger.warning(
                f"Please enter a maximum of {MAX_SEED_KEYWORDS} keywords only. "
                f"Ignoring the overflow keywords: {', '.join(seeds[MAX_SEED_KEYWORDS:])}"
            )
            seeds = seeds[:MAX_SEED_KEYWORDS]

        geo_id = self.geo.resolve_location(country) if country else None
        language_id = self.geo.resolve_language(language) if language else None

        ideas = self.ideation.generate_keyword_ideas(seeds, geo_id, language_id, max_ideas)
        return IdeasResult(seed_keywords=seeds, rows=ideas_to_rows(ideas))

    def get_insights(
        self,
        ideas: Mapping[str, Sequence[int]],
        seed_keywords: Sequence[str],
        growth_metric: Union[str, GrowthMetric] = GrowthMetric.YOY,
        language: str = "English",
        config: Optional[GenerativeRequestConfig] = None,
        min_growth: float = MIN_GROWTH,
    ) -> str:
        """HTML insights on the ideas growing faster than `min_growth`."""
        metric = parse_metric(growth_metric)
        ranked = rank_by_growth(ideas, metric, min_growth)
        prompt = build_insights_prompt(ranked, seed_keywords, metric.label, language)
        return self.gateway.generate(prompt, self.request_config(ResponseType.TEXT, config))

    def get_clusters(
        self,
        ideas: Mapping[str, Sequence[int]],
        prompt_template: str,
        config: Optional[GenerativeRequestConfig] = None,
    ) -> ClusteringResult:
        return self.clusterer.cluster(ideas, prompt_template, self.request_config(ResponseType.JSON, config))

    def get_campaigns(
        self,
        insights: str,
        language: str,
        brand_name: str,
        ad_examples: str,
        style_guide: str = DEFAULT_STYLE_GUIDE,
        config: Optional[GenerativeRequestConfig] = None,
    ) -> str:
        """HTML text ad campaigns, one per insights cluster."""
        prompt = build_campaign_prompt(insights, language, brand_name, ad_examples, style_guide)
        return self.gateway.generate(prompt, self.request_config(ResponseType.TEXT, config))

    def generate_trends_keywords(
        self,
        seed_keywords: Sequence[str],
        prompt_template: str,
        config: Optional[GenerativeRequestConfig] = None,
    ) -> list[str]:
        """Trending keywords around the seeds, grounded with Google Search."""
        prompt = build_trends_prompt(prompt_template, seed_keywords)
        grounded_config = self.request_config(
            ResponseType.JSON,
            config,
            response_schema=list[str],
            enable_retrieval_grounding=True,
        )
        return self.gateway.generate(prompt, grounded_config)

    def get_new_search_terms_clusters(
        self,
        customer_id: Optional[str] = None,
        recent_days: int = 7,
        baseline_days: int = 30,
        language: str = "English",
        config: Optional[GenerativeRequestConfig] = None,
    ) -> list[str]:
        """Broad match keywords summarizing search terms that are new in the recent window."""
        terms = self.search_terms.new_search_terms(
            customer_id or self.settings.ads_account_id, recent_days, baseline_days
        )
        if not terms:
            logger.info("No new search terms found")
            return []
        prompt = build_new_search_terms_prompt(terms, language)
        return self.gateway.generate(
            prompt, self.request_config(ResponseType.JSON, config, response_schema=list[str])
        )

    def create_ad_suggestion(
        self,
        keywords: Sequence[str],
        customer_id: Optional[str] = None,
        top_n: int = 5,
        lookback_days: int = 30,
        metric: str = "clicks",
        config: Optional[GenerativeRequestConfig] = None,
    ) -> list[AdCopy]:
        """Ads for `keywords` written in the style of the account's top performing ads."""
        ads = self.ad_performance.get_top_performing_ads(
            customer_id or self.settings.ads_account_id, top_n, lookback_days, metric
        )
        prompt = f"{build_ad_examples_prompt(ads)}\n{build_ad_request_prompt(keywords)}"
        return self.gateway.generate(
            prompt, self.request_config(ResponseType.JSON, config, response_schema=list[AdCopy])
        )
