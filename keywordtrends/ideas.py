"""
Keyword ideas and historical search volumes from the Google Ads Keyword Planner.
"""

import logging
import math
import time
from datetime import date
from typing import Callable, Iterator, Optional, Sequence, TypeVar

from .ads_client import GoogleAdsClient
from .growth import mom, yoy
from .models import MONTHS_OF_YEAR, IdeaRow, KeywordIdea

logger = logging.getLogger(__name__)

T = TypeVar("T")

# https://developers.google.com/google-ads/api/rest/reference/rest/v22/customers/generateKeywordIdeas
MAX_SEED_KEYWORDS = 20
# Page size ceiling and historical metrics batch size
MAX_KEYWORDS_PER_REQUEST = 10000
LOOKBACK_YEARS = 2
# Keyword Planner allows 1 query per second
REQUEST_DELAY_SECONDS = 1.0
# Ideas whose latest month is not above this volume are not exported
MIN_LATEST_SEARCH_VOLUME = 100


def chunk(items: Sequence[T], size: int) -> Iterator[list[T]]:
    """Split a sequence into consecutive lists of at most `size` items."""
    for start in range(0, len(items), size):
        yield list(items[start:start + size])


def _shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def historical_metrics_options(
    lookback_years: int = LOOKBACK_YEARS, today: Optional[date] = None
) -> dict:
    """Year-month range from `lookback_years` before last month up to last month."""
    today = today or date.today()
    end_year, end_month = _shift_month(today.year, today.month, -1)
    return {
        "includeAverageCpc": True,
        "yearMonthRange": {
            "start": {"year": end_year - lookback_years, "month": MONTHS_OF_YEAR[end_month - 1]},
            "end": {"year": end_year, "month": MONTHS_OF_YEAR[end_month - 1]},
        },
    }


class KeywordIdeationClient:
    """
    Generates keyword ideas with monthly search volume history.

    Requests are strictly sequential and each one is preceded by a fixed delay
    to respect the Keyword Planner rate limit. Errors propagate to the caller.
    """

    def __init__(
        self,
        ads_client: GoogleAdsClient,
        sleep: Callable[[float], None] = time.sleep,
        request_delay: float = REQUEST_DELAY_SECONDS,
    ):
        self.ads = ads_client
        self.sleep = sleep
        self.request_delay = request_delay

    def _post(self, service: str, payload: dict) -> dict:
        self.sleep(self.request_delay)
        return self.ads.post(f"customers/{self.ads.customer_id}:{service}", payload)

    def generate_keyword_ideas(
        self,
        seed_keywords: Sequence[str],
        geo_id: Optional[str] = None,
        language_id: Optional[str] = None,
        max_ideas: int = MAX_KEYWORDS_PER_REQUEST,
        lookback_years: int = LOOKBACK_YEARS,
    ) -> list[KeywordIdea]:
        """
        Fetch keyword ideas for seed keywords.

        Seeds are processed in batches of MAX_SEED_KEYWORDS. Each batch pages
        through the API until there is no next page or `max_ideas` ideas were
        collected for it. Results keep batch order, then API order.

        Args:
            seed_keywords: Seed keywords
            geo_id: Geo target criterion ID (optional)
            language_id: Language criterion ID (optional)
            max_ideas: Maximum ideas per batch
            lookback_years: Years of monthly search volumes to include

        Returns:
            List of KeywordIdea
        """
        batches = list(chunk(list(seed_keywords), MAX_SEED_KEYWORDS))
        ideas: list[KeywordIdea] = []

        for index, keywords in enumerate(batches):
            logger.info(f"Getting keyword ideas batch {index + 1} / {len(batches)}")
            request = {
                "pageSize": min(max_ideas, MAX_KEYWORDS_PER_REQUEST),
                "keywordPlanNetwork": "GOOGLE_SEARCH",
                "geoTargetConstants": [f"geoTargetConstants/{geo_id}"] if geo_id else [],
                "historicalMetricsOptions": historical_metrics_options(lookback_years),
                "keywordSeed": {"keywords": keywords},
            }
            if language_id:
                request["language"] = f"languageConstants/{language_id}"

            results: list[dict] = []
            while True:
                response = self._post("generateKeywordIdeas", request)
                results.extend(response.get("results", []))
                page_token = response.get("nextPageToken")
                if not page_token or len(results) >= max_ideas:
                    break
                request["pageToken"] = page_token

            logger.info(f"Batch {index + 1}: {len(results)} ideas")
            ideas.extend(KeywordIdea.from_api(result) for result in results)

        return ideas

    def get_search_volume(
        self,
        keywords: Sequence[str],
        geo_id: Optional[str] = None,
        lookback_years: int = LOOKBACK_YEARS,
    ) -> list[KeywordIdea]:
        """Historical monthly search volumes for exact keywords."""
        total = math.ceil(len(keywords) / MAX_KEYWORDS_PER_REQUEST)
        ideas: list[KeywordIdea] = []
        for index, batch in enumerate(chunk(list(keywords), MAX_KEYWORDS_PER_REQUEST)):
            logger.info(f"Getting historical metrics: {index + 1} / {total} ...")
            payload = {
                "keywords": batch,
                "keywordPlanNetwork": "GOOGLE_SEARCH",
                "historicalMetricsOptions": historical_metrics_options(lookback_years),
            }
            if geo_id:
                payload["geoTargetConstants"] = [f"geoTargetConstants/{geo_id}"]
            response = self._post("generateKeywordHistoricalMetrics", payload)
            ideas.extend(KeywordIdea.from_api(result) for result in response.get("results", []))
        return ideas


def ideas_to_rows(
    ideas: Sequence[KeywordIdea], min_latest_volume: int = MIN_LATEST_SEARCH_VOLUME
) -> list[IdeaRow]:
    """Tabular rows for ideas whose latest month exceeds `min_latest_volume`."""
    rows = []
    for idea in ideas:
        volumes = idea.search_volumes
        if not volumes or volumes[-1] <= min_latest_volume:
            continue
        rows.append(
            IdeaRow(
                keyword=idea.text,
                avg_monthly_searches=idea.avg_monthly_searches,
                mom=mom(volumes),
                yoy=yoy(volumes),
                search_volumes=volumes,
            )
        )
    logger.info(f"Kept {len(rows)}/{len(ideas)} ideas above {min_latest_volume} monthly searches")
    return rows
