"""
Search term and ad performance reporting on top of googleAds:search.

Date windows are half-open everywhere: `segments.date >= start AND
segments.date < end`, so adjacent windows neither overlap nor leave gaps.
"""

import logging
import re
from collections import defaultdict
from datetime import date, timedelta
from typing import Callable, NamedTuple, Sequence

from .ads_client import GoogleAdsClient
from .models import SearchTermSet, TopPerformingAd

logger = logging.getLogger(__name__)

_METRIC_PATTERN = re.compile(r"^[a-z_]+$")


class DateWindow(NamedTuple):
    start: date  # inclusive
    end: date  # exclusive

    @property
    def days(self) -> int:
        return (self.end - self.start).days


def date_segment(window: DateWindow) -> str:
    return (
        f'segments.date >= "{window.start.isoformat()}" '
        f'AND segments.date < "{window.end.isoformat()}"'
    )


def comparison_windows(
    recent_days: int, baseline_days: int, today: date
) -> tuple[DateWindow, DateWindow]:
    """
    Adjacent windows ending today (exclusive).

    Returns:
        (baseline, recent) where baseline ends where recent starts
    """
    middle = today - timedelta(days=recent_days)
    recent = DateWindow(middle, today)
    baseline = DateWindow(middle - timedelta(days=baseline_days), middle)
    return baseline, recent


def _check_metric(metric: str) -> str:
    if not _METRIC_PATTERN.match(metric):
        raise ValueError(f"Invalid metric name: {metric!r}")
    return metric


class ReportingDiffEngine:
    """
    Surfaces search terms that are new in a recent window.

    Usage:
        engine = ReportingDiffEngine(GoogleAdsClient(settings))
        new_terms = engine.new_search_terms("1234567890", recent_days=7, baseline_days=30)
    """

    def __init__(
        self,
        ads_client: GoogleAdsClient,
        today: Callable[[], date] = date.today,
    ):
        self.ads = ads_client
        self.today = today

    def get_search_terms(
        self,
        customer_id: str,
        window: DateWindow,
        metric: str = "clicks",
        metric_threshold: int = 100,
        sort_order: str = "DESC",
        limit: int = 10000,
    ) -> SearchTermSet:
        """Deduplicated search terms above `metric_threshold` within `window`."""
        metric = _check_metric(metric)
        if sort_order not in ("ASC", "DESC"):
            raise ValueError(f"Invalid sort order: {sort_order!r}")

        query = f"""SELECT
  search_term_view.search_term,
  metrics.{metric}
FROM
  search_term_view
WHERE
  {date_segment(window)}
  AND search_term_view.search_term != ''
  AND metrics.{metric} > {int(metric_threshold)}
ORDER BY
  metrics.{metric} {sort_order}
LIMIT {int(limit)}"""

        rows = self.ads.search(query, customer_id)
        ranked = tuple(dict.fromkeys(row["searchTermView"]["searchTerm"] for row in rows))
        terms = frozenset(ranked)
        logger.info(
            f"{len(terms)} search terms between {window.start} and {window.end} (exclusive)"
        )
        return SearchTermSet(terms=terms, ranked=ranked, start=window.start, end=window.end)

    def new_search_terms(
        self,
        customer_id: str,
        recent_days: int = 7,
        baseline_days: int = 30,
        **query_options,
    ) -> list[str]:
        """
        Search terms present in the last `recent_days` but not in the
        `baseline_days` before them, in the recent window's metric order.

        With `baseline_days=0` all terms of the recent window are returned.
        """
        baseline_window, recent_window = comparison_windows(
            recent_days, baseline_days, self.today()
        )
        recent = self.get_search_terms(customer_id, recent_window, **query_options)
        if not baseline_days:
            return list(recent.ranked)

        baseline = self.get_search_terms(customer_id, baseline_window, **query_options)
        diff = recent.new_terms(baseline)
        logger.info(
            f"{len(diff)} new search terms ({len(recent.terms)} recent, {len(baseline.terms)} baseline)"
        )
        return diff


class AdPerformanceReporter:
    """Top performing responsive search ads and the broad keywords of their ad groups."""

    def __init__(
        self,
        ads_client: GoogleAdsClient,
        today: Callable[[], date] = date.today,
    ):
        self.ads = ads_client
        self.today = today

    def _lookback_window(self, lookback_days: int) -> DateWindow:
        today = self.today()
        return DateWindow(today - timedelta(days=lookback_days), today)

    def get_broad_keywords(
        self, customer_id: str, ad_group_ids: Sequence[str], window: DateWindow
    ) -> dict[str, list[str]]:
        """Ad group ID -> enabled broad match keyword texts."""
        if not ad_group_ids:
            return {}
        query = f"""SELECT
  ad_group_criterion.keyword.text,
  ad_group.id
FROM keyword_view
WHERE
  ad_group.id IN ({", ".join(str(int(i)) for i in ad_group_ids)})
  AND ad_group_criterion.status != 'REMOVED'
  AND {date_segment(window)}
  AND ad_group_criterion.keyword.match_type = 'BROAD'"""

        mapping = defaultdict(list)
        for row in self.ads.search(query, customer_id):
            ad_group_id = str(row["adGroup"]["id"])
            text = row["adGroupCriterion"]["keyword"]["text"]
            if text not in mapping[ad_group_id]:
                mapping[ad_group_id].append(text)
        return dict(mapping)

    def get_top_performing_ads(
        self,
        customer_id: str,
        top_n: int = 5,
        lookback_days: int = 30,
        metric: str = "clicks",
    ) -> list[TopPerformingAd]:
        """Best enabled responsive search ads by `metric` over the lookback window."""
        metric = _check_metric(metric)
        window = self._lookback_window(lookback_days)
        query = f"""SELECT
  ad_group.id,
  ad_group_ad.ad.id,
  ad_group_ad.ad.responsive_search_ad.headlines,
  ad_group_ad.ad.responsive_search_ad.descriptions,
  ad_group_ad.ad_strength,
  metrics.{metric}
FROM ad_group_ad
WHERE campaign.advertising_channel_type = 'SEARCH'
  AND ad_group_ad.ad.type = 'RESPONSIVE_SEARCH_AD'
  AND {date_segment(window)}
  AND ad_group_ad.status = 'ENABLED'
  AND ad_group.status = 'ENABLED'
  AND campaign.status = 'ENABLED'
ORDER BY metrics.{metric} DESC
LIMIT {int(top_n)}"""

        ads = []
        for row in self.ads.search(query, customer_id):
            rsa = row["adGroupAd"]["ad"]["responsiveSearchAd"]
            ads.append(
                TopPerformingAd(
                    ad_group_id=str(row["adGroup"]["id"]),
                    headlines=[asset["text"] for asset in rsa.get("headlines", [])],
                    descriptions=[asset["text"] for asset in rsa.get("descriptions", [])],
                )
            )

        ad_group_ids = list(dict.fromkeys(ad.ad_group_id for ad in ads))
        keywords = self.get_broad_keywords(customer_id, ad_group_ids, window)
        logger.info(f"Found {len(ads)} top performing ads in {len(ad_group_ids)} ad groups")
        return [
            ad.model_copy(update={"keywords": keywords.get(ad.ad_group_id, [])}) for ad in ads
        ]
