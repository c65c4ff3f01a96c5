"""
Growth metrics derived from monthly search volume histories.

All functions are pure and total: a ratio whose denominator is zero (including
offsets that fall outside a short history) evaluates to 0.0.
"""

import logging
from enum import Enum
from typing import Iterable, Mapping, Sequence, Union

from .exceptions import UnknownGrowthMetricError
from .models import GrowthMetrics

logger = logging.getLogger(__name__)

# Ideas must grow by more than this to be considered for insights
MIN_GROWTH = 0.1

RECENT_MONTHS = 3
BASELINE_MONTHS = 21


class GrowthMetric(str, Enum):
    YOY = "yoy"
    MOM = "mom"
    LATEST_VS_AVG = "latest_vs_avg"
    LATEST_VS_MAX = "latest_vs_max"
    THREE_MONTHS_VS_AVG = "three_months_vs_avg"

    @property
    def label(self) -> str:
        return METRIC_LABELS[self]


METRIC_LABELS = {
    GrowthMetric.YOY: "YoY",
    GrowthMetric.MOM: "MoM",
    GrowthMetric.LATEST_VS_AVG: "Latest vs Average",
    GrowthMetric.LATEST_VS_MAX: "Last Month vs Max",
    GrowthMetric.THREE_MONTHS_VS_AVG: "Last 3 Months vs Average",
}


def _ratio(value: float, base: float) -> float:
    return (value - base) / base if base else 0.0


def _at(history: Sequence[float], offset: int) -> float:
    """Value `offset` months before the latest one, 0 if out of range."""
    index = len(history) - 1 - offset
    return history[index] if index >= 0 else 0


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def yoy(history: Sequence[float]) -> float:
    return _ratio(_at(history, 0), _at(history, 12))


def mom(history: Sequence[float]) -> float:
    return _ratio(_at(history, 0), _at(history, 1))


def latest_vs_avg(history: Sequence[float]) -> float:
    return _ratio(_at(history, 0), _mean(history))


def latest_vs_max(history: Sequence[float]) -> float:
    previous = history[:-1]
    return _ratio(_at(history, 0), max(previous) if previous else 0)


def three_months_vs_avg(history: Sequence[float]) -> float:
    recent = history[-RECENT_MONTHS:]
    start = max(len(history) - RECENT_MONTHS - BASELINE_MONTHS, 0)
    baseline = history[start:max(len(history) - RECENT_MONTHS, 0)]
    return _ratio(_mean(recent), _mean(baseline))


_CALCULATORS = {
    GrowthMetric.YOY: yoy,
    GrowthMetric.MOM: mom,
    GrowthMetric.LATEST_VS_AVG: latest_vs_avg,
    GrowthMetric.LATEST_VS_MAX: latest_vs_max,
    GrowthMetric.THREE_MONTHS_VS_AVG: three_months_vs_avg,
}


def calculate_growth(history: Sequence[float]) -> GrowthMetrics:
    """Compute all growth metrics for a history ordered oldest to newest."""
    history = list(history)
    return GrowthMetrics(
        yoy=yoy(history),
        mom=mom(history),
        latest_vs_avg=latest_vs_avg(history),
        latest_vs_max=latest_vs_max(history),
        three_months_vs_avg=three_months_vs_avg(history),
    )


def parse_metric(metric: Union[str, GrowthMetric]) -> GrowthMetric:
    """
    Resolve a metric name (case-insensitive) to a GrowthMetric.

    Raises:
        UnknownGrowthMetricError: if the name is not a supported metric
    """
    if isinstance(metric, GrowthMetric):
        return metric
    try:
        return GrowthMetric(str(metric).strip().lower())
    except ValueError:
        supported = ", ".join(m.value for m in GrowthMetric)
        raise UnknownGrowthMetricError(
            f"Unknown growth metric '{metric}'. Supported: {supported}",
            {"metric": metric},
        ) from None


def growth_for(history: Sequence[float], metric: Union[str, GrowthMetric]) -> float:
    return _CALCULATORS[parse_metric(metric)](list(history))


def rank_by_growth(
    ideas: Mapping[str, Sequence[float]],
    metric: Union[str, GrowthMetric] = GrowthMetric.YOY,
    min_growth: float = MIN_GROWTH,
) -> list[tuple[str, float]]:
    """
    Keep ideas growing by more than `min_growth`, sorted by growth descending.

    Args:
        ideas: keyword -> search volume history
        metric: growth metric used for filtering and sorting
        min_growth: exclusive lower bound of the growth ratio

    Returns:
        List of (keyword, growth) pairs
    """
    metric = parse_metric(metric)
    ranked = [(keyword, growth_for(history, metric)) for keyword, history in ideas.items()]
    relevant = [(keyword, growth) for keyword, growth in ranked if growth > min_growth]
    relevant.sort(key=lambda pair: pair[1], reverse=True)
    logger.info(
        f"{len(relevant)}/{len(ranked)} ideas grew more than {min_growth:.0%} ({metric.label})"
    )
    return relevant


def column_sum(histories: Iterable[Sequence[int]]) -> list[int]:
    """Element-wise sum of histories; shorter histories are aligned to the newest month."""
    histories = [list(h) for h in histories]
    if not histories:
        return []
    width = max(len(h) for h in histories)
    result = [0] * width
    for history in histories:
        offset = width - len(history)
        for i, value in enumerate(history):
            result[offset + i] += value
    return result
