"""
Tests for growth metrics
"""

import math

import pytest

from keywordtrends.exceptions import UnknownGrowthMetricError
from keywordtrends.growth import (
    GrowthMetric,
    calculate_growth,
    column_sum,
    growth_for,
    latest_vs_avg,
    latest_vs_max,
    mom,
    parse_metric,
    rank_by_growth,
    three_months_vs_avg,
    yoy,
)


class TestMetrics:
    """Tests for the individual growth metrics"""

    def test_yoy_doubling(self):
        history = [100] * 12 + [200]
        assert yoy(history) == pytest.approx(1.0)

    def test_mom_drop_to_zero(self):
        assert mom([50, 0]) == pytest.approx(-1.0)

    def test_mom_zero_base(self):
        """Zero denominator evaluates to 0"""
        assert mom([0, 50]) == 0.0

    def test_yoy_short_history(self):
        """Year-ago month outside the history counts as 0"""
        assert yoy([10, 20, 30]) == 0.0

    def test_empty_history(self):
        growth = calculate_growth([])
        assert growth.yoy == 0.0
        assert growth.mom == 0.0
        assert growth.latest_vs_avg == 0.0
        assert growth.latest_vs_max == 0.0
        assert growth.three_months_vs_avg == 0.0

    def test_latest_vs_avg(self):
        # mean is 20, latest 30
        assert latest_vs_avg([10, 20, 30]) == pytest.approx(0.5)

    def test_latest_vs_max_excludes_latest(self):
        assert latest_vs_max([10, 40, 20, 60]) == pytest.approx(0.5)

    def test_latest_vs_max_single_month(self):
        assert latest_vs_max([60]) == 0.0

    def test_three_months_vs_avg(self):
        history = [100] * 21 + [200, 200, 200]
        assert three_months_vs_avg(history) == pytest.approx(1.0)

    def test_three_months_vs_avg_ignores_older_months(self):
        """Only the 21 months before the last 3 form the baseline"""
        history = [10000] * 6 + [100] * 21 + [150, 150, 150]
        assert three_months_vs_avg(history) == pytest.approx(0.5)

    def test_three_months_vs_avg_short_history(self):
        assert three_months_vs_avg([100, 200]) == 0.0

    def test_three_months_vs_avg_partial_baseline(self):
        # baseline is just [5], recent mean is 9
        assert three_months_vs_avg([5, 7, 9, 11]) == pytest.approx(0.8)
        assert three_months_vs_avg([10] * 7 + [20] * 3) == pytest.approx(1.0)

    def test_yoy_uses_month_a_year_before_latest(self):
        """The first month of a 24-month history is not the year-ago month"""
        assert yoy([50] + [0] * 11 + [100] * 12) == 0.0
        assert yoy([50] + [0] * 10 + [100] * 12 + [120]) == pytest.approx(0.2)

    def test_constant_history_has_no_growth(self):
        growth = calculate_growth([70] * 24)
        assert growth.model_dump() == {
            "yoy": 0.0,
            "mom": 0.0,
            "latest_vs_avg": 0.0,
            "latest_vs_max": 0.0,
            "three_months_vs_avg": 0.0,
        }

    def test_calculate_growth_matches_single_metrics(self):
        history = [5, 8, 13, 21, 34, 55, 89, 144, 233, 377, 610, 987, 1597, 2584]
        growth = calculate_growth(history)
        assert growth.yoy == yoy(history)
        assert growth.mom == mom(history)
        assert growth.latest_vs_avg == latest_vs_avg(history)
        assert growth.latest_vs_max == latest_vs_max(history)
        assert growth.three_months_vs_avg == three_months_vs_avg(history)


class TestMetricSelection:
    """Tests for choosing a metric by name"""

    def test_parse_metric_case_insensitive(self):
        assert parse_metric("YoY") == GrowthMetric.YOY
        assert parse_metric(" three_months_vs_avg ") == GrowthMetric.THREE_MONTHS_VS_AVG

    def test_parse_metric_passthrough(self):
        assert parse_metric(GrowthMetric.MOM) is GrowthMetric.MOM

    def test_unknown_metric_raises(self):
        with pytest.raises(UnknownGrowthMetricError, match="Unknown growth metric 'wow'"):
            parse_metric("wow")

    def test_unknown_metric_is_value_error(self):
        with pytest.raises(ValueError):
            growth_for([1, 2], "wow")

    def test_labels(self):
        assert GrowthMetric.YOY.label == "YoY"
        assert GrowthMetric.LATEST_VS_MAX.label == "Last Month vs Max"


class TestRankByGrowth:
    """Tests for filtering and sorting ideas by growth"""

    def test_sorted_descending_above_threshold(self, sample_ideas):
        ranked = rank_by_growth(sample_ideas, "yoy")
        assert ranked == [("dog pool", pytest.approx(1.0)), ("dog games", pytest.approx(0.5))]

    def test_threshold_is_exclusive(self):
        ideas = {"exact": [100] * 12 + [110], "above": [100] * 12 + [111]}
        ranked = rank_by_growth(ideas, GrowthMetric.YOY, min_growth=0.1)
        assert [keyword for keyword, _ in ranked] == ["above"]

    def test_empty_ideas(self):
        assert rank_by_growth({}, "mom") == []


class TestColumnSum:
    """Tests for aggregating histories"""

    def test_equal_lengths(self):
        assert column_sum([[1, 2, 3], [10, 20, 30]]) == [11, 22, 33]

    def test_shorter_history_aligned_to_latest(self):
        assert column_sum([[1, 2, 3], [20, 30]]) == [1, 22, 33]

    def test_no_histories(self):
        assert column_sum([]) == []


@pytest.mark.parametrize(
    "history",
    [[0], [0, 0], [5], [0, 0, 0, 7], [3, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0], [1] * 30, [0] * 24 + [9]],
)
def test_growth_always_finite(history):
    growth = calculate_growth(history)
    assert all(math.isfinite(value) for value in growth.model_dump().values())
