"""
Test Insights Orchestrator

Period filtering, the no-data fallback and generator dispatch.
"""

from datetime import date

import pytest

from analysis.orchestrator import (
    InsightsOrchestrator,
    filter_periods_by_time_range,
    generate_insights,
    months_before,
)
from schemas.insights import InsightSeverity, InsightType
from schemas.periods import InsightsOptions


@pytest.fixture
def orchestrator():
    return InsightsOrchestrator()


@pytest.fixture
def two_years(make_series):
    """24 finalised months, January 2023 to December 2024."""
    return make_series({
        1: [50 + (i % 5) * 3 for i in range(24)],
        2: [10 + i for i in range(24)],
    }, start=(2023, 1))


class TestTimeRangeFilter:
    def test_months_before(self):
        """Cutoff is the first of the month N months back."""
        assert months_before(date(2024, 12, 15), 3) == date(2024, 9, 1)
        assert months_before(date(2024, 2, 1), 3) == date(2023, 11, 1)

    def test_trailing_window(self, two_years):
        """A 3-month window keeps the latest four months."""
        filtered = filter_periods_by_time_range(two_years, 3)
        assert [p.month for p in filtered] == ["2024-09", "2024-10", "2024-11", "2024-12"]

    @pytest.mark.parametrize("months", [None, 0])
    def test_no_window_keeps_everything(self, two_years, months):
        """No time range keeps every period."""
        assert len(filter_periods_by_time_range(two_years, months)) == 24

    def test_anchor_includes_unfinalised(self, make_series):
        """Draft periods still anchor the window."""
        periods = make_series({1: [1, 2, 3, 4, 5]})
        periods[-1].is_finalised = False

        filtered = filter_periods_by_time_range(periods, 1)
        assert [p.month for p in filtered] == ["2024-04", "2024-05"]

    def test_empty(self):
        """Filtering nothing gives nothing."""
        assert filter_periods_by_time_range([], 3) == []


class TestOrchestrator:
    def test_no_periods(self, orchestrator):
        """No periods give the Insufficient Data insight."""
        insights = orchestrator.generate([], [])

        assert len(insights) == 1
        assert insights[0].id == "no-data"
        assert insights[0].type == InsightType.TREND
        assert insights[0].severity == InsightSeverity.INFO
        assert insights[0].title == "Insufficient Data"

    def test_only_drafts(self, orchestrator, make_series):
        """Only draft periods give the Insufficient Data insight."""
        periods = make_series({1: [1, 2, 3]}, is_finalised=False)
        assert [i.id for i in orchestrator.generate(periods, [])] == ["no-data"]

    def test_time_range_limits_generator_input(self, orchestrator, two_years):
        """Generators only see periods inside the window."""
        insights = orchestrator.generate(
            two_years, [], InsightsOptions(time_range=3, types=[InsightType.FORECAST]),
        )

        # Forecast evidence spans the whole series it was given
        months = {
            point.month
            for insight in insights
            for point in insight.evidence.values
        }
        assert insights
        assert months <= {"2024-09", "2024-10", "2024-11", "2024-12"}

    def test_type_filter(self, orchestrator, two_years):
        """Only requested insight types are generated."""
        insights = orchestrator.generate(
            two_years, [], InsightsOptions(types=[InsightType.FORECAST, InsightType.CORRELATION]),
        )
        assert insights
        assert {i.type for i in insights} <= {InsightType.FORECAST, InsightType.CORRELATION}

    def test_dispatch_order(self, orchestrator, two_years):
        """Insights are grouped in generator order."""
        insights = orchestrator.generate(two_years, [])

        order = list(InsightType)
        positions = [order.index(i.type) for i in insights]
        assert positions == sorted(positions)

    def test_metric_selection(self, orchestrator, two_years):
        """Only requested metrics are analysed."""
        insights = orchestrator.generate(two_years, [], InsightsOptions(metric_numbers=[2]))
        assert insights
        assert all(i.metric_keys in (None, [2]) for i in insights)

    def test_unknown_metrics_are_silent(self, orchestrator, two_years):
        """Metrics without data are skipped silently."""
        insights = orchestrator.generate(two_years, [], InsightsOptions(metric_numbers=[99]))
        assert insights == []

    def test_ids_are_unique(self, orchestrator, two_years):
        """Ids never repeat across runs."""
        first = orchestrator.generate(two_years, [])
        second = orchestrator.generate(two_years, [])
        ids = [i.id for i in first + second]
        assert len(ids) == len(set(ids))

    def test_module_entry_point(self, two_years):
        """The module function uses the default orchestrator."""
        insights = generate_insights(two_years, [], InsightsOptions(types=[InsightType.COMPARISON]))
        assert all(i.type == InsightType.COMPARISON for i in insights)
