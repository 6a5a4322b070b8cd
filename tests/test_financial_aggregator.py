"""
Unit tests for the financial aggregation functions.

Tests cover:
- Farm-wide and per-plot summary, including orphaned records
- Conservation of totals across the per-plot breakdown
- Service cost breakdown (product share, ordering, filters)
- Harvest statistics
- Calendar grouping by day
"""
import pytest
from datetime import date

from farmledger.domain.models import ActivityStatus, FinancialSummary
from farmledger.services.domain.financial_aggregator import (
    compute_financial_summary,
    group_activities_by_date,
    harvest_statistics,
    service_cost_breakdown,
)


# ============================================================
# Financial Summary Tests
# ============================================================

class TestFinancialSummary:
    """Tests for the farm-wide financial summary."""

    def test_empty_inputs_yield_zeroed_summary(self):
        """No records should produce zeros and no plot rows."""
        summary = compute_financial_summary([], [], [])

        assert summary.total_revenue == 0
        assert summary.total_cost == 0
        assert summary.net_profit == 0
        assert summary.plot_summaries == []

    def test_missing_inputs_yield_zeroed_summary(self):
        """Absent collections are treated as empty."""
        assert compute_financial_summary() == FinancialSummary()

    def test_sample_farm(self, sample_farm):
        """One activity and one harvest on one plot."""
        summary = compute_financial_summary(**sample_farm)

        assert summary.total_cost == 1500
        assert summary.total_revenue == 9000
        assert summary.net_profit == 7500
        assert len(summary.plot_summaries) == 1
        row = summary.plot_summaries[0]
        assert row.plot_id == "P1"
        assert row.plot_name == "Plot 01 - Palmer"
        assert (row.cost, row.revenue, row.profit) == (1500, 9000, 7500)

    def test_planned_activity_is_ignored(self, sample_farm, make_activity):
        """A planned activity must not change any total."""
        planned = make_activity(id="A2", status=ActivityStatus.PLANNED, labor_cost=200)
        activities = sample_farm["activities"] + [planned]

        summary = compute_financial_summary(sample_farm["plots"], activities, sample_farm["harvests"])

        assert summary.total_cost == 1500
        assert summary.plot_summaries[0].cost == 1500
        assert summary.net_profit == 7500

    def test_completing_planned_activity_adds_its_cost(self, sample_farm, make_activity):
        """Flipping planned to completed adds exactly its total cost."""
        planned = make_activity(id="A2", status=ActivityStatus.PLANNED, labor_cost=200)
        before = compute_financial_summary(
            sample_farm["plots"], sample_farm["activities"] + [planned], sample_farm["harvests"]
        )

        completed = planned.model_copy(update={"status": ActivityStatus.COMPLETED})
        after = compute_financial_summary(
            sample_farm["plots"], sample_farm["activities"] + [completed], sample_farm["harvests"]
        )

        assert after.total_cost - before.total_cost == 200
        assert after.plot_summaries[0].cost - before.plot_summaries[0].cost == 200

    def test_plots_without_records_appear_with_zeros(self, make_plot):
        """Every plot gets a row, in plot list order."""
        plots = [make_plot(id="P1"), make_plot(id="P2", name="Plot 02", crop="Goiaba")]

        summary = compute_financial_summary(plots, [], [])

        assert [p.plot_id for p in summary.plot_summaries] == ["P1", "P2"]
        assert all(p.cost == 0 and p.revenue == 0 and p.profit == 0 for p in summary.plot_summaries)

    def test_orphaned_harvest_keeps_its_own_row(self, sample_farm, make_harvest):
        """Revenue on a deleted plot still counts and gets its own nameless row."""
        orphan = make_harvest(id="H2", plot_id="GONE", quantity=100, unit_price=3.0)
        harvests = sample_farm["harvests"] + [orphan]

        summary = compute_financial_summary(sample_farm["plots"], sample_farm["activities"], harvests)

        assert summary.total_revenue == 9300
        assert [p.plot_id for p in summary.plot_summaries] == ["P1", "GONE"]
        p1, gone = summary.plot_summaries
        assert (p1.cost, p1.revenue, p1.profit) == (1500, 9000, 7500)
        assert gone.plot_name is None
        assert gone.revenue == 300
        assert gone.cost == 0
        assert gone.profit == 300

    def test_orphan_rows_follow_encounter_order(self, make_plot, make_activity, make_harvest):
        """Orphaned accumulators are appended in the order first seen."""
        plots = [make_plot(id="P1")]
        activities = [make_activity(id="A1", plot_id="X2"), make_activity(id="A2", plot_id="X1")]
        harvests = [make_harvest(plot_id="X3"), make_harvest(id="H2", plot_id="X2")]

        summary = compute_financial_summary(plots, activities, harvests)

        assert [p.plot_id for p in summary.plot_summaries] == ["P1", "X2", "X1", "X3"]

    def test_conservation(self, make_plot, make_activity, make_harvest):
        """Per-plot rows must add up to the farm totals."""
        plots = [make_plot(id="P1"), make_plot(id="P2")]
        activities = [
            make_activity(id="A1", plot_id="P1", labor_cost=120.5),
            make_activity(id="A2", plot_id="P2", labor_cost=80.25, total_cost=310.75),
            make_activity(id="A3", plot_id="ORPHAN", labor_cost=40),
            make_activity(id="A4", plot_id="P2", labor_cost=999, status=ActivityStatus.PLANNED),
        ]
        harvests = [
            make_harvest(id="H1", plot_id="P1", quantity=10, unit_price=2.5),
            make_harvest(id="H2", plot_id="P2", quantity=7, unit_price=1.25),
            make_harvest(id="H3", plot_id="ORPHAN2", quantity=3, unit_price=4),
        ]

        summary = compute_financial_summary(plots, activities, harvests)

        assert sum(p.cost for p in summary.plot_summaries) == pytest.approx(summary.total_cost)
        assert sum(p.revenue for p in summary.plot_summaries) == pytest.approx(summary.total_revenue)
        assert summary.total_cost == pytest.approx(120.5 + 310.75 + 40)

    def test_harvests_always_count(self, make_plot, make_harvest):
        """Harvests have no status; every one is revenue."""
        harvests = [make_harvest(id=f"H{i}", quantity=1, unit_price=10) for i in range(3)]

        summary = compute_financial_summary([make_plot()], [], harvests)

        assert summary.total_revenue == 30

    def test_idempotent(self, sample_farm):
        """Same inputs give identical output."""
        first = compute_financial_summary(**sample_farm)
        second = compute_financial_summary(**sample_farm)

        assert first == second
        assert first.model_dump() == second.model_dump()


# ============================================================
# Service Cost Breakdown Tests
# ============================================================

class TestServiceCostBreakdown:
    """Tests for completed activity cost grouped by type."""

    def test_empty(self):
        assert service_cost_breakdown([]) == []

    def test_product_share_is_total_minus_labor(self, make_activity):
        """Products share is total cost minus labor cost."""
        activity = make_activity(id="A3", type="Adubação", labor_cost=300, total_cost=3000)

        rows = service_cost_breakdown([activity])

        assert len(rows) == 1
        row = rows[0]
        assert row.type == "Adubação"
        assert row.count == 1
        assert row.labor == 300
        assert row.products == 2700
        assert row.total == 3000

    def test_planned_activities_excluded(self, make_activity):
        activities = [
            make_activity(id="A1", type="Poda", labor_cost=100),
            make_activity(id="A2", type="Poda", labor_cost=500, status=ActivityStatus.PLANNED),
            make_activity(id="A3", type="Desponte", status=ActivityStatus.PLANNED),
        ]

        rows = service_cost_breakdown(activities)

        assert [(r.type, r.count, r.total) for r in rows] == [("Poda", 1, 100)]

    def test_sorted_by_total_descending(self, make_activity):
        activities = [
            make_activity(id="A1", type="Poda", labor_cost=100),
            make_activity(id="A2", type="Adubação", labor_cost=50, total_cost=900),
            make_activity(id="A3", type="Poda", labor_cost=100),
            make_activity(id="A4", type="Outros", labor_cost=10),
        ]

        rows = service_cost_breakdown(activities)

        assert [r.type for r in rows] == ["Adubação", "Poda", "Outros"]
        assert rows[1].count == 2
        assert rows[1].labor == 200

    def test_ties_keep_first_seen_order(self, make_activity):
        activities = [
            make_activity(id="A1", type="Poda", labor_cost=100),
            make_activity(id="A2", type="Desponte", labor_cost=100),
            make_activity(id="A3", type="Adubação", labor_cost=100),
        ]

        rows = service_cost_breakdown(activities)

        assert [r.type for r in rows] == ["Poda", "Desponte", "Adubação"]

    def test_unsorted_rows_keep_first_seen_order(self, make_activity):
        activities = [
            make_activity(id="A1", type="Roçagem", labor_cost=10),
            make_activity(id="A2", type="Poda", labor_cost=900),
            make_activity(id="A3", type="Roçagem", labor_cost=5),
        ]

        rows = service_cost_breakdown(activities, sort_by_total=False)

        assert [(r.type, r.total) for r in rows] == [("Roçagem", 15), ("Poda", 900)]

    def test_negative_product_share_is_not_clamped(self, make_activity):
        """Labor edited above the stored total yields a negative products bucket."""
        activity = make_activity(labor_cost=500, total_cost=300)

        rows = service_cost_breakdown([activity])

        assert rows[0].products == -200
        assert rows[0].total == 300

    def test_date_range_is_inclusive(self, make_activity):
        activities = [
            make_activity(id="A1", day=date(2024, 1, 1), labor_cost=1),
            make_activity(id="A2", day=date(2024, 1, 15), labor_cost=10),
            make_activity(id="A3", day=date(2024, 1, 31), labor_cost=100),
            make_activity(id="A4", day=date(2024, 2, 1), labor_cost=1000),
        ]

        rows = service_cost_breakdown(
            activities, start_date=date(2024, 1, 1), end_date=date(2024, 1, 31)
        )

        assert rows[0].total == 111
        assert rows[0].count == 3

    def test_open_ended_range(self, make_activity):
        activities = [
            make_activity(id="A1", day=date(2024, 1, 1), labor_cost=1),
            make_activity(id="A2", day=date(2024, 6, 1), labor_cost=10),
        ]

        assert service_cost_breakdown(activities, start_date=date(2024, 3, 1))[0].total == 10
        assert service_cost_breakdown(activities, end_date=date(2024, 3, 1))[0].total == 1

    def test_plot_filter(self, make_activity):
        activities = [
            make_activity(id="A1", plot_id="P1", labor_cost=10),
            make_activity(id="A2", plot_id="P2", labor_cost=20),
        ]

        rows = service_cost_breakdown(activities, plot_id="P2")

        assert rows[0].total == 20
        assert rows[0].count == 1


# ============================================================
# Harvest Statistics Tests
# ============================================================

class TestHarvestStatistics:
    """Tests for harvest volume and revenue."""

    def test_empty(self):
        stats = harvest_statistics([])

        assert stats.total_volume == 0
        assert stats.total_revenue == 0
        assert stats.by_classification == []

    def test_sums_and_classification_split(self, make_harvest):
        harvests = [
            make_harvest(id="H1", classification="Exportação", quantity=100, unit_price=5),
            make_harvest(id="H2", classification="Mercado", quantity=50, unit_price=2),
            make_harvest(id="H3", classification="Exportação", quantity=25, unit_price=5),
        ]

        stats = harvest_statistics(harvests)

        assert stats.total_volume == 175
        assert stats.total_revenue == 725
        assert [(c.classification, c.quantity) for c in stats.by_classification] == [
            ("Exportação", 125),
            ("Mercado", 50),
        ]

    def test_plot_and_date_filters(self, make_harvest):
        harvests = [
            make_harvest(id="H1", plot_id="P1", day=date(2024, 3, 1), quantity=10, unit_price=1),
            make_harvest(id="H2", plot_id="P2", day=date(2024, 3, 1), quantity=20, unit_price=1),
            make_harvest(id="H3", plot_id="P1", day=date(2024, 5, 1), quantity=40, unit_price=1),
        ]

        by_plot = harvest_statistics(harvests, plot_id="P1")
        by_range = harvest_statistics(harvests, start_date=date(2024, 2, 1), end_date=date(2024, 3, 31))

        assert by_plot.total_volume == 50
        assert by_range.total_volume == 30


# ============================================================
# Calendar Grouping Tests
# ============================================================

class TestTimelineGrouping:
    """Tests for grouping a month of activities by day."""

    def test_same_day_activities_share_a_group(self, make_activity):
        """Two days, ascending, same-day items in list order."""
        activities = [
            make_activity(id="late", day=date(2024, 11, 20)),
            make_activity(id="first", day=date(2024, 11, 5)),
            make_activity(id="second", day=date(2024, 11, 5), status=ActivityStatus.PLANNED),
        ]

        groups = group_activities_by_date(activities, 2024, 11)

        assert [g.date for g in groups] == [date(2024, 11, 5), date(2024, 11, 20)]
        assert [a.id for a in groups[0].activities] == ["first", "second"]
        assert [a.id for a in groups[1].activities] == ["late"]

    def test_other_months_and_years_excluded(self, make_activity):
        activities = [
            make_activity(id="A1", day=date(2024, 10, 31)),
            make_activity(id="A2", day=date(2023, 11, 5)),
            make_activity(id="A3", day=date(2024, 12, 1)),
        ]

        assert group_activities_by_date(activities, 2024, 11) == []

    def test_plot_filter(self, make_activity):
        activities = [
            make_activity(id="A1", plot_id="P1", day=date(2024, 11, 5)),
            make_activity(id="A2", plot_id="P2", day=date(2024, 11, 5)),
        ]

        groups = group_activities_by_date(activities, 2024, 11, plot_id="P2")

        assert len(groups) == 1
        assert [a.id for a in groups[0].activities] == ["A2"]

    def test_empty(self):
        assert group_activities_by_date([], 2024, 11) == []
