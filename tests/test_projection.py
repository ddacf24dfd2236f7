"""Unit tests for result projection."""

from decimal import Decimal

from adjustment_allocation.config import ReconcileSettings
from adjustment_allocation.engine import ProportionalTierRule, allocate_line_items
from adjustment_allocation.models import BusinessKey, CategoryKey, LineItem, OutputRecord
from adjustment_allocation.projection import HEADER, project, to_rows
from tests._helpers import CA, IL, IN, PH, US

KEY = BusinessKey("PO-1", "Manila", "ALPHA", "PG", "Analyst", "L1", "English", "W1")


def line_item(key, capacities, residual):
    item = LineItem(key)
    for category, units in capacities.items():
        item.add_observed(category, units)
    item.add_residual(residual)
    return item


class TestProject:
    def test_observed_then_adjustments(self, settings, policy):
        item = line_item(KEY, {PH: 100, IN: 50}, 90)
        results = allocate_line_items({KEY: item}, policy)
        records = project({KEY: item}, results, settings)
        assert records == [
            OutputRecord("SRT", KEY, IN, 50),
            OutputRecord("SRT", KEY, PH, 100),
            OutputRecord("Max Bill Adjustment", KEY, IN, -30),
            OutputRecord("Max Bill Adjustment", KEY, PH, -60),
        ]

    def test_placeholder_for_leftover(self, settings, policy):
        item = line_item(KEY, {PH: 1, IN: 1, US: 1, CA: 1, IL: 1}, 10)
        results = allocate_line_items({KEY: item}, policy)
        records = project({KEY: item}, results, settings)
        placeholders = [r for r in records if r.category == CategoryKey("No Assigned Country Yet", "No Assigned Facility Yet")]
        assert placeholders == [
            OutputRecord(
                "Max Bill Adjustment",
                KEY,
                CategoryKey("No Assigned Country Yet", "No Assigned Facility Yet"),
                -5,
            )
        ]
        adjustments = [r for r in records if r.hours_type == "Max Bill Adjustment"]
        assert sum(r.units for r in adjustments) == -10

    def test_zero_allocations_not_emitted(self, settings, policy):
        item = line_item(KEY, {PH: 10, US: 10}, 4)
        results = allocate_line_items({KEY: item}, policy)
        records = project({KEY: item}, results, settings)
        assert [r for r in records if r.hours_type != "SRT"] == [OutputRecord("Max Bill Adjustment", KEY, PH, -4)]

    def test_missing_result_emits_observed_only(self, settings):
        item = line_item(KEY, {PH: 10}, 4)
        assert project({KEY: item}, {}, settings) == [OutputRecord("SRT", KEY, PH, 10)]

    def test_sorted_by_key_fields(self, settings, policy):
        later = KEY._replace(week="W2")
        items = {later: line_item(later, {PH: 1}, 0), KEY: line_item(KEY, {PH: 1}, 0)}
        records = project(items, allocate_line_items(items, policy), settings)
        assert [r.key.week for r in records] == ["W1", "W2"]

    def test_custom_labels(self, policy):
        settings = ReconcileSettings(observed_label="Observed", adjustment_label="Adjustment")
        item = line_item(KEY, {PH: 10}, 4)
        records = project({KEY: item}, allocate_line_items({KEY: item}, policy), settings)
        assert [r.hours_type for r in records] == ["Observed", "Adjustment"]

    def test_repeatable(self, settings, policy):
        items = {KEY: line_item(KEY, {US: 3, PH: 7, IN: 2}, 11)}
        first = project(items, allocate_line_items(items, policy, ProportionalTierRule()), settings)
        second = project(items, allocate_line_items(items, policy, ProportionalTierRule()), settings)
        assert first == second


class TestToRows:
    def test_header_first(self):
        assert to_rows([], scale=8) == [HEADER]

    def test_row_layout(self):
        record = OutputRecord("SRT", KEY, PH, 150_000_000)
        (_, row) = to_rows([record], scale=8)
        assert row == ["SRT", *KEY, "Philippines", "Manila", Decimal("1.5")]
        assert len(row) == len(HEADER)
