"""
tests/test_store.py
===================
Year-partitioned dataset store: views, slice replacement, point edits,
year initialisation and snapshots.
"""
import pytest

from exec_dashboard.defaults import SUMMARY_STATS
from exec_dashboard.store import DatasetStore
from exec_dashboard.types import (
    DATASET_KINDS,
    BudgetRecord,
    GrowthRateRecord,
    KPIRecord,
    RevenueRecord,
)


class TestViews:
    def test_view_filters_by_year(self, seeded_store):
        view = seeded_store.get_view("revenue", "2024")
        assert len(view) == 12
        assert all(r.year == "2024" for r in view)
        assert view[0].month == "Jan"

    def test_view_of_missing_year_is_empty(self, seeded_store):
        assert seeded_store.get_view("budget", "2031") == []

    def test_unknown_kind(self, seeded_store):
        with pytest.raises(KeyError):
            seeded_store.get_view("weather", "2024")

    def test_years(self, seeded_store):
        assert seeded_store.years() == ["2023", "2024"]

    def test_stats_fallback_to_defaults(self, empty_store):
        stats = empty_store.get_stats("2030")
        assert stats == SUMMARY_STATS
        assert stats is not SUMMARY_STATS


class TestReplaceYearSlice:
    def test_other_years_untouched(self, seeded_store):
        rev_2023 = [r for r in seeded_store.datasets["revenue"] if r.year == "2023"]
        seeded_store.replace_year_slice("revenue", "2024", [RevenueRecord("Jan", 1, 2, 3)])

        assert seeded_store.get_view("revenue", "2023") == rev_2023
        assert seeded_store.get_view("revenue", "2024") == [RevenueRecord("Jan", 1, 2, 3, "2024")]

    def test_records_are_retagged(self, empty_store):
        empty_store.replace_year_slice("budget", "2026", [BudgetRecord("Ops", 10, 5, "1999")])
        assert empty_store.get_view("budget", "2026")[0].year == "2026"
        assert empty_store.get_view("budget", "1999") == []

    def test_idempotent(self, seeded_store):
        records = [KPIRecord("Sales", 80, 100, 82), KPIRecord("Tender", 60, 100, 58)]
        seeded_store.replace_year_slice("kpi", "2024", records)
        once = seeded_store.to_snapshot()
        seeded_store.replace_year_slice("kpi", "2024", records)
        assert seeded_store.to_snapshot() == once

    def test_empty_slice_clears_year(self, seeded_store):
        assert seeded_store.replace_year_slice("pipeline", "2024", []) == 0
        assert seeded_store.get_view("pipeline", "2024") == []

    def test_kpi_progress_clamped_on_replace(self, empty_store):
        empty_store.replace_year_slice("kpi", "2024", [KPIRecord("Sales", 150, 100, 1),
                                                       KPIRecord("Tender", -3, 100, 0)])
        assert [r.progress for r in empty_store.get_view("kpi", "2024")] == [100, 0]

    def test_fields_coerced_on_replace(self, empty_store):
        empty_store.replace_year_slice("revenue", "2024", [RevenueRecord("  ", "4,500", 12.9, None)])
        assert empty_store.get_view("revenue", "2024") == [RevenueRecord("Jan", 4500, 12, 0, "2024")]

    def test_wrong_record_type_rejected(self, seeded_store):
        before = seeded_store.to_snapshot()
        with pytest.raises(TypeError):
            seeded_store.replace_year_slice("revenue", "2024", [BudgetRecord("Ops", 1, 1)])
        assert seeded_store.to_snapshot() == before


class TestMutateField:
    def test_changes_only_target_field(self, seeded_store):
        before = [RevenueRecord(r.month, r.revenue, r.target, r.expense, r.year)
                  for r in seeded_store.datasets["revenue"]]

        assert seeded_store.mutate_field("revenue", "2024", 0, "revenue", 9999)

        after = seeded_store.datasets["revenue"]
        assert after[0].revenue == 9999
        assert (after[0].month, after[0].target, after[0].expense) == (
            before[0].month, before[0].target, before[0].expense)
        assert after[1:] == before[1:]

    def test_index_is_relative_to_year_view(self, seeded_store):
        seeded_store.mutate_field("revenue", "2023", 0, "expense", 1)
        assert seeded_store.get_view("revenue", "2023")[0].expense == 1
        assert seeded_store.get_view("revenue", "2024")[0].expense != 1

    def test_value_is_coerced(self, seeded_store):
        seeded_store.mutate_field("revenue", "2024", 2, "target", "7,250")
        assert seeded_store.get_view("revenue", "2024")[2].target == 7250

    @pytest.mark.parametrize("index", [-1, 12, 99])
    def test_out_of_range_is_noop(self, seeded_store, index):
        before = seeded_store.to_snapshot()
        assert not seeded_store.mutate_field("revenue", "2024", index, "revenue", 1)
        assert seeded_store.to_snapshot() == before

    def test_unknown_field_rejected(self, seeded_store):
        assert not seeded_store.mutate_field("revenue", "2024", 0, "colour", "red")

    def test_year_field_not_editable(self, seeded_store):
        assert not seeded_store.mutate_field("revenue", "2024", 0, "year", "2023")
        assert len(seeded_store.get_view("revenue", "2024")) == 12

    @pytest.mark.parametrize("cleared", [None, float("nan"), ""])
    def test_cleared_cell_matches_stored_default(self, seeded_store, cleared):
        seeded_store.mutate_field("revenue", "2024", 0, "revenue", cleared)
        assert seeded_store.get_view("revenue", "2024")[0].revenue == 0
        assert not seeded_store.edit_changes_value("revenue", "2024", 0, "revenue", cleared)

    def test_cleared_text_cell_matches_stored_default(self, seeded_store):
        seeded_store.mutate_field("revenue", "2024", 3, "month", None)
        assert seeded_store.get_view("revenue", "2024")[3].month == "Jan"
        assert not seeded_store.edit_changes_value("revenue", "2024", 3, "month", float("nan"))

    def test_edit_changes_value(self, seeded_store):
        assert seeded_store.edit_changes_value("revenue", "2024", 0, "revenue", "4501")
        assert not seeded_store.edit_changes_value("revenue", "2024", 0, "revenue", "4,500")
        assert not seeded_store.edit_changes_value("revenue", "2024", 99, "revenue", 1)
        assert not seeded_store.edit_changes_value("kpi", "2024", 0, "target", 50)

    def test_kpi_target_locked(self, seeded_store):
        assert not seeded_store.mutate_field("kpi", "2024", 0, "target", 50)
        assert seeded_store.get_view("kpi", "2024")[0].target == 100


class TestStatsAndYears:
    def test_update_stat(self, seeded_store):
        assert seeded_store.update_stat("2024", "total_leads", "1,500")
        assert seeded_store.get_stats("2024").total_leads == 1500
        assert seeded_store.get_stats("2023").total_leads == 950

    def test_update_unknown_stat(self, seeded_store):
        assert not seeded_store.update_stat("2024", "weather", 1)

    def test_update_stat_for_new_year_starts_from_defaults(self, empty_store):
        empty_store.update_stat("2028", "best_division", "Tender")
        stats = empty_store.get_stats("2028")
        assert stats.best_division == "Tender"
        assert stats.total_leads == SUMMARY_STATS.total_leads

    def test_init_year_seeds_every_kind(self, empty_store):
        seeded = empty_store.init_year("2026")
        assert seeded == list(DATASET_KINDS)
        rev = empty_store.get_view("revenue", "2026")
        assert len(rev) == 12
        assert all(r.revenue == 0 for r in rev)
        stats = empty_store.get_stats("2026")
        assert (stats.total_leads, stats.total_expense, stats.total_profit) == (0, 0, 0)
        assert stats.margin == 0.0

    def test_init_year_keeps_existing_data(self, seeded_store):
        rev_before = seeded_store.get_view("revenue", "2023")
        seeded = seeded_store.init_year("2023")
        assert "revenue" not in seeded
        assert "kpi" in seeded
        assert seeded_store.get_view("revenue", "2023") == rev_before
        assert seeded_store.get_stats("2023").total_leads == 950


class TestSnapshots:
    def test_round_trip(self, seeded_store):
        seeded_store.mutate_field("kpi", "2024", 1, "progress", 55)
        restored = DatasetStore.from_snapshot(seeded_store.to_snapshot())
        assert restored == seeded_store

    def test_round_trip_of_populated_store(self, empty_store):
        empty_store.replace_year_slice("kpi", "2024", [KPIRecord("Sales", 150, 100, 1)])
        empty_store.replace_year_slice("growth_rate", "2025", [GrowthRateRecord("Q2", 7.25)])
        empty_store.update_stat("2025", "best_employee", "Rina")
        restored = DatasetStore.from_snapshot(empty_store.to_snapshot())
        assert restored == empty_store
        assert restored.get_view("kpi", "2024")[0].progress == 100

    def test_snapshot_shape(self, seeded_store):
        snap = seeded_store.to_snapshot()
        assert set(snap) == set(DATASET_KINDS) | {"stats"}
        assert snap["revenue"][0] == {
            "month": "Jan", "revenue": 4500, "target": 4000, "expense": 3200, "year": "2024",
        }
        assert snap["stats"]["2023"]["total_leads"] == 950

    def test_partial_snapshot(self):
        store = DatasetStore.from_snapshot({
            "revenue": [{"month": "Mar", "revenue": "4800", "year": 2025}, "junk"],
        })
        assert store.get_view("revenue", "2025") == [RevenueRecord("Mar", 4800, 0, 0, "2025")]
        assert store.datasets["kpi"] == []
        assert store.stats == {}
