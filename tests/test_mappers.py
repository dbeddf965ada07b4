"""
tests/test_mappers.py
=====================
Value coercion and per-dataset sheet mappers.

Run:  pytest tests/ -v
"""
import math

import pytest

from exec_dashboard.mappers import (
    MAPPERS,
    coerce_float,
    coerce_int,
    coerce_str,
    coerce_value,
    map_ar_turnover_data,
    map_budget_data,
    map_kpi_data,
    map_pipeline_data,
    map_revenue_data,
    map_summary_stats,
    to_numeric,
)
from exec_dashboard.types import DATASET_KINDS, KPIRecord, RevenueRecord


# ═══════════════════════════════════════════════════════════════════════════════
# 1. VALUE COERCION
# ═══════════════════════════════════════════════════════════════════════════════

class TestToNumeric:
    def test_integer_input(self):
        assert to_numeric(1234) == 1234.0

    def test_float_input(self):
        assert to_numeric(3.14) == pytest.approx(3.14)

    def test_comma_separated_string(self):
        assert to_numeric("4,500") == 4500.0

    def test_parenthetical_negative(self):
        assert to_numeric("(500)") == -500.0

    def test_rupiah_prefix(self):
        assert to_numeric("Rp 1,500") == 1500.0
        assert to_numeric("IDR 2500") == 2500.0

    def test_percent_suffix(self):
        assert to_numeric("12.5%") == pytest.approx(12.5)

    def test_none_and_blank(self):
        assert to_numeric(None) is None
        assert to_numeric("") is None
        assert to_numeric("   ") is None

    def test_nan_and_inf(self):
        assert to_numeric(float("nan")) is None
        assert to_numeric(float("inf")) is None
        assert to_numeric("inf") is None

    def test_text(self):
        assert to_numeric("n/a") is None
        assert to_numeric("abc") is None

    def test_bool_is_not_a_number(self):
        assert to_numeric(True) is None


class TestCoerce:
    @pytest.mark.parametrize("value", [None, "", "abc", float("nan"), "-", [], {}])
    def test_int_fallback_is_zero(self, value):
        assert coerce_int(value) == 0

    @pytest.mark.parametrize("value", [None, "", "abc", float("nan")])
    def test_float_fallback_is_zero(self, value):
        out = coerce_float(value)
        assert out == 0.0
        assert not math.isnan(out)

    def test_int_truncates(self):
        assert coerce_int("4500.9") == 4500
        assert coerce_int(-3.7) == -3

    def test_float_keeps_fraction(self):
        assert coerce_float("6.25") == pytest.approx(6.25)

    def test_str_default(self):
        assert coerce_str(None, "Jan") == "Jan"
        assert coerce_str("  ", "Other") == "Other"
        assert coerce_str(float("nan"), "Unknown") == "Unknown"

    def test_str_trims_and_formats_whole_floats(self):
        assert coerce_str("  Feb ", "Jan") == "Feb"
        assert coerce_str(2024.0, "") == "2024"

    def test_kpi_progress_clamped(self):
        assert coerce_value("kpi", "progress", "150") == 100
        assert coerce_value("kpi", "progress", -5) == 0


# ═══════════════════════════════════════════════════════════════════════════════
# 2. SHEET MAPPERS
# ═══════════════════════════════════════════════════════════════════════════════

class TestRevenueMapper:
    def test_lower_case_headers(self):
        rows = [{"month": "Jan", "revenue": "4500", "target": "4000", "expense": "3200"}]
        assert map_revenue_data(rows) == [RevenueRecord("Jan", 4500, 4000, 3200, "")]

    def test_capitalized_headers(self):
        rows = [{"Month": "Mar", "Revenue": 4800, "Target": 4500.0, "Expense": 3100}]
        rec = map_revenue_data(rows)[0]
        assert (rec.month, rec.revenue, rec.target, rec.expense) == ("Mar", 4800, 4500, 3100)

    def test_mixed_case_headers(self):
        rows = [{" MONTH ": "Apr", "ReVeNuE": "6100"}]
        rec = map_revenue_data(rows)[0]
        assert rec.month == "Apr"
        assert rec.revenue == 6100

    def test_lower_case_key_preferred(self):
        rows = [{"revenue": "100", "Revenue": "999"}]
        assert map_revenue_data(rows)[0].revenue == 100

    def test_blank_lower_case_falls_through(self):
        rows = [{"revenue": "", "Revenue": "999"}]
        assert map_revenue_data(rows)[0].revenue == 999

    def test_unrecognized_headers_use_defaults(self):
        rec = map_revenue_data([{"foo": "bar"}])[0]
        assert rec == RevenueRecord("Jan", 0, 0, 0, "")

    def test_indonesian_aliases(self):
        rec = map_revenue_data([{"Bulan": "Mei", "Pendapatan": "5900"}])[0]
        assert rec.month == "Mei"
        assert rec.revenue == 5900


class TestKpiMapper:
    def test_target_always_100(self):
        rows = [{"division": "Sales", "progress": "88", "actual": "91", "target": "55"}]
        rec = map_kpi_data(rows)[0]
        assert rec.target == 100
        assert (rec.division, rec.progress, rec.actual) == ("Sales", 88, 91)

    def test_defaults(self):
        assert map_kpi_data([{}]) == [KPIRecord("Unknown", 0, 100, 0, "")]


class TestOtherMappers:
    def test_budget_defaults(self):
        rec = map_budget_data([{"Budget": "50000"}])[0]
        assert (rec.category, rec.budget, rec.actual) == ("Other", 50000, 0)

    def test_pipeline(self):
        rec = map_pipeline_data([{"Stage": "Proposal", "Value": "600,000", "Count": "18"}])[0]
        assert (rec.stage, rec.value, rec.count) == ("Proposal", 600000, 18)

    def test_ar_turnover_ratio_is_float(self):
        rec = map_ar_turnover_data([{"month": "Feb", "ratio": "5.8"}])[0]
        assert rec.ratio == pytest.approx(5.8)
        assert isinstance(rec.ratio, float)

    @pytest.mark.parametrize("kind", DATASET_KINDS)
    def test_row_count_preserved(self, kind):
        rows = [{"month": "Jan"}, {}, {"garbage": None}, {"value": "12"}, "not a row"]
        assert len(MAPPERS[kind](rows)) == len(rows)

    @pytest.mark.parametrize("kind", DATASET_KINDS)
    def test_empty_input(self, kind):
        assert MAPPERS[kind]([]) == []

    def test_every_kind_has_a_mapper(self):
        assert set(MAPPERS) == set(DATASET_KINDS)


class TestSummaryStats:
    def test_camel_case_remote_keys(self):
        stats = map_summary_stats({"totalLeads": "1248", "margin": "40.2", "bestEmployee": "Budi"})
        assert stats.total_leads == 1248
        assert stats.margin == pytest.approx(40.2)
        assert stats.best_employee == "Budi"

    def test_snake_case_keys(self):
        stats = map_summary_stats({"total_profit": 32400, "best_division": "Sales"})
        assert stats.total_profit == 32400
        assert stats.best_division == "Sales"

    def test_missing_everything(self):
        stats = map_summary_stats(None)
        assert stats.total_leads == 0
        assert stats.best_attendance == ""
