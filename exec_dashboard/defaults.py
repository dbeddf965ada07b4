"""
exec_dashboard/defaults.py
==========================
Seed data for a first run and the zero-valued shapes used when a new year
is opened on the dashboard.
"""
from __future__ import annotations
from dataclasses import replace
from typing import Any, Dict, List

from .types import (
    SummaryStats,
    RevenueRecord, KPIRecord, BudgetRecord, PipelineRecord, ProductSalesRecord,
    MarketShareRecord, GrowthRateRecord, ProfitMarginRecord, CashFlowRecord,
    SegmentationRecord, ARTurnoverRecord,
)

SEED_YEAR = "2024"

MONTHS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
          "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]
QUARTERS = ["Q1", "Q2", "Q3", "Q4"]

DIVISIONS = [
    "Sales",
    "Business Development & Marketing",
    "Technical Support",
    "Technical Service",
    "Finance Accounting & Tax",
    "Supply Chain & Pricing",
    "Warehouse",
    "Tender",
    "Human Resources & General Affair",
    "Project Operation",
    "Sales Service",
]

BUDGET_CATEGORIES = ["Operational", "Marketing", "Development", "HR & GA", "Project Op"]
PRODUCT_NAMES = ["Spare Parts", "Maintenance Service", "New Equipment", "Consultation", "Others"]
MARKET_SHARE_NAMES = ["Oseanland", "Competitor A", "Competitor B", "Competitor C", "Others"]
SEGMENTS = ["Mining", "Oil & Gas", "Construction", "Manufacturing", "Government"]
PIPELINE_STAGES = ["Prospecting", "Qualification", "Proposal", "Negotiation", "Closed Won"]

SUMMARY_STATS = SummaryStats(
    total_leads=1248,
    total_expense=48500,
    total_profit=32400,
    margin=40.2,
    customer_satisfaction=4.8,
    conversion_rate=24.5,
    total_inventory_assets=1500000,
    total_demo_assets=450000,
    total_operational_office_assets=850000,
    best_employee="Budi Santoso",
    best_division="Sales",
    best_attendance="Siti Aminah",
)

# (month, revenue, target, expense)
_REVENUE_2024 = [
    (4500, 4000, 3200), (5200, 4200, 3400), (4800, 4500, 3100), (6100, 4800, 3800),
    (5900, 5000, 3600), (6800, 5500, 4100), (7200, 6000, 4300), (7100, 6200, 4200),
    (8500, 6500, 4800), (8200, 7000, 4600), (9400, 7500, 5200), (10500, 8000, 5800),
]
_REVENUE_2023 = [
    (3500, 3800, 2800), (4200, 4000, 3000), (3800, 4200, 2900), (5100, 4500, 3400),
    (4900, 4600, 3200), (5800, 5000, 3700), (6200, 5500, 3900), (6100, 5800, 3800),
    (7500, 6000, 4400), (7200, 6500, 4200), (8400, 7000, 4800), (9500, 7500, 5300),
]
_KPI_PROGRESS = [88, 76, 92, 81, 95, 73, 84, 67, 90, 78, 86]
_KPI_ACTUAL = [91, 74, 96, 83, 97, 72, 88, 71, 93, 80, 85]


def seed_datasets() -> Dict[str, List[Any]]:
    """Sample datasets loaded on the very first run."""
    y = SEED_YEAR
    revenue = [RevenueRecord(m, r, t, e, y) for m, (r, t, e) in zip(MONTHS, _REVENUE_2024)]
    revenue += [RevenueRecord(m, r, t, e, "2023") for m, (r, t, e) in zip(MONTHS, _REVENUE_2023)]
    return {
        "revenue": revenue,
        "kpi": [KPIRecord(d, p, 100, a, y)
                for d, p, a in zip(DIVISIONS, _KPI_PROGRESS, _KPI_ACTUAL)],
        "budget": [BudgetRecord(c, b, a, y) for c, b, a in zip(
            BUDGET_CATEGORIES, [50000, 25000, 40000, 15000, 60000],
            [48500, 28000, 35000, 14200, 58000])],
        "pipeline": [PipelineRecord(s, v, c, y) for s, v, c in zip(
            PIPELINE_STAGES, [1200000, 850000, 600000, 450000, 300000], [45, 32, 18, 12, 8])],
        "product_sales": [ProductSalesRecord(n, v, y) for n, v in zip(
            PRODUCT_NAMES, [35, 25, 20, 15, 5])],
        "growth_rate": [GrowthRateRecord(q, r, y) for q, r in zip(
            QUARTERS, [12.5, 15.2, 18.7, 22.1])],
        "profit_margin": [ProfitMarginRecord(m, v, y) for m, v in zip(
            MONTHS[:6], [28.9, 34.6, 35.4, 37.7, 39.0, 39.7])],
        "cash_flow": [CashFlowRecord(m, i, o, y) for m, i, o in zip(
            MONTHS[:6], [4200, 4900, 4600, 5800, 5600, 6500], [3100, 3300, 3000, 3700, 3500, 4000])],
        "market_share": [MarketShareRecord(n, v, y) for n, v in zip(
            MARKET_SHARE_NAMES, [32, 24, 18, 14, 12])],
        "segmentation": [SegmentationRecord(s, v, y) for s, v in zip(
            SEGMENTS, [40, 25, 15, 12, 8])],
        "ar_turnover": [ARTurnoverRecord(m, r, y) for m, r in zip(
            MONTHS[:6], [6.2, 5.8, 6.5, 7.1, 6.9, 7.4])],
    }


def seed_stats() -> Dict[str, SummaryStats]:
    return {SEED_YEAR: replace(SUMMARY_STATS), "2023": replace(SUMMARY_STATS, total_leads=950)}


def zero_records(kind: str, year: str) -> List[Any]:
    """Zero-valued default shape of one dataset kind for a freshly opened year."""
    builders = {
        "revenue": lambda: [RevenueRecord(m, 0, 0, 0, year) for m in MONTHS],
        "kpi": lambda: [KPIRecord(d, 0, 100, 0, year) for d in DIVISIONS],
        "budget": lambda: [BudgetRecord(c, 0, 0, year) for c in BUDGET_CATEGORIES],
        "pipeline": lambda: [PipelineRecord(s, 0, 0, year) for s in PIPELINE_STAGES],
        "product_sales": lambda: [ProductSalesRecord(n, 0, year) for n in PRODUCT_NAMES],
        "growth_rate": lambda: [GrowthRateRecord(q, 0.0, year) for q in QUARTERS],
        "profit_margin": lambda: [ProfitMarginRecord(m, 0.0, year) for m in MONTHS[:6]],
        "cash_flow": lambda: [CashFlowRecord(m, 0, 0, year) for m in MONTHS[:6]],
        "market_share": lambda: [MarketShareRecord(n, 0, year) for n in MARKET_SHARE_NAMES],
        "segmentation": lambda: [SegmentationRecord(s, 0, year) for s in SEGMENTS],
        "ar_turnover": lambda: [ARTurnoverRecord(m, 0.0, year) for m in MONTHS[:6]],
    }
    if kind not in builders:
        raise KeyError(f"Unknown dataset kind: {kind}")
    return builders[kind]()


def zero_stats() -> SummaryStats:
    return replace(SUMMARY_STATS, total_leads=0, total_expense=0, total_profit=0, margin=0.0)
