"""
exec_dashboard/types.py
=======================
Typed records, dataset kinds, configuration and error classes shared by
the ingestion pipeline, the dataset store and the dashboard UI.
"""
from __future__ import annotations
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional, Tuple

logger = logging.getLogger(__name__)

# ─── Core Data Types ──────────────────────────────────────────────────────────

# RawRow: {column_header: cell_value}
RawRow = Dict[str, Any]

# Snapshot: JSON-serializable dump of the whole dataset store
Snapshot = Dict[str, Any]

DatasetKind = Literal[
    "revenue", "kpi", "budget", "pipeline", "product_sales", "growth_rate",
    "profit_margin", "cash_flow", "market_share", "segmentation", "ar_turnover",
]
ImportKind = Literal[
    "all", "revenue", "kpi", "budget", "pipeline", "product_sales", "growth_rate",
    "profit_margin", "cash_flow", "market_share", "segmentation", "ar_turnover",
]
FileFormat = Literal["csv", "workbook"]

DATASET_KINDS: Tuple[str, ...] = (
    "revenue", "kpi", "budget", "pipeline", "product_sales", "growth_rate",
    "profit_margin", "cash_flow", "market_share", "segmentation", "ar_turnover",
)

DATASET_LABELS: Dict[str, str] = {
    "revenue": "Revenue",
    "kpi": "KPI",
    "budget": "Budget",
    "pipeline": "Sales Pipeline",
    "product_sales": "Product Mix",
    "growth_rate": "Growth Rate",
    "profit_margin": "Profit Margin",
    "cash_flow": "Cash Flow",
    "market_share": "Market Share",
    "segmentation": "Segmentation",
    "ar_turnover": "AR Turnover",
}


# ─── Typed Records ────────────────────────────────────────────────────────────

@dataclass
class RevenueRecord:
    month: str = "Jan"
    revenue: int = 0
    target: int = 0
    expense: int = 0
    year: str = ""


@dataclass
class KPIRecord:
    division: str = "Unknown"
    progress: int = 0  # 0-100
    target: int = 100
    actual: int = 0
    year: str = ""


@dataclass
class BudgetRecord:
    category: str = "Other"
    budget: int = 0
    actual: int = 0
    year: str = ""


@dataclass
class PipelineRecord:
    stage: str = "Unknown"
    value: int = 0
    count: int = 0
    year: str = ""


@dataclass
class ProductSalesRecord:
    name: str = "Other"
    value: int = 0
    year: str = ""


@dataclass
class MarketShareRecord:
    name: str = "Other"
    value: int = 0
    year: str = ""


@dataclass
class GrowthRateRecord:
    period: str = "Q1"
    rate: float = 0.0
    year: str = ""


@dataclass
class ProfitMarginRecord:
    month: str = "Jan"
    margin: float = 0.0
    year: str = ""


@dataclass
class CashFlowRecord:
    month: str = "Jan"
    inflow: int = 0
    outflow: int = 0
    year: str = ""


@dataclass
class SegmentationRecord:
    segment: str = "Other"
    value: int = 0
    year: str = ""


@dataclass
class ARTurnoverRecord:
    month: str = "Jan"
    ratio: float = 0.0
    year: str = ""


@dataclass
class SummaryStats:
    """Headline figures shown in the KPI cards, one object per year."""
    total_leads: int = 0
    total_expense: int = 0
    total_profit: int = 0
    margin: float = 0.0
    customer_satisfaction: float = 0.0
    conversion_rate: float = 0.0
    total_inventory_assets: int = 0
    total_demo_assets: int = 0
    total_operational_office_assets: int = 0
    best_employee: str = ""
    best_division: str = ""
    best_attendance: str = ""


RECORD_TYPES: Dict[str, type] = {
    "revenue": RevenueRecord,
    "kpi": KPIRecord,
    "budget": BudgetRecord,
    "pipeline": PipelineRecord,
    "product_sales": ProductSalesRecord,
    "growth_rate": GrowthRateRecord,
    "profit_margin": ProfitMarginRecord,
    "cash_flow": CashFlowRecord,
    "market_share": MarketShareRecord,
    "segmentation": SegmentationRecord,
    "ar_turnover": ARTurnoverRecord,
}


# ─── Import Results ───────────────────────────────────────────────────────────

@dataclass
class ParsedFile:
    format: FileFormat
    sheets: Dict[str, List[RawRow]] = field(default_factory=dict)


@dataclass
class ImportResult:
    imported_count: int = 0
    updated_kinds: List[str] = field(default_factory=list)
    skipped_sheets: List[str] = field(default_factory=list)
    failed_sheets: List[str] = field(default_factory=list)
    row_counts: Dict[str, int] = field(default_factory=dict)
    fallback_sheet: Optional[str] = None
    smart: bool = False

    @property
    def message(self) -> str:
        if self.fallback_sheet is not None:
            kind = self.updated_kinds[0] if self.updated_kinds else "?"
            return f'Imported first sheet "{self.fallback_sheet}" as {DATASET_LABELS.get(kind, kind)}.'
        if self.imported_count == 0 and self.failed_sheets:
            return f"Import failed for {', '.join(self.failed_sheets)}; nothing was imported."
        if self.imported_count == 0:
            return "No sheets matched a known dataset; nothing was imported."
        if self.smart:
            return f"Smart Import: successfully imported {self.imported_count} sheet(s)."
        kind = self.updated_kinds[0]
        return f"Imported {self.row_counts.get(kind, 0)} rows into {DATASET_LABELS.get(kind, kind)}."


# ─── Configuration ────────────────────────────────────────────────────────────

STORAGE_KEY = "oseanland_dashboard_data"


@dataclass
class DashboardConfig:
    storage_path: str = os.path.join(os.path.expanduser("~"), ".exec_dashboard", "state.json")
    storage_key: str = STORAGE_KEY
    remote_url: Optional[str] = None
    remote_timeout: float = 10.0
    default_year: str = "2024"
    years: List[str] = field(default_factory=lambda: [str(y) for y in range(2023, 2031)])
    charts: List[str] = field(default_factory=lambda: list(DATASET_KINDS))

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None) -> "DashboardConfig":
        """Build a config, overriding defaults from EXEC_DASHBOARD_* variables."""
        env = os.environ if environ is None else environ
        cfg = cls()
        if env.get("EXEC_DASHBOARD_STORAGE_PATH"):
            cfg.storage_path = env["EXEC_DASHBOARD_STORAGE_PATH"]
        if env.get("EXEC_DASHBOARD_STORAGE_KEY"):
            cfg.storage_key = env["EXEC_DASHBOARD_STORAGE_KEY"]
        if env.get("EXEC_DASHBOARD_REMOTE_URL"):
            cfg.remote_url = env["EXEC_DASHBOARD_REMOTE_URL"]
        if env.get("EXEC_DASHBOARD_REMOTE_TIMEOUT"):
            try:
                cfg.remote_timeout = float(env["EXEC_DASHBOARD_REMOTE_TIMEOUT"])
            except ValueError:
                logger.warning("Ignoring non-numeric EXEC_DASHBOARD_REMOTE_TIMEOUT=%r",
                               env["EXEC_DASHBOARD_REMOTE_TIMEOUT"])
        if env.get("EXEC_DASHBOARD_DEFAULT_YEAR"):
            cfg.default_year = env["EXEC_DASHBOARD_DEFAULT_YEAR"]
        if env.get("EXEC_DASHBOARD_CHARTS"):
            charts = [c.strip() for c in env["EXEC_DASHBOARD_CHARTS"].split(",")]
            cfg.charts = [c for c in charts if c in DATASET_KINDS]
        if cfg.default_year not in cfg.years:
            cfg.years = sorted(cfg.years + [cfg.default_year])
        return cfg


# ─── Errors ───────────────────────────────────────────────────────────────────

class DashboardError(Exception):
    """Base class for errors raised by the ingestion pipeline."""


class MalformedInputError(DashboardError):
    """The uploaded file cannot be read at all; the import is aborted."""


class UnsupportedFormatError(MalformedInputError):
    pass


class ParseError(MalformedInputError):
    pass
