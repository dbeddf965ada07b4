"""
exec_dashboard/mappers.py
=========================
Value coercion and per-dataset sheet mappers.

Every mapper turns a list of raw rows (header → cell) into typed records,
one record per row, in order. Unknown headers and unreadable cells never
drop a row: each field falls back to its default (0 for numbers, a fixed
literal such as 'Jan' / 'Unknown' / 'Other' for text).
"""
from __future__ import annotations
import math
from collections.abc import Mapping
from dataclasses import fields
from typing import Any, Callable, Dict, List, Optional, Tuple

from .types import (
    RECORD_TYPES, RawRow, SummaryStats,
    RevenueRecord, KPIRecord, BudgetRecord, PipelineRecord, ProductSalesRecord,
    MarketShareRecord, GrowthRateRecord, ProfitMarginRecord, CashFlowRecord,
    SegmentationRecord, ARTurnoverRecord,
)


# ─── Numeric Normalisation ────────────────────────────────────────────────────

def to_numeric(val: Any) -> Optional[float]:
    """Convert diverse cell formats to float; None when nothing numeric is there."""
    if val is None or isinstance(val, bool):
        return None
    if isinstance(val, (int, float)):
        f = float(val)
        return None if math.isnan(f) or math.isinf(f) else f
    s = str(val).strip()
    # Parenthetical negatives: (1234) → -1234
    if s.startswith('(') and s.endswith(')'):
        s = '-' + s[1:-1]
    # Strip currency, percent & separators
    s = (s.replace(',', '').replace('Rp.', '').replace('Rp', '').replace('IDR', '')
         .replace('$', '').replace('%', '').replace(' ', '')
         .strip())
    if s in ('', '-', '--', 'N/A', 'NA', 'n/a', 'nan', 'NaN', 'None', 'null'):
        return None
    try:
        f = float(s)
    except ValueError:
        return None
    return None if math.isnan(f) or math.isinf(f) else f


def coerce_int(value: Any) -> int:
    num = to_numeric(value)
    return 0 if num is None else int(num)


def coerce_float(value: Any) -> float:
    num = to_numeric(value)
    return 0.0 if num is None else num


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return isinstance(value, str) and not value.strip()


def coerce_str(value: Any, default: str) -> str:
    if _is_blank(value):
        return default
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


COERCERS: Dict[str, Callable[[Any], Any]] = {
    "int": coerce_int,
    "float": coerce_float,
}


# ─── Header Aliases ───────────────────────────────────────────────────────────

# {kind: {field: accepted header aliases, in preference order}}
FIELD_ALIASES: Dict[str, Dict[str, Tuple[str, ...]]] = {
    "revenue": {
        "month": ("month", "bulan"),
        "revenue": ("revenue", "pendapatan"),
        "target": ("target",),
        "expense": ("expense", "biaya"),
    },
    "kpi": {
        "division": ("division", "divisi"),
        "progress": ("progress",),
        "actual": ("actual", "realisasi"),
    },
    "budget": {
        "category": ("category", "kategori"),
        "budget": ("budget", "anggaran"),
        "actual": ("actual", "realisasi"),
    },
    "pipeline": {
        "stage": ("stage", "tahap"),
        "value": ("value", "nilai"),
        "count": ("count", "jumlah"),
    },
    "product_sales": {
        "name": ("name", "product", "produk"),
        "value": ("value", "nilai"),
    },
    "market_share": {
        "name": ("name", "company", "competitor"),
        "value": ("value", "share", "nilai"),
    },
    "growth_rate": {
        "period": ("period", "quarter", "periode"),
        "rate": ("rate", "growth"),
    },
    "profit_margin": {
        "month": ("month", "bulan"),
        "margin": ("margin",),
    },
    "cash_flow": {
        "month": ("month", "bulan"),
        "inflow": ("inflow", "masuk"),
        "outflow": ("outflow", "keluar"),
    },
    "segmentation": {
        "segment": ("segment", "segmen"),
        "value": ("value", "nilai"),
    },
    "ar_turnover": {
        "month": ("month", "bulan"),
        "ratio": ("ratio", "rasio"),
    },
}

# {kind: {field: "int" | "float" | "str"}}; used by imports and point edits alike
FIELD_TYPES: Dict[str, Dict[str, str]] = {
    "revenue": {"month": "str", "revenue": "int", "target": "int", "expense": "int"},
    "kpi": {"division": "str", "progress": "int", "target": "int", "actual": "int"},
    "budget": {"category": "str", "budget": "int", "actual": "int"},
    "pipeline": {"stage": "str", "value": "int", "count": "int"},
    "product_sales": {"name": "str", "value": "int"},
    "market_share": {"name": "str", "value": "int"},
    "growth_rate": {"period": "str", "rate": "float"},
    "profit_margin": {"month": "str", "margin": "float"},
    "cash_flow": {"month": "str", "inflow": "int", "outflow": "int"},
    "segmentation": {"segment": "str", "value": "int"},
    "ar_turnover": {"month": "str", "ratio": "float"},
}

STATS_ALIASES: Dict[str, Tuple[str, ...]] = {
    "total_leads": ("total_leads", "totalleads", "leads"),
    "total_expense": ("total_expense", "totalexpense", "expense"),
    "total_profit": ("total_profit", "totalprofit", "profit"),
    "margin": ("margin",),
    "customer_satisfaction": ("customer_satisfaction", "customersatisfaction", "satisfaction"),
    "conversion_rate": ("conversion_rate", "conversionrate"),
    "total_inventory_assets": ("total_inventory_assets", "totalinventoryassets"),
    "total_demo_assets": ("total_demo_assets", "totaldemoassets"),
    "total_operational_office_assets": ("total_operational_office_assets",
                                        "totaloperationalofficeassets"),
    "best_employee": ("best_employee", "bestemployee"),
    "best_division": ("best_division", "bestdivision"),
    "best_attendance": ("best_attendance", "bestattendance"),
}

STATS_TYPES: Dict[str, str] = {
    "total_leads": "int",
    "total_expense": "int",
    "total_profit": "int",
    "margin": "float",
    "customer_satisfaction": "float",
    "conversion_rate": "float",
    "total_inventory_assets": "int",
    "total_demo_assets": "int",
    "total_operational_office_assets": "int",
    "best_employee": "str",
    "best_division": "str",
    "best_attendance": "str",
}


def _pick(row: RawRow, aliases: Tuple[str, ...]) -> Any:
    """First non-blank value for any alias: exact lower-case key, then
    Capitalized / UPPER variants, then a case-insensitive header match."""
    for alias in aliases:
        for key in (alias, alias.capitalize(), alias.upper()):
            val = row.get(key)
            if not _is_blank(val):
                return val
    lowered: Dict[str, Any] = {}
    for key, val in row.items():
        norm = str(key).strip().lower()
        if norm not in lowered or _is_blank(lowered[norm]):
            lowered[norm] = val
    for alias in aliases:
        val = lowered.get(alias)
        if not _is_blank(val):
            return val
    return None


def _field_default(record_cls: type, name: str) -> Any:
    for f in fields(record_cls):
        if f.name == name:
            return f.default
    raise KeyError(name)


def coerce_value(kind: str, field_name: str, value: Any) -> Any:
    """Coerce a single edited value to the declared type of kind.field."""
    ftype = FIELD_TYPES[kind][field_name]
    if ftype == "str":
        return coerce_str(value, _field_default(RECORD_TYPES[kind], field_name))
    coerced = COERCERS[ftype](value)
    if kind == "kpi" and field_name == "progress":
        coerced = max(0, min(100, coerced))
    return coerced


def _map_rows(kind: str, rows: List[Any]) -> List[Any]:
    record_cls = RECORD_TYPES[kind]
    aliases = FIELD_ALIASES[kind]
    out = []
    for row in rows:
        if not isinstance(row, Mapping):
            row = {}
        values = {name: coerce_value(kind, name, _pick(row, names))
                  for name, names in aliases.items()}
        out.append(record_cls(**values))
    return out


# ─── Sheet Mappers ────────────────────────────────────────────────────────────

def map_revenue_data(rows: List[RawRow]) -> List[RevenueRecord]:
    return _map_rows("revenue", rows)


def map_kpi_data(rows: List[RawRow]) -> List[KPIRecord]:
    """KPI sheets never carry a target column; the target is always 100."""
    records = _map_rows("kpi", rows)
    for rec in records:
        rec.target = 100
    return records


def map_budget_data(rows: List[RawRow]) -> List[BudgetRecord]:
    return _map_rows("budget", rows)


def map_pipeline_data(rows: List[RawRow]) -> List[PipelineRecord]:
    return _map_rows("pipeline", rows)


def map_product_sales_data(rows: List[RawRow]) -> List[ProductSalesRecord]:
    return _map_rows("product_sales", rows)


def map_market_share_data(rows: List[RawRow]) -> List[MarketShareRecord]:
    return _map_rows("market_share", rows)


def map_growth_rate_data(rows: List[RawRow]) -> List[GrowthRateRecord]:
    return _map_rows("growth_rate", rows)


def map_profit_margin_data(rows: List[RawRow]) -> List[ProfitMarginRecord]:
    return _map_rows("profit_margin", rows)


def map_cash_flow_data(rows: List[RawRow]) -> List[CashFlowRecord]:
    return _map_rows("cash_flow", rows)


def map_segmentation_data(rows: List[RawRow]) -> List[SegmentationRecord]:
    return _map_rows("segmentation", rows)


def map_ar_turnover_data(rows: List[RawRow]) -> List[ARTurnoverRecord]:
    return _map_rows("ar_turnover", rows)


MAPPERS: Dict[str, Callable[[List[RawRow]], List[Any]]] = {
    "revenue": map_revenue_data,
    "kpi": map_kpi_data,
    "budget": map_budget_data,
    "pipeline": map_pipeline_data,
    "product_sales": map_product_sales_data,
    "growth_rate": map_growth_rate_data,
    "profit_margin": map_profit_margin_data,
    "cash_flow": map_cash_flow_data,
    "market_share": map_market_share_data,
    "segmentation": map_segmentation_data,
    "ar_turnover": map_ar_turnover_data,
}


def coerce_stat(key: str, value: Any) -> Any:
    ftype = STATS_TYPES[key]
    if ftype == "str":
        return coerce_str(value, "")
    return COERCERS[ftype](value)


def map_summary_stats(raw: Any) -> SummaryStats:
    """Map a loosely keyed stats object (snake_case or camelCase) to SummaryStats."""
    if not isinstance(raw, Mapping):
        raw = {}
    return SummaryStats(**{key: coerce_stat(key, _pick(raw, aliases))
                           for key, aliases in STATS_ALIASES.items()})
