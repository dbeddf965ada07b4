"""
exec_dashboard/formatting.py
============================
Rupiah (IDR) formatting, compact numbers, percent and labels for the
dashboard cards and chart axes.
"""
from __future__ import annotations
from typing import Optional

from .types import DATASET_LABELS


def format_currency(value: Optional[float]) -> str:
    """
    Format in id-ID style without decimals: dot thousands separators.
    e.g. 4500000 → Rp 4.500.000
    """
    if value is None:
        return "—"
    sign = "-" if value < 0 else ""
    return f"{sign}Rp {abs(value):,.0f}".replace(",", ".")


def format_compact(value: Optional[float], decimals: int = 1) -> str:
    """Short Indonesian magnitudes: rb (ribu), jt (juta), M (miliar)."""
    if value is None:
        return "—"
    if value == 0:
        return "0"

    abs_val = abs(value)
    sign = "-" if value < 0 else ""

    if abs_val >= 1_000_000_000:
        return f"{sign}{abs_val / 1_000_000_000:,.{decimals}f} M"
    elif abs_val >= 1_000_000:
        return f"{sign}{abs_val / 1_000_000:,.{decimals}f} jt"
    elif abs_val >= 1_000:
        return f"{sign}{abs_val / 1_000:,.{decimals}f} rb"
    else:
        return f"{sign}{abs_val:,.0f}"


def format_percent(value: Optional[float], decimals: int = 1) -> str:
    if value is None:
        return "—"
    return f"{value:.{decimals}f}%"


def format_ratio(value: Optional[float], decimals: int = 1) -> str:
    if value is None:
        return "—"
    return f"{value:.{decimals}f}x"


def dataset_label(kind: str) -> str:
    return DATASET_LABELS.get(kind, kind.replace("_", " ").title())


def progress_color(progress: float) -> str:
    """Traffic-light colour for KPI progress bars."""
    if progress >= 80:
        return "#10B981"
    elif progress >= 60:
        return "#F59E0B"
    return "#EF4444"
