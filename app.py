"""
app.py
======
Executive Summary Dashboard — Main Streamlit Application

Sections:
  1. Summary cards (leads, expense, profit, margin, assets, awards)
  2. Charts for every configured dataset kind, filtered by the active year
  3. Edit panel: summary stats + per-dataset tables
Sidebar: year / month filters, bulk import (CSV / Excel), save & reset.
"""

import logging
from datetime import datetime
from typing import Any, Callable, Dict, List

import pandas as pd
import plotly.graph_objects as go
import streamlit as st

from exec_dashboard.types import (
    DATASET_KINDS, DashboardConfig, MalformedInputError,
)
from exec_dashboard.defaults import DIVISIONS, MONTHS
from exec_dashboard.formatting import (
    dataset_label, format_compact, format_currency, format_percent, format_ratio, progress_color,
)
from exec_dashboard.importer import import_file
from exec_dashboard.mappers import FIELD_TYPES, STATS_TYPES
from exec_dashboard.persistence import JsonFileStorage
from exec_dashboard.remote import apply_remote_payload, fetch_dashboard_data, map_remote_payload
from exec_dashboard.store import LOCKED_FIELDS, DatasetStore

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

CONFIG = DashboardConfig.from_env()

# ─── Page Configuration ───────────────────────────────────────────────────────

st.set_page_config(
    page_title="Executive Summary Dashboard",
    page_icon="📊",
    layout="wide",
    initial_sidebar_state="expanded",
)

st.markdown("""
<style>
    .main-header {
        background: linear-gradient(135deg, #FF8C42 0%, #FFB382 100%);
        border-radius: 12px;
        padding: 1.2rem 1.5rem;
        color: white;
        margin-bottom: 1.5rem;
    }
    .main-header h1 { margin: 0; font-size: 1.6rem; font-weight: 800; }
    .main-header p  { margin: 0.25rem 0 0; font-size: 0.85rem; opacity: 0.9; }
</style>
""", unsafe_allow_html=True)

PALETTE = ["#10B981", "#3B82F6", "#F59E0B", "#EF4444", "#8B5CF6"]


# ─── Helpers ─────────────────────────────────────────────────────────────────

def _style(fig: go.Figure, title: str, height: int = 300) -> go.Figure:
    fig.update_layout(
        title=dict(text=title, font=dict(size=14, color="#1e293b")),
        paper_bgcolor="white", plot_bgcolor="#f8fafc",
        margin=dict(l=40, r=20, t=40, b=30),
        height=height, legend=dict(orientation="h", y=-0.2),
        font=dict(family="sans-serif", size=11, color="#64748b"),
        xaxis=dict(gridcolor="#e2e8f0"), yaxis=dict(gridcolor="#e2e8f0"),
    )
    return fig


def _chart_revenue(records: List[Any]) -> go.Figure:
    months = [r.month for r in records]
    fig = go.Figure()
    fig.add_trace(go.Bar(x=months, y=[r.revenue for r in records], name="Revenue", marker_color=PALETTE[0]))
    fig.add_trace(go.Bar(x=months, y=[r.target for r in records], name="Target", marker_color=PALETTE[1]))
    fig.add_trace(go.Scatter(x=months, y=[r.expense for r in records], name="Expense",
                             mode="lines+markers", line=dict(color=PALETTE[3], width=2.5)))
    return _style(fig, "Revenue vs Target")


def _chart_kpi(records: List[Any]) -> go.Figure:
    fig = go.Figure(go.Bar(
        y=[r.division for r in records], x=[r.progress for r in records], orientation="h",
        marker_color=[progress_color(r.progress) for r in records], name="Progress",
    ))
    fig.update_xaxes(range=[0, 100])
    return _style(fig, "KPI Progress by Division (%)", height=420)


def _chart_budget(records: List[Any]) -> go.Figure:
    cats = [r.category for r in records]
    fig = go.Figure()
    fig.add_trace(go.Bar(x=cats, y=[r.budget for r in records], name="Budget", marker_color=PALETTE[1]))
    fig.add_trace(go.Bar(x=cats, y=[r.actual for r in records], name="Actual", marker_color=PALETTE[2]))
    return _style(fig, "Budget vs Actual")


def _chart_pipeline(records: List[Any]) -> go.Figure:
    fig = go.Figure(go.Funnel(
        y=[r.stage for r in records], x=[r.value for r in records],
        text=[f"{r.count} deals" for r in records], textinfo="value+text",
    ))
    return _style(fig, "Sales Pipeline")


def _pie(labels: List[str], values: List[float], title: str) -> go.Figure:
    fig = go.Figure(go.Pie(labels=labels, values=values, hole=0.45, marker=dict(colors=PALETTE)))
    return _style(fig, title)


def _line(x: List[str], y: List[float], name: str, title: str, fill: bool = False) -> go.Figure:
    fig = go.Figure(go.Scatter(
        x=x, y=y, name=name, mode="lines+markers",
        fill="tozeroy" if fill else None, line=dict(color=PALETTE[1], width=2.5),
    ))
    return _style(fig, title)


def _chart_ar_turnover(records: List[Any]) -> go.Figure:
    fig = go.Figure(go.Scatter(
        x=[r.month for r in records], y=[r.ratio for r in records], name="Ratio",
        mode="lines+markers+text", text=[format_ratio(r.ratio) for r in records],
        textposition="top center", line=dict(color=PALETTE[4], width=2.5),
    ))
    return _style(fig, "AR Turnover")


def _chart_cash_flow(records: List[Any]) -> go.Figure:
    months = [r.month for r in records]
    fig = go.Figure()
    fig.add_trace(go.Bar(x=months, y=[r.inflow for r in records], name="Inflow", marker_color=PALETTE[0]))
    fig.add_trace(go.Bar(x=months, y=[r.outflow for r in records], name="Outflow", marker_color=PALETTE[3]))
    return _style(fig, "Cash Flow")


CHART_BUILDERS: Dict[str, Callable[[List[Any]], go.Figure]] = {
    "revenue": _chart_revenue,
    "kpi": _chart_kpi,
    "budget": _chart_budget,
    "pipeline": _chart_pipeline,
    "product_sales": lambda rs: _pie([r.name for r in rs], [r.value for r in rs], "Product Mix"),
    "growth_rate": lambda rs: _line([r.period for r in rs], [r.rate for r in rs], "Growth", "Growth Rate (%)"),
    "profit_margin": lambda rs: _line([r.month for r in rs], [r.margin for r in rs], "Margin",
                                      "Profit Margin (%)", fill=True),
    "cash_flow": _chart_cash_flow,
    "market_share": lambda rs: _pie([r.name for r in rs], [r.value for r in rs], "Market Share"),
    "segmentation": lambda rs: _pie([r.segment for r in rs], [r.value for r in rs], "Customer Segmentation"),
    "ar_turnover": _chart_ar_turnover,
}


def _filter_month(records: List[Any], month: str) -> List[Any]:
    if month == "All Months" or not records or not hasattr(records[0], "month"):
        return records
    return [r for r in records if r.month == month]


# ─── Session State ────────────────────────────────────────────────────────────

def _storage() -> JsonFileStorage:
    return JsonFileStorage(CONFIG.storage_path, CONFIG.storage_key)


def _init_state() -> None:
    if "store" not in st.session_state:
        saved = _storage().load()
        st.session_state["store"] = DatasetStore.from_snapshot(saved) if saved else DatasetStore.seeded()
    defaults = {
        "year": CONFIG.default_year,
        "month": "All Months",
        "last_updated": "",
        "remote_checked": False,
    }
    for k, v in defaults.items():
        if k not in st.session_state:
            st.session_state[k] = v


def _load_live_data(store: DatasetStore) -> None:
    """One fetch per session; failures leave the current data in place."""
    st.session_state["remote_checked"] = True
    if not CONFIG.remote_url:
        return
    with st.spinner("Syncing live data..."):
        raw = fetch_dashboard_data(CONFIG.remote_url, timeout=CONFIG.remote_timeout)
    if raw is None:
        return
    touched = apply_remote_payload(store, map_remote_payload(raw), CONFIG.default_year)
    logger.info("Live data merged into %s: %s", CONFIG.default_year, touched)
    st.session_state["last_updated"] = datetime.now().strftime("%H:%M:%S")


_init_state()
store: DatasetStore = st.session_state["store"]
if not st.session_state["remote_checked"]:
    _load_live_data(store)


# ─── Sidebar ──────────────────────────────────────────────────────────────────

with st.sidebar:
    st.subheader("📅 Period")
    # Years found in stored data stay selectable even outside the configured range
    year_options = sorted(set(CONFIG.years) | set(store.years()))
    st.session_state["year"] = st.selectbox(
        "Year", year_options, index=year_options.index(st.session_state["year"])
        if st.session_state["year"] in year_options else 0,
    )
    month_options = ["All Months"] + MONTHS
    st.session_state["month"] = st.selectbox(
        "Month", month_options, index=month_options.index(st.session_state["month"]),
    )

    st.markdown("---")
    st.subheader("📥 Bulk Import (CSV/Excel)")
    import_kind = st.selectbox(
        "Target dataset",
        ["all"] + list(DATASET_KINDS),
        format_func=lambda k: "Smart Import (auto-detect sheets)" if k == "all" else dataset_label(k),
    )
    uploaded = st.file_uploader("Upload file", type=["csv", "xlsx", "xls"], label_visibility="collapsed")
    if uploaded is not None and st.button("Import", type="primary", width='stretch'):
        try:
            result = import_file(store, uploaded.getvalue(), uploaded.name,
                                 st.session_state["year"], import_kind)
        except MalformedInputError as e:
            st.error(f"❌ {e}")
        else:
            (st.success if result.imported_count else st.warning)(result.message)
            if result.failed_sheets:
                st.warning(f"⚠️ Could not import: {', '.join(result.failed_sheets)}")

    st.markdown("---")
    col_s, col_r = st.columns(2)
    if col_s.button("💾 Save", width='stretch'):
        _storage().save(store.to_snapshot())
        st.success("Saved.")
    if col_r.button("🔄 Reset", width='stretch'):
        _storage().clear()
        st.session_state["store"] = DatasetStore.seeded()
        st.rerun()

year: str = st.session_state["year"]
if not store.get_view("revenue", year):
    store.init_year(year)
stats = store.get_stats(year)


# ─── Main Header ─────────────────────────────────────────────────────────────

st.markdown(f"""
<div class='main-header'>
    <h1>Executive Summary Dashboard</h1>
    <p>PT Oseanland Indonesia Group · Performance overview {year}</p>
</div>
""", unsafe_allow_html=True)

if st.session_state["last_updated"]:
    st.caption(f"🟢 Live Data Source Linked • Last Sync: {st.session_state['last_updated']}")

c1, c2, c3, c4, c5, c6 = st.columns(6)
c1.metric("Total Leads", f"{stats.total_leads:,}")
c2.metric("Total Expense", format_compact(stats.total_expense))
c3.metric("Total Profit", format_compact(stats.total_profit))
c4.metric("Margin", format_percent(stats.margin))
c5.metric("Conversion", format_percent(stats.conversion_rate))
c6.metric("Satisfaction", f"{stats.customer_satisfaction:.1f} / 5")

a1, a2, a3 = st.columns(3)
a1.metric("Inventory Assets", format_currency(stats.total_inventory_assets))
a2.metric("Demo Assets", format_currency(stats.total_demo_assets))
a3.metric("Operational Office Assets", format_currency(stats.total_operational_office_assets))

b1, b2, b3 = st.columns(3)
b1.metric("🏅 Best Employee", stats.best_employee or "—")
b2.metric("🏆 Best Division", stats.best_division or "—")
b3.metric("⏰ Best Attendance", stats.best_attendance or "—")

st.markdown("---")


# ═══════════════════════════════════════════════════════════════════════════════
# CHARTS
# ═══════════════════════════════════════════════════════════════════════════════

charts = [k for k in CONFIG.charts if k in CHART_BUILDERS]
for i in range(0, len(charts), 2):
    cols = st.columns(2)
    for col, kind in zip(cols, charts[i:i + 2]):
        records = _filter_month(store.get_view(kind, year), st.session_state["month"])
        with col:
            if records:
                st.plotly_chart(CHART_BUILDERS[kind](records), width='stretch')
            else:
                st.info(f"No {dataset_label(kind)} data for {year}.")


# ═══════════════════════════════════════════════════════════════════════════════
# EDIT PANEL
# ═══════════════════════════════════════════════════════════════════════════════

def _render_stats_editor(year: str) -> None:
    current = store.get_stats(year)
    with st.form(f"stats_{year}"):
        cols = st.columns(3)
        values: Dict[str, Any] = {}
        for i, (key, ftype) in enumerate(STATS_TYPES.items()):
            label = key.replace("_", " ").title()
            with cols[i % 3]:
                if key == "best_division":
                    options = DIVISIONS if current.best_division in DIVISIONS else [current.best_division] + DIVISIONS
                    values[key] = st.selectbox(label, options, index=options.index(current.best_division))
                elif ftype == "str":
                    values[key] = st.text_input(label, getattr(current, key))
                elif ftype == "float":
                    values[key] = st.number_input(label, value=float(getattr(current, key)), step=0.1)
                else:
                    values[key] = st.number_input(label, value=int(getattr(current, key)), step=1)
        if st.form_submit_button("Apply"):
            for key, value in values.items():
                store.update_stat(year, key, value)
            st.rerun()


def _render_dataset_editor(kind: str, year: str) -> int:
    """
    Table editor for one slice; each changed cell becomes a point edit.
    Edited cells persist across reruns, so a cell only counts as changed when
    its coerced value differs from what the store already holds.
    """
    view = store.get_view(kind, year)
    editable = [f for f in FIELD_TYPES[kind] if (kind, f) not in LOCKED_FIELDS]
    before = pd.DataFrame([{f: getattr(r, f) for f in editable} for r in view], columns=editable)
    after = st.data_editor(before, key=f"edit_{kind}_{year}", num_rows="fixed",
                           hide_index=True, width='stretch')
    changed = 0
    for idx in range(min(len(view), len(after))):
        for f in editable:
            new = after.iloc[idx][f]
            if store.edit_changes_value(kind, year, idx, f, new) and \
                    store.mutate_field(kind, year, idx, f, new):
                changed += 1
    return changed


with st.expander("✏️ Edit Dashboard Data", expanded=False):
    tabs = st.tabs(["Summary"] + [dataset_label(k) for k in DATASET_KINDS])
    with tabs[0]:
        _render_stats_editor(year)
    for tab, kind in zip(tabs[1:], DATASET_KINDS):
        with tab:
            if _render_dataset_editor(kind, year):
                st.rerun()
