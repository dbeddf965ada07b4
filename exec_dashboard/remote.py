"""
exec_dashboard/remote.py
========================
Live data source: a JSON endpoint (e.g. an Apps Script web app over a
Google Sheet) returning {kpi, revenue, budget, pipeline, stats, inquiries}.
Every field is optional. Failures are logged and reported as None so the
dashboard keeps showing what it already has.
"""
from __future__ import annotations
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import requests

from .mappers import MAPPERS, map_summary_stats
from .store import DatasetStore

logger = logging.getLogger(__name__)

REMOTE_DATASETS = ("kpi", "revenue", "budget", "pipeline")


@dataclass
class RemotePayload:
    kpi: List[Dict[str, Any]] = field(default_factory=list)
    revenue: List[Dict[str, Any]] = field(default_factory=list)
    budget: List[Dict[str, Any]] = field(default_factory=list)
    pipeline: List[Dict[str, Any]] = field(default_factory=list)
    stats: Dict[str, Any] = field(default_factory=dict)
    inquiries: List[Dict[str, Any]] = field(default_factory=list)


def fetch_dashboard_data(url: str, timeout: float = 10.0,
                         session: Optional[requests.Session] = None) -> Optional[Dict[str, Any]]:
    """GET `url`?action=fetch_dashboard_data; None on any network / decode failure."""
    getter = session or requests
    try:
        response = getter.get(url, params={"action": "fetch_dashboard_data"}, timeout=timeout)
        response.raise_for_status()
        data = response.json()
    except requests.Timeout:
        logger.warning("Dashboard data request timed out after %.1fs", timeout)
        return None
    except (requests.RequestException, ValueError):
        logger.exception("Error fetching dashboard data")
        return None
    if not isinstance(data, dict):
        logger.error("Dashboard data response is not a JSON object")
        return None
    return data


def _as_list(value: Any) -> List[Dict[str, Any]]:
    if not isinstance(value, list):
        return []
    return [v for v in value if isinstance(v, Mapping)]


def map_remote_payload(raw: Optional[Mapping]) -> RemotePayload:
    """Defensive mapping: absent or malformed fields become empty lists / dicts."""
    raw = raw if isinstance(raw, Mapping) else {}
    stats = raw.get("stats")
    return RemotePayload(
        kpi=_as_list(raw.get("kpi")),
        revenue=_as_list(raw.get("revenue")),
        budget=_as_list(raw.get("budget")),
        pipeline=_as_list(raw.get("pipeline")),
        stats=dict(stats) if isinstance(stats, Mapping) else {},
        inquiries=_as_list(raw.get("inquiries")),
    )


def apply_remote_payload(store: DatasetStore, payload: RemotePayload, year: str) -> List[str]:
    """Replace `year` slices for every non-empty remote dataset; returns kinds touched."""
    touched = []
    for kind in REMOTE_DATASETS:
        rows = getattr(payload, kind)
        if rows:
            store.replace_year_slice(kind, year, MAPPERS[kind](rows))
            touched.append(kind)
    if payload.stats:
        store.set_stats(year, map_summary_stats(payload.stats))
        touched.append("stats")
    return touched
