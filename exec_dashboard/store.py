"""
exec_dashboard/store.py
=======================
Year-partitioned dataset store behind every chart and edit form.

Each dataset kind holds one ordered list of records; the records of a given
year form a "slice". Imports swap a whole slice, the edit panel changes one
field of one record addressed by its position inside the slice.
"""
from __future__ import annotations
import logging
from collections.abc import Mapping
from dataclasses import asdict, fields, replace
from typing import Any, Dict, Iterable, List, Optional

from .defaults import SUMMARY_STATS, seed_datasets, seed_stats, zero_records, zero_stats
from .mappers import FIELD_TYPES, STATS_TYPES, coerce_stat, coerce_value, map_summary_stats
from .types import DATASET_KINDS, RECORD_TYPES, DatasetKind, Snapshot, SummaryStats

logger = logging.getLogger(__name__)

# Fields the edit panel may not touch
LOCKED_FIELDS = {("kpi", "target")}


def _check_kind(kind: str) -> None:
    if kind not in RECORD_TYPES:
        raise KeyError(f"Unknown dataset kind: {kind}")


class DatasetStore:
    """All dashboard datasets, partitioned by the `year` tag of each record."""

    def __init__(
        self,
        datasets: Optional[Dict[str, Iterable[Any]]] = None,
        stats: Optional[Dict[str, SummaryStats]] = None,
    ) -> None:
        datasets = datasets or {}
        self.datasets: Dict[str, List[Any]] = {k: list(datasets.get(k, [])) for k in DATASET_KINDS}
        self.stats: Dict[str, SummaryStats] = dict(stats or {})

    @classmethod
    def seeded(cls) -> "DatasetStore":
        return cls(seed_datasets(), seed_stats())

    # ── Views ──────────────────────────────────────────────────────────────

    def get_view(self, kind: DatasetKind, year: str) -> List[Any]:
        _check_kind(kind)
        return [r for r in self.datasets[kind] if r.year == year]

    def years(self) -> List[str]:
        found = set(self.stats)
        for records in self.datasets.values():
            found.update(r.year for r in records)
        return sorted(y for y in found if y)

    def get_stats(self, year: str) -> SummaryStats:
        return self.stats.get(year) or replace(SUMMARY_STATS)

    # ── Mutation ───────────────────────────────────────────────────────────

    def replace_year_slice(self, kind: DatasetKind, year: str, records: Iterable[Any]) -> int:
        """
        Drop every `kind` record tagged `year` and append `records`, retagged.
        Field values are coerced the same way as point edits and snapshot loads.
        """
        _check_kind(kind)
        record_cls = RECORD_TYPES[kind]
        tagged = []
        for rec in records:
            if not isinstance(rec, record_cls):
                raise TypeError(f"{kind} slice expects {record_cls.__name__}, got {type(rec).__name__}")
            values = {f: coerce_value(kind, f, getattr(rec, f)) for f in FIELD_TYPES[kind]}
            tagged.append(replace(rec, year=year, **values))
        kept = [r for r in self.datasets[kind] if r.year != year]
        self.datasets[kind] = kept + tagged
        logger.debug("Replaced %s/%s slice with %d record(s)", kind, year, len(tagged))
        return len(tagged)

    def mutate_field(self, kind: DatasetKind, year: str, index: int, field: str, value: Any) -> bool:
        """
        Set one field of the index-th record of the year's slice.
        Returns False (and changes nothing) when the index is out of range or
        the field is unknown / not editable.
        """
        _check_kind(kind)
        if field not in FIELD_TYPES[kind] or (kind, field) in LOCKED_FIELDS:
            logger.warning("Refusing edit of %s.%s", kind, field)
            return False
        view = self.get_view(kind, year)
        if not 0 <= index < len(view):
            return False
        setattr(view[index], field, coerce_value(kind, field, value))
        return True

    def edit_changes_value(self, kind: DatasetKind, year: str, index: int, field: str,
                           value: Any) -> bool:
        """True when `mutate_field` with these arguments would store a different value."""
        _check_kind(kind)
        if field not in FIELD_TYPES[kind] or (kind, field) in LOCKED_FIELDS:
            return False
        view = self.get_view(kind, year)
        if not 0 <= index < len(view):
            return False
        return coerce_value(kind, field, value) != getattr(view[index], field)

    def update_stat(self, year: str, key: str, value: Any) -> bool:
        if key not in STATS_TYPES:
            logger.warning("Refusing edit of unknown stat %s", key)
            return False
        current = self.get_stats(year)
        self.stats[year] = replace(current, **{key: coerce_stat(key, value)})
        return True

    def set_stats(self, year: str, stats: SummaryStats) -> None:
        self.stats[year] = replace(stats)

    def init_year(self, year: str) -> List[str]:
        """Seed zero-valued default shapes for every kind with no data in `year`."""
        seeded = []
        for kind in DATASET_KINDS:
            if not any(r.year == year for r in self.datasets[kind]):
                self.datasets[kind].extend(zero_records(kind, year))
                seeded.append(kind)
        if year not in self.stats:
            self.stats[year] = zero_stats()
        if seeded:
            logger.info("Initialised year %s for %s", year, ", ".join(seeded))
        return seeded

    # ── Snapshots ──────────────────────────────────────────────────────────

    def to_snapshot(self) -> Snapshot:
        snap: Snapshot = {k: [asdict(r) for r in self.datasets[k]] for k in DATASET_KINDS}
        snap["stats"] = {y: asdict(s) for y, s in self.stats.items()}
        return snap

    @classmethod
    def from_snapshot(cls, snapshot: Snapshot) -> "DatasetStore":
        """Rebuild a store from `to_snapshot()` output; missing kinds load empty."""
        datasets: Dict[str, List[Any]] = {}
        for kind in DATASET_KINDS:
            record_cls = RECORD_TYPES[kind]
            names = [f.name for f in fields(record_cls) if f.name != "year"]
            records = []
            for raw in snapshot.get(kind) or []:
                if not isinstance(raw, Mapping):
                    continue
                values = {n: coerce_value(kind, n, raw.get(n)) for n in names if n in FIELD_TYPES[kind]}
                records.append(record_cls(**values, year=str(raw.get("year") or "")))
            datasets[kind] = records
        stats = {str(y): map_summary_stats(s) for y, s in (snapshot.get("stats") or {}).items()}
        return cls(datasets, stats)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DatasetStore):
            return NotImplemented
        return self.to_snapshot() == other.to_snapshot()
