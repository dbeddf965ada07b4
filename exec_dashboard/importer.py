"""
exec_dashboard/importer.py
==========================
File import orchestration: parse → classify → map → merge into the store.

Smart import classifies each sheet by name and replaces the active-year
slice of every matched dataset. An explicit import maps the first sheet as
the requested dataset. Each dataset slice is swapped in one step, but the
sheets of one smart import are applied independently: a failing sheet does
not undo the ones merged before it.
"""
from __future__ import annotations
import logging
from typing import List, Optional, Tuple

from .mappers import MAPPERS
from .parser import classify_sheet, parse_file
from .store import DatasetStore
from .types import ImportKind, ImportResult, RawRow

logger = logging.getLogger(__name__)

SMART = "all"


def _apply(store: DatasetStore, kind: str, rows: List[RawRow], year: str,
           result: ImportResult) -> None:
    records = MAPPERS[kind](rows)
    count = store.replace_year_slice(kind, year, records)
    result.imported_count += 1
    if kind not in result.updated_kinds:
        result.updated_kinds.append(kind)
    result.row_counts[kind] = count


def _smart_import(store: DatasetStore, sheets: List[Tuple[str, List[RawRow]]], year: str,
                  result: ImportResult) -> None:
    for name, rows in sheets:
        kind = classify_sheet(name)
        if kind is None:
            logger.info("Skipping sheet %r: no dataset matches its name", name)
            result.skipped_sheets.append(name)
            continue
        try:
            _apply(store, kind, rows, year, result)
        except Exception:
            logger.exception("Failed to import sheet %r as %s", name, kind)
            result.failed_sheets.append(name)


def import_file(
    store: DatasetStore,
    file_bytes: bytes,
    filename: str,
    year: str,
    kind: Optional[ImportKind] = None,
) -> ImportResult:
    """
    Import a .csv / .xlsx / .xls file into `store` for `year`.

    `kind` is a dataset kind for an explicit import, or None / "all" for a
    smart import. Raises UnsupportedFormatError or ParseError (store
    untouched) when the file cannot be read.
    """
    if kind is not None and kind != SMART and kind not in MAPPERS:
        raise ValueError(f"Unknown dataset kind: {kind}")
    explicit = kind if kind not in (None, SMART) else None

    parsed = parse_file(file_bytes, filename)
    sheets = list(parsed.sheets.items())
    result = ImportResult()

    if not sheets:
        logger.warning("%s contains no sheets", filename)
        return result

    if explicit is None or len(sheets) > 1:
        result.smart = True
        _smart_import(store, sheets, year, result)
        if result.imported_count > 0 or explicit is None:
            logger.info("Smart import of %s for %s: %d sheet(s) -> %s",
                        filename, year, result.imported_count, result.updated_kinds)
            return result
        # Nothing matched by name: fall back to the first sheet as the requested kind
        result.smart = False
        result.skipped_sheets = []
        result.fallback_sheet = sheets[0][0]

    name, rows = sheets[0]
    _apply(store, explicit, rows, year, result)
    logger.info("Imported %s (%s) as %s for %s: %d row(s)",
                filename, name, explicit, year, result.row_counts[explicit])
    return result
