"""
exec_dashboard/parser.py
========================
Tabular input parsing. Handles:
  - CSV (.csv) – first line is the header row, headers lower-cased
  - Excel (.xlsx, .xls) – every sheet, first row per sheet is the header

Sheet names are classified into dataset kinds with bilingual
(English / Indonesian) substring heuristics.
"""
from __future__ import annotations
import io
import logging
import math
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import numpy as np
import pandas as pd

from .types import DatasetKind, FileFormat, ParsedFile, ParseError, RawRow, UnsupportedFormatError

logger = logging.getLogger(__name__)

CSV_EXTENSIONS = ('.csv',)
WORKBOOK_EXTENSIONS = ('.xlsx', '.xls')


# ─── Sheet Classification ──────────────────────────────────────────────────────

# Ordered: the first alias contained in the sheet name wins.
SHEET_ALIASES: List[Tuple[Tuple[str, ...], DatasetKind]] = [
    (('revenue', 'monthly'), 'revenue'),
    (('kpi', 'performa'), 'kpi'),
    (('budget', 'anggaran'), 'budget'),
    (('turnover', 'ar turnover'), 'ar_turnover'),
    (('pipeline', 'funnel'), 'pipeline'),
    (('product', 'produk'), 'product_sales'),
    (('growth', 'pertumbuhan'), 'growth_rate'),
    (('margin',), 'profit_margin'),
    (('cash', 'arus kas'), 'cash_flow'),
    (('market share', 'pangsa'), 'market_share'),
    (('segment',), 'segmentation'),
]


def classify_sheet(sheet_name: str) -> Optional[DatasetKind]:
    """Sheet name → dataset kind, or None when no alias matches."""
    s = str(sheet_name).lower()
    for aliases, kind in SHEET_ALIASES:
        if any(a in s for a in aliases):
            return kind
    return None


# ─── Cell Cleanup ──────────────────────────────────────────────────────────────

def _clean_cell(val: Any) -> Any:
    """Normalise a pandas cell: NaN → None, numpy scalars → Python, text trimmed."""
    if val is None or val is pd.NaT:
        return None
    if isinstance(val, np.generic):
        val = val.item()
    if isinstance(val, float) and math.isnan(val):
        return None
    if isinstance(val, str):
        return val.strip()
    return val


def _frame_to_rows(df: pd.DataFrame) -> List[RawRow]:
    headers = [str(c) for c in df.columns]
    rows: List[RawRow] = []
    for values in df.itertuples(index=False, name=None):
        rows.append({h: _clean_cell(v) for h, v in zip(headers, values)})
    return rows


# ─── CSV Parser ───────────────────────────────────────────────────────────────

@dataclass
class CsvTable:
    headers: List[str] = field(default_factory=list)
    rows: List[RawRow] = field(default_factory=list)


def parse_csv(text: str) -> CsvTable:
    """
    Parse comma-delimited text. The first line is the header row; headers are
    trimmed and lower-cased. Quoted fields may contain commas. Blank lines are
    dropped, but a line of empty fields (",,,") is kept as a row of None.
    Short rows yield None for the missing trailing fields and surplus fields
    on long rows are ignored. An unterminated quote raises ParseError.
    """
    if not text or not text.strip():
        return CsvTable()
    text = text.lstrip('\ufeff')

    read_opts = dict(header=None, dtype=str, keep_default_na=False, skip_blank_lines=True,
                     skipinitialspace=True, engine='python', index_col=False)
    try:
        n_cols = pd.read_csv(io.StringIO(text), nrows=1, **read_opts).shape[1]
        df = pd.read_csv(io.StringIO(text), on_bad_lines=lambda bad: bad[:n_cols], **read_opts)
    except pd.errors.EmptyDataError:
        return CsvTable()
    except (pd.errors.ParserError, ValueError) as exc:
        raise ParseError(f"Could not parse CSV: {exc}") from exc

    headers = [str(h).strip().lower() for h in df.iloc[0].fillna('')]
    body = df.iloc[1:].copy()
    body.columns = headers
    rows = [{k: (None if v == '' else v) for k, v in row.items()} for row in _frame_to_rows(body)]
    return CsvTable(headers=headers, rows=rows)


def _decode_text(content: bytes) -> str:
    """Decode bytes with fallbacks for legacy exports (utf-16/latin1/etc.)."""
    if content.startswith((b'\xff\xfe', b'\xfe\xff')):
        return content.decode('utf-16')
    for enc in ('utf-8-sig', 'cp1252', 'latin1'):
        try:
            return content.decode(enc)
        except UnicodeDecodeError:
            continue
    return content.decode('utf-8', errors='replace')


# ─── Workbook Parser ──────────────────────────────────────────────────────────

def parse_workbook(file_bytes: bytes, filename: str = 'workbook.xlsx') -> Dict[str, List[RawRow]]:
    """
    Read every sheet of an Excel workbook into raw rows. The first row of each
    sheet is the header; header text keeps its source casing.
    Raises ParseError when the bytes are not a workbook.
    """
    engine = 'xlrd' if filename.lower().endswith('.xls') else 'openpyxl'
    result: Dict[str, List[RawRow]] = {}
    try:
        with pd.ExcelFile(io.BytesIO(file_bytes), engine=engine) as xl:
            for sheet_name in xl.sheet_names:
                try:
                    df = xl.parse(sheet_name, header=0)
                except pd.errors.EmptyDataError:
                    result[str(sheet_name)] = []
                    continue
                df = df.dropna(axis=0, how='all')
                result[str(sheet_name)] = _frame_to_rows(df)
    except Exception as exc:
        raise ParseError(f"{filename}: not a readable Excel workbook ({exc})") from exc
    logger.debug("Parsed workbook %s: %d sheet(s)", filename, len(result))
    return result


# ─── Main Parse Entry Point ───────────────────────────────────────────────────

def detect_format(filename: str) -> FileFormat:
    fn_lower = filename.lower()
    if fn_lower.endswith(CSV_EXTENSIONS):
        return 'csv'
    if fn_lower.endswith(WORKBOOK_EXTENSIONS):
        return 'workbook'
    raise UnsupportedFormatError(
        f"{filename}: unsupported file type (expected .csv, .xlsx or .xls)"
    )


def parse_file(file_bytes: bytes, filename: str) -> ParsedFile:
    """
    Parse uploaded file bytes into named sheets of raw rows.
    A CSV becomes a single sheet named after the file stem.
    """
    fmt = detect_format(filename)
    if fmt == 'csv':
        table = parse_csv(_decode_text(file_bytes))
        stem = os.path.splitext(os.path.basename(filename))[0]
        return ParsedFile(format='csv', sheets={stem: table.rows})
    return ParsedFile(format='workbook', sheets=parse_workbook(file_bytes, filename))
