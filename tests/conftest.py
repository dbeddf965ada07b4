"""
tests/conftest.py
=================
Shared pytest fixtures for the Executive Dashboard test suite.
"""
import io
import sys
import os

# Ensure the project root is on the path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pandas as pd
import pytest

from exec_dashboard.store import DatasetStore


def build_workbook(sheets):
    """{sheet_name: list-of-dict rows} → .xlsx bytes (header row from the dict keys)."""
    buf = io.BytesIO()
    with pd.ExcelWriter(buf, engine="openpyxl") as writer:
        for name, rows in sheets.items():
            pd.DataFrame(rows).to_excel(writer, sheet_name=name, index=False)
    return buf.getvalue()


@pytest.fixture
def make_workbook():
    return build_workbook


@pytest.fixture
def empty_store():
    return DatasetStore()


@pytest.fixture
def seeded_store():
    return DatasetStore.seeded()


@pytest.fixture
def revenue_csv():
    return "month,revenue,target,expense\nJan,4500,4000,3200\nFeb,,4200,"


@pytest.fixture
def smart_workbook():
    """Two recognisable sheets and one that matches no dataset."""
    return build_workbook({
        "Revenue Jan-Dec": [
            {"Month": "Jan", "Revenue": 4500, "Target": 4000, "Expense": 3200},
            {"Month": "Feb", "Revenue": 5200, "Target": 4200, "Expense": 3400},
        ],
        "KPI Performa": [
            {"Division": "Sales", "Progress": 88, "Actual": 91},
            {"Division": "Warehouse", "Progress": 70, "Actual": 65},
        ],
        "Misc Notes": [
            {"Note": "prepared by finance"},
        ],
    })
