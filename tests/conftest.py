"""
Pytest configuration and fixtures for student import tests.
"""

from io import BytesIO
from typing import Any, List, Optional, Sequence

import pytest
from openpyxl import Workbook

ROSTER_HEADERS = ['No', 'Code', 'Name']


def build_workbook(rows: Sequence[Sequence[Any]],
                   headers: Optional[Sequence[Any]] = ROSTER_HEADERS,
                   title: str = 'Roster',
                   extra_sheets: Optional[List[str]] = None) -> bytes:
    """Build an .xlsx payload whose first sheet holds headers and rows."""
    wb = Workbook()
    ws = wb.active
    ws.title = title
    if headers is not None:
        ws.append(list(headers))
    for row in rows:
        ws.append(list(row))

    for name in extra_sheets or []:
        other = wb.create_sheet(name)
        other.append(ROSTER_HEADERS)
        other.append([1, 'ZZ9', 'not on the first sheet'])

    buffer = BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


@pytest.fixture
def make_workbook():
    """Factory fixture for in-memory workbooks."""
    return build_workbook


@pytest.fixture
def scenario_rows():
    """Sheet rows of the reference end-to-end scenario."""
    return [
        [None, 'A1', 'jane doe'],
        [None, None, 'john'],
        [5, 'B2', 'AL SMITH'],
    ]


@pytest.fixture
def scenario_workbook(make_workbook, scenario_rows):
    return make_workbook(scenario_rows)


@pytest.fixture
def scenario_file(tmp_path, scenario_workbook):
    """Scenario workbook written to disk."""
    path = tmp_path / 'roster.xlsx'
    path.write_bytes(scenario_workbook)
    return path
