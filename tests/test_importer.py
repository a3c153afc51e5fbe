"""
Tests for the student import service.

Tests cover reading file handles, decoding the first sheet, normalization
of the decoded rows and error propagation.
"""

import asyncio
import zipfile
from io import BytesIO

import pytest
from openpyxl import Workbook

from services.normalization import StudentRow
from services.student_import_service import (
    StudentImportService, decode_first_sheet, import_students,
    parse_workbook_bytes, read_source
)

EXPECTED_SCENARIO = [
    StudentRow(No=1, Code='A1', Name='Jane Doe'),
    StudentRow(No=5, Code='B2', Name='Al Smith'),
]


class AsyncReader:
    """File handle with an awaitable read(), like an UploadFile."""

    def __init__(self, data: bytes):
        self._data = data

    async def read(self):
        return self._data


class FailingReader:

    async def read(self):
        raise OSError('disk unreadable')


def _save(wb: Workbook) -> bytes:
    buffer = BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


class TestReadSource:
    """Test reading the different kinds of file handles."""

    def test_raw_bytes(self):
        assert asyncio.run(read_source(b'abc')) == b'abc'
        assert asyncio.run(read_source(bytearray(b'abc'))) == b'abc'

    def test_path(self, tmp_path):
        path = tmp_path / 'data.bin'
        path.write_bytes(b'payload')
        assert asyncio.run(read_source(path)) == b'payload'
        assert asyncio.run(read_source(str(path))) == b'payload'

    def test_sync_file_object(self):
        assert asyncio.run(read_source(BytesIO(b'payload'))) == b'payload'

    def test_async_file_object(self):
        assert asyncio.run(read_source(AsyncReader(b'payload'))) == b'payload'

    def test_unreadable_handle(self):
        with pytest.raises(TypeError):
            asyncio.run(read_source(42))

    def test_missing_path_propagates(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            asyncio.run(read_source(tmp_path / 'missing.xlsx'))


class TestDecodeFirstSheet:
    """Test projecting the first sheet into generic rows."""

    def test_missing_cells_default_to_empty_string(self, make_workbook):
        rows = decode_first_sheet(make_workbook([[None, 'A1', None]]))
        assert rows == [{'No': '', 'Code': 'A1', 'Name': ''}]

    def test_values_keep_their_type(self, make_workbook):
        rows = decode_first_sheet(make_workbook([[5, 'A1', 'jane']]))
        assert rows[0]['No'] == 5

    def test_first_sheet_by_declaration_order(self):
        wb = Workbook()
        wb.active.title = 'Second'
        wb.active.append(['No', 'Code', 'Name'])
        wb.active.append([1, 'S2', 'second sheet'])
        first = wb.create_sheet('First', 0)
        first.append(['No', 'Code', 'Name'])
        first.append([1, 'S1', 'first sheet'])

        rows = decode_first_sheet(_save(wb))
        assert rows == [{'No': 1, 'Code': 'S1', 'Name': 'first sheet'}]

    def test_other_sheets_ignored(self, make_workbook):
        rows = decode_first_sheet(make_workbook([[1, 'A1', 'x']], extra_sheets=['Other']))
        assert [row['Code'] for row in rows] == ['A1']

    def test_blank_and_duplicate_headers(self, make_workbook):
        data = make_workbook(
            [['jane', 'x', 'extra', 'C1', 'tail']],
            headers=['Name', 'Name', None, 'Code', None]
        )
        rows = decode_first_sheet(data)
        assert rows == [{
            'Name': 'jane',
            'Name_1': 'x',
            '__EMPTY': 'extra',
            'Code': 'C1',
            '__EMPTY_1': 'tail',
        }]

    def test_blank_rows_skipped(self):
        wb = Workbook()
        ws = wb.active
        for col, header in enumerate(['No', 'Code', 'Name'], start=1):
            ws.cell(row=2, column=col, value=header)
        ws.cell(row=3, column=2, value='A1')
        ws.cell(row=3, column=3, value='first')
        ws.cell(row=5, column=2, value='A2')
        ws.cell(row=5, column=3, value='second')

        rows = decode_first_sheet(_save(wb))
        assert [row['Code'] for row in rows] == ['A1', 'A2']

    def test_header_only_sheet(self, make_workbook):
        assert decode_first_sheet(make_workbook([])) == []

    def test_empty_sheet(self, make_workbook):
        assert decode_first_sheet(make_workbook([], headers=None)) == []

    def test_malformed_payload_raises(self):
        with pytest.raises(zipfile.BadZipFile):
            decode_first_sheet(b'this is not a workbook')


class TestImportStudents:
    """Test the full import operation."""

    def test_end_to_end_scenario(self, scenario_workbook):
        students = asyncio.run(import_students(scenario_workbook))
        assert students == EXPECTED_SCENARIO

    def test_import_from_path(self, scenario_file):
        assert asyncio.run(import_students(scenario_file)) == EXPECTED_SCENARIO

    def test_import_from_async_handle(self, scenario_workbook):
        students = asyncio.run(import_students(AsyncReader(scenario_workbook)))
        assert students == EXPECTED_SCENARIO

    def test_reimport_is_identical(self, scenario_workbook):
        first = asyncio.run(import_students(scenario_workbook))
        second = asyncio.run(import_students(scenario_workbook))
        assert first == second

    def test_concurrent_imports_are_independent(self, make_workbook, scenario_workbook):
        other = make_workbook([[None, 'Z1', 'zed']])

        async def run_both():
            return await asyncio.gather(import_students(scenario_workbook), import_students(other))

        scenario, single = asyncio.run(run_both())
        assert scenario == EXPECTED_SCENARIO
        assert single == [StudentRow(No=1, Code='Z1', Name='Zed')]

    def test_empty_input_resolves_to_empty_list(self, tmp_path):
        path = tmp_path / 'empty.xlsx'
        path.write_bytes(b'')
        assert asyncio.run(import_students(path)) == []
        assert asyncio.run(import_students(AsyncReader(b''))) == []

    def test_rows_missing_code_or_name_dropped(self, make_workbook):
        data = make_workbook([
            [1, 'A1', None],
            [2, None, 'no code'],
            [3, 'A3', 'kept'],
        ])
        students = asyncio.run(import_students(data))
        assert students == [StudentRow(No=3, Code='A3', Name='Kept')]

    def test_sheet_without_code_column(self, make_workbook):
        data = make_workbook([[1, 'jane']], headers=['No', 'Name'])
        assert asyncio.run(import_students(data)) == []

    def test_zero_ordinal_is_synthesized(self, make_workbook):
        data = make_workbook([[0, 'A1', 'x'], [0, 'A2', 'y']])
        students = asyncio.run(import_students(data))
        assert [s.No for s in students] == [1, 2]

    def test_numeric_codes(self, make_workbook):
        data = make_workbook([[None, 1001, 'x']])
        assert asyncio.run(import_students(data))[0].Code == '1001'

    def test_read_failure_propagates_unchanged(self):
        with pytest.raises(OSError, match='disk unreadable'):
            asyncio.run(import_students(FailingReader()))

    def test_decode_failure_propagates(self):
        with pytest.raises(zipfile.BadZipFile):
            asyncio.run(import_students(b'garbage bytes'))

    def test_progress_callback(self, scenario_workbook):
        updates = []
        service = StudentImportService(
            progress_callback=lambda stage, percent, message: updates.append((stage, percent))
        )
        asyncio.run(service.import_students(scenario_workbook))

        assert [stage for stage, _ in updates] == ['reading', 'decoding', 'normalizing', 'complete']
        assert updates[-1][1] == 100

    def test_progress_callback_on_empty_input(self):
        updates = []
        service = StudentImportService(
            progress_callback=lambda stage, percent, message: updates.append(stage)
        )
        asyncio.run(service.import_students(b''))
        assert updates == ['reading', 'complete']


class TestParseWorkbookBytes:

    def test_scenario(self, scenario_workbook):
        assert parse_workbook_bytes(scenario_workbook) == EXPECTED_SCENARIO

    def test_empty(self):
        assert parse_workbook_bytes(b'') == []
