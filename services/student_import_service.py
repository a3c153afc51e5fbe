"""
Student Import Service - Framework-agnostic roster import logic.

Reads an uploaded spreadsheet, projects its first sheet onto generic rows
and normalizes them into StudentRow records. Shared by the API and the CLI.
"""

import asyncio
import inspect
import logging
import os
from io import BytesIO
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence

import openpyxl

from services.normalization import StudentRow, cell_text, normalize_rows

logger = logging.getLogger(__name__)

# Value given to cells missing from a row
DEFAULT_CELL_VALUE = ''
EMPTY_HEADER = '__EMPTY'


def _header_keys(header: Sequence[Any], width: int) -> List[str]:
    """
    Build row keys from the header cells.

    Blank headers become __EMPTY, __EMPTY_1, ... and repeated headers are
    suffixed the same way (Name, Name_1, Name_2).
    """
    counts: Dict[str, int] = {}
    keys = []
    for col in range(width):
        value = header[col] if col < len(header) else None
        base = EMPTY_HEADER if value is None else cell_text(value)
        key = base
        counter = counts.get(base, 0)
        if not counter:
            counts[base] = 1
        else:
            while True:
                key = f"{base}_{counter}"
                counter += 1
                if key not in counts:
                    break
            counts[base] = counter
            counts[key] = 1
        keys.append(key)
    return keys


def _is_blank(values: Sequence[Any]) -> bool:
    return all(value is None for value in values)


def decode_first_sheet(data: bytes) -> List[Dict[str, Any]]:
    """
    Decode a workbook payload and project its first sheet into generic rows.

    The first non-blank row holds the headers. Blank rows are skipped and
    every row carries every header, missing cells set to ''.

    Raises whatever openpyxl raises for a malformed payload.
    """
    workbook = openpyxl.load_workbook(BytesIO(data), data_only=True)
    sheet = workbook.worksheets[0]
    logger.debug(f"Decoding sheet '{sheet.title}' of {workbook.sheetnames}")

    rows = [row for row in sheet.iter_rows(values_only=True) if not _is_blank(row)]

    if not rows:
        return []

    width = max(len(row) for row in rows)
    keys = _header_keys(rows[0], width)

    records = []
    for row in rows[1:]:
        record = {}
        for col, key in enumerate(keys):
            value = row[col] if col < len(row) else None
            record[key] = DEFAULT_CELL_VALUE if value is None else value
        records.append(record)

    logger.debug(f"Decoded {len(records)} data rows with columns {keys}")
    return records


def parse_workbook_bytes(data: bytes) -> List[StudentRow]:
    """Decode and normalize an in-memory workbook. Empty input gives []."""
    if not data:
        return []
    return normalize_rows(decode_first_sheet(data))


async def read_source(source: Any) -> bytes:
    """
    Read the whole content of a file handle.

    Accepts raw buffers, filesystem paths, objects with an async read()
    (such as an UploadFile) and plain binary file objects. Blocking reads
    run in a worker thread.
    """
    if isinstance(source, (bytes, bytearray, memoryview)):
        return bytes(source)

    if isinstance(source, (str, os.PathLike)):
        return await asyncio.to_thread(Path(source).read_bytes)

    read = getattr(source, 'read', None)
    if read is None:
        raise TypeError(f"Cannot read from {type(source).__name__}")

    if inspect.iscoroutinefunction(read):
        data = await read()
    else:
        data = await asyncio.to_thread(read)

    return bytes(data or b'')


class StudentImportService:
    """
    Imports student rosters from spreadsheet files.

    Holds no state between imports, so one instance can serve concurrent
    calls.
    """

    def __init__(
        self,
        progress_callback: Optional[Callable[[str, float, str], None]] = None
    ):
        """
        Initialize student import service.

        Args:
            progress_callback: Optional callback for progress updates
                              Signature: callback(stage: str, percent: float, message: str)
        """
        self.progress_callback = progress_callback or (lambda *args: None)

    def _update_progress(self, stage: str, percent: float, message: str):
        logger.debug(f"[{stage}] {percent:.0f}% - {message}")
        self.progress_callback(stage, percent, message)

    async def import_students(self, source: Any) -> List[StudentRow]:
        """
        Import students from a spreadsheet file.

        Args:
            source: File handle, path or raw buffer

        Returns:
            StudentRow records in sheet order, incomplete rows removed

        Read and decode errors propagate unchanged.
        """
        self._update_progress('reading', 0, 'Reading file')
        data = await read_source(source)

        if not data:
            logger.info("Empty file, nothing to import")
            self._update_progress('complete', 100, 'Imported 0 students')
            return []

        self._update_progress('decoding', 30, f'Decoding workbook ({len(data)} bytes)')
        rows = decode_first_sheet(data)

        self._update_progress('normalizing', 70, f'Normalizing {len(rows)} rows')
        students = normalize_rows(rows)

        logger.info(f"Imported {len(students)} students from {len(rows)} rows")
        self._update_progress('complete', 100, f'Imported {len(students)} students')
        return students


async def import_students(source: Any) -> List[StudentRow]:
    """Import students from a spreadsheet file with a default service."""
    return await StudentImportService().import_students(source)
