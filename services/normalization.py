"""
Field normalization for imported student rows.

Turns generic spreadsheet rows (header -> raw cell value) into StudentRow
records: ordinal synthesis, name capitalization and the completeness filter.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Union

logger = logging.getLogger(__name__)

# Column headers read from the sheet
NO_COLUMN = 'No'
CODE_COLUMN = 'Code'
NAME_COLUMN = 'Name'


@dataclass(frozen=True)
class StudentRow:
    """Normalized student record produced by an import."""
    No: Union[int, str]
    Code: str
    Name: str

    def to_dict(self) -> Dict[str, Any]:
        return {'No': self.No, 'Code': self.Code, 'Name': self.Name}


def is_empty(value: Any) -> bool:
    """
    Check whether a raw cell value counts as absent.

    None, False, the empty string and numeric zero are empty.
    Whitespace-only strings are not.
    """
    if value is None or value is False:
        return True
    if isinstance(value, str):
        return value == ''
    if isinstance(value, (int, float)):
        return value == 0
    return False


def _integral(value: Any) -> Any:
    # Decoders hand back 5.0 for a cell typed as 5
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def cell_text(value: Any) -> str:
    """Render a raw cell value as text."""
    if value is None:
        return ''
    if isinstance(value, bool):
        return 'TRUE' if value else 'FALSE'
    return str(_integral(value))


def normalize_name(value: Any) -> str:
    """
    Title-case a display name, token by token.

    The text is lower-cased, split on single spaces and the first character
    of each token is upper-cased. Nothing else is special-cased, so
    "MARY-JANE DOE" becomes "Mary-jane Doe".
    """
    if is_empty(value):
        return ''
    words = cell_text(value).lower().split(' ')
    return ' '.join(word[:1].upper() + word[1:] for word in words)


def resolve_ordinal(value: Any, index: int) -> Union[int, str]:
    """
    Return the declared ordinal, or the 1-based position when it is empty.

    Integral numbers come back as int, anything else that is not already
    text (2.5, dates) is rendered as text.
    """
    if is_empty(value):
        return index + 1
    value = _integral(value)
    if isinstance(value, (int, str)) and not isinstance(value, bool):
        return value
    return cell_text(value)


def normalize_row(row: Dict[str, Any], index: int) -> StudentRow:
    """
    Map one generic row onto a StudentRow.

    Args:
        row: Header -> raw cell value, absent cells already defaulted to ''
        index: 0-based position of the row in the sheet

    Returns:
        StudentRow, possibly with empty Code or Name
    """
    code = row.get(CODE_COLUMN, '')
    return StudentRow(
        No=resolve_ordinal(row.get(NO_COLUMN, ''), index),
        Code='' if is_empty(code) else cell_text(code),
        Name=normalize_name(row.get(NAME_COLUMN, '')),
    )


def normalize_rows(rows: Iterable[Dict[str, Any]]) -> List[StudentRow]:
    """
    Normalize generic rows and drop those missing a Code or a Name.

    Ordinals are synthesized from the position before filtering, and the
    surviving rows keep their sheet order.
    """
    students = []
    dropped = 0
    for index, row in enumerate(rows):
        student = normalize_row(row, index)
        if student.Code and student.Name:
            students.append(student)
        else:
            dropped += 1

    logger.debug(f"Normalized {len(students)} rows, dropped {dropped} incomplete rows")
    return students
