"""
Read-only in-memory model of a decoded spreadsheet.

The extraction engine never touches openpyxl objects directly. The reader
(``reader.py``) converts a workbook into these small immutable structures,
which keeps every heuristic testable with hand-built sheets.

Cell values are a closed tagged union:

- ``EmptyValue``   -- blank cell
- ``NumberValue``  -- numeric literal
- ``TextValue``    -- any non-numeric literal (strings, dates, booleans)
- ``FormulaValue`` -- formula text plus its cached result (may be ``None``
  when the workbook was never recalculated)

Rows and columns are 1-based, matching spreadsheet coordinates.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Union


@dataclass(frozen=True)
class EmptyValue:
    """A blank cell."""


@dataclass(frozen=True)
class NumberValue:
    value: float


@dataclass(frozen=True)
class TextValue:
    text: str


@dataclass(frozen=True)
class FormulaValue:
    """A formula cell. ``result`` is the value cached by the spreadsheet app."""
    text: str
    result: float | str | None = None


CellValue = Union[EmptyValue, NumberValue, TextValue, FormulaValue]

EMPTY = EmptyValue()


@dataclass(frozen=True)
class FillInfo:
    """Background fill of a cell.

    Attributes:
        pattern_type: openpyxl pattern name (``"solid"``, ``"gray125"``, ...).
        argb: Foreground colour as upper-case ARGB hex, or ``None`` for
            theme / indexed colours that carry no literal RGB.
    """
    pattern_type: str | None
    argb: str | None = None


@dataclass(frozen=True)
class CellModel:
    value: CellValue = EMPTY
    fill: FillInfo | None = None

    @property
    def is_empty(self) -> bool:
        if isinstance(self.value, EmptyValue):
            return True
        if isinstance(self.value, TextValue):
            return self.value.text == ""
        return False

    @property
    def text(self) -> str | None:
        """Textual form of the cell, or ``None`` if it holds no text.

        Formulas expose their result when that result is a string.
        """
        value = self.value
        if isinstance(value, TextValue):
            return value.text
        if isinstance(value, FormulaValue) and isinstance(value.result, str):
            return value.result
        return None


EMPTY_CELL = CellModel()


@dataclass(frozen=True)
class RowModel:
    """One worksheet row.

    ``cells`` maps 1-based column index to cell; absent columns are blank.
    """
    cells: Mapping[int, CellModel] = field(default_factory=dict)
    hidden: bool = False

    def get_cell(self, col: int) -> CellModel:
        return self.cells.get(col, EMPTY_CELL)

    @property
    def last_column(self) -> int:
        """Index of the right-most non-empty cell, 0 for a blank row."""
        filled = [c for c, cell in self.cells.items() if not cell.is_empty]
        return max(filled, default=0)

    @property
    def values(self) -> list[Any]:
        """Sparse 1-based snapshot of raw values (index 0 is unused).

        Numbers come back as floats, text as strings, formulas as their
        ``FormulaValue`` and blanks as ``None``. The list stops at the
        last non-empty cell.
        """
        snapshot: list[Any] = [None] * (self.last_column + 1)
        for col in range(1, self.last_column + 1):
            value = self.get_cell(col).value
            if isinstance(value, NumberValue):
                snapshot[col] = value.value
            elif isinstance(value, TextValue):
                snapshot[col] = value.text or None
            elif isinstance(value, FormulaValue):
                snapshot[col] = value
        return snapshot

    @property
    def is_blank(self) -> bool:
        return self.last_column == 0


EMPTY_ROW = RowModel()


class WorksheetModel:
    """A named worksheet with random row access and one-shot iteration.

    ``each_row()`` may only be called once per instance. The extraction
    pipeline consumes it exactly once; random access via ``get_row()``
    remains available for header and sample-row inspection.
    """

    def __init__(self, name: str, rows: Mapping[int, RowModel] | None = None) -> None:
        self.name = name
        self._rows: dict[int, RowModel] = dict(rows or {})
        self._consumed = False

    def __repr__(self) -> str:
        return f"WorksheetModel(name={self.name!r}, rows={len(self._rows)})"

    @property
    def row_count(self) -> int:
        return max(self._rows, default=0)

    def get_row(self, index: int) -> RowModel:
        return self._rows.get(index, EMPTY_ROW)

    @property
    def header_row(self) -> RowModel:
        return self.get_row(1)

    def each_row(self) -> Iterator[tuple[int, RowModel]]:
        """Yield ``(row_index, row)`` for every non-blank row in file order.

        Raises:
            RuntimeError: If the rows of this worksheet were already iterated.
        """
        if self._consumed:
            raise RuntimeError(
                f"Rows of worksheet '{self.name}' were already iterated"
            )
        self._consumed = True
        return (
            (index, self._rows[index])
            for index in sorted(self._rows)
            if not self._rows[index].is_blank
        )


@dataclass(frozen=True)
class WorkbookModel:
    """Ordered worksheets of a decoded workbook."""
    worksheets: Sequence[WorksheetModel] = ()

    @property
    def sheet_names(self) -> list[str]:
        return [ws.name for ws in self.worksheets]


def cell_from_python(value: Any, fill: FillInfo | None = None) -> CellModel:
    """Build a ``CellModel`` from a plain Python value.

    Used by the reader for literal cells and handy in tests:
    ``None``/``""`` -> blank, ``bool`` -> text, ``int``/``float`` -> number,
    ``CellValue`` instances pass through, anything else -> ``str(value)``.
    """
    if isinstance(value, (EmptyValue, NumberValue, TextValue, FormulaValue)):
        return CellModel(value=value, fill=fill)
    if value is None or value == "":
        return CellModel(value=EMPTY, fill=fill)
    if isinstance(value, bool):
        return CellModel(value=TextValue("TRUE" if value else "FALSE"), fill=fill)
    if isinstance(value, (int, float)):
        return CellModel(value=NumberValue(float(value)), fill=fill)
    return CellModel(value=TextValue(str(value)), fill=fill)


def row_from_values(
    values: Sequence[Any],
    fills: Mapping[int, FillInfo] | None = None,
    hidden: bool = False,
) -> RowModel:
    """Build a ``RowModel`` from a 0-based list; ``values[0]`` lands in column 1."""
    fills = fills or {}
    cells = {
        col: cell_from_python(value, fills.get(col))
        for col, value in enumerate(values, start=1)
    }
    for col, fill in fills.items():
        if col not in cells:
            cells[col] = CellModel(fill=fill)
    return RowModel(cells=cells, hidden=hidden)
