"""
Workbook decoding for fin-sheet-ingest.

Turns raw ``.xlsx`` bytes into the read-only ``WorkbookModel`` consumed by
the extraction engine. This is the only module that imports openpyxl.

Formula strategy:
  openpyxl returns either the formula text (``data_only=False``) or the
  value cached by the last recalculation (``data_only=True``), never both.
  The bytes are therefore opened twice and the two views are merged into
  a ``FormulaValue(text, result)``. Workbooks written by libraries that
  never recalculate carry no cached result, so ``result`` is ``None``.

Errors:
  Any failure raised while opening the archive (bad zip, missing parts,
  malformed XML) is wrapped into ``DecodeError``.
"""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Any

from openpyxl import load_workbook
from openpyxl.cell import Cell
from openpyxl.worksheet.worksheet import Worksheet

from fin_sheet_ingest.exceptions import DecodeError
from fin_sheet_ingest.workbook import (
    CellModel,
    FillInfo,
    FormulaValue,
    RowModel,
    WorkbookModel,
    WorksheetModel,
    cell_from_python,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def load_workbook_model(data: bytes) -> WorkbookModel:
    """Decode ``.xlsx`` bytes into a ``WorkbookModel``.

    Args:
        data: Raw file content.

    Returns:
        WorkbookModel with one ``WorksheetModel`` per worksheet, in
        workbook order. Chart sheets are ignored.

    Raises:
        DecodeError: If the bytes are empty or not a readable workbook.
    """
    if not data:
        raise DecodeError("Cannot decode an empty file")

    try:
        formula_wb = load_workbook(io.BytesIO(data), data_only=False)
        computed_wb = load_workbook(io.BytesIO(data), data_only=True)
    except Exception as e:
        raise DecodeError(f"Could not decode workbook: {e}") from e

    worksheets = [
        _convert_sheet(formula_wb[name], computed_wb[name])
        for name in formula_wb.sheetnames
        if isinstance(formula_wb[name], Worksheet)
    ]
    logger.info(
        "Decoded workbook with %d worksheets: %s",
        len(worksheets), [ws.name for ws in worksheets],
    )
    return WorkbookModel(worksheets=tuple(worksheets))


def read_workbook_file(path: str | Path) -> WorkbookModel:
    """Read an ``.xlsx`` file from disk and decode it.

    Raises:
        FileNotFoundError: If the file does not exist.
        DecodeError: If the content is not a readable workbook.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Workbook file not found: {path}")
    return load_workbook_model(path.read_bytes())


# ---------------------------------------------------------------------------
# Private helpers
# ---------------------------------------------------------------------------

def _convert_sheet(sheet: Worksheet, computed_sheet: Worksheet) -> WorksheetModel:
    """Convert one openpyxl worksheet (plus its computed twin)."""
    rows: dict[int, RowModel] = {}
    for row_cells in sheet.iter_rows():
        if not row_cells:
            continue
        row_idx = row_cells[0].row
        cells: dict[int, CellModel] = {}
        for cell in row_cells:
            if isinstance(cell, Cell):
                cached = computed_sheet.cell(row=cell.row, column=cell.column).value
                cells[cell.column] = _convert_cell(cell, cached)
        hidden = bool(sheet.row_dimensions[row_idx].hidden)
        rows[row_idx] = RowModel(cells=cells, hidden=hidden)

    logger.debug("Converted worksheet '%s': %d rows", sheet.title, len(rows))
    return WorksheetModel(name=sheet.title, rows=rows)


def _convert_cell(cell: Cell, cached: Any) -> CellModel:
    """Map an openpyxl cell to a tagged ``CellModel``."""
    fill = _fill_info(cell)
    if cell.data_type == "f":
        raw = cell.value
        # Array / data-table formulas are objects exposing ``.text``
        text = raw if isinstance(raw, str) else getattr(raw, "text", str(raw))
        return CellModel(value=FormulaValue(text=text, result=_formula_result(cached)), fill=fill)
    return cell_from_python(cell.value, fill)


def _formula_result(cached: Any) -> float | str | None:
    """Normalize a cached formula result to ``float | str | None``."""
    if cached is None:
        return None
    if isinstance(cached, bool):
        return "TRUE" if cached else "FALSE"
    if isinstance(cached, (int, float)):
        return float(cached)
    return str(cached)


def _fill_info(cell: Cell) -> FillInfo | None:
    """Extract the background fill, or ``None`` if the cell has no pattern."""
    fill = cell.fill
    pattern = getattr(fill, "patternType", None)
    if fill is None or pattern is None:
        return None
    color = getattr(fill, "fgColor", None)
    argb: str | None = None
    # Theme / indexed colours have no literal rgb string
    if color is not None and getattr(color, "type", None) == "rgb":
        rgb = color.rgb
        if isinstance(rgb, str):
            argb = rgb.upper()
    return FillInfo(pattern_type=pattern, argb=argb)
