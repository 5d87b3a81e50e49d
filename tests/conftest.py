"""
Shared test helpers for fin-sheet-ingest tests.

Unit tests build ``WorksheetModel``s by hand with ``make_sheet``.
Integration tests build real .xlsx bytes in memory with
``build_workbook_bytes`` (openpyxl), so no binary fixtures are checked in.
"""

from __future__ import annotations

import io
from collections.abc import Mapping, Sequence
from typing import Any

import pytest
from openpyxl import Workbook
from openpyxl.styles import PatternFill

from fin_sheet_ingest.workbook import FillInfo, WorksheetModel, row_from_values

# ---------------------------------------------------------------------------
# Template colours
# ---------------------------------------------------------------------------
INPUT_FILL = "FFBFBFBF"
LOCKED_GREY = "FFD3D3D3"
NA_GREY = "FFE0E0E0"
SECTION_BLUE = "FF1F4E78"

TEMPLATE_HEADER = ["Item (Chave Interna)", "Descrição", "Período 1", "Período 2", "Período 3"]

# Multi-sheet download template: four info columns before the periods
DRIVER_INPUT = "FFD9E8FB"
OVERRIDE_INPUT = "FFFFF0CB"
DRIVERS_SHEET = "✅ Drivers"
INSTRUCTIONS_SHEET = "📋 Instruções"
OVERRIDES_PL_SHEET = "🔧 Overrides DRE"


def smart_header(periods: int) -> list[str]:
    return [
        "Campo (Chave Interna)", "Descrição (Português)", "Tipo de Dado", "Obrigatório/Opcional",
        *[f"Período {i} (Ano)" for i in range(1, periods + 1)],
        "Notas/Instruções Adicionais",
    ]


def solid(argb: str) -> FillInfo:
    return FillInfo(pattern_type="solid", argb=argb)


def make_sheet(
    name: str,
    rows: Sequence[Sequence[Any]],
    fills: Mapping[tuple[int, int], FillInfo] | None = None,
    hidden_rows: Sequence[int] = (),
) -> WorksheetModel:
    """Hand-built worksheet. ``rows[0]`` is row 1; fills are keyed by (row, col)."""
    fills = fills or {}
    models = {}
    for row_idx, values in enumerate(rows, start=1):
        row_fills = {c: f for (r, c), f in fills.items() if r == row_idx}
        models[row_idx] = row_from_values(values, row_fills, hidden=row_idx in hidden_rows)
    return WorksheetModel(name, models)


def build_workbook_bytes(sheets: Sequence[Mapping[str, Any]]) -> bytes:
    """Write an .xlsx workbook to memory.

    Each sheet is a mapping with ``name``, ``rows`` (list of row lists,
    row 1 first) and optionally ``fills`` (``{"C3": "FFD3D3D3"}``) and
    ``hidden_rows`` (1-based row numbers).
    """
    wb = Workbook()
    wb.remove(wb.active)
    for sheet in sheets:
        ws = wb.create_sheet(sheet["name"])
        for values in sheet["rows"]:
            ws.append(list(values))
        for coord, argb in sheet.get("fills", {}).items():
            ws[coord].fill = PatternFill(fill_type="solid", start_color=argb, end_color=argb)
        for row_idx in sheet.get("hidden_rows", ()):
            ws.row_dimensions[row_idx].hidden = True
    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


# ---------------------------------------------------------------------------
# Pytest markers
# ---------------------------------------------------------------------------
def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers",
        "integration: mark test as integration test (decodes real .xlsx bytes)",
    )
