"""
Multi-sheet template recognition for fin-sheet-ingest.

The platform's own download template spreads one period table over
several sheets ("✅ Drivers", "🔧 Overrides DRE", ...) and puts two info
columns ("Tipo de Dado", "Obrigatório/Opcional") before the periods.
Reading it with the single-sheet heuristics would pick the drivers sheet
but shift every value by two periods and skip the overrides.

Layouts are data (``ExtractionConfig.template_layouts``), tried in order
before the single-sheet strategies; the first layout whose marker sheets
and required sheets are all present wins. Missing optional sheets are
simply not read.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from fin_sheet_ingest.config import ExtractionConfig, TemplateLayout, TemplateSheet
from fin_sheet_ingest.fields import FIELD_CATALOG, FieldDefinition, FieldKey, field_keys
from fin_sheet_ingest.workbook import WorkbookModel, WorksheetModel

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TemplateMatch:
    """A recognized layout plus the worksheets found for its sheets, in layout order."""
    layout: TemplateLayout
    sheets: tuple[tuple[WorksheetModel, TemplateSheet], ...]

    @property
    def primary(self) -> WorksheetModel:
        """The sheet whose header decides the period count."""
        return self.sheets[0][0]

    @property
    def sheet_names(self) -> tuple[str, ...]:
        return tuple(ws.name for ws, _ in self.sheets)


def find_sheet(workbook: WorkbookModel, name: str) -> WorksheetModel | None:
    wanted = name.strip().lower()
    for worksheet in workbook.worksheets:
        if worksheet.name.strip().lower() == wanted:
            return worksheet
    return None


def sheet_catalog(sheet: TemplateSheet) -> dict[FieldKey, FieldDefinition]:
    """Catalog subset a template sheet may fill."""
    return {key: FIELD_CATALOG[key] for key in field_keys(sheet.categories)}


def match_layout(workbook: WorkbookModel, layout: TemplateLayout) -> TemplateMatch | None:
    if any(find_sheet(workbook, name) is None for name in layout.marker_sheets):
        return None

    found: list[tuple[WorksheetModel, TemplateSheet]] = []
    for sheet in layout.sheets:
        worksheet = find_sheet(workbook, sheet.name)
        if worksheet is not None:
            found.append((worksheet, sheet))
        elif sheet.required:
            logger.debug("Layout '%s': required sheet '%s' missing", layout.name, sheet.name)
            return None
        else:
            logger.debug("Layout '%s': optional sheet '%s' absent", layout.name, sheet.name)

    if not found:
        return None
    return TemplateMatch(layout=layout, sheets=tuple(found))


def detect_template(workbook: WorkbookModel, config: ExtractionConfig) -> TemplateMatch | None:
    """Return the first configured layout the workbook matches, else ``None``."""
    for layout in config.template_layouts:
        match = match_layout(workbook, layout)
        if match is not None:
            logger.info(
                "Recognized template '%s' (sheets: %s)",
                layout.name, list(match.sheet_names),
            )
            return match
    return None
