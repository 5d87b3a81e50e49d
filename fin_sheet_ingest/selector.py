"""
Worksheet selection for fin-sheet-ingest.

Users rename tabs, add instruction sheets and reorder them, so the data
sheet is found with an ordered list of heuristics rather than by name.

Design: Strategy list
- Each strategy is a pure predicate ``(worksheet, config) -> bool``.
- Strategies are tried in priority order. For each strategy, worksheets
  are tested in workbook order; the first match wins.
- The last strategy always matches, so selection never fails on a
  non-empty workbook.

Selection order:
1. header_pattern        -- row 1 contains a known column title.
2. data_sheet_name       -- sheet name contains "dados".
3. not_instruction_sheet -- sheet name does not contain "instru".
4. first_sheet           -- ultimate fallback.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from fin_sheet_ingest.config import ExtractionConfig
from fin_sheet_ingest.exceptions import NoWorksheetError
from fin_sheet_ingest.workbook import WorkbookModel, WorksheetModel

logger = logging.getLogger(__name__)

SheetPredicate = Callable[[WorksheetModel, ExtractionConfig], bool]


@dataclass(frozen=True)
class SheetSelection:
    worksheet: WorksheetModel
    strategy: str

    @property
    def matched_header(self) -> bool:
        return self.strategy == "header_pattern"


def has_header_pattern(worksheet: WorksheetModel, config: ExtractionConfig) -> bool:
    """True if any row-1 text cell contains a known header title (case-insensitive)."""
    patterns = [p.lower() for p in config.header_patterns]
    for cell in worksheet.header_row.cells.values():
        text = cell.text
        if text and any(p in text.lower() for p in patterns):
            return True
    return False


def is_data_sheet(worksheet: WorksheetModel, config: ExtractionConfig) -> bool:
    return config.data_sheet_marker.lower() in worksheet.name.lower()


def is_not_instruction_sheet(worksheet: WorksheetModel, config: ExtractionConfig) -> bool:
    return config.instruction_sheet_marker.lower() not in worksheet.name.lower()


SELECTION_STRATEGIES: tuple[tuple[str, SheetPredicate], ...] = (
    ("header_pattern", has_header_pattern),
    ("data_sheet_name", is_data_sheet),
    ("not_instruction_sheet", is_not_instruction_sheet),
)


def select_worksheet(workbook: WorkbookModel, config: ExtractionConfig) -> SheetSelection:
    """Pick the worksheet most likely to hold the data-entry table.

    Args:
        workbook: The decoded workbook.
        config: Extraction settings (header patterns, sheet-name markers).

    Returns:
        SheetSelection with the chosen worksheet and the strategy name.

    Raises:
        NoWorksheetError: If the workbook has no worksheets.
    """
    if not workbook.worksheets:
        raise NoWorksheetError("Workbook contains no worksheets")

    for strategy, predicate in SELECTION_STRATEGIES:
        for worksheet in workbook.worksheets:
            if predicate(worksheet, config):
                logger.info("Selected worksheet '%s' (%s)", worksheet.name, strategy)
                return SheetSelection(worksheet=worksheet, strategy=strategy)
        logger.debug("No worksheet matched strategy '%s'", strategy)

    worksheet = workbook.worksheets[0]
    logger.info("Selected worksheet '%s' (first_sheet)", worksheet.name)
    return SheetSelection(worksheet=worksheet, strategy="first_sheet")
