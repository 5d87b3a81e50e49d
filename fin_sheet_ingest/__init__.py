"""
fin-sheet-ingest: extract per-period financial inputs from uploaded .xlsx templates.

Public API surface:

- ``parse_bytes(data, config=None)`` -- **recommended entry point**.
  Decodes raw .xlsx bytes and returns a ``ParseResult``.

- ``parse_file(path, config=None)`` -- Reads a file from disk, then
  behaves like ``parse_bytes``.

- ``parse_workbook(workbook, config=None)`` -- Runs the extraction on an
  already decoded ``WorkbookModel`` (useful with hand-built models).

Fatal problems raise ``DecodeError`` or ``NoWorksheetError``. Everything
else (no header match, defaulted period count, no numeric data) is
reported in ``ParseResult.warnings``, next to completeness ``insights``
and ``suggestions`` for the user.

The platform's multi-sheet download template (drivers and override
sheets) is recognized by its sheet names and read sheet by sheet; any
other workbook goes through the single-sheet heuristics.
"""

from __future__ import annotations

import logging
from pathlib import Path

from fin_sheet_ingest._pipeline import run_extraction
from fin_sheet_ingest.config import (
    DEFAULT_CONFIG,
    MAX_PERIODS,
    ExtractionConfig,
    TemplateLayout,
    TemplateSheet,
    load_config,
    save_config,
)
from fin_sheet_ingest.exceptions import (
    ConfigValidationError,
    DecodeError,
    FinSheetIngestError,
    NoWorksheetError,
)
from fin_sheet_ingest.fields import FIELD_CATALOG, FieldDefinition, FieldKey
from fin_sheet_ingest.reader import load_workbook_model, read_workbook_file
from fin_sheet_ingest.result import (
    CompletenessInsights,
    ParseResult,
    ParseWarning,
    ParseWarningCode,
    PeriodRecord,
)
from fin_sheet_ingest.workbook import WorkbookModel

__all__ = [
    "parse_bytes",
    "parse_file",
    "parse_workbook",
    "ExtractionConfig",
    "TemplateLayout",
    "TemplateSheet",
    "load_config",
    "save_config",
    "MAX_PERIODS",
    "FieldKey",
    "FieldDefinition",
    "FIELD_CATALOG",
    "ParseResult",
    "CompletenessInsights",
    "ParseWarning",
    "ParseWarningCode",
    "PeriodRecord",
    "WorkbookModel",
    "FinSheetIngestError",
    "DecodeError",
    "NoWorksheetError",
    "ConfigValidationError",
]

logger = logging.getLogger(__name__)


def parse_workbook(
    workbook: WorkbookModel,
    config: ExtractionConfig | None = None,
) -> ParseResult:
    """Extract period records from a decoded workbook.

    Args:
        workbook: Decoded workbook. The selected worksheet's rows are
            consumed; decode again to parse a second time.
        config: Extraction settings. Defaults to ``ExtractionConfig()``.

    Raises:
        NoWorksheetError: If the workbook has no worksheets.
    """
    return run_extraction(workbook, config or DEFAULT_CONFIG)


def parse_bytes(
    data: bytes,
    config: ExtractionConfig | None = None,
) -> ParseResult:
    """Decode .xlsx bytes and extract period records.

    Pure function of ``data`` and ``config``: parsing the same bytes twice
    gives equal results.

    Raises:
        DecodeError: If the bytes are not a readable workbook.
        NoWorksheetError: If the workbook has no worksheets.
    """
    workbook = load_workbook_model(data)
    return parse_workbook(workbook, config)


def parse_file(
    path: str | Path,
    config: ExtractionConfig | None = None,
) -> ParseResult:
    """Read an .xlsx file and extract period records.

    Raises:
        FileNotFoundError: If the file does not exist.
        DecodeError: If the file is not a readable workbook.
        NoWorksheetError: If the workbook has no worksheets.
    """
    logger.info("Parsing workbook file: %s", path)
    workbook = read_workbook_file(path)
    return parse_workbook(workbook, config)
