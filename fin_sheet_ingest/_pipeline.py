"""
Internal pipeline orchestration for fin-sheet-ingest.

Runs the extraction stages on a decoded workbook:

  1. Recognize a multi-sheet template, else select one worksheet.
  2. Detect the period count on the primary worksheet.
  3. Assemble the period records of every sheet read and merge them.
  4. Compute completeness insights.
  5. Collect soft warnings into an immutable ``ParseResult``.

Kept out of ``__init__.py`` so the public entry points (bytes, file,
already-decoded workbook) share one sequence.

This module is **not** part of the public API.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from fin_sheet_ingest.assemble import assemble_records, merge_assemblies
from fin_sheet_ingest.config import ExtractionConfig
from fin_sheet_ingest.fields import FIELD_CATALOG, FieldDefinition, FieldKey
from fin_sheet_ingest.insights import analyze_completeness, suggest_improvements
from fin_sheet_ingest.periods import detect_period_count
from fin_sheet_ingest.result import ParseResult, ParseWarning, ParseWarningCode
from fin_sheet_ingest.selector import select_worksheet
from fin_sheet_ingest.template import detect_template, sheet_catalog
from fin_sheet_ingest.workbook import WorkbookModel, WorksheetModel

logger = logging.getLogger(__name__)

SheetTarget = tuple[WorksheetModel, Mapping[FieldKey, FieldDefinition]]


def run_extraction(workbook: WorkbookModel, config: ExtractionConfig) -> ParseResult:
    """Extract per-period field values from a decoded workbook.

    Args:
        workbook: The decoded workbook. The rows of every sheet read are
            consumed, so a workbook can only be extracted once.
        config: Extraction settings.

    Returns:
        ParseResult with ``detected_period_count`` complete records.

    Raises:
        NoWorksheetError: If the workbook has no worksheets.
    """
    warnings: list[ParseWarning] = []

    # 1. Worksheet(s)
    match = detect_template(workbook, config)
    if match is not None:
        primary = match.primary
        sheet_strategy = "template"
        template = match.layout.name
        config = config.model_copy(
            update={"first_data_column": match.layout.first_data_column}
        )
        targets: list[SheetTarget] = [
            (worksheet, sheet_catalog(sheet)) for worksheet, sheet in match.sheets
        ]
    else:
        selection = select_worksheet(workbook, config)
        primary = selection.worksheet
        sheet_strategy = selection.strategy
        template = None
        targets = [(primary, FIELD_CATALOG)]
        if not selection.matched_header:
            warnings.append(ParseWarning(
                ParseWarningCode.HEADER_PATTERN_NOT_FOUND,
                f"No worksheet header matched the expected column titles; "
                f"using '{primary.name}' ({selection.strategy})",
            ))

    # 2. Period count
    detection = detect_period_count(primary, config)
    if detection.defaulted:
        warnings.append(ParseWarning(
            ParseWarningCode.PERIOD_COUNT_DEFAULTED,
            f"Could not detect the number of periods; assuming {detection.count}",
        ))
    elif detection.clamped:
        warnings.append(ParseWarning(
            ParseWarningCode.PERIOD_COUNT_CLAMPED,
            f"Found {detection.raw_count} period columns; only the first "
            f"{detection.count} are read",
        ))

    # 3. Records
    assembly = merge_assemblies([
        assemble_records(worksheet, detection.count, config, catalog)
        for worksheet, catalog in targets
    ])
    if not assembly.found_any_data:
        warnings.append(ParseWarning(
            ParseWarningCode.NO_NUMERIC_DATA,
            f"No numeric data found in the input cells of "
            f"{', '.join(repr(ws.name) for ws, _ in targets)}",
        ))

    # 4. Insights
    insights = analyze_completeness(assembly.periods)
    suggestions = suggest_improvements(insights)

    for warning in warnings:
        logger.warning("%s: %s", warning.code.value, warning.message)

    logger.info(
        "Extraction complete: sheet='%s', periods=%d, completeness=%.1f%%, warnings=%d",
        primary.name, detection.count, insights.percentage, len(warnings),
    )
    return ParseResult(
        periods=assembly.periods,
        detected_period_count=detection.count,
        warnings=tuple(warnings),
        sheet_name=primary.name,
        sheet_strategy=sheet_strategy,
        period_strategy=detection.strategy,
        found_any_data=assembly.found_any_data,
        sheets_read=tuple(ws.name for ws, _ in targets),
        template=template,
        insights=insights,
        suggestions=suggestions,
    )
