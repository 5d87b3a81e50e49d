"""
Period-count detection for fin-sheet-ingest.

The template lays periods out as columns: ``[key, description, P1..PN,
notes?]``. Users add or drop period columns, rename headers or clear them
entirely, so the count is inferred by three strategies tried in order:

1. explicit_pattern -- count header cells that look like period labels
   ("Período 1", "Periodo 2", "P3", ...). Any match wins outright, even
   a single one.
2. column_position  -- only if (1) found nothing: the header span from
   column 3 up to (not including) the first notes column.
3. data_rows        -- if the count is still <= 1: the longest run of
   consecutive filled cells from column 3 in the sampled data rows.

A count that is still <= 1 falls back to ``default_period_count`` (2), so
ambiguous input never yields a degenerate single-period report. The final
count is clamped to ``[1, max_periods]``.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from fin_sheet_ingest.config import ExtractionConfig
from fin_sheet_ingest.workbook import RowModel, WorksheetModel

logger = logging.getLogger(__name__)

# "Período 1", "periodo2", "PERÍODO 10"
_PERIOD_LABEL = re.compile(r"^per[íi]odo\s*\d+$", re.IGNORECASE)


@dataclass(frozen=True)
class PeriodDetection:
    """Detected period count plus how it was obtained.

    Attributes:
        count: Final period count, within ``[1, max_periods]``.
        strategy: ``explicit_pattern``, ``column_position``, ``data_rows``
            or ``default``.
        raw_count: Candidate before clamping / defaulting.
    """
    count: int
    strategy: str
    raw_count: int

    @property
    def defaulted(self) -> bool:
        return self.strategy == "default"

    @property
    def clamped(self) -> bool:
        return not self.defaulted and self.raw_count > self.count


def is_period_label(text: str, config: ExtractionConfig) -> bool:
    lowered = text.lower()
    if _PERIOD_LABEL.match(lowered.strip()):
        return True
    return any(s in lowered for s in config.period_substrings)


def count_period_labels(header: RowModel, config: ExtractionConfig) -> int:
    """Strategy 1: number of row-1 text cells that look like period labels."""
    count = 0
    for col in sorted(header.cells):
        text = header.get_cell(col).text
        if text and is_period_label(text, config):
            logger.debug("Period header at column %d: %r", col, text)
            count += 1
    return count


def count_header_span(header: RowModel, config: ExtractionConfig) -> int:
    """Strategy 2: period columns implied by the header layout.

    Counts columns from ``first_data_column`` to the last header column,
    stopping before the first cell that contains a notes marker. Returns 0
    when the header is too short to hold any period column.
    """
    start = config.first_data_column
    end = header.last_column
    if end < start:
        return 0
    markers = [m.lower() for m in config.notes_markers]
    for col in range(start, end + 1):
        text = header.get_cell(col).text
        if text and any(m in text.lower() for m in markers):
            end = col - 1
            break
    return end - start + 1


def longest_data_run(row: RowModel, config: ExtractionConfig) -> int:
    """Length of the first run of consecutive filled cells from ``first_data_column``.

    Leading blanks are skipped; the run ends at the first blank after it.
    """
    run = 0
    for col in range(config.first_data_column, row.last_column + 1):
        if not row.get_cell(col).is_empty:
            run += 1
        elif run > 0:
            break
    return run


def count_data_columns(worksheet: WorksheetModel, config: ExtractionConfig) -> int:
    """Strategy 3: widest data run across the sampled rows."""
    return max(
        (longest_data_run(worksheet.get_row(r), config) for r in config.data_sample_rows),
        default=0,
    )


def detect_period_count(worksheet: WorksheetModel, config: ExtractionConfig) -> PeriodDetection:
    """Determine how many period columns the worksheet holds.

    Args:
        worksheet: The selected worksheet.
        config: Extraction settings.

    Returns:
        PeriodDetection with a count in ``[1, config.max_periods]``.
    """
    header = worksheet.header_row

    labelled = count_period_labels(header, config)
    if labelled >= 1:
        return _finish(worksheet, labelled, "explicit_pattern", config)

    candidate = count_header_span(header, config)
    strategy = "column_position"
    logger.debug("Header span inference: %d columns", candidate)

    if candidate <= 1:
        from_data = count_data_columns(worksheet, config)
        logger.debug("Data-row inference: %d columns", from_data)
        if from_data > candidate:
            candidate = from_data
            strategy = "data_rows"

    if candidate <= 1:
        logger.info(
            "Could not detect period count on '%s', defaulting to %d",
            worksheet.name, config.default_period_count,
        )
        return PeriodDetection(
            count=config.default_period_count,
            strategy="default",
            raw_count=candidate,
        )

    return _finish(worksheet, candidate, strategy, config)


def _finish(
    worksheet: WorksheetModel, candidate: int, strategy: str, config: ExtractionConfig
) -> PeriodDetection:
    count = min(max(candidate, 1), config.max_periods)
    logger.info(
        "Detected %d periods on '%s' (%s, raw=%d)",
        count, worksheet.name, strategy, candidate,
    )
    return PeriodDetection(count=count, strategy=strategy, raw_count=candidate)
