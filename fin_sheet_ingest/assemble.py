"""
Record assembly for fin-sheet-ingest.

Walks the selected worksheet once, row by row:

- Row 1 is the header and is skipped.
- Column 1 must hold a catalog field key verbatim (e.g. ``revenue``).
  Anything else (labels, section titles, blank keys) is expected noise
  and the row is skipped without a warning.
- Column ``first_data_column + i`` holds the value for period ``i``.
- Keys outside the given catalog subset are skipped, which lets each
  sheet of a multi-sheet template fill only its own field categories.

Hidden rows are read like any other row: hiding is cosmetic in the
upload template.

Every ``PeriodRecord`` is closed over the full catalog at the end, so
fields without a row come back as explicit ``None``.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from fin_sheet_ingest.config import ExtractionConfig
from fin_sheet_ingest.fields import FIELD_CATALOG, FieldDefinition, FieldKey
from fin_sheet_ingest.resolve import resolve_cell
from fin_sheet_ingest.result import PeriodRecord
from fin_sheet_ingest.workbook import WorksheetModel

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AssemblyResult:
    """Records built from one worksheet plus row statistics."""
    periods: tuple[PeriodRecord, ...]
    found_any_data: bool
    rows_matched: int
    rows_skipped: int


def assemble_records(
    worksheet: WorksheetModel,
    period_count: int,
    config: ExtractionConfig,
    catalog: Mapping[FieldKey, FieldDefinition] = FIELD_CATALOG,
) -> AssemblyResult:
    """Build one complete ``PeriodRecord`` per period.

    Consumes ``worksheet.each_row()``; the worksheet cannot be iterated
    again afterwards.

    Args:
        worksheet: The selected worksheet.
        period_count: Number of period columns to read.
        config: Extraction settings.
        catalog: Field definitions to match against column 1.

    Returns:
        AssemblyResult with ``period_count`` records.
    """
    extracted: list[dict[FieldKey, float | None]] = [{} for _ in range(period_count)]
    found_any_data = False
    rows_matched = 0
    rows_skipped = 0

    for row_idx, row in worksheet.each_row():
        if row_idx == 1:
            continue

        key = FieldKey.lookup(row.get_cell(1).text)
        if key is None or key not in catalog:
            rows_skipped += 1
            logger.debug("Row %d: no field key in column 1, skipped", row_idx)
            continue

        rows_matched += 1
        field_def = catalog[key]
        for period_idx in range(period_count):
            cell = row.get_cell(config.first_data_column + period_idx)
            value = resolve_cell(cell, field_def, period_idx, config)
            extracted[period_idx][key] = value
            if value is not None:
                found_any_data = True

    periods = tuple(PeriodRecord(values, keys=catalog) for values in extracted)
    logger.info(
        "Assembled %d periods from '%s': %d field rows, %d other rows",
        period_count, worksheet.name, rows_matched, rows_skipped,
    )
    return AssemblyResult(
        periods=periods,
        found_any_data=found_any_data,
        rows_matched=rows_matched,
        rows_skipped=rows_skipped,
    )


def merge_assemblies(
    parts: Sequence[AssemblyResult],
    catalog: Mapping[FieldKey, FieldDefinition] = FIELD_CATALOG,
) -> AssemblyResult:
    """Combine per-sheet assemblies of the same period count.

    A value from a later part replaces an earlier one only when it is not
    ``None``; template sheets cover disjoint field categories, so in
    practice each key comes from exactly one sheet.
    """
    if not parts:
        raise ValueError("merge_assemblies() needs at least one assembly")
    period_count = len(parts[0].periods)
    merged: list[dict[FieldKey, float | None]] = [{} for _ in range(period_count)]
    for part in parts:
        if len(part.periods) != period_count:
            raise ValueError(
                f"Cannot merge {len(part.periods)} periods into {period_count}"
            )
        for values, record in zip(merged, part.periods):
            values.update((k, v) for k, v in record.items() if v is not None)

    return AssemblyResult(
        periods=tuple(PeriodRecord(values, keys=catalog) for values in merged),
        found_any_data=any(part.found_any_data for part in parts),
        rows_matched=sum(part.rows_matched for part in parts),
        rows_skipped=sum(part.rows_skipped for part in parts),
    )
